from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uploadable.core.db.entity import Entity
    from uploadable.core.db.table import Table
    from uploadable.core.upload.config import FieldConfig
    from uploadable.core.upload.datum import UploadDatum


class Strategy:
    """
    Base of the three upload roles. A strategy is created once per field when
    the behavior is attached and keeps the field name and its settings.
    """

    def __init__(self, field: str, settings: FieldConfig) -> None:
        self.field = field
        self.settings = settings

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.field}>"


class PathProcessor(Strategy, ABC):
    """
    Computes where an upload goes. Must not touch any storage.
    """

    @abstractmethod
    def resolve(self, table: Table, entity: Entity, datum: UploadDatum) -> tuple[str, str]:
        """
        Returns the base directory and the final filename for `datum`.
        """


class Transformer(Strategy, ABC):
    """
    Produces the files to store for an upload.
    """

    @abstractmethod
    def transform(self, table: Table, entity: Entity, datum: UploadDatum) -> dict[str, str]:
        """
        Returns a mapping of local source paths to output names. The output names
        are relative to the base directory of the field.
        """

    def cleanup(self, datum: UploadDatum, files: Mapping[str, str]) -> None:
        """
        Called once the outputs of `transform` were handed to the writer,
        whatever the outcome. Removes the intermediate files the transformer
        created. The upload itself is never removed here.
        """


class Writer(Strategy, ABC):
    """
    Persists files into and removes files from a storage backend.
    """

    @abstractmethod
    def write(self, files: Mapping[str, str]) -> dict[str, bool]:
        """
        Stores every source path under its target name and reports the outcome
        per target name.
        """

    @abstractmethod
    def delete(self, paths: Sequence[str]) -> list[bool]:
        """
        Removes `paths` and reports the outcome in the same order. A path which
        does not exist counts as deleted.
        """
