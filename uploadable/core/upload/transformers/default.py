from __future__ import annotations

import posixpath
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from uploadable.core.upload.base import Transformer
from uploadable.utils.text import slugify

if TYPE_CHECKING:
    from uploadable.core.db.entity import Entity
    from uploadable.core.db.table import Table
    from uploadable.core.upload.config import FieldConfig
    from uploadable.core.upload.datum import UploadDatum


class DefaultTransformer(Transformer):
    """
    Stores the upload as it is, under its resolved filename.
    """

    def transform(self, table: Table, entity: Entity, datum: UploadDatum) -> dict[str, str]:
        return {datum.tmp_name: datum.name}


class SlugTransformer(Transformer):
    """
    Stores the upload under a slug of its filename. The extension is lowercased.
    """

    def transform(self, table: Table, entity: Entity, datum: UploadDatum) -> dict[str, str]:
        stem, extension = posixpath.splitext(datum.name)
        return {datum.tmp_name: f"{slugify(stem) or 'file'}{extension.lower()}"}


class CallableTransformer(Transformer):
    """
    Adapts a plain function `(table, entity, datum, field, settings) -> dict`.
    """

    def __init__(
        self, function: Callable[..., dict[str, str]], field: str, settings: FieldConfig
    ) -> None:
        super().__init__(field, settings)
        self.function = function

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.field} ({self.function!r})>"

    def transform(self, table: Table, entity: Entity, datum: UploadDatum) -> dict[str, str]:
        result: Any = self.function(table, entity, datum, self.field, self.settings)
        return dict(result or {})
