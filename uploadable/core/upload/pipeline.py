from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

from loguru import logger

from uploadable.core.upload.datum import UploadDatum
from uploadable.core.upload.registry import path_processors, transformers, writers

if TYPE_CHECKING:
    from uploadable.core.db.entity import Entity
    from uploadable.core.db.table import Table
    from uploadable.core.upload.base import PathProcessor, Transformer, Writer
    from uploadable.core.upload.config import FieldConfig


class FieldPipeline:
    """
    Processes the upload of one field: resolve the path, transform the upload,
    write the outputs and mirror the metadata onto the record.

    The columns of the record are only touched when every output was written.
    """

    def __init__(
        self,
        field: str,
        settings: FieldConfig,
        path_processor: PathProcessor,
        transformer: Transformer,
        writer: Writer,
    ) -> None:
        self.field = field
        self.settings = settings
        self.path_processor = path_processor
        self.transformer = transformer
        self.writer = writer

    @classmethod
    def from_config(cls, field: str, settings: FieldConfig) -> FieldPipeline:
        """
        Resolves the strategies configured for `field`.

        Raises:
            InvalidStrategyError: If a strategy is unknown or does not fit its role.
        """
        return cls(
            field,
            settings,
            path_processor=path_processors.create(settings.path_processor, field, settings),
            transformer=transformers.create(settings.transformer, field, settings),
            writer=writers.create(settings.writer, field, settings),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.field}>"

    def run(self, table: Table, entity: Entity) -> bool:
        """
        Returns `False` if an output could not be written. Fields without a
        successful upload are skipped and count as success.
        """
        datum = UploadDatum.coerce(entity.get(self.field))
        if datum is None or not datum.is_ok:
            if datum is not None:
                logger.debug(f"Skipping '{self.field}', upload status is {datum.error.name}.")
            return True

        basepath, filename = self.path_processor.resolve(table, entity, datum)
        datum = datum.model_copy(update={"name": filename})
        files = {
            source: self.qualify(basepath, name)
            for source, name in self.transformer.transform(table, entity, datum).items()
        }

        try:
            results = self.writer.write(files)
        finally:
            self.transformer.cleanup(datum, files)
        if not all(results.values()):
            failed = [name for name, success in results.items() if not success]
            logger.warning(f"Could not write {failed} for field '{self.field}'.")
            return False

        columns = self.settings.fields
        entity.set(self.field, filename)
        entity.set(columns.dir, basepath)
        entity.set(columns.size, datum.size)
        entity.set(columns.type, datum.type)
        return True

    @staticmethod
    def qualify(basepath: str, name: str) -> str:
        name = name.lstrip("/")
        return posixpath.join(basepath, name) if basepath else name
