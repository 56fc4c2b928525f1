from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING, Any

from loguru import logger

from uploadable.conf import settings
from uploadable.core.db.behaviors import Behavior
from uploadable.core.upload.config import FieldConfig, normalize_config
from uploadable.core.upload.datum import UploadDatum, UploadError
from uploadable.core.upload.pipeline import FieldPipeline
from uploadable.core.upload.types import FILE_TYPE, FileType
from uploadable.exceptions import DeferredWriteFailed, MetadataNotPersisted

if TYPE_CHECKING:
    from uploadable.core.db.entity import Entity
    from uploadable.core.db.table import Table

DEFERRED_UPLOADS = "deferred_uploads"

DeferredUploads = dict[str, UploadDatum]


class UploadBehavior(Behavior):
    """
    Stores the files submitted for the configured fields and mirrors their
    metadata onto the record.

    Example:
        ```python
        table.add_behavior(
            UploadBehavior,
            {"photo": {"path": "uploads/{table}/{id}/", "fields": {"dir": "photo_dir"}}},
        )
        ```

    Fields whose path needs the primary key are written after a new record was
    inserted. Their metadata is then stored with a second update which does not
    go through the save signals again.
    """

    config: dict[str, FieldConfig]

    def initialize(self, config: Any) -> None:
        self.config = normalize_config(config)
        self.pipelines = {
            field: FieldPipeline.from_config(field, field_settings)
            for field, field_settings in self.config.items()
        }
        schema = self.table.schema
        schema.map_type(FILE_TYPE, FileType)
        for field in self.config:
            schema.column_type(field, FILE_TYPE)

    def before_marshal(
        self, table: Table, *, data: dict[str, Any], new_record: bool = True, **kwargs: Any
    ) -> None:
        # an empty optional upload must not overwrite the stored filename
        for field in self.config:
            if not table.validator.is_empty_allowed(field, new_record):
                continue
            datum = UploadDatum.coerce(data.get(field))
            if datum is not None and datum.error == UploadError.NO_FILE:
                del data[field]

    def before_save(
        self, table: Table, *, entity: Entity, options: dict[str, Any], **kwargs: Any
    ) -> bool | None:
        fields = list(self.config)
        deferred: DeferredUploads = {}
        if entity.is_new:
            deferred = self.defer_fields(table, entity)
            if deferred:
                options[DEFERRED_UPLOADS] = deferred
                fields = [field for field in fields if field not in deferred]
        written = False
        try:
            written = self.write_files(table, entity, fields)
        finally:
            if not written:
                # nothing is inserted, deferred uploads go back for the next attempt
                options.pop(DEFERRED_UPLOADS, None)
                for field, datum in deferred.items():
                    entity.set(field, datum)
        return None if written else False

    def after_save(
        self, table: Table, *, entity: Entity, options: dict[str, Any], **kwargs: Any
    ) -> bool | None:
        deferred: DeferredUploads | None = options.pop(DEFERRED_UPLOADS, None)
        if not deferred:
            return None

        for field, datum in deferred.items():
            entity.set(field, datum)
        fields = [field for field in self.config if field in deferred]
        if not self.write_files(table, entity, fields):
            logger.error(
                f"Files of {list(deferred)} were not written for an inserted record "
                f"of '{table.name}'."
            )
            raise DeferredWriteFailed("Some files were not written.")

        if entity.is_dirty() and not self.save_no_callbacks(table, entity):
            logger.error(
                f"File metadata of {list(deferred)} was not stored for a record of '{table.name}'."
            )
            raise MetadataNotPersisted("Some file data was not saved.")
        return None

    def after_delete(self, table: Table, *, entity: Entity, **kwargs: Any) -> bool | None:
        failed = False
        for field, field_settings in self.config.items():
            if field_settings.keep_files_on_delete:
                continue
            filename = entity.get(field)
            if not filename or not isinstance(filename, str):
                logger.debug(f"No stored file to delete for '{field}'.")
                continue

            path = posixpath.join(entity.get(field_settings.fields.dir) or "", filename)
            if all(self.pipelines[field].writer.delete([path])):
                continue
            logger.warning(f"Could not delete the file of '{field}': {path}")
            if settings.upload_fail_fast_on_delete:
                return False
            failed = True
        return False if failed else None

    def defer_fields(self, table: Table, entity: Entity) -> DeferredUploads:
        """
        Takes the uploads whose path needs the primary key off the record. They
        are restored in `after_save`.
        """
        deferred: DeferredUploads = {}
        for field, field_settings in self.config.items():
            if not field_settings.is_deferred(table.primary_key):
                continue
            datum = UploadDatum.coerce(entity.get(field))
            if datum is None or not datum.is_ok:
                continue
            deferred[field] = datum
            entity.set(field, "")
            logger.debug(f"Deferring '{field}' until the record of '{table.name}' is inserted.")
        return deferred

    def write_files(self, table: Table, entity: Entity, fields: list[str]) -> bool:
        for field in fields:
            if not self.pipelines[field].run(table, entity):
                return False
        return True

    def save_no_callbacks(self, table: Table, entity: Entity) -> bool:
        """
        Stores the dirty columns of a saved record without dispatching any
        signal. The record is clean afterwards whatever the outcome.
        """
        pk = entity.get(table.primary_key)
        values = entity.extract(table.schema.columns(), only_dirty=True)
        if pk is None or pk == "":
            result = False
        elif not values:
            result = True
        else:
            logger.debug(f"Storing {list(values)} of '{table.name}' {pk!r} without callbacks.")
            result = table.update_all(values, {table.primary_key: pk}) > 0
        entity.clean()
        return result
