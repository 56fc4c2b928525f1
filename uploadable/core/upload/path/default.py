from __future__ import annotations

import posixpath
import re
import time
from datetime import datetime
from typing import TYPE_CHECKING

from uploadable.core.upload.base import PathProcessor
from uploadable.core.upload.config import PRIMARY_KEY_PLACEHOLDER
from uploadable.exceptions import PathResolutionError, SuspiciousFileOperation
from uploadable.utils.path import get_valid_filename

if TYPE_CHECKING:
    from uploadable.core.db.entity import Entity
    from uploadable.core.db.table import Table
    from uploadable.core.upload.datum import UploadDatum

FIELD_VALUE_PATTERN = re.compile(r"\{field-value:(\w+)\}")


class DefaultProcessor(PathProcessor):
    """
    Builds paths from the `path` template of the field.

    Supported placeholders: `{DS}`, `{table}`, `{model}`, `{field}`,
    `{primaryKey}` and `{<primary key column>}`, `{year}`, `{month}`, `{day}`,
    `{time}`, `{microtime}` and `{field-value:<column>}`.

    A template ending with a separator names a directory and the file keeps
    its (sanitized) client name. Otherwise the last segment is the file stem
    and the extension of the client name is appended to it.
    """

    def resolve(self, table: Table, entity: Entity, datum: UploadDatum) -> tuple[str, str]:
        path = self.render(table, entity)
        if not path or path.endswith("/"):
            return path.rstrip("/"), self.filename(datum)
        basepath, stem = posixpath.split(path)
        extension = posixpath.splitext(posixpath.basename(datum.name.replace("\\", "/")))[1]
        return basepath, self.clean(f"{stem}{extension}")

    def filename(self, datum: UploadDatum) -> str:
        if self.settings.name_callback is not None:
            name = self.settings.name_callback(datum, self.settings)
        else:
            name = datum.name
        return self.clean(name)

    def clean(self, name: str) -> str:
        try:
            return get_valid_filename(posixpath.basename(str(name).replace("\\", "/")))
        except SuspiciousFileOperation as exc:
            raise PathResolutionError(f"Invalid filename for '{self.field}': {name!r}") from exc

    def render(self, table: Table, entity: Entity) -> str:
        now = datetime.now()
        timestamp = time.time()
        replacements = {
            "{DS}": "/",
            "{table}": table.name,
            "{model}": table.name,
            "{field}": self.field,
            "{year}": now.strftime("%Y"),
            "{month}": now.strftime("%m"),
            "{day}": now.strftime("%d"),
            "{time}": str(int(timestamp)),
            "{microtime}": f"{timestamp:.6f}",
        }
        path = self.settings.path
        for placeholder, value in replacements.items():
            path = path.replace(placeholder, value)

        pk_placeholders = (PRIMARY_KEY_PLACEHOLDER, f"{{{table.primary_key}}}")
        if any(placeholder in path for placeholder in pk_placeholders):
            pk = entity.get(table.primary_key)
            if pk is None or pk == "":
                raise PathResolutionError(
                    f"{PRIMARY_KEY_PLACEHOLDER} substitution not allowed for new records."
                )
            for placeholder in pk_placeholders:
                path = path.replace(placeholder, str(pk))

        return FIELD_VALUE_PATTERN.sub(lambda match: self._field_value(entity, match[1]), path)

    def _field_value(self, entity: Entity, column: str) -> str:
        value = entity.get(column)
        if value is None or value == "":
            raise PathResolutionError(f"Field value for substitution is missing: {column}")
        return str(value)
