from __future__ import annotations

from typing import Any

from sqlalchemy.types import String, TypeDecorator

from uploadable.core.upload.datum import UploadDatum

FILE_TYPE = "upload.file"


class FileType(TypeDecorator):
    """
    Column type of an upload field. Stores the filename; a submitted upload
    which was not consumed by a writer is stored as NULL.
    """

    impl = String(255)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None or UploadDatum.coerce(value) is not None:
            return None
        return str(value)

    def process_result_value(self, value: Any, dialect: Any) -> str | None:
        return value
