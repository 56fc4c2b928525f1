from __future__ import annotations

import mimetypes
import os
from collections.abc import Mapping
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError


class UploadError(IntEnum):
    """
    Status codes of a submitted file, numbered like the codes HTTP upload
    handlers commonly report.
    """

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


class UploadDatum(BaseModel):
    """
    The raw payload submitted for one upload field in one save attempt.
    """

    model_config = ConfigDict(extra="ignore")

    tmp_name: str = ""
    name: str = ""
    size: int = 0
    type: str = ""
    error: UploadError = UploadError.NO_FILE

    @property
    def is_ok(self) -> bool:
        return self.error == UploadError.OK

    @classmethod
    def coerce(cls, value: Any) -> UploadDatum | None:
        """
        Returns `value` as a datum, or `None` when it does not look like an
        upload (e.g. a stored filename).
        """
        if isinstance(value, UploadDatum):
            return value
        if isinstance(value, Mapping) and "error" in value:
            try:
                return cls.model_validate(value)
            except ValidationError:
                return None
        return None

    @classmethod
    def from_path(cls, path: str | os.PathLike, name: str = "", type: str = "") -> UploadDatum:
        """
        Builds a successful upload for a file on the local disk.
        """
        path = os.fspath(path)
        name = name or os.path.basename(path)
        if not type:
            type = mimetypes.guess_type(name)[0] or "application/octet-stream"
        return cls(
            tmp_name=path, name=name, size=os.path.getsize(path), type=type, error=UploadError.OK
        )
