from __future__ import annotations

import os
from pathlib import Path

from monkay import ExtensionProtocol
from pydantic_settings import BaseSettings, SettingsConfigDict


class MediaSettings(BaseSettings):
    """
    Settings related to where uploaded files end up and how they are stored.
    """

    file_upload_permissions: int | None = 0o644
    """
    The permissions applied to written files, as an octal integer.

    If `None`, the system defaults apply.
    """
    file_upload_directory_permissions: int | None = None
    """
    The permissions for directories created while writing files.
    """
    media_root: str | os.PathLike = Path("media/")
    """
    The directory the default filesystem storage writes into.
    """
    media_url: str = ""
    """
    The base URL prepended to stored names when building public URLs.
    """
    storages: dict[str, dict] = {
        "default": {
            "backend": "uploadable.core.files.storage.filesystem.FileSystemStorage",
        },
    }
    """
    Named storage backends. Each value holds a dotted `backend` path and
    optional `options` passed to its constructor.
    """


class UploadSettings(BaseSettings):
    """
    Defaults applied to upload fields which do not configure a value themselves.
    """

    upload_default_path: str = "files{DS}{table}{DS}{field}{DS}"
    """
    Path template used when a field does not set `path`.
    """
    upload_path_processor: str = "default"
    upload_transformer: str = "default"
    upload_writer: str = "default"
    upload_keep_files_on_delete: bool = True
    """
    Whether deleting a record leaves its files in place.
    """
    upload_delete_temporary_files: bool = True
    """
    Whether the default writer removes the temporary source once it was copied.
    """
    upload_fail_fast_on_delete: bool = True
    """
    Stop deleting files of the remaining fields as soon as one delete fails.

    With `False` every configured field is processed and the failure is reported
    once at the end.
    """


class UploadableSettings(MediaSettings, UploadSettings):
    """
    Main settings class for Uploadable.
    """

    model_config = SettingsConfigDict(extra="allow")

    preloads: list[str] | tuple[str, ...] = ()
    """
    Module paths imported when the settings are evaluated.
    """
    extensions: list[ExtensionProtocol] | tuple[ExtensionProtocol, ...] = ()
    """
    Monkay extensions to apply.
    """
