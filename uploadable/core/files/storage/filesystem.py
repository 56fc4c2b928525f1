import os
from functools import cached_property
from typing import Any
from urllib.parse import urljoin

from uploadable.conf import settings
from uploadable.core.files.base import File
from uploadable.core.files.move import file_move_safe
from uploadable.utils.path import filepath_to_uri, safe_join

from .base import Storage


class FileSystemStorage(Storage):
    """
    Stores files below a directory of the local disk.

    Every name goes through `safe_join`, nothing is written outside of
    `location`. Directories are created as needed. Unset arguments fall back
    to `media_root`, `media_url`, `file_upload_permissions` and
    `file_upload_directory_permissions` of the settings.
    """

    def __init__(
        self,
        location: str | os.PathLike | None = None,
        base_url: str | None = None,
        file_permissions_mode: int | None = None,
        directory_permissions_mode: int | None = None,
    ) -> None:
        self._location = location
        self._base_url = base_url
        self._file_permissions_mode = file_permissions_mode
        self._directory_permissions_mode = directory_permissions_mode

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.location}>"

    @cached_property
    def location(self) -> str:
        location = self.value_or_setting(self._location, settings.media_root)
        return os.path.abspath(os.path.normpath(location))

    @cached_property
    def base_url(self) -> str:
        base_url = self.value_or_setting(self._base_url, settings.media_url)
        if base_url and not base_url.endswith("/"):
            base_url = f"{base_url}/"
        return base_url

    @cached_property
    def file_permissions_mode(self) -> int | None:
        return self.value_or_setting(self._file_permissions_mode, settings.file_upload_permissions)

    @cached_property
    def directory_permissions_mode(self) -> int | None:
        return self.value_or_setting(
            self._directory_permissions_mode, settings.file_upload_directory_permissions
        )

    def _open(self, name: str, mode: str) -> File:
        return File(open(self.path(name), mode), name=name, storage=self)  # noqa: SIM115

    def _save(self, content: File, name: str, overwrite: bool) -> str:
        if not overwrite:
            name = self.get_available_name(name)
        full_path = self.path(name)
        os.makedirs(
            os.path.dirname(full_path), mode=self.directory_permissions_mode or 0o777, exist_ok=True
        )

        while True:
            try:
                self._write(content, full_path, overwrite)
            except FileExistsError:
                # created concurrently, retry under another name
                name = self.get_available_name(name)
                full_path = self.path(name)
            else:
                break

        if self.file_permissions_mode is not None:
            os.chmod(full_path, self.file_permissions_mode)
        return os.path.relpath(full_path, self.location).replace("\\", "/")

    def _write(self, content: Any, full_path: str, overwrite: bool) -> None:
        if hasattr(content, "temporary_file_path"):
            file_move_safe(content.temporary_file_path(), full_path, allow_overwrite=overwrite)
            return
        with open(full_path, "wb" if overwrite else "xb") as fp:
            for chunk in content.chunks():
                fp.write(chunk)

    def delete(self, name: str) -> None:
        """
        Removes a file or an empty directory. Missing entries are ignored.

        Raises:
            ValueError: If `name` is empty.
        """
        if not name:
            raise ValueError("The name must be given to delete().")
        full_path = self.path(name)
        try:
            if os.path.isdir(full_path):
                os.rmdir(full_path)
            else:
                os.remove(full_path)
        except FileNotFoundError:
            pass

    def exists(self, name: str) -> bool:
        return os.path.lexists(self.path(name))

    def listdir(self, path: str) -> tuple[list[str], list[str]]:
        directories: list[str] = []
        files: list[str] = []
        with os.scandir(self.path(path)) as entries:
            for entry in entries:
                (directories if entry.is_dir() else files).append(entry.name)
        return sorted(directories), sorted(files)

    def path(self, name: str) -> str:
        return safe_join(self.location, name)

    def size(self, name: str) -> int:
        return os.path.getsize(self.path(name))

    def url(self, name: str) -> str:
        if not self.base_url:
            raise ValueError("This file is not accessible via a URL.")
        return urljoin(self.base_url, filepath_to_uri(name).lstrip("/"))
