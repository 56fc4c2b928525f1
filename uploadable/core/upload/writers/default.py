from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from contextlib import suppress
from functools import cached_property

from loguru import logger

from uploadable.conf import settings
from uploadable.core.files.base import File, TemporaryUploadedFile
from uploadable.core.files.storage.base import Storage
from uploadable.core.upload.base import Writer
from uploadable.exceptions import SuspiciousFileOperation
from uploadable.utils.path import to_storage_name


class DefaultWriter(Writer):
    """
    Writes into the storage named by the `storage` setting of the field.

    Targets are stored under their name relative to the storage root and
    existing files are overwritten, so a record always points at what was
    written last. With `upload_delete_temporary_files` the sources are moved
    or removed afterwards.
    """

    @cached_property
    def storage(self) -> Storage:
        if isinstance(self.settings.storage, Storage):
            return self.settings.storage
        from uploadable.core.files.storage import storages

        return storages[self.settings.storage]

    def write(self, files: Mapping[str, str]) -> dict[str, bool]:
        return {target: self.write_file(source, target) for source, target in files.items()}

    def write_file(self, source: str, target: str) -> bool:
        name = to_storage_name(target)
        try:
            if settings.upload_delete_temporary_files:
                with TemporaryUploadedFile(source, name=name, storage=self.storage) as content:
                    stored_name = self.storage.save(content, name, overwrite=True)
                with suppress(FileNotFoundError):
                    os.remove(source)
            else:
                with open(source, "rb") as fp:
                    stored_name = self.storage.save(
                        File(fp, name=name, storage=self.storage), name, overwrite=True
                    )
        except (OSError, SuspiciousFileOperation) as exc:
            logger.warning(f"Could not write '{source}' to '{name}': {exc}")
            return False

        if stored_name != name:
            logger.warning(f"'{source}' was stored as '{stored_name}' instead of '{name}'.")
            return False
        logger.debug(f"Wrote '{name}' for field '{self.field}'.")
        return True

    def delete(self, paths: Sequence[str]) -> list[bool]:
        return [self.delete_file(path) for path in paths]

    def delete_file(self, path: str) -> bool:
        name = to_storage_name(path)
        try:
            self.storage.delete(name)
        except (OSError, ValueError, SuspiciousFileOperation) as exc:
            logger.warning(f"Could not delete '{name}': {exc}")
            return False
        logger.debug(f"Deleted '{name}' for field '{self.field}'.")
        return True
