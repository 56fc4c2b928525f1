from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from uploadable.core.files.base import ContentFile, File
from uploadable.utils.path import get_random_string, get_valid_filepath, validate_file_name

T = TypeVar("T")
S = TypeVar("S")


class Storage(ABC):
    """
    Base class of the storage backends files are written to.

    Names are relative to the root of the storage and always use `/`.
    Backends implement the underscored primitives plus `delete`, `exists`,
    `listdir` and `size`; `save` and `open` normalize the arguments first.
    """

    # alias under which the storage handler created the storage
    name: str = ""

    @staticmethod
    def value_or_setting(value: T, setting: S) -> T | S:
        return setting if value is None else value

    def open(self, name: str, mode: str = "rb") -> File:
        return self._open(name, mode)

    def save(self, content: Any, name: str = "", overwrite: bool = False) -> str:
        """
        Writes `content` (`str`, `bytes`, a binary stream or a `File`) under
        `name` and returns the name which was actually used.

        Unless `overwrite` is set, an existing file is kept and the content is
        stored under an alternative name.
        """
        name = self.sanitize_name(name or content.name)
        if isinstance(content, str):
            content = ContentFile(content.encode("utf8"), name)
        elif isinstance(content, bytes):
            content = ContentFile(content, name)
        elif not hasattr(content, "chunks"):
            content = File(content, name, storage=self)
        return self._save(content, name, overwrite)

    def sanitize_name(self, name: str) -> str:
        """
        Rejects traversal and cleans the filename part of `name`.

        Raises:
            SuspiciousFileOperation: If `name` is absolute or leaves the root.
        """
        validate_file_name(name, allow_relative_path=True)
        return get_valid_filepath(name)

    def get_available_name(self, name: str) -> str:
        """
        Returns `name`, or a variant with a random suffix while `name` is taken.
        """
        directory, filename = posixpath.split(str(name).replace("\\", "/"))
        validate_file_name(filename)
        stem, extension = posixpath.splitext(filename)
        while self.exists(name):
            name = posixpath.join(directory, f"{stem}_{get_random_string(7)}{extension}")
        return name

    def path(self, name: str) -> str:
        raise NotImplementedError(f"{type(self).__name__} has no local paths.")

    def url(self, name: str) -> str:
        raise NotImplementedError(f"{type(self).__name__} has no public URLs.")

    @abstractmethod
    def _open(self, name: str, mode: str) -> File: ...

    @abstractmethod
    def _save(self, content: File, name: str, overwrite: bool) -> str: ...

    @abstractmethod
    def delete(self, name: str) -> None:
        """
        Removes `name`. A missing file is not an error.
        """

    @abstractmethod
    def exists(self, name: str) -> bool: ...

    @abstractmethod
    def listdir(self, path: str) -> tuple[list[str], list[str]]:
        """
        Returns the directories and the files directly inside `path`.
        """

    @abstractmethod
    def size(self, name: str) -> int: ...
