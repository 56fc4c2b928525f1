from __future__ import annotations

import os
from collections.abc import Iterator
from functools import cached_property
from io import BytesIO
from typing import TYPE_CHECKING, Any, BinaryIO, ClassVar

from uploadable.exceptions import FileOperationError

if TYPE_CHECKING:
    from .storage import Storage


class File:
    """
    A binary stream together with the storage it belongs to.

    Storages write anything providing `chunks()`, raw streams and bytes are
    wrapped in a `File` first. `storage` may be a storage or the alias of one
    and defaults to `"default"`.
    """

    DEFAULT_CHUNK_SIZE: ClassVar[int] = 64 * 2**10

    def __init__(
        self,
        file: BinaryIO | bytes | None = None,
        name: str = "",
        storage: Storage | str | None = None,
    ) -> None:
        if isinstance(file, bytes):
            file = BytesIO(file)
        self.file = file
        self.name = name or getattr(file, "name", "") or ""
        self.mode: str = getattr(file, "mode", "rb")
        self._storage = storage

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.name or 'None'}>"

    @cached_property
    def storage(self) -> Storage:
        storage = self._storage or "default"
        if isinstance(storage, str):
            from .storage import storages

            storage = storages[storage]
        return storage

    @cached_property
    def size(self) -> int:
        if self.file is None:
            return 0
        if hasattr(self.file, "size"):
            return int(self.file.size)
        position = self.file.tell()
        self.file.seek(0, os.SEEK_END)
        size = self.file.tell()
        self.file.seek(position)
        return size

    @property
    def closed(self) -> bool:
        return self.file is None or self.file.closed

    def chunks(self, chunk_size: int | None = None) -> Iterator[bytes]:
        """
        Reads the whole file from the start, `chunk_size` bytes at a time.
        """
        if self.file is None:
            raise FileOperationError(f"'{self.name}' is closed.")
        chunk_size = chunk_size or self.DEFAULT_CHUNK_SIZE
        if self.file.seekable():
            self.file.seek(0)
        while data := self.file.read(chunk_size):
            yield data

    def open(self, mode: str | None = None) -> File:
        """
        Rewinds the file, reopening it from its storage when it was closed.

        Raises:
            FileOperationError: If the file is closed and not in its storage.
        """
        if not self.closed:
            self.file.seek(0)
        elif self.name and self.storage.exists(self.name):
            self.file = self.storage.open(self.name, mode or self.mode).file
        else:
            raise FileOperationError(f"'{self.name}' cannot be reopened.")
        return self

    def read(self, amount: int | None = None) -> bytes:
        if self.file is None:
            raise FileOperationError(f"'{self.name}' is closed.")
        return self.file.read(amount)

    def close(self) -> None:
        if self.file is not None:
            self.file.close()
            self.file = None
        self.__dict__.pop("size", None)

    def __enter__(self) -> File:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class ContentFile(File):
    """
    A `File` holding its content in memory.
    """

    def __init__(self, content: bytes, name: str = "") -> None:
        super().__init__(BytesIO(content), name=name)
        self.size = len(content)


class TemporaryUploadedFile(File):
    """
    A `File` backed by an upload in a temporary location of the local disk.

    Storages which can move files move it into place, consuming the source.
    """

    def __init__(self, tmp_name: str, name: str = "", storage: Storage | str | None = None):
        super().__init__(open(tmp_name, "rb"), name=name, storage=storage)  # noqa: SIM115
        self.tmp_name = tmp_name

    def temporary_file_path(self) -> str:
        return self.tmp_name
