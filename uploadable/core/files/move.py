from __future__ import annotations

import os
import shutil
from contextlib import suppress

__all__ = ["file_move_safe"]


def file_move_safe(
    old_file_name: str,
    new_file_name: str,
    chunk_size: int = 1024 * 64,
    allow_overwrite: bool = False,
) -> None:
    """
    Moves a file, renaming when possible and copying otherwise (e.g. across
    devices). The source is gone afterwards in both cases.

    Raises:
        FileExistsError: If the destination exists and `allow_overwrite` is False.
    """
    with suppress(OSError):
        if os.path.samefile(old_file_name, new_file_name):
            return

    if not allow_overwrite and os.path.exists(new_file_name):
        raise FileExistsError(f"Destination file {new_file_name} exists.")

    try:
        os.replace(old_file_name, new_file_name)
        return
    except OSError:
        pass

    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)
    if not allow_overwrite:
        flags |= os.O_EXCL
    with open(old_file_name, "rb") as source, os.fdopen(os.open(new_file_name, flags), "wb") as target:
        shutil.copyfileobj(source, target, chunk_size)
    with suppress(PermissionError):
        shutil.copymode(old_file_name, new_file_name)
    os.remove(old_file_name)
