from __future__ import annotations

import os
import posixpath
import re
import secrets
import string
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import quote

from uploadable.exceptions import SuspiciousFileOperation

INVALID_FILENAME_CHARS = re.compile(r"(?u)[^-\w.]")


def safe_join(base: str, *paths: Any) -> str:
    """
    Joins `paths` onto `base` and returns the absolute result.

    Raises:
        SuspiciousFileOperation: If the result is outside of `base`.
    """
    base_path = os.path.abspath(base)
    final_path = os.path.abspath(os.path.join(base_path, *paths))

    normalized_base = os.path.normcase(base_path)
    normalized_final = os.path.normcase(final_path)
    inside = normalized_final == normalized_base or normalized_final.startswith(
        normalized_base.rstrip(os.sep) + os.sep
    )
    if not inside:
        raise SuspiciousFileOperation(
            f"The joined path ({final_path}) is located outside of the base path ({base_path})"
        )
    return final_path


def get_valid_filename(name: str) -> str:
    """
    Turns `name` into a safe filename: spaces become underscores, anything but
    letters, digits, `-`, `_` and `.` is dropped.

    Raises:
        SuspiciousFileOperation: If nothing usable is left.
    """
    cleaned = INVALID_FILENAME_CHARS.sub("", str(name).strip().replace(" ", "_"))
    if cleaned in {"", ".", ".."}:
        raise SuspiciousFileOperation(f"Could not derive file name from '{name}'")
    return cleaned


def get_valid_filepath(name: str) -> str:
    """
    Like `get_valid_filename` for the last segment of a relative path. The
    directories are kept as they are.
    """
    directory, filename = posixpath.split(str(name).replace("\\", "/"))
    return posixpath.join(directory, get_valid_filename(filename))


def validate_file_name(name: str, allow_relative_path: bool = False) -> str:
    """
    Raises:
        SuspiciousFileOperation: If `name` is empty or reserved, absolute,
            contains `..`, or has directories while `allow_relative_path` is
            False.
    """
    if os.path.basename(name) in {"", ".", ".."}:
        raise SuspiciousFileOperation(f"Could not derive file name from '{name}'")

    if allow_relative_path:
        path = PurePosixPath(str(name).replace("\\", "/"))
        if path.is_absolute() or ".." in path.parts:
            raise SuspiciousFileOperation(f"Detected path traversal attempt in '{name}'")
    elif name != os.path.basename(name):
        raise SuspiciousFileOperation(f"File name '{name}' includes path elements")
    return name


def to_storage_name(path: str) -> str:
    """
    Turns a path built from a path template into a name relative to the root
    of a storage.
    """
    return posixpath.normpath(str(path).replace("\\", "/")).lstrip("/")


def filepath_to_uri(path: str | None) -> str:
    if not path:
        return ""
    return quote(str(path).replace("\\", "/"), safe="/~!*()'")


def get_random_string(length: int = 10) -> str:
    return "".join(secrets.choice(string.ascii_lowercase) for _ in range(length))
