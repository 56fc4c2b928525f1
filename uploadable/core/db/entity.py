from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class Entity:
    """
    A single record with change tracking.

    Values are reachable as items, as attributes or through `get`/`set`. Every
    `set` marks the field dirty until `clean()` is called, which the table does
    once a record has been written.
    """

    def __init__(self, data: Mapping[str, Any] | None = None, *, new: bool = True) -> None:
        object.__setattr__(self, "_fields", {})
        object.__setattr__(self, "_dirty", set())
        object.__setattr__(self, "_new", new)
        for key, value in (data or {}).items():
            self.set(key, value)
        if not new:
            self.clean()

    @property
    def is_new(self) -> bool:
        return self._new

    @is_new.setter
    def is_new(self, value: bool) -> None:
        object.__setattr__(self, "_new", value)

    def get(self, field: str, default: Any = None) -> Any:
        return self._fields.get(field, default)

    def set(self, field: str, value: Any) -> None:
        self._fields[field] = value
        self._dirty.add(field)

    def has(self, field: str) -> bool:
        return field in self._fields

    def unset(self, field: str) -> None:
        self._fields.pop(field, None)
        self._dirty.discard(field)

    def is_dirty(self, field: str | None = None) -> bool:
        if field is None:
            return bool(self._dirty)
        return field in self._dirty

    @property
    def dirty_fields(self) -> list[str]:
        return [field for field in self._fields if field in self._dirty]

    def extract(self, fields: Iterable[str], only_dirty: bool = False) -> dict[str, Any]:
        """
        Returns the values of `fields` present on the record, optionally only the
        dirty ones.
        """
        return {
            field: self._fields[field]
            for field in fields
            if field in self._fields and (not only_dirty or field in self._dirty)
        }

    def clean(self) -> None:
        self._dirty.clear()

    def to_dict(self) -> dict[str, Any]:
        return dict(self._fields)

    def __getitem__(self, field: str) -> Any:
        return self._fields[field]

    def __setitem__(self, field: str, value: Any) -> None:
        self.set(field, value)

    def __contains__(self, field: object) -> bool:
        return field in self._fields

    def __getattr__(self, field: str) -> Any:
        if field.startswith("_"):
            raise AttributeError(field)
        try:
            return self._fields[field]
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{field}'"
            ) from None

    def __setattr__(self, field: str, value: Any) -> None:
        if field.startswith("_") or field == "is_new":
            object.__setattr__(self, field, value)
        else:
            self.set(field, value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self._fields!r}>"
