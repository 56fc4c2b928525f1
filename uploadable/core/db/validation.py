from __future__ import annotations

from typing import Literal

When = bool | Literal["create", "update"]


class Validator:
    """
    Holds which fields of a table may be submitted empty.

    Only the emptiness rules are modelled; the upload behavior consults them
    to drop "no file submitted" payloads before a record is built.
    """

    def __init__(self) -> None:
        self._allow_empty: dict[str, When] = {}

    def allow_empty(self, field: str, when: When = True) -> Validator:
        """
        Allows `field` to be empty always (`True`), never (`False`) or only when
        the record is being created or updated.
        """
        self._allow_empty[field] = when
        return self

    def is_empty_allowed(self, field: str, new_record: bool) -> bool:
        when = self._allow_empty.get(field, False)
        if when == "create":
            return new_record
        if when == "update":
            return not new_record
        return bool(when)
