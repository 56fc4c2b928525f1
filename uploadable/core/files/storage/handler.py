from __future__ import annotations

from typing import TYPE_CHECKING, Any

from monkay import load

from uploadable.conf import settings
from uploadable.exceptions import InvalidStorageError

if TYPE_CHECKING:
    from uploadable.core.files.storage.base import Storage


class StorageHandler:
    """
    The storages of the application by alias.

    Storages are built from `backends` (by default `settings.storages`) when
    first requested. Each entry names a dotted `backend` class and optional
    constructor `options`.
    """

    def __init__(self, backends: dict[str, Any] | None = None) -> None:
        self._backends = backends
        self._storages: dict[str, Storage] = {}

    @property
    def backends(self) -> dict[str, Any]:
        if self._backends is None:
            self._backends = dict(settings.storages)
        return self._backends

    def __contains__(self, alias: object) -> bool:
        return alias in self._storages or alias in self.backends

    def __getitem__(self, alias: str) -> Storage:
        """
        Raises:
            InvalidStorageError: If `alias` is not configured or its backend
                cannot be imported.
        """
        if alias not in self._storages:
            try:
                params = self.backends[alias]
            except KeyError:
                raise InvalidStorageError(
                    f"Could not find config for '{alias}' in settings.storages."
                ) from None
            self[alias] = self.create_storage(params)
        return self._storages[alias]

    def __setitem__(self, alias: str, storage: Storage) -> None:
        storage.name = alias
        self._storages[alias] = storage

    def create_storage(self, params: dict[str, Any]) -> Storage:
        backend = params.get("backend")
        try:
            storage_class: type[Storage] = load(backend)
        except (ImportError, AttributeError, ValueError) as exc:
            raise InvalidStorageError(f"Could not find backend {backend!r}: {exc}") from exc
        return storage_class(**params.get("options", {}))
