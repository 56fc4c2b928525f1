from __future__ import annotations

from typing import TYPE_CHECKING

from monkay import Monkay

from .handler import StorageHandler

if TYPE_CHECKING:
    from .base import Storage

    storages: StorageHandler

# used as long as no application instance was set on the monkay container
_fallback_storages = StorageHandler()


def _get_storages() -> StorageHandler:
    from uploadable import monkay

    instance = monkay.instance
    return _fallback_storages if instance is None else instance.storages


Monkay(
    globals(),
    lazy_imports={
        "Storage": ".base.Storage",
        "storages": _get_storages,
    },
    uncached_imports={"storages"},
)

__all__ = ["Storage", "StorageHandler", "storages"]
