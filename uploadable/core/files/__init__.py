from typing import TYPE_CHECKING

from monkay import Monkay

from .base import ContentFile, File, TemporaryUploadedFile

if TYPE_CHECKING:
    from .storage import Storage, storages

# storages follows the current monkay instance, so it is never cached
Monkay(
    globals(),
    lazy_imports={"Storage": ".storage.Storage", "storages": ".storage.storages"},
    uncached_imports={"storages"},
)

__all__ = ["ContentFile", "File", "Storage", "TemporaryUploadedFile", "storages"]
