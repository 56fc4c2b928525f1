from __future__ import annotations

__version__ = "0.1.0"
from typing import TYPE_CHECKING

from ._monkay import Instance, create_monkay

if TYPE_CHECKING:
    from .conf.global_settings import UploadableSettings
    from .core.db.behaviors import Behavior
    from .core.db.entity import Entity
    from .core.db.table import Table
    from .core.db.validation import Validator
    from .core.files.base import ContentFile, File
    from .core.files.storage.base import Storage
    from .core.upload.behavior import UploadBehavior
    from .core.upload.config import FieldConfig
    from .core.upload.datum import UploadDatum, UploadError
    from .core.upload.registry import path_processors, transformers, writers

__all__ = [
    "Instance",
    "monkay",
    "settings",
    "UploadableSettings",
    # record store
    "Behavior",
    "Entity",
    "Table",
    "Validator",
    # uploads
    "FieldConfig",
    "UploadBehavior",
    "UploadDatum",
    "UploadError",
    "path_processors",
    "transformers",
    "writers",
    # files
    "ContentFile",
    "File",
    "Storage",
]
monkay = create_monkay(globals())

del create_monkay
