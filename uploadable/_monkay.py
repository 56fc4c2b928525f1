from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from monkay import Monkay

from uploadable.core.files.storage.handler import StorageHandler

if TYPE_CHECKING:
    from uploadable.conf.global_settings import UploadableSettings


@dataclass
class Instance:
    """
    Holds the application wide objects, currently the storage handler.
    """

    storages: StorageHandler = field(default_factory=StorageHandler)


def create_monkay(global_dict: dict) -> Monkay[Instance, UploadableSettings]:
    """
    Initializes the Monkay container backing the lazy public API and the settings.
    """
    monkay: Monkay[Instance, UploadableSettings] = Monkay(
        global_dict,
        with_extensions=True,
        with_instance=True,
        settings_path=lambda: os.environ.get(
            "UPLOADABLE_SETTINGS_MODULE", "uploadable.conf.global_settings.UploadableSettings"
        )
        or "",
        settings_extensions_name="extensions",
        settings_preloads_name="preloads",
        uncached_imports={"settings"},
        lazy_imports={
            "settings": lambda: monkay.settings,
            "UploadableSettings": "uploadable.conf.global_settings:UploadableSettings",
            "Entity": "uploadable.core.db.entity:Entity",
            "Table": "uploadable.core.db.table:Table",
            "Validator": "uploadable.core.db.validation:Validator",
            "Behavior": "uploadable.core.db.behaviors:Behavior",
            "UploadBehavior": "uploadable.core.upload.behavior:UploadBehavior",
            "FieldConfig": "uploadable.core.upload.config:FieldConfig",
            "UploadDatum": "uploadable.core.upload.datum:UploadDatum",
            "UploadError": "uploadable.core.upload.datum:UploadError",
            "path_processors": "uploadable.core.upload.registry:path_processors",
            "transformers": "uploadable.core.upload.registry:transformers",
            "writers": "uploadable.core.upload.registry:writers",
            "File": "uploadable.core.files.base:File",
            "ContentFile": "uploadable.core.files.base:ContentFile",
            "Storage": "uploadable.core.files.storage.base:Storage",
        },
        skip_all_update=True,
    )
    return monkay
