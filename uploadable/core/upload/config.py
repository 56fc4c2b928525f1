from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from uploadable.conf import settings
from uploadable.core.files.storage.base import Storage
from uploadable.core.upload.datum import UploadDatum
from uploadable.exceptions import ImproperlyConfigured

PRIMARY_KEY_PLACEHOLDER = "{primaryKey}"


class ColumnNames(BaseModel):
    """
    The columns receiving the metadata of an upload field.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dir: str = "dir"
    size: str = "size"
    type: str = "type"


class FieldConfig(BaseModel):
    """
    The settings of one upload field. Frozen once the behavior is attached.

    `path_processor`, `transformer` and `writer` accept a registered name, a
    dotted import path or a class; `transformer` also accepts a plain function.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    path: str = Field(default_factory=lambda: settings.upload_default_path)
    fields: ColumnNames = Field(default_factory=ColumnNames)
    name_callback: Callable[[UploadDatum, FieldConfig], str] | None = None
    path_processor: Any = Field(default_factory=lambda: settings.upload_path_processor)
    transformer: Any = Field(default_factory=lambda: settings.upload_transformer)
    writer: Any = Field(default_factory=lambda: settings.upload_writer)
    keep_files_on_delete: bool = Field(
        default_factory=lambda: settings.upload_keep_files_on_delete
    )
    storage: str | Storage = "default"
    transformer_options: dict[str, Any] = Field(default_factory=dict)

    def is_deferred(self, primary_key: str) -> bool:
        """
        Whether the path needs the primary key, i.e. cannot be built before the
        record was inserted.
        """
        return PRIMARY_KEY_PLACEHOLDER in self.path or f"{{{primary_key}}}" in self.path


def normalize_config(config: Any) -> dict[str, FieldConfig]:
    """
    Turns the configuration given to the behavior into field configs.

    Accepts a mapping of field names to settings or an iterable mixing bare
    field names and such mappings. The resulting order is the processing order.
    """
    if config is None:
        return {}
    if isinstance(config, Mapping):
        items: Iterable[Any] = [config]
    elif isinstance(config, str):
        items = [config]
    else:
        items = config

    result: dict[str, FieldConfig] = {}
    for item in items:
        if isinstance(item, str):
            result[item] = FieldConfig()
        elif isinstance(item, Mapping):
            for field, field_settings in item.items():
                result[field] = _to_field_config(field, field_settings)
        else:
            raise ImproperlyConfigured(f"Invalid upload field configuration: {item!r}")
    return result


def _to_field_config(field: str, field_settings: Any) -> FieldConfig:
    if isinstance(field_settings, FieldConfig):
        return field_settings
    if field_settings is None:
        return FieldConfig()
    if isinstance(field_settings, Mapping):
        try:
            return FieldConfig.model_validate(dict(field_settings))
        except ValidationError as e:
            raise ImproperlyConfigured(
                f"Invalid settings for upload field '{field}': {e}"
            ) from e
    raise ImproperlyConfigured(f"Invalid settings for upload field '{field}': {field_settings!r}")
