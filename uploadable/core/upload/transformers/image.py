from __future__ import annotations

import os
import posixpath
import tempfile
from collections.abc import Mapping, Sequence
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from loguru import logger

from uploadable.core.upload.base import Transformer
from uploadable.exceptions import InvalidStrategyError

if TYPE_CHECKING:
    from uploadable.core.db.entity import Entity
    from uploadable.core.db.table import Table
    from uploadable.core.upload.config import FieldConfig
    from uploadable.core.upload.datum import UploadDatum


class ImageTransformer(Transformer):
    """
    Stores the original image plus one thumbnail per entry of
    `transformer_options["sizes"]`, e.g. `{"thumb": (150, 150)}`.

    Thumbnails keep the aspect ratio and are named `<size>-<filename>`.
    Requires Pillow (`pip install uploadable[image]`).
    """

    def __init__(self, field: str, settings: FieldConfig) -> None:
        try:
            import PIL  # noqa: F401
        except ImportError:
            raise InvalidStrategyError(
                "The 'image' transformer requires the pillow library, run: pip install pillow"
            ) from None
        super().__init__(field, settings)
        self.sizes = self.parse_sizes(settings.transformer_options.get("sizes") or {})

    @staticmethod
    def parse_sizes(sizes: Any) -> dict[str, tuple[int, int]]:
        result: dict[str, tuple[int, int]] = {}
        for label, size in dict(sizes).items():
            if not isinstance(size, Sequence) or len(size) != 2:
                raise InvalidStrategyError(f"Invalid image size for '{label}': {size!r}")
            result[str(label)] = (int(size[0]), int(size[1]))
        return result

    def transform(self, table: Table, entity: Entity, datum: UploadDatum) -> dict[str, str]:
        from PIL import Image

        files = {datum.tmp_name: datum.name}
        if not self.sizes:
            return files

        extension = posixpath.splitext(datum.name)[1]
        try:
            with Image.open(datum.tmp_name) as image:
                image_format = image.format
                for label, size in self.sizes.items():
                    thumbnail = image.copy()
                    thumbnail.thumbnail(size)
                    fd, path = tempfile.mkstemp(suffix=extension)
                    files[path] = f"{label}-{datum.name}"
                    with os.fdopen(fd, "wb") as fp:
                        thumbnail.save(fp, format=image_format)
        except OSError as exc:
            # not an image, only the original is stored
            for path in list(files)[1:]:
                os.remove(path)
            logger.warning(f"Could not create thumbnails for '{self.field}': {exc}")
            return {datum.tmp_name: datum.name}
        return files

    def cleanup(self, datum: UploadDatum, files: Mapping[str, str]) -> None:
        for source in files:
            if source == datum.tmp_name:
                continue
            # moved into the storage already when temporary files are consumed
            with suppress(FileNotFoundError):
                os.remove(source)
