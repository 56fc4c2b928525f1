from .base import PathProcessor, Strategy, Transformer, Writer
from .behavior import UploadBehavior
from .config import ColumnNames, FieldConfig
from .datum import UploadDatum, UploadError
from .pipeline import FieldPipeline
from .registry import StrategyRegistry, path_processors, transformers, writers

__all__ = [
    "ColumnNames",
    "FieldConfig",
    "FieldPipeline",
    "PathProcessor",
    "Strategy",
    "StrategyRegistry",
    "Transformer",
    "UploadBehavior",
    "UploadDatum",
    "UploadError",
    "Writer",
    "path_processors",
    "transformers",
    "writers",
]
