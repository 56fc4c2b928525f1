from .default import DefaultTransformer, SlugTransformer
from .image import ImageTransformer

__all__ = ["DefaultTransformer", "ImageTransformer", "SlugTransformer"]
