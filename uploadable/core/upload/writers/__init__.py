from .default import DefaultWriter

__all__ = ["DefaultWriter"]
