from .default import DefaultProcessor

__all__ = ["DefaultProcessor"]
