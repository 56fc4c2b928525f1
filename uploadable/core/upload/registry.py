from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from monkay import load

from uploadable.core.upload.base import PathProcessor, Strategy, Transformer, Writer
from uploadable.core.upload.path import DefaultProcessor
from uploadable.core.upload.transformers import (
    DefaultTransformer,
    ImageTransformer,
    SlugTransformer,
)
from uploadable.core.upload.transformers.default import CallableTransformer
from uploadable.core.upload.writers import DefaultWriter
from uploadable.exceptions import InvalidStrategyError

if TYPE_CHECKING:
    from uploadable.core.upload.config import FieldConfig


class StrategyRegistry:
    """
    Maps names to the strategies of one role.

    An identifier is resolved in this order: a registered name, a dotted import
    path, a class. Registries accepting callables also take plain functions.

    Example:
        ```python
        @transformers.register("upper")
        class UpperTransformer(Transformer): ...
        ```
    """

    def __init__(self, role: str, base: type[Strategy], allow_callables: bool = False) -> None:
        self.role = role
        self.base = base
        self.allow_callables = allow_callables
        self._registry: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.role}>"

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def names(self) -> list[str]:
        return list(self._registry)

    def register(self, name: str, strategy: Any = None) -> Any:
        """
        Registers `strategy` under `name`. Without a strategy a decorator is
        returned.
        """
        if strategy is None:

            def wrapper(strategy: Any) -> Any:
                self.register(name, strategy)
                return strategy

            return wrapper

        self.validate(strategy)
        self._registry[name] = strategy
        return strategy

    def unregister(self, name: str) -> None:
        self._registry.pop(name, None)

    def validate(self, strategy: Any) -> Any:
        if inspect.isclass(strategy):
            if issubclass(strategy, self.base) and not inspect.isabstract(strategy):
                return strategy
        elif self.allow_callables and callable(strategy):
            return strategy
        raise InvalidStrategyError(
            f"'{self.role}' not set to a subclass of {self.base.__name__}: {strategy!r}"
        )

    def get(self, identifier: Any) -> Any:
        """
        Returns the class (or function) `identifier` stands for.

        Raises:
            InvalidStrategyError: If it cannot be found or does not fit the role.
        """
        if isinstance(identifier, str):
            if identifier in self._registry:
                return self._registry[identifier]
            try:
                identifier = load(identifier)
            except (ImportError, AttributeError, ValueError) as exc:
                raise InvalidStrategyError(
                    f"Unknown '{self.role}': {identifier!r} ({exc})."
                ) from exc
        return self.validate(identifier)

    def create(self, identifier: Any, field: str, settings: FieldConfig) -> Strategy:
        """
        Resolves `identifier` and instantiates it for `field`.
        """
        strategy: Callable[..., Any] = self.get(identifier)
        if inspect.isclass(strategy):
            return strategy(field, settings)
        return CallableTransformer(strategy, field, settings)


path_processors = StrategyRegistry("path_processor", PathProcessor)
transformers = StrategyRegistry("transformer", Transformer, allow_callables=True)
writers = StrategyRegistry("writer", Writer)

path_processors.register("default", DefaultProcessor)
transformers.register("default", DefaultTransformer)
transformers.register("slug", SlugTransformer)
transformers.register("image", ImageTransformer)
writers.register("default", DefaultWriter)

__all__ = ["StrategyRegistry", "path_processors", "transformers", "writers"]
