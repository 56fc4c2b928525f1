from __future__ import annotations

from typing import TYPE_CHECKING, Any

from uploadable.core.signals import LIFECYCLE_SIGNALS

if TYPE_CHECKING:
    from uploadable.core.db.table import Table


class Behavior:
    """
    Base class for reusable table extensions.

    A behavior connects every method named after a lifecycle signal
    (`before_marshal`, `before_save`, `after_save`, `after_delete`) to the
    signals of the table it is attached to.
    """

    def __init__(self, table: Table, config: Any = None) -> None:
        self.table = table
        self.initialize(config)
        for signal_name, method_name in self.implemented_events().items():
            getattr(table.signals, signal_name).connect(getattr(self, method_name), weak=False)

    def initialize(self, config: Any) -> None:
        self.config = dict(config or {})

    def implemented_events(self) -> dict[str, str]:
        return {name: name for name in LIFECYCLE_SIGNALS if callable(getattr(self, name, None))}

    def detach(self) -> None:
        for signal_name, method_name in self.implemented_events().items():
            getattr(self.table.signals, signal_name).disconnect(getattr(self, method_name))
