from __future__ import annotations

from typing import Any

from blinker import Signal

from uploadable.exceptions import SignalError

LIFECYCLE_SIGNALS = ("before_marshal", "before_save", "after_save", "after_delete")


class Broadcaster(dict):
    """
    A dictionary of blinker signals with attribute access.

    Every `Table` owns one, so receivers connected to a table only hear about
    that table's records. Unknown signals are created on first access.
    """

    def __getattr__(self, item: str) -> Signal:
        return self.setdefault(item, Signal())  # type: ignore

    def __setattr__(self, __name: str, __value: Signal) -> None:
        if not isinstance(__value, Signal):
            raise SignalError(f"{__value} is not valid signal")
        self[__name] = __value


def send_vetoable(signal: Signal, sender: Any, **kwargs: Any) -> bool:
    """
    Sends `signal` synchronously and reports whether the operation may go on.

    Receivers run one after another. A receiver vetoes by returning `False`,
    which stops the dispatch; every other return value, `None` included, lets
    the operation continue. Exceptions raised by receivers propagate.
    """
    for receiver in signal.receivers_for(sender):
        if receiver(sender, **kwargs) is False:
            return False
    return True


__all__ = ["Broadcaster", "LIFECYCLE_SIGNALS", "Signal", "send_vetoable"]
