from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from monkay import Monkay

    from uploadable import Instance, UploadableSettings


@lru_cache
def get_uploadable_monkay() -> Monkay[Instance, UploadableSettings]:
    from uploadable import monkay

    monkay.evaluate_settings(on_conflict="error", ignore_import_errors=False)

    return monkay


class SettingsForward:
    def __getattribute__(self, name: str) -> Any:
        monkay = get_uploadable_monkay()
        return getattr(monkay.settings, name)


settings: UploadableSettings = cast("UploadableSettings", SettingsForward())


def evaluate_settings_once_ready() -> None:
    """
    Call when settings must be ready.

    This doesn't prevent the settings being updated later or set before.
    """
    get_uploadable_monkay()


__all__ = ["settings", "evaluate_settings_once_ready"]
