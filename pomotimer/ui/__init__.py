"""UI package."""

from .complete_panel import CompletePanel
from .settings_panel import SettingsPanel
from .timer_widget import TimerWidget

__all__ = [
    "CompletePanel",
    "SettingsPanel",
    "TimerWidget",
]
