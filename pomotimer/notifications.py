"""Desktop notifications for session boundaries.

Messages go out through the system tray icon, the same channel the
window's tray menu uses.  "Permission" maps onto what the platform
offers: a tray that can show balloon messages is ``granted``, anything
else is ``denied``.  Failures are logged and swallowed.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from PyQt6.QtWidgets import QSystemTrayIcon

from .timer.state import SessionType

logger = logging.getLogger(__name__)


PERMISSION_DEFAULT = "default"
PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"

MESSAGE_TIMEOUT_MS = 5000


class Message(NamedTuple):
    title: str
    body: str


NOTIFICATION_MESSAGES: dict[str, Message] = {
    SessionType.WORK.value: Message(
        "Work session finished", "Time for a break."
    ),
    SessionType.BREAK.value: Message(
        "Break finished", "Let's get back to work."
    ),
    SessionType.LONG_BREAK.value: Message(
        "Long break finished", "Let's get back to work."
    ),
    "complete": Message(
        "Congratulations!", "You finished every set."
    ),
}


class Notifier:
    """Shows session-end and completion messages via a tray icon."""

    def __init__(self, tray_icon: Optional[QSystemTrayIcon] = None) -> None:
        self._tray_icon = tray_icon
        self._enabled = True
        self._permission = PERMISSION_DEFAULT
        self._check_permission()

    # ── permission ────────────────────────────────────────────────────

    def _check_permission(self) -> None:
        if self._tray_icon is None:
            return
        if (
            QSystemTrayIcon.isSystemTrayAvailable()
            and QSystemTrayIcon.supportsMessages()
        ):
            self._permission = PERMISSION_GRANTED
        else:
            self._permission = PERMISSION_DENIED

    def request_permission(self) -> bool:
        """Re-check platform support.  True if messages can be shown."""
        if self._tray_icon is None:
            logger.warning("Notifications unavailable: no tray icon")
            return False
        if self._permission == PERMISSION_GRANTED:
            return True
        self._check_permission()
        if self._permission != PERMISSION_GRANTED:
            logger.warning("Notifications are not supported on this desktop")
        return self._permission == PERMISSION_GRANTED

    @property
    def permission(self) -> str:
        return self._permission

    def has_permission(self) -> bool:
        return self._permission == PERMISSION_GRANTED

    # ── enable flag ───────────────────────────────────────────────────

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── messages ──────────────────────────────────────────────────────

    def notify_session_end(self, session: SessionType) -> None:
        self._show(NOTIFICATION_MESSAGES[session.value])

    def notify_complete(self) -> None:
        self._show(NOTIFICATION_MESSAGES["complete"])

    def _show(self, message: Message) -> None:
        if not self._enabled or not self.has_permission():
            return
        try:
            self._tray_icon.showMessage(
                message.title,
                message.body,
                QSystemTrayIcon.MessageIcon.Information,
                MESSAGE_TIMEOUT_MS,
            )
        except RuntimeError as exc:  # tray icon already deleted
            logger.error("Could not show notification: %s", exc)
