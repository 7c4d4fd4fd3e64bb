"""Main application window for pomotimer.

Three screens share one ``QStackedWidget``: settings → timer → complete.
The window owns the collaborators (settings store, sound manager,
notifier) and subscribes them to the engine's signals; the engine never
sees any of them.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QIcon, QPainter, QPixmap
from PyQt6.QtWidgets import (
    QMainWindow, QMessageBox, QStackedWidget, QSystemTrayIcon,
    QVBoxLayout, QWidget,
)

from . import settings as settings_store
from .audio.sounds import COMPLETE, SoundManager, cue_for_session_end
from .notifications import Notifier
from .settings import Settings, ThemeMode
from .timer.engine import SessionEngine, format_time
from .timer.state import SessionType, TimerState, TimerStatus
from .ui.complete_panel import CompletePanel
from .ui.settings_panel import SettingsPanel
from .ui.styles import build_stylesheet, resolve_palette
from .ui.timer_widget import SESSION_LABELS, TimerWidget

logger = logging.getLogger(__name__)


def _make_tray_icon(color: str = "#E8575A") -> QIcon:
    """A plain filled circle, drawn at 2× for high-DPI trays."""
    size = 64
    pixmap = QPixmap(size, size)
    pixmap.fill(QColor(0, 0, 0, 0))
    p = QPainter(pixmap)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setPen(Qt.PenStyle.NoPen)
    p.setBrush(QColor(color))
    p.drawEllipse(4, 4, size - 8, size - 8)
    p.end()
    return QIcon(pixmap)


class PomoTimerApp(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        *,
        sound_manager: SoundManager | None = None,
        confirm_actions: bool = True,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Pomodoro Timer")
        self.setMinimumSize(420, 560)
        self._confirm_actions = confirm_actions

        # ── settings ──────────────────────────────────────────────────
        self._storage_ok = settings_store.storage_available()
        if not self._storage_ok:
            logger.warning(
                "Settings directory %s is not writable; changes will not persist",
                settings_store.SETTINGS_PATH.parent,
            )
        self._settings: Settings = settings_store.load_settings()

        # ── engine ────────────────────────────────────────────────────
        self._engine = SessionEngine(self._settings, self)
        self._engine.tick.connect(self._on_tick)
        self._engine.session_ended.connect(self._on_session_ended)
        self._engine.completed.connect(self._on_completed)
        self._engine.state_changed.connect(self._on_state_changed)

        # ── collaborators ─────────────────────────────────────────────
        self._sound_manager = sound_manager or SoundManager(parent=self)
        self._sound_manager.set_enabled(self._settings.sound_enabled)

        self._tray_icon = QSystemTrayIcon(_make_tray_icon(), self)
        self._tray_icon.setToolTip("Pomodoro Timer")
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.show()
        self._notifier = Notifier(self._tray_icon)
        self._notifier.set_enabled(self._settings.notification_enabled)

        # ── screens ───────────────────────────────────────────────────
        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(16, 12, 16, 12)

        self._stack = QStackedWidget(central)
        root_layout.addWidget(self._stack)

        self._settings_panel = SettingsPanel(self._settings, self._stack)
        self._timer_widget = TimerWidget(self._engine, self._stack)
        self._complete_panel = CompletePanel(self._stack)
        for screen in (
            self._settings_panel, self._timer_widget, self._complete_panel,
        ):
            self._stack.addWidget(screen)

        self._settings_panel.start_requested.connect(self._on_start_requested)
        self._settings_panel.theme_changed.connect(self._on_theme_changed)
        self._settings_panel.sound_toggled.connect(self._on_sound_toggled)
        self._settings_panel.notification_toggled.connect(
            self._on_notification_toggled
        )
        self._settings_panel.defaults_requested.connect(
            self._on_defaults_requested
        )
        self._timer_widget.skip_requested.connect(self._on_skip_requested)
        self._timer_widget.reset_requested.connect(self._on_reset_requested)
        self._complete_panel.restart_requested.connect(self._show_settings)

        self._apply_theme(self._settings.theme_mode)
        self._stack.setCurrentWidget(self._settings_panel)

    # ══════════════════════════════════════════════════════════════════
    #  ACCESSORS
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> SessionEngine:
        return self._engine

    @property
    def storage_ok(self) -> bool:
        """False when settings changes cannot be written to disk."""
        return self._storage_ok

    @property
    def current_screen(self) -> QWidget:
        return self._stack.currentWidget()

    # ══════════════════════════════════════════════════════════════════
    #  THEME
    # ══════════════════════════════════════════════════════════════════

    def _apply_theme(self, theme_mode: ThemeMode) -> None:
        self._palette = resolve_palette(theme_mode)
        self.setStyleSheet(build_stylesheet(self._palette))

    def _on_theme_changed(self, theme_mode: ThemeMode) -> None:
        self._apply_theme(theme_mode)
        settings_store.save_settings(self._settings_panel.settings())

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS SCREEN
    # ══════════════════════════════════════════════════════════════════

    def _on_sound_toggled(self, checked: bool) -> None:
        if checked:
            self._sound_manager.play_test()

    def _on_notification_toggled(self, checked: bool) -> None:
        if checked and not self._notifier.request_permission():
            self._settings_panel.set_notification_checked(False)
            self._warn("Desktop notifications are not available here.")

    def _on_defaults_requested(self) -> None:
        if not self._confirm(
            "Restore defaults?", "Replace every setting with its default?"
        ):
            return
        settings_store.reset_settings()
        self._settings = settings_store.load_settings()
        self._settings_panel.populate(self._settings)
        self._apply_theme(self._settings.theme_mode)

    def _on_start_requested(self, settings: Settings) -> None:
        if settings.notification_enabled and not self._notifier.has_permission():
            if not self._notifier.request_permission():
                settings.notification_enabled = False
                self._settings_panel.set_notification_checked(False)

        self._settings = settings
        settings_store.save_settings(settings)
        self._engine.update_settings(settings)
        self._sound_manager.set_enabled(settings.sound_enabled)
        self._notifier.set_enabled(settings.notification_enabled)

        # a fresh run always starts from set 1
        if not self._engine.is_idle():
            self._engine.reset()
        self._stack.setCurrentWidget(self._timer_widget)
        self._engine.start()

    def _show_settings(self) -> None:
        self._engine.reset()
        self._settings = settings_store.load_settings()
        self._settings_panel.populate(self._settings)
        self._stack.setCurrentWidget(self._settings_panel)

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SCREEN
    # ══════════════════════════════════════════════════════════════════

    def _confirm(self, title: str, text: str) -> bool:
        if not self._confirm_actions:
            return True
        reply = QMessageBox.question(
            self,
            title,
            text,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes

    def _warn(self, text: str) -> None:
        if self._confirm_actions:
            QMessageBox.information(self, "Notifications", text)

    def _on_skip_requested(self) -> None:
        if self._confirm("Skip session?", "Skip the current session?"):
            self._engine.skip()

    def _on_reset_requested(self) -> None:
        if self._confirm(
            "Reset timer?", "Reset the timer and return to the settings?"
        ):
            self._show_settings()

    # ══════════════════════════════════════════════════════════════════
    #  ENGINE SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self, state: TimerState) -> None:
        self._tray_icon.setToolTip(
            f"{SESSION_LABELS[state.current_session].title()} "
            f"{format_time(state.remaining_time)}"
        )

    def _on_session_ended(
        self, ended: SessionType, next_session: SessionType | None
    ) -> None:
        self._sound_manager.play(cue_for_session_end(ended))
        self._notifier.notify_session_end(ended)

    def _on_completed(self) -> None:
        self._sound_manager.play(COMPLETE)
        self._notifier.notify_complete()
        self._complete_panel.set_total_sets(self._settings.total_sets)
        self._stack.setCurrentWidget(self._complete_panel)

    def _on_state_changed(self, state: TimerState) -> None:
        if state.status is TimerStatus.IDLE:
            self._tray_icon.setToolTip("Pomodoro Timer")

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space toggles pause/resume while the timer screen is shown."""
        if (
            event.key() == Qt.Key.Key_Space
            and not event.modifiers()
            and self._stack.currentWidget() is self._timer_widget
        ):
            self._timer_widget.toggle_pause()
            event.accept()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._engine.reset()
        self._tray_icon.hide()
        event.accept()
