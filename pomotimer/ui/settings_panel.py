"""Settings screen for pomotimer.

The first screen the user sees: every timer setting, the sound and
notification toggles, and the theme selector.  Pressing *Start* emits
``start_requested`` with the settings read from the form; the window
decides what to persist.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox, QComboBox, QFormLayout, QFrame, QLabel,
    QPushButton, QSpinBox, QVBoxLayout, QWidget,
)

from ..settings import Settings, ThemeMode

THEME_LABELS: dict[ThemeMode, str] = {
    ThemeMode.SYSTEM: "Follow system",
    ThemeMode.LIGHT:  "Light",
    ThemeMode.DARK:   "Dark",
}


class SettingsPanel(QWidget):
    """Form over a ``Settings`` value."""

    start_requested = pyqtSignal(object)       # Settings
    theme_changed = pyqtSignal(object)         # ThemeMode
    sound_toggled = pyqtSignal(bool)
    notification_toggled = pyqtSignal(bool)
    defaults_requested = pyqtSignal()

    def __init__(
        self, settings: Settings, parent: QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self._build_ui()
        self.populate(settings)
        self._connect_signals()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 24, 32, 28)
        layout.setSpacing(16)

        title = QLabel("Pomodoro Timer", card)
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet("font-size: 22px; font-weight: 700;")
        layout.addWidget(title)

        # ── Timer section ────────────────────────────────────────────
        form = QFormLayout()
        form.setHorizontalSpacing(20)
        form.setVerticalSpacing(10)

        self._work_spin = self._minutes_spin(1, 60)
        form.addRow("Work duration:", self._work_spin)

        self._break_spin = self._minutes_spin(1, 30)
        form.addRow("Break duration:", self._break_spin)

        self._long_spin = self._minutes_spin(1, 60)
        form.addRow("Long break:", self._long_spin)

        self._sets_spin = QSpinBox()
        self._sets_spin.setRange(1, 12)
        form.addRow("Sets:", self._sets_spin)

        self._interval_spin = QSpinBox()
        self._interval_spin.setRange(2, 12)
        self._interval_spin.setSuffix(" sets")
        form.addRow("Long break every:", self._interval_spin)

        # ── Sound, notifications, theme ──────────────────────────────
        self._sound_cb = QCheckBox("Sound cues")
        form.addRow("", self._sound_cb)

        self._notif_cb = QCheckBox("Desktop notifications")
        form.addRow("", self._notif_cb)

        self._theme_combo = QComboBox()
        for mode, label in THEME_LABELS.items():
            self._theme_combo.addItem(label, mode.value)
        form.addRow("Theme:", self._theme_combo)

        layout.addLayout(form)
        layout.addStretch()

        self._start_btn = QPushButton("Start", card)
        self._start_btn.setObjectName("primaryButton")
        layout.addWidget(self._start_btn)

        self._defaults_btn = QPushButton("Restore defaults", card)
        self._defaults_btn.setObjectName("secondaryButton")
        layout.addWidget(
            self._defaults_btn, alignment=Qt.AlignmentFlag.AlignCenter
        )

    @staticmethod
    def _minutes_spin(low: int, high: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(low, high)
        spin.setSuffix(" min")
        return spin

    def _connect_signals(self) -> None:
        self._start_btn.clicked.connect(self._on_start)
        self._defaults_btn.clicked.connect(self.defaults_requested.emit)
        self._sound_cb.toggled.connect(self.sound_toggled.emit)
        self._notif_cb.toggled.connect(self.notification_toggled.emit)
        self._theme_combo.currentIndexChanged.connect(self._on_theme_changed)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    def populate(self, settings: Settings) -> None:
        """Load *settings* into the form without emitting change signals."""
        widgets = (self._sound_cb, self._notif_cb, self._theme_combo)
        for w in widgets:
            w.blockSignals(True)
        self._work_spin.setValue(round(settings.work_duration))
        self._break_spin.setValue(round(settings.break_duration))
        self._long_spin.setValue(round(settings.long_break_duration))
        self._sets_spin.setValue(settings.total_sets)
        self._interval_spin.setValue(settings.long_break_interval)
        self._sound_cb.setChecked(settings.sound_enabled)
        self._notif_cb.setChecked(settings.notification_enabled)
        self._theme_combo.setCurrentIndex(
            self._theme_combo.findData(settings.theme_mode.value)
        )
        for w in widgets:
            w.blockSignals(False)

    def settings(self) -> Settings:
        """Settings as currently entered."""
        return Settings(
            work_duration=self._work_spin.value(),
            break_duration=self._break_spin.value(),
            long_break_duration=self._long_spin.value(),
            total_sets=self._sets_spin.value(),
            long_break_interval=self._interval_spin.value(),
            sound_enabled=self._sound_cb.isChecked(),
            notification_enabled=self._notif_cb.isChecked(),
            theme_mode=self._current_theme(),
        )

    def _current_theme(self) -> ThemeMode:
        return ThemeMode(self._theme_combo.currentData())

    def set_notification_checked(self, checked: bool) -> None:
        """Untick the box after a refused permission, silently."""
        self._notif_cb.blockSignals(True)
        self._notif_cb.setChecked(checked)
        self._notif_cb.blockSignals(False)

    # ── slots ────────────────────────────────────────────────────────

    def _on_start(self) -> None:
        self.start_requested.emit(self.settings())

    def _on_theme_changed(self, _index: int) -> None:
        self.theme_changed.emit(self._current_theme())
