"""Main timer display widget: the running screen.

Layout (top → bottom):
    - Session label ("FOCUS", "BREAK", "LONG BREAK")
    - MM:SS countdown with a paused indicator beneath
    - Progress bar for the current session + "Set N / total"
    - One dot per configured set (done / current / pending)
    - Pause-resume and skip buttons, reset below

The widget only renders ``TimerState`` snapshots.  Skip and reset are
forwarded as signals so the window can ask for confirmation first.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QProgressBar,
    QPushButton, QVBoxLayout, QWidget,
)

from ..timer.engine import SessionEngine, format_time
from ..timer.state import SessionType, TimerState, TimerStatus
from .styles import SESSION_COLORS, session_chunk_style


SESSION_LABELS: dict[SessionType, str] = {
    SessionType.WORK:       "FOCUS",
    SessionType.BREAK:      "BREAK",
    SessionType.LONG_BREAK: "LONG BREAK",
}

PAUSED_COLOR = "#8A8796"

DOT_DONE = "●"
DOT_CURRENT = "◉"
DOT_PENDING = "○"


def set_dots(current_set: int, total_sets: int) -> list[str]:
    """Glyph per set: earlier sets done, the current one marked."""
    dots = []
    for i in range(1, total_sets + 1):
        if i < current_set:
            dots.append(DOT_DONE)
        elif i == current_set:
            dots.append(DOT_CURRENT)
        else:
            dots.append(DOT_PENDING)
    return dots


class TimerWidget(QWidget):
    """Countdown card shown while a run is in progress."""

    skip_requested = pyqtSignal()
    reset_requested = pyqtSignal()

    def __init__(
        self, engine: SessionEngine, parent: QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._build_ui()
        self._connect_signals()
        self.show_state(engine.get_state())

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 24, 32, 28)
        layout.setSpacing(12)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._session_label = QLabel(card)
        self._session_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._session_label)

        self._time_label = QLabel(card)
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._time_label)

        self._paused_label = QLabel("Paused", card)
        self._paused_label.setObjectName("mutedLabel")
        self._paused_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._paused_label.setVisible(False)
        layout.addWidget(self._paused_label)

        # ── progress ─────────────────────────────────────────────────
        self._progress = QProgressBar(card)
        self._progress.setRange(0, 1000)
        self._progress.setTextVisible(False)
        layout.addWidget(self._progress)

        self._set_label = QLabel(card)
        self._set_label.setObjectName("mutedLabel")
        self._set_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._set_label)

        self._dots_label = QLabel(card)
        self._dots_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._dots_label.setStyleSheet("font-size: 18px; letter-spacing: 6px;")
        layout.addWidget(self._dots_label)

        # ── controls ─────────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._pause_btn = QPushButton("Pause", card)
        self._pause_btn.setObjectName("primaryButton")

        self._skip_btn = QPushButton("Skip", card)
        self._skip_btn.setObjectName("secondaryButton")

        btn_row.addWidget(self._pause_btn)
        btn_row.addWidget(self._skip_btn)
        layout.addLayout(btn_row)

        self._reset_btn = QPushButton("Reset", card)
        self._reset_btn.setObjectName("secondaryButton")
        layout.addWidget(self._reset_btn, alignment=Qt.AlignmentFlag.AlignCenter)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._pause_btn.clicked.connect(self.toggle_pause)
        self._skip_btn.clicked.connect(self.skip_requested.emit)
        self._reset_btn.clicked.connect(self.reset_requested.emit)

        self._engine.tick.connect(self.show_state)
        self._engine.state_changed.connect(self._on_state_changed)

    # ── slots ─────────────────────────────────────────────────────────────

    def toggle_pause(self) -> None:
        if self._engine.is_running():
            self._engine.pause()
        elif self._engine.is_paused():
            self._engine.start()

    def _on_state_changed(self, state: TimerState) -> None:
        if state.status in (TimerStatus.RUNNING, TimerStatus.PAUSED):
            self.show_state(state)

    # ── rendering ─────────────────────────────────────────────────────────

    def show_state(self, state: TimerState) -> None:
        """Redraw every element from *state*."""
        total_sets = self._engine.get_settings().total_sets
        color = SESSION_COLORS[state.current_session]
        paused = state.status is TimerStatus.PAUSED

        self._session_label.setText(SESSION_LABELS[state.current_session])
        self._session_label.setStyleSheet(
            f"font-size: 16px; font-weight: 700; color: {color};"
        )

        self._time_label.setText(format_time(state.remaining_time))
        self._time_label.setStyleSheet(
            "font-size: 72px; font-weight: 700; "
            f"color: {PAUSED_COLOR if paused else color};"
        )
        self._paused_label.setVisible(paused)

        self._progress.setValue(round(self._engine.get_progress() * 10))
        self._progress.setStyleSheet(session_chunk_style(state.current_session))

        self._set_label.setText(f"Set {state.current_set} / {total_sets}")
        self._dots_label.setText(
            " ".join(set_dots(state.current_set, total_sets))
        )

        self._pause_btn.setText("Resume" if paused else "Pause")
