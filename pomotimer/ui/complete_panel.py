"""Completion screen shown once every set is done."""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QFrame, QLabel, QPushButton, QVBoxLayout, QWidget


class CompletePanel(QWidget):

    restart_requested = pyqtSignal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 40, 32, 28)
        layout.setSpacing(16)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel("Congratulations!", card)
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet("font-size: 26px; font-weight: 700;")
        layout.addWidget(title)

        self._message = QLabel(card)
        self._message.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._message.setWordWrap(True)
        layout.addWidget(self._message)

        self._restart_btn = QPushButton("Go again", card)
        self._restart_btn.setObjectName("successButton")
        self._restart_btn.clicked.connect(self.restart_requested.emit)
        layout.addWidget(self._restart_btn)

        self.set_total_sets(0)

    def set_total_sets(self, total_sets: int) -> None:
        noun = "set" if total_sets == 1 else "sets"
        self._message.setText(
            f"You completed {total_sets} {noun}.\nNice work, take it easy!"
        )

    @property
    def message(self) -> str:
        return self._message.text()
