"""QSS stylesheets, theming, and session colours for pomotimer."""

from __future__ import annotations

from ..settings import ThemeMode
from ..timer.state import SessionType

# ── session accents (time text, label, progress fill) ───────────────────

SESSION_COLORS: dict[SessionType, str] = {
    SessionType.WORK:       "#E8575A",   # tomato red
    SessionType.BREAK:      "#3FB68B",   # mint
    SessionType.LONG_BREAK: "#4C8DDB",   # sky blue
}

# ── palettes ─────────────────────────────────────────────────────────────

DARK_PALETTE: dict[str, str] = {
    "bg":           "#1A1A2E",
    "bg_secondary": "#232340",
    "surface":      "#2A2A4A",
    "accent":       "#E8575A",
    "accent2":      "#F07C7E",
    "text":         "#E2E2F0",
    "text_muted":   "#7A7A9A",
    "success":      "#A6E3A1",
    "danger":       "#F38BA8",
    "border":       "#313154",
}

LIGHT_PALETTE: dict[str, str] = {
    "bg":           "#F6F4F0",
    "bg_secondary": "#FFFFFF",
    "surface":      "#ECE8E1",
    "accent":       "#D9454A",
    "accent2":      "#E8686C",
    "text":         "#2B2B36",
    "text_muted":   "#8A8796",
    "success":      "#2E9E6A",
    "danger":       "#C8323F",
    "border":       "#DDD8CF",
}


def _system_prefers_light() -> bool:
    """Ask Qt for the desktop colour scheme (dark when unknown)."""
    from PyQt6.QtCore import Qt
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None or app.styleHints() is None:
        return False
    return app.styleHints().colorScheme() == Qt.ColorScheme.Light


def resolve_palette(theme_mode: ThemeMode) -> dict[str, str]:
    """Return the colour palette for *theme_mode*.

    ``SYSTEM`` follows the desktop light/dark appearance.
    """
    if theme_mode is ThemeMode.LIGHT:
        return dict(LIGHT_PALETTE)
    if theme_mode is ThemeMode.DARK:
        return dict(DARK_PALETTE)
    return dict(LIGHT_PALETTE if _system_prefers_light() else DARK_PALETTE)


# ── QSS builder ───────────────────────────────────────────────────────


def build_stylesheet(palette: dict[str, str]) -> str:
    p = palette
    return f"""
    /* ── global ─────────────────────────────────── */
    QWidget {{
        background-color: {p['bg']};
        color: {p['text']};
        font-family: "Helvetica Neue", Arial;
        font-size: 14px;
    }}

    /* ── buttons ────────────────────────────────── */
    QPushButton {{
        background-color: {p['bg_secondary']};
        color: {p['text']};
        border: 1px solid {p['border']};
        border-radius: 10px;
        padding: 10px 24px;
        font-size: 14px;
        font-weight: 600;
    }}

    QPushButton:hover {{
        background-color: {p['surface']};
        border-color: {p['accent']};
    }}

    QPushButton#primaryButton {{
        background-color: {p['accent']};
        color: {p['bg']};
        border: none;
        font-size: 17px;
        padding: 14px 40px;
        border-radius: 12px;
        font-weight: 700;
    }}

    QPushButton#primaryButton:hover {{
        background-color: {p['accent2']};
    }}

    QPushButton#secondaryButton {{
        background-color: transparent;
        color: {p['text_muted']};
        border: 1px solid {p['border']};
        font-size: 13px;
        padding: 8px 16px;
        border-radius: 8px;
    }}

    QPushButton#secondaryButton:hover {{
        color: {p['text']};
        border-color: {p['text_muted']};
    }}

    QPushButton#successButton {{
        background-color: {p['success']};
        color: {p['bg']};
        border: none;
        font-size: 16px;
        padding: 12px 32px;
        border-radius: 12px;
        font-weight: 700;
    }}

    /* ── form inputs ─────────────────────────────── */
    QSpinBox, QComboBox {{
        background-color: {p['bg_secondary']};
        color: {p['text']};
        border: 1px solid {p['border']};
        border-radius: 8px;
        padding: 6px 10px;
    }}

    QSpinBox:focus, QComboBox:focus {{
        border-color: {p['accent']};
    }}

    /* ── frame / card ────────────────────────────── */
    QFrame#card {{
        background-color: {p['bg_secondary']};
        border: 1px solid {p['border']};
        border-radius: 12px;
    }}

    /* ── session progress ────────────────────────── */
    QProgressBar {{
        background-color: {p['surface']};
        border: none;
        border-radius: 4px;
        max-height: 8px;
        text-align: center;
    }}

    QProgressBar::chunk {{
        background-color: {p['accent']};
        border-radius: 4px;
    }}

    QLabel#mutedLabel {{
        color: {p['text_muted']};
        font-size: 13px;
    }}
    """


def session_chunk_style(session: SessionType) -> str:
    """Per-session override for the progress bar fill."""
    return (
        "QProgressBar::chunk {"
        f" background-color: {SESSION_COLORS[session]}; border-radius: 4px; "
        "}"
    )
