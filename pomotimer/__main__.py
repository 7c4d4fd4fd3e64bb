"""Allow running pomotimer as a module: python -m pomotimer."""

import argparse
import logging
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from . import settings as settings_store
from .app import PomoTimerApp
from .audio import sounds


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="pomotimer",
        description="Pomodoro timer with work/break sets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Controls:
  Space    Pause / resume (timer screen)

Examples:
  pomotimer                          # Settings from ~/.pomotimer
  pomotimer --log-level debug        # Verbose engine logging
  pomotimer --settings ./work.json   # Use another settings file
  pomotimer --data-dir ./profile     # Keep settings and sounds together
""",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging verbosity (default: warning)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        metavar="DIR",
        help="Directory for settings and the sound cache (default: ~/.pomotimer)",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        metavar="PATH",
        help="Settings JSON file only; sounds stay in the data directory",
    )
    return parser.parse_args(argv)


def configure_paths(
    data_dir: Path | None, settings_path: Path | None = None
) -> None:
    """Point the settings store and the sound cache at the chosen paths."""
    if data_dir is not None:
        settings_store.SETTINGS_PATH = data_dir / "settings.json"
        sounds.SOUNDS_DIR = data_dir / "sounds"
    if settings_path is not None:
        settings_store.SETTINGS_PATH = settings_path


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    configure_paths(args.data_dir, args.settings)

    app = QApplication(sys.argv[:1])
    app.setApplicationName("pomotimer")
    app.setOrganizationName("pomotimer")

    window = PomoTimerApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
