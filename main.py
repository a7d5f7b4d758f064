# main.py
from __future__ import annotations
import sys
import logging
from pathlib import Path

from PySide6.QtWidgets import QApplication, QMessageBox

from ui.main_window import MainWindow
from utils.db_helper import DB_PATH

LOG_PATH = DB_PATH.parent / "typetower.log"


def setup_logging(level: int = logging.INFO) -> None:
    LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(LOG_PATH, encoding="utf-8"),
        ],
    )

    # a crash in a slot must reach the log file before Qt tears down
    def excepthook(exctype, value, tb):
        logging.critical("Unhandled exception", exc_info=(exctype, value, tb))
        if QApplication.instance() is not None:
            QMessageBox.critical(None, "Typetower", f"{exctype.__name__}: {value}")
        sys.exit(1)

    sys.excepthook = excepthook


def load_stylesheet(app: QApplication, path: Path = Path("resources/style.qss")) -> None:
    if not path.exists():
        return
    try:
        app.setStyleSheet(path.read_text(encoding="utf-8"))
    except OSError as e:
        logging.warning("Failed to load stylesheet %s: %s", path, e)


def main() -> int:
    debug = "--debug" in sys.argv
    setup_logging(logging.DEBUG if debug else logging.INFO)
    logging.getLogger(__name__).info("Starting Typetower (history db: %s)", DB_PATH)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Typetower")
    app.setOrganizationName("Typetower")
    load_stylesheet(app)

    win = MainWindow()
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
