# core/chrono.py
from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal


class DisplayTicker(QObject):
    """
    Periodic refresh for the live labels. Only reads through `read_seconds`;
    the engine itself is never touched from here.
    """
    elapsedChanged = Signal(float)

    def __init__(self, read_seconds: Callable[[], float], tick_ms: int = 100, parent=None):
        super().__init__(parent)
        self._read = read_seconds
        self._tick = QTimer(self)
        self._tick.setInterval(tick_ms)
        self._tick.timeout.connect(self._on_tick)

    def start(self):
        self._tick.start()

    def stop(self):
        self._tick.stop()

    def is_active(self) -> bool:
        return self._tick.isActive()

    def _on_tick(self):
        self.elapsedChanged.emit(self._read())
