# core/threads.py
import logging
from typing import Callable

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

log = logging.getLogger(__name__)


class JobSignals(QObject):
    done = Signal()
    failed = Signal(str)


class JobWorker(QRunnable):
    """Runs one callable on the pool. Errors are logged and signalled, never raised."""

    def __init__(self, job: Callable[[], None]):
        super().__init__()
        self.job = job
        self.signals = JobSignals()

    def run(self):
        try:
            self.job()
            self.signals.done.emit()
        except Exception as e:
            log.exception("Background job failed")
            self.signals.failed.emit(str(e))


class TextLoadWorkerSignals(QObject):
    loaded = Signal(list)
    failed = Signal(str)


class TextLoadWorker(QRunnable):
    """Reads a text file into non-empty, stripped lines."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.signals = TextLoadWorkerSignals()

    def run(self):
        try:
            with open(self.path, "r", encoding="utf-8", errors="ignore") as f:
                lines = [ln.strip() for ln in f.read().splitlines() if ln.strip()]
            self.signals.loaded.emit(lines)
        except OSError as e:
            self.signals.failed.emit(str(e))


class Workers:
    pool = QThreadPool.globalInstance()


def pool_dispatch(job: Callable[[], None]) -> None:
    """Fire-and-forget dispatcher for RunController: returns before `job` runs."""
    Workers.pool.start(JobWorker(job))
