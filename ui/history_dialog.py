# ui/history_dialog.py
import csv
import logging

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QSpinBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QFileDialog,
    QMessageBox,
)
import pyqtgraph as pg

from app.errors import PersistenceError
from utils.graph_helper import setup_bar_plot, update_bars

log = logging.getLogger(__name__)

_HEADERS = ["Start", "Duration (s)", "WPM", "Accuracy %", "Floors", "Words"]


class HistoryDialog(QDialog):
    def __init__(self, store, parent=None):
        super().__init__(parent)
        self.setWindowTitle("History")
        self.resize(760, 600)
        self._store = store
        self._sessions = []

        root = QVBoxLayout(self)

        self.lbl_totals = QLabel("")
        root.addWidget(self.lbl_totals)

        # --- controls ---
        ctrl = QHBoxLayout()
        ctrl.addWidget(QLabel("Show last:"))
        self.limit = QSpinBox()
        self.limit.setRange(1, 1000)
        self.limit.setValue(10)
        self.limit.valueChanged.connect(self._reload)
        ctrl.addWidget(self.limit)
        ctrl.addStretch(1)
        self.btn_export = QPushButton("Export CSV…")
        self.btn_export.clicked.connect(self._export_csv)
        ctrl.addWidget(self.btn_export)
        root.addLayout(ctrl)

        # --- daily average WPM ---
        self.plot = pg.PlotWidget()
        self._bar = setup_bar_plot(self.plot, "Avg WPM / day")
        root.addWidget(self.plot, stretch=2)

        # --- sessions ---
        self.table = QTableWidget(0, len(_HEADERS))
        self.table.setHorizontalHeaderLabels(_HEADERS)
        self.table.horizontalHeader().setStretchLastSection(True)
        root.addWidget(self.table, stretch=1)

        self._reload()

    def _reload(self):
        try:
            stats = self._store.get_aggregate_stats()
            self._sessions = self._store.list_recent_sessions(self.limit.value())
            days = self._store.daily_stats()
        except PersistenceError as e:
            log.warning("Could not load history: %s", e)
            QMessageBox.warning(self, "History", f"Could not load history: {e}")
            return

        hours = stats.total_practice_time_seconds / 3600.0
        self.lbl_totals.setText(
            f"{stats.total_sessions} sessions · avg {stats.average_wpm:.1f} WPM · "
            f"best {stats.best_wpm:.1f} WPM · {stats.average_accuracy:.1f}% accuracy · "
            f"{hours:.1f} h practised"
        )

        # oldest day on the left
        days = list(reversed(days))
        update_bars(self.plot, self._bar, [d.date[5:] for d in days], [d.average_wpm for d in days])

        self.table.setRowCount(len(self._sessions))
        for i, s in enumerate(self._sessions):
            cells = [
                s.session_start[:19].replace("T", " "),
                f"{s.duration_seconds:.0f}",
                f"{s.wpm:.1f}",
                f"{s.accuracy_percentage:.1f}",
                str(s.sentences_completed),
                str(s.word_count),
            ]
            for col, val in enumerate(cells):
                self.table.setItem(i, col, QTableWidgetItem(val))

    def _export_csv(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Sessions", "sessions.csv", "CSV (*.csv)"
        )
        if not path:
            return
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                w = csv.writer(f)
                w.writerow(["SessionStart", "SessionEnd", "DurationSeconds", "WPM",
                            "AccuracyPercent", "Floors", "Words"])
                for s in self._sessions:
                    w.writerow([s.session_start, s.session_end, f"{s.duration_seconds:.1f}",
                                f"{s.wpm:.1f}", f"{s.accuracy_percentage:.1f}",
                                s.sentences_completed, s.word_count])
        except OSError as e:
            log.warning("CSV export to %s failed: %s", path, e)
            QMessageBox.warning(self, "Export", f"Could not write {path}: {e}")
            return
        log.info("Exported %d sessions to %s", len(self._sessions), path)
