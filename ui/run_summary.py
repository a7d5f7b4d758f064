# ui/run_summary.py
from __future__ import annotations
from PySide6.QtWidgets import QDialog, QVBoxLayout, QLabel, QPushButton
import pyqtgraph as pg

from app.state import Run
from utils.graph_helper import setup_floor_plot, update_curve


class RunSummary(QDialog):
    """Final run stats plus a per-floor WPM graph."""

    def __init__(self, run: Run, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Run Summary")
        self.resize(720, 420)

        secs = 0.0
        if run.end_time is not None:
            secs = (run.end_time - run.start_time).total_seconds()

        root = QVBoxLayout(self)
        root.addWidget(QLabel(f"Floors: {run.floors_completed}"))
        root.addWidget(QLabel(f"Average WPM: {run.average_wpm:.1f}"))
        root.addWidget(QLabel(f"Accuracy: {run.average_accuracy:.1f}%"))
        root.addWidget(QLabel(
            f"Characters: {run.total_correct_characters} correct, "
            f"{run.total_incorrect_characters} incorrect"
        ))
        root.addWidget(QLabel(f"Time: {secs:.1f}s"))

        plot = pg.PlotWidget()
        curve = setup_floor_plot(plot, "#eab308")
        update_curve(curve, [f.wpm for f in run.floors])
        root.addWidget(plot, stretch=1)

        btn = QPushButton("OK", self)
        btn.clicked.connect(self.accept)
        root.addWidget(btn)
