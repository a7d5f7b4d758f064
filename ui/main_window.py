# ui/main_window.py
import logging

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QComboBox, QLabel, QPushButton, QMessageBox
)
from PySide6.QtCore import Qt, QTimer

from app.calculation import accuracy, floor_wpm, word_count
from app.errors import ConfigurationError, DatabaseError
from app.modes import RunType
from app.state import Run, RunPhase
from core.chrono import DisplayTicker
from core.threads import pool_dispatch
from services.mode_registry import ModeRegistry
from services.run_controller import RunController
from services.typing_engine import BACKSPACE
from ui.history_dialog import HistoryDialog
from ui.mode_manager import ModeManager
from ui.run_summary import RunSummary
from ui.widgets import FloorView
from utils.db_helper import SqliteSessionStore
from utils.file_handler import load_sentences, load_words
from utils.mode_store import JsonModeStore

log = logging.getLogger(__name__)

_TOPBAR_QSS = """
QWidget { background: #0f1115; color: #e5e7eb; }
QWidget#TopBar {
    background: rgba(255,255,255,0.04);
    border: 1px solid rgba(255,255,255,0.08);
    border-radius: 14px;
}
QPushButton#TopBtn, QComboBox#TopBtn {
    background: transparent;
    border: 1px solid rgba(255,255,255,0.10);
    border-radius: 9px;
    padding: 6px 12px;
}
QPushButton#TopBtn:hover {
    border-color: rgba(255,255,255,0.32);
    background: rgba(255,255,255,0.06);
}
QLabel#lblTimer, QLabel#lblAcc, QLabel#lblFloor { color: #6b7280; }
QLabel#lblWPM { color: #eab308; }
"""


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Typetower")
        self.resize(1200, 720)

        try:
            self.sessions = SqliteSessionStore()
        except DatabaseError as e:
            # runs continue without history
            log.warning("Session history disabled: %s", e)
            self.sessions = None

        words, sentences = load_words(), load_sentences()
        self.controller = RunController(
            session_store=self.sessions,
            words=words,
            sentences=sentences,
            dispatch=pool_dispatch,
        )
        self.controller.subscribe(self._on_run_completed)
        self.registry = ModeRegistry(
            JsonModeStore(), self.controller, words=words, sentences=sentences
        )

        root = QWidget(self)
        root_v = QVBoxLayout(root)
        root_v.setContentsMargins(16, 40, 16, 16)
        root_v.setSpacing(24)
        self._build_top_bar(root_v)

        stats = QHBoxLayout()
        stats.setSpacing(40)
        self.lblTimer = QLabel("0.0 s", self); self.lblTimer.setObjectName("lblTimer")
        self.lblWPM = QLabel("0.0 WPM", self); self.lblWPM.setObjectName("lblWPM")
        self.lblAcc = QLabel("0.0 %", self); self.lblAcc.setObjectName("lblAcc")
        self.lblFloor = QLabel("", self); self.lblFloor.setObjectName("lblFloor")
        for lab in (self.lblTimer, self.lblWPM, self.lblAcc, self.lblFloor):
            lab.setAlignment(Qt.AlignCenter)
            stats.addWidget(lab)
        root_v.addLayout(stats)

        self.view = FloorView(self)
        view_h = QHBoxLayout()
        view_h.addStretch(1)
        view_h.addWidget(self.view, 1)
        view_h.addStretch(1)
        root_v.addLayout(view_h, 1)
        self.setCentralWidget(root)
        self.setStyleSheet(_TOPBAR_QSS)
        self.menuBar().setVisible(False)

        # keys go to the window itself, not the buttons
        self.setFocusPolicy(Qt.StrongFocus)

        self.ticker = DisplayTicker(self.controller.elapsed_seconds, tick_ms=100, parent=self)
        self.ticker.elapsedChanged.connect(self._refresh_metrics)
        self.ticker.start()

        self._render()

    # ---------------- Top Bar ----------------
    def _build_top_bar(self, parent_layout):
        bar = QWidget(self)
        bar.setObjectName("TopBar")
        h = QHBoxLayout(bar)
        h.setContentsMargins(14, 16, 14, 16)
        h.setSpacing(10)

        self.cmb_mode = QComboBox(bar)
        self.cmb_mode.setObjectName("TopBtn")
        self.cmb_mode.setFocusPolicy(Qt.NoFocus)
        self.cmb_mode.activated.connect(self._on_mode_chosen)
        h.addWidget(self.cmb_mode)
        self._rebuild_mode_menu()

        for text, handler in [
            ("New run", self._new_run),
            ("Modes…", self._open_modes),
            ("History…", self._open_history),
        ]:
            btn = QPushButton(text, bar)
            btn.clicked.connect(handler)
            btn.setObjectName("TopBtn")
            btn.setFocusPolicy(Qt.NoFocus)
            h.addWidget(btn)

        h.addStretch(1)
        parent_layout.addWidget(bar)

    def _rebuild_mode_menu(self):
        self.cmb_mode.blockSignals(True)
        self.cmb_mode.clear()
        current = self.controller.mode.id
        for i, m in enumerate(self.registry.all_modes()):
            self.cmb_mode.addItem(m.name, m.id)
            if m.id == current:
                self.cmb_mode.setCurrentIndex(i)
        self.cmb_mode.blockSignals(False)

    def _on_mode_chosen(self, idx):
        mode = self.registry.get(self.cmb_mode.itemData(idx))
        self.controller.select_mode(mode)
        self.controller.reset()
        self._render()
        self.setFocus()

    # ---------------- Runs ----------------
    def _new_run(self):
        try:
            self.controller.start_run()
        except ConfigurationError as e:
            QMessageBox.warning(self, "Run", str(e))
        self._render()
        self.setFocus()

    def _on_run_completed(self, run: Run):
        # called from inside keyPressEvent; open the dialog once the event returns
        QTimer.singleShot(0, lambda: self._show_summary(run))

    def _show_summary(self, run: Run):
        RunSummary(run, self).exec()
        self.setFocus()

    def keyPressEvent(self, ev):
        if ev.key() == Qt.Key_Escape:
            self._new_run()
            return
        nk = self._normalize_key(ev)
        if nk is None:
            return super().keyPressEvent(ev)
        try:
            self.controller.handle_key(nk)
        except ConfigurationError as e:
            QMessageBox.warning(self, "Run", str(e))
        self._render()

    def _normalize_key(self, ev):
        if ev.modifiers() & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier):
            return None
        if ev.key() == Qt.Key_Backspace:
            return BACKSPACE
        t = ev.text()
        if t and t >= " ":
            return t
        return None

    # ---------------- Rendering ----------------
    def _render(self):
        state = self.controller.state
        self.view.render_state(state)
        run = state.run
        if run is None:
            self.lblFloor.setText("")
        elif run.run_target and state.phase is RunPhase.ACTIVE:
            unit = "min" if run.run_type is RunType.TIME_BASED else "floors"
            self.lblFloor.setText(f"Floor {run.floors_completed + 1} · target {run.run_target:g} {unit}")
        else:
            self.lblFloor.setText(f"Floors {run.floors_completed}")
        self._refresh_metrics(self.controller.elapsed_seconds())

    def _refresh_metrics(self, secs: float):
        state = self.controller.state
        floor = state.floor
        self.lblTimer.setText(f"{secs:0.1f} s")
        if floor is None:
            return
        wpm = floor_wpm(word_count(state.typing.typed_text), secs)
        acc = accuracy(floor.correct_characters, floor.incorrect_characters)
        self.lblWPM.setText(f"{wpm:0.1f} WPM")
        self.lblAcc.setText(f"{acc:0.1f} %")

    # ---------------- Dialogs ----------------
    def _open_modes(self):
        dlg = ModeManager(self.registry, self)
        dlg.modesChanged.connect(self._on_modes_changed)
        dlg.exec()
        self.setFocus()

    def _on_modes_changed(self):
        self._rebuild_mode_menu()
        self._render()

    def _open_history(self):
        if self.sessions is None:
            QMessageBox.information(self, "History", "Session history is unavailable.")
            return
        HistoryDialog(self.sessions, self).exec()
        self.setFocus()
