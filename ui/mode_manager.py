from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel, QLineEdit, QComboBox,
    QSpinBox, QCheckBox, QPushButton, QListWidget, QListWidgetItem, QFileDialog, QMessageBox,
)
from PySide6.QtCore import Qt, Signal

from app.errors import ConfigurationError
from app.modes import (
    ErrorHandling, ModeSettings, RandomSentences, RandomWords, RunType,
    SequentialSentences, WordLength,
)
from core.threads import TextLoadWorker, Workers

_ERROR_LABELS = [("Forgiving", ErrorHandling.FORGIVING), ("Perfectionist", ErrorHandling.PERFECTIONIST)]
_RUN_LABELS = [("Floor count", RunType.FLOOR_COUNT), ("Time (minutes)", RunType.TIME_BASED), ("Endless", RunType.ENDLESS)]
_GEN_LABELS = ["Random sentences", "Sequential sentences", "Random words"]


class ModeManager(QDialog):
    """Create, edit, duplicate and delete custom modes. Built-ins are read-only."""
    modesChanged = Signal()

    def __init__(self, registry, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Manage Typing Modes")
        self.resize(760, 460)
        self.registry = registry
        self._editing_id = None
        self._sentences = None

        root = QHBoxLayout(self)

        # ---- mode list ----
        left = QVBoxLayout()
        self.list = QListWidget()
        self.list.currentItemChanged.connect(self._on_selected)
        left.addWidget(self.list, stretch=1)
        row = QHBoxLayout()
        btn_new = QPushButton("New"); btn_new.clicked.connect(self._start_create)
        btn_dup = QPushButton("Duplicate"); btn_dup.clicked.connect(self._duplicate)
        btn_del = QPushButton("Delete"); btn_del.clicked.connect(self._delete)
        for b in (btn_new, btn_dup, btn_del):
            row.addWidget(b)
        left.addLayout(row)
        root.addLayout(left, stretch=1)

        # ---- form ----
        form = QFormLayout()
        self.name_edit = QLineEdit()
        form.addRow("Name:", self.name_edit)

        self.cmb_errors = QComboBox()
        self.cmb_errors.addItems([lab for lab, _ in _ERROR_LABELS])
        form.addRow("Errors:", self.cmb_errors)

        self.cmb_run = QComboBox()
        self.cmb_run.addItems([lab for lab, _ in _RUN_LABELS])
        self.cmb_run.currentIndexChanged.connect(self._sync_enabled)
        form.addRow("Run type:", self.cmb_run)

        self.spin_target = QSpinBox()
        self.spin_target.setRange(1, 999)
        self.spin_target.setValue(10)
        form.addRow("Target:", self.spin_target)

        self.cmb_gen = QComboBox()
        self.cmb_gen.addItems(_GEN_LABELS)
        self.cmb_gen.currentIndexChanged.connect(self._sync_enabled)
        form.addRow("Floors:", self.cmb_gen)

        sent_row = QHBoxLayout()
        self.lbl_sentences = QLabel("Built-in sentences")
        self.btn_sentences = QPushButton("Load file…")
        self.btn_sentences.clicked.connect(self._browse_sentences)
        sent_row.addWidget(self.lbl_sentences, stretch=1)
        sent_row.addWidget(self.btn_sentences)
        form.addRow("Sentences:", sent_row)

        self.spin_words = QSpinBox(); self.spin_words.setRange(1, 200); self.spin_words.setValue(10)
        form.addRow("Words per floor:", self.spin_words)
        len_row = QHBoxLayout()
        self.spin_min = QSpinBox(); self.spin_min.setRange(1, 30); self.spin_min.setValue(2)
        self.spin_max = QSpinBox(); self.spin_max.setRange(1, 30); self.spin_max.setValue(8)
        len_row.addWidget(self.spin_min); len_row.addWidget(QLabel("to")); len_row.addWidget(self.spin_max)
        form.addRow("Word length:", len_row)
        self.chk_numbers = QCheckBox("Include numbers")
        self.chk_punct = QCheckBox("Include punctuation")
        form.addRow(self.chk_numbers)
        form.addRow(self.chk_punct)

        right = QVBoxLayout()
        right.addLayout(form)
        right.addStretch(1)
        btns = QHBoxLayout()
        btns.addStretch(1)
        self.btn_save = QPushButton("Save"); self.btn_save.clicked.connect(self._save)
        close = QPushButton("Close"); close.clicked.connect(self.accept)
        btns.addWidget(self.btn_save); btns.addWidget(close)
        right.addLayout(btns)
        root.addLayout(right, stretch=2)

        self._reload()
        self._start_create()

    # ---------------- list ----------------
    def _reload(self, select_id=None):
        self.list.blockSignals(True)
        self.list.clear()
        for m in self.registry.all_modes():
            item = QListWidgetItem(m.name + ("  (built-in)" if m.is_default else ""))
            item.setData(Qt.UserRole, m.id)
            self.list.addItem(item)
            if m.id == select_id:
                self.list.setCurrentItem(item)
        self.list.blockSignals(False)

    def _selected_mode(self):
        item = self.list.currentItem()
        if item is None:
            return None
        return self.registry.get(item.data(Qt.UserRole))

    def _on_selected(self, *_):
        mode = self._selected_mode()
        if mode is None:
            return
        self._editing_id = None if mode.is_default else mode.id
        self._fill_form(mode.name, mode.settings)
        self.btn_save.setEnabled(not mode.is_default)

    # ---------------- form ----------------
    def _start_create(self):
        self.list.clearSelection()
        self._editing_id = None
        self._fill_form("", ModeSettings())
        self.btn_save.setEnabled(True)
        self.name_edit.setFocus()

    def _fill_form(self, name, s: ModeSettings):
        self.name_edit.setText(name)
        self.cmb_errors.setCurrentIndex([e for _, e in _ERROR_LABELS].index(s.error_handling))
        self.cmb_run.setCurrentIndex([r for _, r in _RUN_LABELS].index(s.run_type))
        self.spin_target.setValue(int(s.run_target or 10))
        gen = s.floor_generation
        if isinstance(gen, RandomWords):
            self.cmb_gen.setCurrentIndex(2)
            self.spin_words.setValue(gen.word_count)
            self.spin_min.setValue(gen.word_length.min)
            self.spin_max.setValue(gen.word_length.max)
            self.chk_numbers.setChecked(gen.include_numbers)
            self.chk_punct.setChecked(gen.include_punctuation)
            self._set_sentences(None)
        else:
            self.cmb_gen.setCurrentIndex(1 if isinstance(gen, SequentialSentences) else 0)
            self._set_sentences(gen.sentence_list)
        self._sync_enabled()

    def _sync_enabled(self):
        run_type = _RUN_LABELS[self.cmb_run.currentIndex()][1]
        self.spin_target.setEnabled(run_type is not RunType.ENDLESS)
        words = self.cmb_gen.currentIndex() == 2
        for w in (self.spin_words, self.spin_min, self.spin_max, self.chk_numbers, self.chk_punct):
            w.setEnabled(words)
        self.btn_sentences.setEnabled(not words)

    def _set_sentences(self, sentences):
        self._sentences = tuple(sentences) if sentences else None
        self.lbl_sentences.setText(
            f"{len(self._sentences)} custom sentences" if self._sentences else "Built-in sentences"
        )

    def _browse_sentences(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open sentences", "", "Text (*.txt)")
        if not path:
            return
        worker = TextLoadWorker(path)
        worker.signals.loaded.connect(self._set_sentences)
        worker.signals.failed.connect(lambda msg: QMessageBox.warning(self, "Load Sentences", msg))
        Workers.pool.start(worker)

    def _settings_from_form(self) -> ModeSettings:
        run_type = _RUN_LABELS[self.cmb_run.currentIndex()][1]
        idx = self.cmb_gen.currentIndex()
        if idx == 2:
            gen = RandomWords(
                word_count=self.spin_words.value(),
                word_length=WordLength(min=self.spin_min.value(), max=self.spin_max.value()),
                include_numbers=self.chk_numbers.isChecked(),
                include_punctuation=self.chk_punct.isChecked(),
            )
        elif idx == 1:
            gen = SequentialSentences(sentence_list=self._sentences)
        else:
            gen = RandomSentences(sentence_list=self._sentences)
        return ModeSettings(
            error_handling=_ERROR_LABELS[self.cmb_errors.currentIndex()][1],
            run_type=run_type,
            run_target=None if run_type is RunType.ENDLESS else self.spin_target.value(),
            floor_generation=gen,
        )

    # ---------------- actions ----------------
    def _save(self):
        try:
            settings = self._settings_from_form()
            if self._editing_id is None:
                mode = self.registry.create_mode(self.name_edit.text(), settings)
            else:
                mode = self.registry.update_mode(self._editing_id, self.name_edit.text(), settings)
        except ConfigurationError as e:
            QMessageBox.warning(self, "Mode", str(e))
            return
        self._reload(select_id=mode.id)
        self._editing_id = mode.id
        self.modesChanged.emit()

    def _duplicate(self):
        mode = self._selected_mode()
        if mode is None:
            return
        try:
            copy = self.registry.duplicate_mode(mode)
        except ConfigurationError as e:
            QMessageBox.warning(self, "Mode", str(e))
            return
        self._reload(select_id=copy.id)
        self._on_selected()
        self.modesChanged.emit()

    def _delete(self):
        mode = self._selected_mode()
        if mode is None:
            return
        try:
            self.registry.delete_mode(mode.id)
        except ConfigurationError as e:
            QMessageBox.warning(self, "Mode", str(e))
            return
        self._reload()
        self._start_create()
        self.modesChanged.emit()
