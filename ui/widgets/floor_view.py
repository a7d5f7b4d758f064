# ui/widgets/floor_view.py
from __future__ import annotations
import html

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QSizePolicy

from app.modes import ErrorHandling
from app.state import EngineState, RunPhase

COLORS = {
    "ok": "#22c55e",
    "err": "#ef4444",
    "mut": "#9aa1a9",
    "caret": "#eab308",
    "err_bg": "rgba(239,68,68,0.18)",
}


def _span(ch: str, color: str, underline: bool = False, bg: str | None = None) -> str:
    style = [f"color:{color}"]
    if underline:
        style.append(f"border-bottom:2px solid {COLORS['err']}; text-decoration:underline")
    if bg:
        style.append(f"background:{bg}")
    # keep spaces visible inside a rich-text label
    txt = "&nbsp;" if ch == " " else html.escape(ch)
    return f'<span style="{";".join(style)}">{txt}</span>'


def render_forgiving(text: str, position: int, error: bool) -> str:
    parts = []
    for i, ch in enumerate(text):
        if i < position:
            parts.append(_span(ch, COLORS["ok"]))
        elif i == position:
            color = COLORS["err"] if error else COLORS["caret"]
            parts.append(_span(ch, color, underline=True, bg=COLORS["err_bg"] if error else None))
        else:
            parts.append(_span(ch, COLORS["mut"]))
    return "".join(parts)


def render_perfectionist(text: str, typed: str, first_error: int | None) -> str:
    parts = []
    if first_error is None:
        parts.extend(_span(ch, COLORS["ok"]) for ch in typed)
        cursor = len(typed)
    else:
        parts.extend(_span(ch, COLORS["ok"]) for ch in text[:first_error])
        # everything typed since the first error, shown as typed
        parts.extend(_span(ch, COLORS["err"], bg=COLORS["err_bg"]) for ch in typed[first_error:])
        cursor = first_error
    if cursor < len(text):
        parts.append(_span(text[cursor], COLORS["caret"], underline=True))
        parts.extend(_span(ch, COLORS["mut"]) for ch in text[cursor + 1:])
    return "".join(parts)


class FloorView(QLabel):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("lblLine")
        self.setTextFormat(Qt.RichText)
        self.setWordWrap(True)
        self.setAlignment(Qt.AlignCenter)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumWidth(900)
        self.setMaximumWidth(1100)
        self.setMinimumHeight(140)
        self.setStyleSheet("font-size: 34px; line-height: 1.35;")
        self.setFocusPolicy(Qt.NoFocus)

    def render_state(self, state: EngineState):
        if state.phase is RunPhase.NO_RUN:
            self.setText(f'<span style="color:{COLORS["mut"]}">Press any key to start</span>')
            return
        if state.phase is RunPhase.COMPLETED or state.floor is None:
            self.setText(f'<span style="color:{COLORS["mut"]}">Run complete. Press Esc for a new run</span>')
            return

        floor, typing = state.floor, state.typing
        if state.run_settings.error_handling is ErrorHandling.PERFECTIONIST:
            self.setText(render_perfectionist(floor.text, typing.typed_text, typing.first_error_position))
        else:
            self.setText(render_forgiving(floor.text, typing.position, typing.error_active))
