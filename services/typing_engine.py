from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum

from app.modes import ErrorHandling
from app.state import Floor, TypingState

BACKSPACE = "Backspace"


class KeyOutcome(str, Enum):
    IGNORED = "ignored"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    BACKSPACE = "backspace"
    FLOOR_COMPLETE = "floor_complete"
    RUN_STARTED = "run_started"


@dataclass(frozen=True)
class KeyResult:
    state: TypingState
    floor: Floor
    outcome: KeyOutcome


def is_printable_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def process_key(state: TypingState, floor: Floor, mode: ErrorHandling, key: str) -> KeyResult:
    """
    Pure keystroke reducer: returns the next typing state, the floor with its
    keystroke counts updated, and what happened. Inputs are never mutated.
    """
    if mode is ErrorHandling.PERFECTIONIST:
        return _perfectionist(state, floor, key)
    return _forgiving(state, floor, key)


def _ignored(state: TypingState, floor: Floor) -> KeyResult:
    return KeyResult(state, floor, KeyOutcome.IGNORED)


def _forgiving(state: TypingState, floor: Floor, key: str) -> KeyResult:
    # lock-step: backspace does nothing, a wrong key blocks the cursor
    if not is_printable_key(key):
        return _ignored(state, floor)
    text = floor.text
    pos = state.position
    if pos >= len(text):
        return _ignored(state, floor)

    if key == text[pos]:
        pos += 1
        new_state = replace(state, position=pos, error_active=False, typed_text=text[:pos])
        new_floor = replace(
            floor,
            correct_characters=floor.correct_characters + 1,
            typed_text=text[:pos],
        )
        done = pos == len(text)
        return KeyResult(new_state, new_floor, KeyOutcome.FLOOR_COMPLETE if done else KeyOutcome.CORRECT)

    return KeyResult(
        replace(state, error_active=True),
        replace(floor, incorrect_characters=floor.incorrect_characters + 1),
        KeyOutcome.INCORRECT,
    )


def _perfectionist(state: TypingState, floor: Floor, key: str) -> KeyResult:
    typed = state.typed_text

    if key == BACKSPACE:
        if not typed:
            return _ignored(state, floor)
        typed = typed[:-1]
        first_err = state.first_error_position
        error = state.error_active
        if first_err is not None and len(typed) <= first_err:
            first_err = None
            error = False
        new_state = TypingState(
            position=len(typed),
            error_active=error,
            first_error_position=first_err,
            typed_text=typed,
        )
        return KeyResult(new_state, replace(floor, typed_text=typed), KeyOutcome.BACKSPACE)

    if not is_printable_key(key):
        return _ignored(state, floor)

    before = len(typed)
    typed = typed + key
    # After the first error every key is judged against the frozen error index,
    # so nothing counts as correct until backspace clears it.
    ref = state.first_error_position if state.first_error_position is not None else before
    expected = floor.text[ref] if ref < len(floor.text) else None

    if state.first_error_position is None and key == expected:
        new_state = replace(state, position=len(typed), typed_text=typed)
        new_floor = replace(
            floor,
            correct_characters=floor.correct_characters + 1,
            typed_text=typed,
        )
        done = typed == floor.text
        return KeyResult(new_state, new_floor, KeyOutcome.FLOOR_COMPLETE if done else KeyOutcome.CORRECT)

    first_err = state.first_error_position
    if first_err is None:
        first_err = state.position
    new_state = TypingState(
        position=len(typed),
        error_active=True,
        first_error_position=first_err,
        typed_text=typed,
    )
    new_floor = replace(
        floor,
        incorrect_characters=floor.incorrect_characters + 1,
        typed_text=typed,
    )
    return KeyResult(new_state, new_floor, KeyOutcome.INCORRECT)
