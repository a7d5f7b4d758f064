"""Keystroke reducer: forgiving lock-step and perfectionist free entry."""

from app.modes import ErrorHandling
from app.state import TypingState
from services.typing_engine import BACKSPACE, KeyOutcome, process_key

FORGIVING = ErrorHandling.FORGIVING
PERFECTIONIST = ErrorHandling.PERFECTIONIST


def type_keys(floor, mode, keys, state=None):
    state = state or TypingState()
    outcomes = []
    for k in keys:
        result = process_key(state, floor, mode, k)
        state, floor = result.state, result.floor
        outcomes.append(result.outcome)
    return state, floor, outcomes


class TestForgiving:

    def test_exact_typing_completes_floor(self, floor_factory):
        state, floor, outcomes = type_keys(floor_factory("cat"), FORGIVING, "cat")
        assert outcomes == [KeyOutcome.CORRECT, KeyOutcome.CORRECT, KeyOutcome.FLOOR_COMPLETE]
        assert floor.correct_characters == 3
        assert floor.incorrect_characters == 0
        assert floor.typed_text == "cat"
        assert state.position == 3

    def test_wrong_key_blocks_position(self, floor_factory):
        state, floor, outcomes = type_keys(floor_factory("cat"), FORGIVING, "cx")
        assert outcomes[-1] is KeyOutcome.INCORRECT
        assert state.position == 1
        assert state.error_active
        assert floor.incorrect_characters == 1

    def test_correct_key_after_error_resumes(self, floor_factory):
        state, floor, _ = type_keys(floor_factory("cat"), FORGIVING, "cx")
        state, floor, outcomes = type_keys(floor, FORGIVING, "at", state=state)
        assert outcomes == [KeyOutcome.CORRECT, KeyOutcome.FLOOR_COMPLETE]
        assert not state.error_active
        assert floor.correct_characters == 3
        assert floor.incorrect_characters == 1

    def test_repeated_wrong_keys_all_counted(self, floor_factory):
        state, floor, _ = type_keys(floor_factory("cat"), FORGIVING, "cxyz")
        assert state.position == 1
        assert floor.incorrect_characters == 3

    def test_backspace_is_a_no_op(self, floor_factory):
        state, floor, _ = type_keys(floor_factory("cat"), FORGIVING, "c")
        result = process_key(state, floor, FORGIVING, BACKSPACE)
        assert result.outcome is KeyOutcome.IGNORED
        assert result.state == state
        assert result.floor == floor

    def test_named_and_control_keys_ignored(self, floor_factory):
        floor = floor_factory("cat")
        for key in ("Shift", "ArrowLeft", "", "\x1b", "\t"):
            result = process_key(TypingState(), floor, FORGIVING, key)
            assert result.outcome is KeyOutcome.IGNORED
            assert result.floor.incorrect_characters == 0

    def test_space_is_typed(self, floor_factory):
        _, floor, outcomes = type_keys(floor_factory("a b"), FORGIVING, "a b")
        assert outcomes[-1] is KeyOutcome.FLOOR_COMPLETE
        assert floor.correct_characters == 3

    def test_inputs_are_not_mutated(self, floor_factory):
        floor = floor_factory("cat")
        state = TypingState()
        process_key(state, floor, FORGIVING, "c")
        assert state.position == 0
        assert floor.correct_characters == 0


class TestPerfectionist:

    def test_exact_typing_completes_floor(self, floor_factory):
        _, floor, outcomes = type_keys(floor_factory("cat"), PERFECTIONIST, "cat")
        assert outcomes[-1] is KeyOutcome.FLOOR_COMPLETE
        assert floor.typed_text == "cat"

    def test_first_error_position_recorded(self, floor_factory):
        state, floor, outcomes = type_keys(floor_factory("cat"), PERFECTIONIST, "cax")
        assert outcomes[-1] is KeyOutcome.INCORRECT
        assert state.first_error_position == 2
        assert state.error_active
        assert state.typed_text == "cax"
        assert state.position == 3
        assert floor.correct_characters == 2
        assert floor.incorrect_characters == 1

    def test_keys_after_error_are_incorrect_even_if_matching(self, floor_factory):
        state, floor, _ = type_keys(floor_factory("cat"), PERFECTIONIST, "cax")
        # "t" is the right letter for index 2, but the error is still active
        state, floor, outcomes = type_keys(floor, PERFECTIONIST, "t", state=state)
        assert outcomes == [KeyOutcome.INCORRECT]
        assert state.first_error_position == 2
        assert state.typed_text == "caxt"
        assert floor.incorrect_characters == 2

    def test_backspacing_past_error_then_retyping_completes(self, floor_factory):
        state, floor, _ = type_keys(floor_factory("cat"), PERFECTIONIST, "caxy")
        state, floor, outcomes = type_keys(floor, PERFECTIONIST, [BACKSPACE, BACKSPACE], state=state)
        assert outcomes == [KeyOutcome.BACKSPACE, KeyOutcome.BACKSPACE]
        assert state.typed_text == "ca"
        assert state.first_error_position is None
        assert not state.error_active

        state, floor, outcomes = type_keys(floor, PERFECTIONIST, "t", state=state)
        assert outcomes == [KeyOutcome.FLOOR_COMPLETE]
        assert floor.typed_text == "cat"

    def test_one_backspace_clears_error_at_boundary(self, floor_factory):
        state, floor, _ = type_keys(floor_factory("cat"), PERFECTIONIST, ["c", "a", "x", BACKSPACE])
        assert state.typed_text == "ca"
        assert state.first_error_position is None

    def test_error_stays_until_length_reaches_error_index(self, floor_factory):
        state, _, _ = type_keys(floor_factory("cat"), PERFECTIONIST, ["c", "a", "x", "y", BACKSPACE])
        assert state.typed_text == "cax"
        assert state.first_error_position == 2
        assert state.error_active

    def test_error_on_first_character(self, floor_factory):
        state, _, _ = type_keys(floor_factory("cat"), PERFECTIONIST, "x")
        assert state.first_error_position == 0
        state, _, _ = type_keys(floor_factory("cat"), PERFECTIONIST, [BACKSPACE], state=state)
        assert state.typed_text == ""
        assert state.first_error_position is None

    def test_backspace_on_empty_is_ignored(self, floor_factory):
        result = process_key(TypingState(), floor_factory("cat"), PERFECTIONIST, BACKSPACE)
        assert result.outcome is KeyOutcome.IGNORED

    def test_backspace_does_not_change_counts(self, floor_factory):
        _, floor, _ = type_keys(floor_factory("cat"), PERFECTIONIST, ["c", "x", BACKSPACE, "a"])
        assert floor.correct_characters == 2
        assert floor.incorrect_characters == 1

    def test_named_keys_ignored(self, floor_factory):
        result = process_key(TypingState(), floor_factory("cat"), PERFECTIONIST, "Shift")
        assert result.outcome is KeyOutcome.IGNORED
