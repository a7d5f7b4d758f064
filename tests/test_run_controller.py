import logging
from dataclasses import replace

import pytest

from app.errors import EmptyDictionaryError
from app.modes import DEFAULT_MODE, ErrorHandling, RunType
from app.state import RunPhase
from services.run_controller import RunController, should_continue
from services.typing_engine import KeyOutcome


def type_floor(ctrl):
    outcome = None
    for ch in ctrl.floor.text:
        outcome = ctrl.handle_key(ch)
    return outcome


@pytest.fixture
def store(store_factory):
    return store_factory()


@pytest.fixture
def controller(clock, store, make_mode):
    def make(mode=None, **kw):
        return RunController(session_store=kw.pop("session_store", store),
                             mode=mode or make_mode(), clock=clock, **kw)
    return make


class TestStartRun:

    def test_run_starts_with_first_floor(self, controller, clock):
        ctrl = controller()
        run = ctrl.start_run()
        st = ctrl.state
        assert st.phase is RunPhase.ACTIVE
        assert st.run is run
        assert run.floors_completed == 0
        assert run.is_active
        assert st.floor.text == "cat"
        assert st.floor.start_time == clock()
        assert st.typing.position == 0

    def test_first_key_starts_run_without_typing(self, controller):
        ctrl = controller()
        assert ctrl.handle_key("c") is KeyOutcome.RUN_STARTED
        assert ctrl.phase is RunPhase.ACTIVE
        assert ctrl.floor.correct_characters == 0
        assert ctrl.state.typing.position == 0

    def test_restart_discards_run_without_saving(self, controller, store):
        ctrl = controller()
        first = ctrl.start_run()
        ctrl.handle_key("c")
        second = ctrl.start_run()
        assert second.id != first.id
        assert ctrl.floor.correct_characters == 0
        assert store.saved == []

    def test_generation_failure_leaves_state_untouched(self, controller, make_mode):
        ctrl = controller(mode=make_mode(sentences=()))
        before = ctrl.state
        with pytest.raises(EmptyDictionaryError):
            ctrl.start_run()
        assert ctrl.state is before

    def test_each_transition_bumps_version(self, controller):
        ctrl = controller()
        versions = [ctrl.state.version]
        ctrl.start_run()
        versions.append(ctrl.state.version)
        ctrl.handle_key("c")
        versions.append(ctrl.state.version)
        assert versions == sorted(set(versions))

    def test_ignored_key_does_not_commit(self, controller):
        ctrl = controller()
        ctrl.start_run()
        v = ctrl.state.version
        assert ctrl.handle_key("Shift") is KeyOutcome.IGNORED
        assert ctrl.state.version == v


class TestFloorCountRun:

    def test_completes_after_target_floors(self, controller, store):
        completed = []
        ctrl = controller()
        ctrl.subscribe(completed.append)
        ctrl.start_run()

        assert type_floor(ctrl) is KeyOutcome.FLOOR_COMPLETE
        assert ctrl.phase is RunPhase.ACTIVE
        assert ctrl.run.floors_completed == 1
        assert ctrl.floor.text == "dog"

        type_floor(ctrl)
        run = ctrl.run
        assert ctrl.phase is RunPhase.COMPLETED
        assert ctrl.floor is None
        assert run.floors_completed == 2
        assert not run.is_active
        assert run.end_time is not None
        assert completed == [run]
        assert len(store.saved) == 1
        assert store.saved[0].sentences_completed == 2

    def test_floor_numbers_cycle_sentences(self, controller, make_mode):
        ctrl = controller(mode=make_mode(run_type=RunType.FLOOR_COUNT, run_target=3))
        ctrl.start_run()
        texts = []
        for _ in range(3):
            texts.append(ctrl.floor.text)
            type_floor(ctrl)
        assert texts == ["cat", "dog", "cat"]

    def test_average_wpm_is_mean_of_floors(self, controller, clock):
        ctrl = controller()
        ctrl.start_run()
        clock.advance(1)
        type_floor(ctrl)  # 1 word in 1s
        type_floor(ctrl)  # 0s elapsed, 0 wpm
        floors = ctrl.run.floors
        assert floors[0].wpm == pytest.approx(60.0)
        assert floors[1].wpm == 0.0
        assert ctrl.run.average_wpm == pytest.approx(30.0)

    def test_keys_ignored_after_completion(self, controller):
        ctrl = controller()
        ctrl.start_run()
        type_floor(ctrl)
        type_floor(ctrl)
        v = ctrl.state.version
        assert ctrl.handle_key("c") is KeyOutcome.IGNORED
        assert ctrl.phase is RunPhase.COMPLETED
        assert ctrl.state.version == v

    def test_new_run_after_completion(self, controller):
        ctrl = controller()
        ctrl.start_run()
        type_floor(ctrl)
        type_floor(ctrl)
        ctrl.start_run()
        assert ctrl.phase is RunPhase.ACTIVE
        assert ctrl.run.floors_completed == 0


class TestOtherRunTypes:

    def test_time_based_checked_at_floor_completion(self, controller, make_mode, clock):
        ctrl = controller(mode=make_mode(run_type=RunType.TIME_BASED, run_target=1))
        ctrl.start_run()
        clock.advance(30)
        type_floor(ctrl)
        assert ctrl.phase is RunPhase.ACTIVE

        clock.advance(31)
        assert ctrl.phase is RunPhase.ACTIVE  # time alone never ends a run
        type_floor(ctrl)
        assert ctrl.phase is RunPhase.COMPLETED
        assert ctrl.run.floors_completed == 2

    def test_endless_never_completes(self, controller, make_mode, store):
        ctrl = controller(mode=make_mode(run_type=RunType.ENDLESS, run_target=None))
        ctrl.start_run()
        for _ in range(25):
            type_floor(ctrl)
        assert ctrl.phase is RunPhase.ACTIVE
        assert ctrl.run.floors_completed == 25
        assert store.saved == []

    def test_should_continue_endless(self, controller, make_mode, clock):
        ctrl = controller(mode=make_mode(run_type=RunType.ENDLESS, run_target=None))
        run = ctrl.start_run()
        assert should_continue(run, clock())

    def test_perfectionist_run(self, controller, make_mode):
        ctrl = controller(mode=make_mode(error_handling=ErrorHandling.PERFECTIONIST, run_target=1))
        ctrl.start_run()
        for k in ("c", "x", "Backspace", "a", "t"):
            ctrl.handle_key(k)
        assert ctrl.phase is RunPhase.COMPLETED
        floor = ctrl.run.floors[0]
        assert floor.correct_characters == 3
        assert floor.incorrect_characters == 1
        assert floor.accuracy == pytest.approx(75.0)


class TestSessionPersistence:

    def test_store_failure_is_logged_not_raised(self, controller, store_factory, caplog):
        ctrl = controller(session_store=store_factory(fail=True))
        ctrl.start_run()
        type_floor(ctrl)
        with caplog.at_level(logging.WARNING):
            type_floor(ctrl)
        assert ctrl.phase is RunPhase.COMPLETED
        assert "Failed to save session" in caplog.text

    def test_deferred_save_runs_after_completion(self, controller, store):
        jobs = []
        ctrl = controller(dispatch=jobs.append)
        ctrl.start_run()
        type_floor(ctrl)
        type_floor(ctrl)
        assert ctrl.phase is RunPhase.COMPLETED
        assert store.saved == []
        jobs[0]()
        assert len(store.saved) == 1

    def test_no_store_is_fine(self, controller):
        ctrl = controller(session_store=None)
        ctrl.start_run()
        type_floor(ctrl)
        type_floor(ctrl)
        assert ctrl.phase is RunPhase.COMPLETED

    def test_listener_error_does_not_stop_save(self, controller, store):
        ctrl = controller()

        def boom(run):
            raise RuntimeError("listener broke")

        ctrl.subscribe(boom)
        ctrl.start_run()
        type_floor(ctrl)
        type_floor(ctrl)
        assert len(store.saved) == 1

    def test_unexpected_store_error_is_logged(self, controller, caplog):
        class BrokenStore:
            def save_session(self, record):
                raise OSError("device not ready")

        ctrl = controller(session_store=BrokenStore())
        ctrl.start_run()
        type_floor(ctrl)
        with caplog.at_level(logging.ERROR):
            type_floor(ctrl)
        assert ctrl.phase is RunPhase.COMPLETED
        assert "Session store raised unexpectedly" in caplog.text


class TestModeChanges:

    def test_active_run_keeps_settings_snapshot(self, controller, make_mode):
        ctrl = controller()
        ctrl.start_run()
        edited = replace(make_mode(), settings=replace(make_mode().settings, run_target=5))
        ctrl.mode_updated(edited)
        assert ctrl.mode.settings.run_target == 5
        type_floor(ctrl)
        type_floor(ctrl)
        assert ctrl.phase is RunPhase.COMPLETED

    def test_select_mode_applies_to_next_run(self, controller, make_mode):
        ctrl = controller()
        ctrl.start_run()
        other = make_mode(mode_id="custom-other", sentences=("zebra",))
        ctrl.select_mode(other)
        assert ctrl.floor.text == "cat"
        ctrl.start_run()
        assert ctrl.floor.text == "zebra"
        assert ctrl.run.mode_id == "custom-other"

    def test_update_for_other_mode_is_ignored(self, controller, make_mode):
        ctrl = controller()
        ctrl.mode_updated(make_mode(mode_id="custom-other", name="Other"))
        assert ctrl.mode.id == "custom-test"

    def test_deleting_current_mode_resets(self, controller):
        ctrl = controller()
        ctrl.start_run()
        assert ctrl.mode_deleted("custom-test", DEFAULT_MODE)
        assert ctrl.phase is RunPhase.NO_RUN
        assert ctrl.run is None
        assert ctrl.mode is DEFAULT_MODE

    def test_deleting_other_mode_keeps_run(self, controller):
        ctrl = controller()
        ctrl.start_run()
        assert not ctrl.mode_deleted("custom-other", DEFAULT_MODE)
        assert ctrl.phase is RunPhase.ACTIVE

    def test_deleting_mode_of_active_run_discards_run(self, controller, make_mode):
        ctrl = controller()
        ctrl.start_run()
        other = make_mode(mode_id="custom-other", name="Other")
        ctrl.select_mode(other)
        assert ctrl.mode_deleted("custom-test", DEFAULT_MODE)
        assert ctrl.phase is RunPhase.NO_RUN
        assert ctrl.run is None
        assert ctrl.mode == other

    def test_reset_keeps_mode(self, controller):
        ctrl = controller()
        ctrl.start_run()
        ctrl.reset()
        assert ctrl.phase is RunPhase.NO_RUN
        assert ctrl.floor is None
        assert ctrl.mode.id == "custom-test"


class TestErrors:

    def test_floor_complete_without_run(self, controller):
        with pytest.raises(RuntimeError):
            controller().on_floor_complete()

    def test_elapsed_seconds(self, controller, clock):
        ctrl = controller()
        assert ctrl.elapsed_seconds() == 0.0
        ctrl.start_run()
        clock.advance(2.5)
        assert ctrl.elapsed_seconds() == pytest.approx(2.5)
