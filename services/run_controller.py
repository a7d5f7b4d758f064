from __future__ import annotations
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from app.calculation import finalize_floor, fold_floor, session_from_run
from app.errors import PersistenceError
from app.modes import DEFAULT_MODE, ModeSettings, RunType, TypingMode
from app.state import EngineState, Floor, Run, RunPhase, SessionRecord, TypingState
from services import floor_generator
from services.typing_engine import KeyOutcome, process_key

log = logging.getLogger(__name__)

RunListener = Callable[[Run], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def inline_dispatch(job: Callable[[], None]) -> None:
    job()


def should_continue(run: Run, now: datetime) -> bool:
    """Checked only when a floor completes, so a timed run can overrun by one floor."""
    if run.run_type is RunType.FLOOR_COUNT:
        return run.floors_completed < (run.run_target or 0)
    if run.run_type is RunType.TIME_BASED:
        elapsed_min = (now - run.start_time).total_seconds() / 60.0
        return elapsed_min < (run.run_target or 0)
    if run.run_type is RunType.ENDLESS:
        return True
    return False


class RunController:
    """
    Owns the EngineState record and is the only thing that replaces it.
    Single-threaded: each call runs to completion before the next one.
    The session store is only touched through `dispatch`, which may hand the
    save to a worker thread; its outcome never feeds back into run state.
    """

    def __init__(
        self,
        session_store=None,
        mode: TypingMode = DEFAULT_MODE,
        clock: Callable[[], datetime] = utcnow,
        rng=None,
        words: Optional[Sequence[str]] = None,
        sentences: Optional[Sequence[str]] = None,
        dispatch: Callable[[Callable[[], None]], None] = inline_dispatch,
    ):
        self._store = session_store
        self._clock = clock
        self._rng = rng
        self._words = words
        self._sentences = sentences
        self._dispatch = dispatch
        self._listeners: List[RunListener] = []
        self._state = EngineState(mode=mode)

    # ---------------- read side ----------------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def mode(self) -> TypingMode:
        return self._state.mode

    @property
    def run(self) -> Optional[Run]:
        return self._state.run

    @property
    def floor(self) -> Optional[Floor]:
        return self._state.floor

    @property
    def phase(self) -> RunPhase:
        return self._state.phase

    def elapsed_seconds(self) -> float:
        """Seconds on the current floor; read-only, safe to call from a UI tick."""
        floor = self._state.floor
        if floor is None or floor.start_time is None:
            return 0.0
        return max(0.0, (self._clock() - floor.start_time).total_seconds())

    def subscribe(self, listener: RunListener) -> None:
        self._listeners.append(listener)

    # ---------------- transitions ----------------
    def _commit(self, **changes) -> None:
        self._state = replace(self._state, version=self._state.version + 1, **changes)

    def _generate(self, floor_number: int, settings: ModeSettings, now: datetime) -> Floor:
        floor = floor_generator.generate(
            floor_number,
            settings.floor_generation,
            rng=self._rng,
            words=self._words,
            sentences=self._sentences,
        )
        return replace(floor, start_time=now)

    def start_run(self, mode: Optional[TypingMode] = None) -> Run:
        """Start a fresh run, discarding any run in progress without saving it."""
        mode = mode or self._state.mode
        settings = mode.settings
        now = self._clock()
        # floor 1 exists before the run is published, so no input ever sees a run without a floor
        floor = self._generate(1, settings, now)
        run = Run(
            id=f"run-{uuid.uuid4().hex[:12]}",
            mode_id=mode.id,
            start_time=now,
            run_type=settings.run_type,
            run_target=settings.run_target,
        )
        if self._state.phase is RunPhase.ACTIVE:
            log.info("Discarding unfinished run %s", self._state.run.id)
        self._commit(
            mode=mode,
            phase=RunPhase.ACTIVE,
            run=run,
            floor=floor,
            typing=TypingState(),
            run_settings=settings,
        )
        log.info("Run %s started (mode=%s, %s)", run.id, mode.name, run.run_type.value)
        return run

    def handle_key(self, key: str) -> KeyOutcome:
        st = self._state
        if st.phase is RunPhase.NO_RUN:
            # first key press only starts the run; it is not typed
            self.start_run()
            return KeyOutcome.RUN_STARTED
        if st.phase is RunPhase.COMPLETED or st.floor is None:
            return KeyOutcome.IGNORED

        result = process_key(st.typing, st.floor, st.run_settings.error_handling, key)
        if result.outcome is KeyOutcome.IGNORED:
            return result.outcome
        self._commit(typing=result.state, floor=result.floor)
        if result.outcome is KeyOutcome.FLOOR_COMPLETE:
            self.on_floor_complete()
        return result.outcome

    def on_floor_complete(self) -> bool:
        """Finalize the current floor; returns True if the run goes on."""
        st = self._state
        if st.phase is not RunPhase.ACTIVE or st.floor is None:
            raise RuntimeError("no active floor to complete")

        now = self._clock()
        floor = finalize_floor(st.floor, now)
        run = fold_floor(st.run, floor)
        log.debug(
            "Floor %d done: %.1f wpm, %.1f%% accuracy",
            run.floors_completed, floor.wpm, floor.accuracy,
        )

        if should_continue(run, now):
            nxt = self._generate(run.floors_completed + 1, st.run_settings, now)
            self._commit(run=run, floor=nxt, typing=TypingState())
            return True

        run = replace(run, end_time=now, is_active=False)
        self._commit(run=run, floor=None, typing=TypingState(), phase=RunPhase.COMPLETED)
        log.info(
            "Run %s completed: %d floors, %.1f%% accuracy, %.1f wpm",
            run.id, run.floors_completed, run.average_accuracy, run.average_wpm,
        )
        self._emit_completed(run)
        return False

    def _emit_completed(self, run: Run) -> None:
        for listener in list(self._listeners):
            try:
                listener(run)
            except Exception:
                log.exception("Run completion listener failed")
        if self._store is not None:
            record = session_from_run(run)
            self._dispatch(lambda: self._save_session(record))

    def _save_session(self, record: SessionRecord) -> None:
        try:
            saved = self._store.save_session(record)
            log.info("Session saved (id=%s)", saved.id)
        except PersistenceError as e:
            log.warning("Failed to save session, not retrying: %s", e)
        except Exception:
            log.exception("Session store raised unexpectedly, not retrying")

    def reset(self) -> None:
        """Drop any run and return to NoRun, keeping the current mode."""
        self._state = EngineState(version=self._state.version + 1, mode=self._state.mode)

    # ---------------- mode changes ----------------
    def select_mode(self, mode: TypingMode) -> None:
        """Applies to the next run; an active run keeps its own settings snapshot."""
        self._commit(mode=mode)

    def mode_updated(self, mode: TypingMode) -> None:
        if self._state.mode.id == mode.id:
            self._commit(mode=mode)

    def mode_deleted(self, mode_id: str, fallback: TypingMode) -> bool:
        """Reset to NoRun if the deleted mode is current or drives the active run."""
        st = self._state
        is_current = st.mode.id == mode_id
        runs_it = st.phase is RunPhase.ACTIVE and st.run.mode_id == mode_id
        if not (is_current or runs_it):
            return False
        mode = fallback if is_current else st.mode
        if is_current:
            log.info("Current mode %s deleted, falling back to %s", mode_id, fallback.name)
        else:
            log.info("Mode %s of the active run deleted, discarding run %s", mode_id, st.run.id)
        self._state = EngineState(version=st.version + 1, mode=mode)
        return True
