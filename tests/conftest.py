import random
from datetime import datetime, timedelta, timezone

import pytest

from app.errors import DatabaseError, ModeStoreError
from app.modes import ErrorHandling, ModeSettings, RunType, SequentialSentences, TypingMode
from app.state import Floor


class FakeClock:
    def __init__(self, start=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


class RecordingSessionStore:
    def __init__(self, fail: bool = False):
        self.saved = []
        self.fail = fail

    def save_session(self, record):
        if self.fail:
            raise DatabaseError("disk full")
        self.saved.append(record)
        return record


class MemoryModeStore:
    def __init__(self, modes=None, fail_save: bool = False):
        self.modes = list(modes or [])
        self.fail_save = fail_save
        self.saves = 0

    def load_custom_modes(self):
        return list(self.modes)

    def save_custom_modes(self, modes):
        if self.fail_save:
            raise ModeStoreError("read-only")
        self.saves += 1
        self.modes = list(modes)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def floor_factory():
    def make(text="cat"):
        return Floor(id="floor-test", text=text)
    return make


@pytest.fixture
def make_mode():
    def make(
        error_handling=ErrorHandling.FORGIVING,
        run_type=RunType.FLOOR_COUNT,
        run_target=2,
        sentences=("cat", "dog"),
        mode_id="custom-test",
        name="Test Mode",
    ):
        settings = ModeSettings(
            error_handling=error_handling,
            run_type=run_type,
            run_target=run_target,
            floor_generation=SequentialSentences(sentence_list=tuple(sentences)),
        )
        return TypingMode(id=mode_id, name=name, settings=settings)
    return make


@pytest.fixture
def store_factory():
    return RecordingSessionStore


@pytest.fixture
def mode_store_factory():
    return MemoryModeStore
