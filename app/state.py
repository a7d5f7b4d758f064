from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from app.modes import DEFAULT_MODE, ModeSettings, RunType, TypingMode


@dataclass(frozen=True)
class Floor:
    id: str
    text: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    typed_text: str = ""
    correct_characters: int = 0
    incorrect_characters: int = 0
    accuracy: float = 0.0
    wpm: float = 0.0
    completed: bool = False


@dataclass(frozen=True)
class Run:
    id: str
    mode_id: str
    start_time: datetime
    run_type: RunType
    run_target: Optional[float] = None
    end_time: Optional[datetime] = None
    total_characters: int = 0
    total_correct_characters: int = 0
    total_incorrect_characters: int = 0
    average_accuracy: float = 0.0
    average_wpm: float = 0.0
    is_active: bool = True
    floors: Tuple[Floor, ...] = ()

    @property
    def floors_completed(self) -> int:
        return len(self.floors)


@dataclass(frozen=True)
class TypingState:
    """Cursor state for the floor being typed. Reset by the caller per floor."""
    position: int = 0
    error_active: bool = False
    first_error_position: Optional[int] = None
    typed_text: str = ""


class RunPhase(str, Enum):
    NO_RUN = "no_run"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class EngineState:
    """The single record the run controller owns; every transition bumps version."""
    version: int = 0
    mode: TypingMode = DEFAULT_MODE
    phase: RunPhase = RunPhase.NO_RUN
    run: Optional[Run] = None
    floor: Optional[Floor] = None
    typing: TypingState = field(default_factory=TypingState)
    # snapshot of mode.settings taken at run start; later mode edits do not leak in
    run_settings: Optional[ModeSettings] = None

    @property
    def is_running(self) -> bool:
        return self.phase is RunPhase.ACTIVE


# -------- session history records (external store) --------
@dataclass(frozen=True)
class SessionRecord:
    session_start: str
    session_end: str
    duration_seconds: float
    total_characters: int
    correct_characters: int
    incorrect_characters: int
    accuracy_percentage: float
    wpm: float
    sentences_completed: int
    word_count: int = 0
    id: Optional[int] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class AggregateStats:
    total_sessions: int = 0
    average_wpm: float = 0.0
    best_wpm: float = 0.0
    average_accuracy: float = 0.0
    total_practice_time_seconds: float = 0.0


@dataclass(frozen=True)
class DailyStats:
    date: str
    sessions: int
    total_wpm: float
    average_wpm: float
    total_duration: float
    average_accuracy: float
