from __future__ import annotations
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List

from app.state import DailyStats, Floor, Run, SessionRecord


def word_count(text: str) -> int:
    return len(text.split())


def floor_wpm(words: int, duration_seconds: float) -> float:
    """
    Text words per minute. The floor's own word count is used, not keystrokes/5,
    so a floor typed with many corrections scores the same as a clean one.
    """
    if duration_seconds <= 0:
        return 0.0
    return words / (duration_seconds / 60.0)


def accuracy(correct: int, incorrect: int) -> float:
    total = correct + incorrect
    if total <= 0:
        return 0.0
    return 100.0 * correct / total


def finalize_floor(floor: Floor, end_time: datetime) -> Floor:
    duration = 0.0
    if floor.start_time is not None:
        duration = (end_time - floor.start_time).total_seconds()
    return replace(
        floor,
        end_time=end_time,
        wpm=floor_wpm(word_count(floor.text), duration),
        accuracy=accuracy(floor.correct_characters, floor.incorrect_characters),
        completed=True,
    )


def fold_floor(run: Run, floor: Floor) -> Run:
    """
    Append a finalized floor and recompute run averages.
    average_accuracy is weighted by character counts across floors while
    average_wpm is the plain mean of per-floor wpm. Keep them that way.
    """
    floors = run.floors + (floor,)
    correct = run.total_correct_characters + floor.correct_characters
    incorrect = run.total_incorrect_characters + floor.incorrect_characters
    return replace(
        run,
        floors=floors,
        total_characters=run.total_characters + len(floor.text),
        total_correct_characters=correct,
        total_incorrect_characters=incorrect,
        average_accuracy=accuracy(correct, incorrect),
        average_wpm=sum(f.wpm for f in floors) / len(floors),
    )


def session_from_run(run: Run) -> SessionRecord:
    end = run.end_time or run.start_time
    return SessionRecord(
        session_start=run.start_time.isoformat(),
        session_end=end.isoformat(),
        duration_seconds=max(0.0, (end - run.start_time).total_seconds()),
        total_characters=run.total_characters,
        correct_characters=run.total_correct_characters,
        incorrect_characters=run.total_incorrect_characters,
        accuracy_percentage=run.average_accuracy,
        wpm=run.average_wpm,
        sentences_completed=run.floors_completed,
        word_count=sum(word_count(f.text) for f in run.floors),
    )


def daily_stats(sessions: Iterable[SessionRecord]) -> List[DailyStats]:
    """Group sessions by calendar day of session_start, most recent day first."""
    buckets: Dict[str, Dict[str, float]] = {}
    for s in sessions:
        day = datetime.fromisoformat(s.session_start).date().isoformat()
        b = buckets.setdefault(day, {"sessions": 0, "wpm": 0.0, "dur": 0.0, "acc": 0.0})
        b["sessions"] += 1
        b["wpm"] += s.wpm
        b["dur"] += s.duration_seconds
        b["acc"] += s.accuracy_percentage

    out = [
        DailyStats(
            date=day,
            sessions=int(b["sessions"]),
            total_wpm=b["wpm"],
            average_wpm=b["wpm"] / b["sessions"],
            total_duration=b["dur"],
            average_accuracy=b["acc"] / b["sessions"],
        )
        for day, b in buckets.items()
    ]
    return sorted(out, key=lambda d: d.date, reverse=True)
