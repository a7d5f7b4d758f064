import math

from app.errors import InvalidModeError
from app.modes import ModeSettings, RandomWords, RunType

MAX_MODE_NAME = 40


def sanitize_mode_name(name: str) -> str:
    # collapse inner whitespace so "Fast   Mode" and "Fast Mode" collide
    return " ".join((name or "").split())[:MAX_MODE_NAME]


def validate_settings(settings: ModeSettings) -> None:
    if settings.run_type in (RunType.TIME_BASED, RunType.FLOOR_COUNT):
        target = settings.run_target
        if target is None or not math.isfinite(target) or target <= 0:
            raise InvalidModeError(
                f"{settings.run_type.value} runs need a positive, finite run target"
            )
    gen = settings.floor_generation
    if isinstance(gen, RandomWords):
        if gen.word_count < 1:
            raise InvalidModeError("word count must be at least 1")
        if gen.word_length.min < 1 or gen.word_length.min > gen.word_length.max:
            raise InvalidModeError(
                f"invalid word length range {gen.word_length.min}..{gen.word_length.max}"
            )
        for p in (gen.number_probability, gen.punctuation_probability):
            if not 0.0 <= p <= 1.0:
                raise InvalidModeError(f"probability {p} outside 0..1")
