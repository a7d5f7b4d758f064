# app/modes.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class ErrorHandling(str, Enum):
    FORGIVING = "forgiving"
    PERFECTIONIST = "perfectionist"


class RunType(str, Enum):
    TIME_BASED = "time"  # run_target is minutes
    FLOOR_COUNT = "floors"  # run_target is a floor count
    ENDLESS = "endless"


DEFAULT_RUN_TARGET = 10
DEFAULT_WORD_COUNT = 10
DEFAULT_MIN_WORD_LENGTH = 2
DEFAULT_MAX_WORD_LENGTH = 8
NUMBER_PROBABILITY = 0.1
PUNCTUATION_PROBABILITY = 0.15
PUNCTUATION_MARKS = ".,;:!?"


# -------- floor generation variants --------
@dataclass(frozen=True)
class SequentialSentences:
    sentence_list: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class RandomSentences:
    sentence_list: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class WordLength:
    min: int = DEFAULT_MIN_WORD_LENGTH
    max: int = DEFAULT_MAX_WORD_LENGTH


@dataclass(frozen=True)
class RandomWords:
    word_count: int = DEFAULT_WORD_COUNT
    word_length: WordLength = field(default_factory=WordLength)
    include_numbers: bool = False
    include_punctuation: bool = False
    number_probability: float = NUMBER_PROBABILITY
    punctuation_probability: float = PUNCTUATION_PROBABILITY


FloorGeneration = Union[SequentialSentences, RandomWords, RandomSentences]

_GENERATION_TAGS = {
    SequentialSentences: "sequentialSentences",
    RandomWords: "randomWords",
    RandomSentences: "randomSentences",
}


# -------- modes --------
@dataclass(frozen=True)
class ModeSettings:
    error_handling: ErrorHandling = ErrorHandling.FORGIVING
    run_type: RunType = RunType.FLOOR_COUNT
    run_target: Optional[float] = DEFAULT_RUN_TARGET
    floor_generation: FloorGeneration = field(default_factory=RandomSentences)


@dataclass(frozen=True)
class TypingMode:
    id: str
    name: str
    settings: ModeSettings
    is_default: bool = False
    created_at: Optional[str] = None


# -------- Built-in modes --------
DEFAULT_MODES: List[TypingMode] = [
    TypingMode(
        id="forgiving-default",
        name="Forgiving Mode",
        settings=ModeSettings(error_handling=ErrorHandling.FORGIVING),
        is_default=True,
    ),
    TypingMode(
        id="perfectionist-default",
        name="Perfectionist Mode",
        settings=ModeSettings(error_handling=ErrorHandling.PERFECTIONIST),
        is_default=True,
    ),
]

DEFAULT_MODE = DEFAULT_MODES[0]


# -------- dict codec (custom mode persistence) --------
def generation_to_dict(gen: FloorGeneration) -> Dict[str, Any]:
    tag = _GENERATION_TAGS[type(gen)]
    if isinstance(gen, RandomWords):
        return {
            "type": tag,
            "wordCount": gen.word_count,
            "wordLength": {"min": gen.word_length.min, "max": gen.word_length.max},
            "includeNumbers": gen.include_numbers,
            "includePunctuation": gen.include_punctuation,
            "numberProbability": gen.number_probability,
            "punctuationProbability": gen.punctuation_probability,
        }
    out: Dict[str, Any] = {"type": tag}
    if gen.sentence_list is not None:
        out["sentenceList"] = list(gen.sentence_list)
    return out


def _expect_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


def generation_from_dict(d: Dict[str, Any]) -> FloorGeneration:
    d = _expect_dict(d, "floorGeneration")
    tag = d.get("type")
    if tag == "randomWords":
        length = _expect_dict(d.get("wordLength") or {}, "wordLength")
        return RandomWords(
            word_count=int(d.get("wordCount", DEFAULT_WORD_COUNT)),
            word_length=WordLength(
                min=int(length.get("min", DEFAULT_MIN_WORD_LENGTH)),
                max=int(length.get("max", DEFAULT_MAX_WORD_LENGTH)),
            ),
            include_numbers=bool(d.get("includeNumbers", False)),
            include_punctuation=bool(d.get("includePunctuation", False)),
            number_probability=float(d.get("numberProbability", NUMBER_PROBABILITY)),
            punctuation_probability=float(
                d.get("punctuationProbability", PUNCTUATION_PROBABILITY)
            ),
        )
    sentences = d.get("sentenceList")
    if sentences is not None:
        if not isinstance(sentences, list):
            raise TypeError("sentenceList must be a list")
        sentences = tuple(str(s) for s in sentences)
    if tag == "sequentialSentences":
        return SequentialSentences(sentence_list=sentences)
    if tag == "randomSentences":
        return RandomSentences(sentence_list=sentences)
    raise ValueError(f"Unknown floor generation type: {tag!r}")


def settings_to_dict(s: ModeSettings) -> Dict[str, Any]:
    return {
        "errorHandling": s.error_handling.value,
        "runType": s.run_type.value,
        "runTarget": s.run_target,
        "floorGeneration": generation_to_dict(s.floor_generation),
    }


def settings_from_dict(d: Dict[str, Any]) -> ModeSettings:
    d = _expect_dict(d, "settings")
    # Modes saved before generation settings existed have no floorGeneration
    gen = d.get("floorGeneration")
    target = d.get("runTarget")
    if target is not None and not isinstance(target, (int, float)):
        target = float(target)
    return ModeSettings(
        error_handling=ErrorHandling(d["errorHandling"]),
        run_type=RunType(d["runType"]),
        run_target=target,
        floor_generation=generation_from_dict(gen) if gen else RandomSentences(),
    )


def mode_to_dict(m: TypingMode) -> Dict[str, Any]:
    out = {
        "id": m.id,
        "name": m.name,
        "settings": settings_to_dict(m.settings),
        "isDefault": m.is_default,
    }
    if m.created_at:
        out["createdAt"] = m.created_at
    return out


def mode_from_dict(d: Dict[str, Any]) -> TypingMode:
    if not isinstance(d, dict):
        raise TypeError(f"Mode entry must be an object, got {type(d).__name__}")
    required = {"id", "name", "settings"}
    missing = required - set(d.keys())
    if missing:
        raise ValueError(f"Missing mode keys: {', '.join(sorted(missing))}")
    return TypingMode(
        id=str(d["id"]),
        name=str(d["name"]),
        settings=settings_from_dict(d["settings"]),
        is_default=bool(d.get("isDefault", False)),
        created_at=d.get("createdAt"),
    )
