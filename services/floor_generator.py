from __future__ import annotations
import random
import uuid
from typing import List, Optional, Sequence

from app.errors import EmptyDictionaryError
from app.modes import (
    PUNCTUATION_MARKS,
    FloorGeneration,
    RandomSentences,
    RandomWords,
    SequentialSentences,
)
from app.state import Floor
from utils.file_handler import DEFAULT_SENTENCES, DEFAULT_WORDS

MAX_RANDOM_NUMBER = 9999


def new_floor_id() -> str:
    return f"floor-{uuid.uuid4().hex[:12]}"


def _sentences(gen, default: Optional[Sequence[str]] = None) -> Sequence[str]:
    if gen.sentence_list is not None:
        sentences = gen.sentence_list
    else:
        sentences = DEFAULT_SENTENCES if default is None else default
    if not sentences:
        raise EmptyDictionaryError("sentence list is empty")
    # a blank floor can never be completed
    if any(not s.strip() for s in sentences):
        raise EmptyDictionaryError("sentence list contains a blank sentence")
    return sentences


def filter_words(words: Sequence[str], min_len: int, max_len: int) -> List[str]:
    return [w for w in words if min_len <= len(w) <= max_len]


def _word_pool(gen: RandomWords, words: Optional[Sequence[str]]) -> List[str]:
    pool = filter_words(
        DEFAULT_WORDS if words is None else words,
        gen.word_length.min,
        gen.word_length.max,
    )
    if not pool:
        raise EmptyDictionaryError(
            f"no words of length {gen.word_length.min}..{gen.word_length.max}"
        )
    return pool


def check_generation(
    gen: FloorGeneration,
    words: Optional[Sequence[str]] = None,
    sentences: Optional[Sequence[str]] = None,
) -> None:
    """Raise EmptyDictionaryError if `gen` could never produce a floor."""
    if isinstance(gen, RandomWords):
        _word_pool(gen, words)
    else:
        _sentences(gen, sentences)


def _random_words_text(gen: RandomWords, pool: Sequence[str], rng) -> str:
    out = []
    for _ in range(gen.word_count):
        word = rng.choice(pool)
        if gen.include_numbers and rng.random() < gen.number_probability:
            word = str(rng.randint(0, MAX_RANDOM_NUMBER))
        if gen.include_punctuation and rng.random() < gen.punctuation_probability:
            word += rng.choice(PUNCTUATION_MARKS)
        out.append(word)
    return " ".join(out)


def generate_text(
    floor_number: int,
    gen: FloorGeneration,
    rng=None,
    words: Optional[Sequence[str]] = None,
    sentences: Optional[Sequence[str]] = None,
) -> str:
    if floor_number < 1:
        raise ValueError(f"floor numbers start at 1, got {floor_number}")
    rng = rng or random

    if isinstance(gen, SequentialSentences):
        pool = _sentences(gen, sentences)
        return pool[(floor_number - 1) % len(pool)]
    if isinstance(gen, RandomSentences):
        return rng.choice(_sentences(gen, sentences))
    if isinstance(gen, RandomWords):
        return _random_words_text(gen, _word_pool(gen, words), rng)
    raise TypeError(f"unknown floor generation settings: {type(gen).__name__}")


def generate(
    floor_number: int,
    gen: FloorGeneration,
    rng=None,
    words: Optional[Sequence[str]] = None,
    sentences: Optional[Sequence[str]] = None,
) -> Floor:
    """Build the next floor. start_time is left unset; the caller stamps it."""
    return Floor(id=new_floor_id(), text=generate_text(floor_number, gen, rng, words, sentences))
