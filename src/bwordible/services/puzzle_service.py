"""Service for loading the word corpus and assigning a puzzle to every date."""
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional, Sequence, Tuple

from bwordible.models.puzzle_models import PuzzlePlan
from bwordible.services.calendar_service import compare_date_keys, day_distance, parse_date_key
from bwordible.services.permutation import build_permutation

logger = logging.getLogger(__name__)

CYCLE_START_MONTH = 3
CYCLE_START_DAY = 1


class OutOfAnswersError(LookupError):
    """The corpus is too small to supply a word for a cycle position."""


def answer_word(entry) -> str:
    """Normalize a corpus entry (bare string or ``{"word": ...}``) to uppercase."""
    if isinstance(entry, str):
        return entry.upper()
    return str(entry["word"]).upper()


@dataclass(frozen=True)
class WordCorpus:
    """Answer words plus the additional guesses accepted for each length."""
    answers: Tuple[str, ...]
    allowed_by_length: Dict[int, FrozenSet[str]] = field(default_factory=dict)
    allowed_count: int = 0

    @classmethod
    def from_entries(
        cls,
        answers: Iterable,
        allowed_by_length: Optional[Dict] = None,
        allowed_count: Optional[int] = None,
    ) -> "WordCorpus":
        """Build a corpus from raw entries, uppercasing every word."""
        words = tuple(answer_word(entry) for entry in answers)
        duplicates = [word for word, count in Counter(words).items() if count > 1]
        if duplicates:
            logger.warning(f"Answer corpus contains {len(duplicates)} duplicate words: {duplicates[:10]}")

        allowed = {
            int(length): frozenset(str(word).upper() for word in group)
            for length, group in (allowed_by_length or {}).items()
        }
        if allowed_count is None:
            allowed_count = sum(len(group) for group in allowed.values())
        return cls(answers=words, allowed_by_length=allowed, allowed_count=allowed_count)

    @classmethod
    def from_files(cls, answers_path: Path, guesses_path: Optional[Path] = None) -> "WordCorpus":
        """Load the answers JSON and, if given, the allowed-guesses JSON."""
        with open(answers_path, encoding="utf-8") as f:
            answers = json.load(f)

        allowed_by_length: Dict = {}
        allowed_count = None
        if guesses_path is not None:
            with open(guesses_path, encoding="utf-8") as f:
                guesses = json.load(f)
            allowed_by_length = guesses.get("by_length", {})
            allowed_count = guesses.get("metadata", {}).get("count_total")

        corpus = cls.from_entries(answers, allowed_by_length, allowed_count)
        logger.info(f"Loaded {len(corpus.answers)} answers and {corpus.allowed_count} allowed guesses")
        return corpus

    def __len__(self) -> int:
        return len(self.answers)

    def is_allowed(self, guess: str, length: int) -> bool:
        """Check the allowed-guess list for ``length``."""
        return guess in self.allowed_by_length.get(length, frozenset())


def cycle_year_for(date_key: str, start_date_key: str) -> int:
    """Scheduling year for a date: cycles run from March 1 to the end of February."""
    if compare_date_keys(date_key, start_date_key) < 0:
        return parse_date_key(start_date_key).year

    day = parse_date_key(date_key)
    if (day.month, day.day) >= (CYCLE_START_MONTH, CYCLE_START_DAY):
        return day.year
    return day.year - 1


def cycle_start_key(cycle_year: int) -> str:
    return f"{cycle_year:04d}-{CYCLE_START_MONTH:02d}-{CYCLE_START_DAY:02d}"


def select_puzzle(
    answers: Sequence,
    date_key: str,
    start_date_key: str,
    base_seed: str,
) -> PuzzlePlan:
    """Deterministically pick the answer and guess budget for ``date_key``.

    Dates before ``start_date_key`` resolve to the opening puzzle. Each
    cycle year reshuffles the whole corpus with its own seed.
    """
    effective_key = start_date_key if compare_date_keys(date_key, start_date_key) < 0 else date_key
    cycle_year = cycle_year_for(effective_key, start_date_key)
    cycle_start = cycle_start_key(cycle_year)
    position = max(0, day_distance(effective_key, cycle_start))

    order = build_permutation(len(answers), f"{base_seed}:{cycle_year}")
    if position >= len(order):
        raise OutOfAnswersError(
            f"Not enough answers for the {cycle_year} cycle: position {position}, {len(order)} answers"
        )

    answer_index = order[position]
    answer = answer_word(answers[answer_index])
    logger.debug(f"Puzzle for {date_key}: cycle {cycle_year}, position {position}, index {answer_index}")

    return PuzzlePlan(
        answer=answer,
        answer_index=answer_index,
        length=len(answer),
        max_guesses=len(answer) + 2,
        cycle_year=cycle_year,
        cycle_start_date_key=cycle_start,
        position_in_cycle=position,
    )
