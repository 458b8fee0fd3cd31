"""Models for puzzle, progress and statistics data."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from bwordible.services.calendar_service import sanitize_date_key

DISTRIBUTION_BUCKETS = range(1, 8)


class LetterStatus(Enum):
    """Classification of one guessed letter."""
    ABSENT = "absent"
    PRESENT = "present"
    CORRECT = "correct"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    LetterStatus.ABSENT: 1,
    LetterStatus.PRESENT: 2,
    LetterStatus.CORRECT: 3,
}


class PuzzleMode(Enum):
    """How a puzzle was opened."""
    DAILY = "daily"  # The live today, the only ranked mode
    ARCHIVE = "archive"  # Replay of an already released date
    PREVIEW = "preview"  # Today is before the launch date


class PuzzleState(Enum):
    """Lifecycle of one date's puzzle."""
    UNSTARTED = "unstarted"
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


class DayStatus(Enum):
    """Calendar cell status for a date."""
    EMPTY = "empty"
    WON = "won"
    LOST = "lost"
    MISSED = "missed"
    TODAY = "today"


@dataclass(frozen=True)
class PuzzlePlan:
    """The word and guess budget assigned to one date."""
    answer: str
    answer_index: int
    length: int
    max_guesses: int
    cycle_year: int
    cycle_start_date_key: str
    position_in_cycle: int


@dataclass
class PuzzleProgress:
    """Per-date progress record, persisted in the save document."""
    guesses: List[str] = field(default_factory=list)
    current_guess: str = ""
    completed: bool = False
    won: bool = False
    stats_recorded: bool = False

    @property
    def state(self) -> PuzzleState:
        if self.completed:
            return PuzzleState.WON if self.won else PuzzleState.LOST
        if self.guesses or self.current_guess:
            return PuzzleState.IN_PROGRESS
        return PuzzleState.UNSTARTED

    def to_dict(self) -> dict:
        return {
            "completed": self.completed,
            "currentGuess": self.current_guess,
            "guesses": list(self.guesses),
            "statsRecorded": self.stats_recorded,
            "won": self.won,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PuzzleProgress":
        return cls(
            guesses=[str(guess) for guess in data.get("guesses", [])],
            current_guess=str(data.get("currentGuess", "")),
            completed=bool(data.get("completed", False)),
            won=bool(data.get("won", False)),
            stats_recorded=bool(data.get("statsRecorded", False)),
        )


def _empty_distribution() -> Dict[int, int]:
    return {bucket: 0 for bucket in DISTRIBUTION_BUCKETS}


@dataclass
class StatsSnapshot:
    """Lifetime aggregate statistics for ranked puzzles."""
    played: int = 0
    wins: int = 0
    current_streak: int = 0
    max_streak: int = 0
    total_winning_guesses: int = 0
    distribution: Dict[int, int] = field(default_factory=_empty_distribution)
    last_completed_date: Optional[str] = None

    @property
    def win_rate(self) -> int:
        """Percentage of played puzzles that were won, rounded."""
        if not self.played:
            return 0
        return int(self.wins / self.played * 100 + 0.5)

    @property
    def average_guesses(self) -> Optional[float]:
        """Mean guesses per win, one decimal place."""
        if not self.wins:
            return None
        return round(self.total_winning_guesses / self.wins, 1)

    def to_dict(self) -> dict:
        return {
            "currentStreak": self.current_streak,
            "distribution": {str(bucket): count for bucket, count in sorted(self.distribution.items())},
            "lastCompletedDate": self.last_completed_date,
            "maxStreak": self.max_streak,
            "played": self.played,
            "totalWinningGuesses": self.total_winning_guesses,
            "wins": self.wins,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StatsSnapshot":
        distribution = _empty_distribution()
        for bucket, count in (data.get("distribution") or {}).items():
            distribution[int(bucket)] = int(count)
        last_completed = data.get("lastCompletedDate")
        return cls(
            played=int(data.get("played", 0)),
            wins=int(data.get("wins", 0)),
            current_streak=int(data.get("currentStreak", 0)),
            max_streak=int(data.get("maxStreak", 0)),
            total_winning_guesses=int(data.get("totalWinningGuesses", 0)),
            distribution=distribution,
            last_completed_date=sanitize_date_key(last_completed),
        )


@dataclass
class SaveState:
    """The whole persisted document: per-date progress plus statistics."""
    puzzles: Dict[str, PuzzleProgress] = field(default_factory=dict)
    stats: StatsSnapshot = field(default_factory=StatsSnapshot)

    def to_dict(self) -> dict:
        return {
            "puzzles": {key: progress.to_dict() for key, progress in self.puzzles.items()},
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SaveState":
        if not isinstance(data, dict):
            raise TypeError(f"Save document must be an object, got {type(data).__name__}")
        return cls(
            puzzles={
                str(key): PuzzleProgress.from_dict(value)
                for key, value in (data.get("puzzles") or {}).items()
            },
            stats=StatsSnapshot.from_dict(data.get("stats") or {}),
        )


@dataclass(frozen=True)
class ActivePuzzle:
    """A puzzle opened in a session: the plan plus how it was reached."""
    key: str
    mode: PuzzleMode
    plan: PuzzlePlan
    display_date: str
    today_key: str

    @property
    def is_ranked(self) -> bool:
        return self.mode is PuzzleMode.DAILY


class RejectionReason(Enum):
    """Why a submission was refused."""
    ALREADY_COMPLETED = "already_completed"
    LENGTH_MISMATCH = "length_mismatch"
    NOT_ALLOWED = "not_allowed"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of submitting the current guess."""
    accepted: bool
    state: PuzzleState
    guess: str = ""
    evaluation: Tuple[LetterStatus, ...] = ()
    reason: Optional[RejectionReason] = None
    message: str = ""
