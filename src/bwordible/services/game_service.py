"""Game session: resolves today, opens puzzles and drives guessing."""
import logging
from datetime import UTC, datetime
from typing import Dict, List, Optional, Tuple

from bwordible.config import settings
from bwordible.models.puzzle_models import (
    ActivePuzzle,
    DayStatus,
    LetterStatus,
    PuzzleMode,
    PuzzleProgress,
    RejectionReason,
    SubmissionResult,
)
from bwordible.monitoring import (
    guesses_rejected,
    guesses_submitted,
    puzzles_completed,
    puzzles_opened,
)
from bwordible.services.calendar_service import (
    InvalidDateKeyError,
    compare_date_keys,
    date_key_for,
    day_distance,
    format_for_display,
    parse_date_key,
    sanitize_date_key,
    seconds_until_next_day,
    shift_date_key,
)
from bwordible.services.evaluation_service import evaluate_guess, keyboard_statuses, share_row
from bwordible.services.ledger_service import Ledger
from bwordible.services.puzzle_service import WordCorpus, select_puzzle
from bwordible.services.storage_service import SaveStore

logger = logging.getLogger(__name__)

GAME_TITLE = "bWORDibLE"


class GameSession:
    """One player's session over a loaded corpus and save store.

    The save is loaded once here and written back after every mutation.
    """

    def __init__(
        self,
        corpus: WordCorpus,
        store: SaveStore,
        simulated_today: Optional[str] = None,
        now: Optional[datetime] = None,
        time_zone: Optional[str] = None,
        start_date_key: Optional[str] = None,
        base_seed: Optional[str] = None,
    ):
        """Initialize the session and resolve today's date key."""
        self.corpus = corpus
        self.store = store
        self.time_zone = time_zone or settings.puzzle.time_zone
        self.start_date_key = start_date_key or settings.puzzle.start_date
        self.base_seed = base_seed or settings.puzzle.base_seed
        self.ledger = Ledger(store.load())

        self.simulated_today = sanitize_date_key(simulated_today)
        if simulated_today is not None and self.simulated_today is None:
            logger.warning(f"Ignoring invalid simulated today {simulated_today!r}")
        self.today_key = self.simulated_today or date_key_for(now or datetime.now(UTC), self.time_zone)
        self.puzzle: Optional[ActivePuzzle] = None
        logger.info(f"Session started for {self.today_key} ({self.time_zone})")

    # Date resolution

    @property
    def max_archive_date_key(self) -> Optional[str]:
        """Latest released date, or None before launch."""
        if compare_date_keys(self.today_key, self.start_date_key) >= 0:
            return self.today_key
        return None

    def resolve_mode(self, date_key: str) -> PuzzleMode:
        if compare_date_keys(self.today_key, self.start_date_key) < 0 and date_key == self.today_key:
            return PuzzleMode.PREVIEW
        return PuzzleMode.DAILY if date_key == self.today_key else PuzzleMode.ARCHIVE

    def normalize_requested_date_key(self, raw_date_key: Optional[str]) -> str:
        """Map a requested date to a playable one; anything unplayable becomes today."""
        try:
            parse_date_key(raw_date_key)
        except InvalidDateKeyError:
            if raw_date_key is not None:
                logger.warning(f"Invalid requested date {raw_date_key!r}, using today")
            return self.today_key

        if raw_date_key == self.today_key:
            return raw_date_key

        max_key = self.max_archive_date_key
        if max_key is None:
            return self.today_key
        if (
            compare_date_keys(raw_date_key, self.start_date_key) < 0
            or compare_date_keys(raw_date_key, max_key) > 0
        ):
            logger.info(f"Requested date {raw_date_key} is outside the archive, using today")
            return self.today_key
        return raw_date_key

    # Puzzle lifecycle

    def open_puzzle(self, date_key: Optional[str] = None) -> ActivePuzzle:
        """Open the puzzle for a requested date (default today)."""
        key = self.normalize_requested_date_key(date_key)
        mode = self.resolve_mode(key)
        selection_key = self.today_key if mode is PuzzleMode.PREVIEW else key
        plan = select_puzzle(self.corpus.answers, selection_key, self.start_date_key, self.base_seed)

        self.puzzle = ActivePuzzle(
            key=key,
            mode=mode,
            plan=plan,
            display_date=format_for_display(key, self.time_zone),
            today_key=self.today_key,
        )

        _, created = self.ledger.ensure_progress(key)
        if created:
            self.persist()
        puzzles_opened.labels(mode=mode.value).inc()
        logger.info(f"Opened {mode.value} puzzle for {key}: {plan.length} letters, {plan.max_guesses} guesses")
        return self.puzzle

    def _require_puzzle(self) -> ActivePuzzle:
        if self.puzzle is None:
            raise RuntimeError("No puzzle is open")
        return self.puzzle

    @property
    def progress(self) -> PuzzleProgress:
        progress, _ = self.ledger.ensure_progress(self._require_puzzle().key)
        return progress

    def persist(self) -> None:
        self.store.persist(self.ledger.state)

    def add_letter(self, letter: str) -> bool:
        """Append a letter to the pending guess; False when ignored."""
        letter = letter.upper()
        if len(letter) != 1 or not ("A" <= letter <= "Z"):
            return False

        progress = self.progress
        if progress.completed or len(progress.current_guess) >= self._require_puzzle().plan.length:
            return False

        progress.current_guess += letter
        self.persist()
        return True

    def backspace(self) -> bool:
        """Remove the last pending letter; False when there is nothing to remove."""
        progress = self.progress
        if progress.completed or not progress.current_guess:
            return False

        progress.current_guess = progress.current_guess[:-1]
        self.persist()
        return True

    def _reject(self, reason: RejectionReason, message: str, guess: str = "") -> SubmissionResult:
        guesses_rejected.labels(reason=reason.value).inc()
        logger.debug(f"Rejected submission: {reason.value}")
        return SubmissionResult(
            accepted=False,
            state=self.progress.state,
            guess=guess,
            reason=reason,
            message=message,
        )

    def submit_guess(self, word: Optional[str] = None) -> SubmissionResult:
        """Submit the pending guess, or ``word`` typed in one go."""
        puzzle = self._require_puzzle()
        plan = puzzle.plan
        progress = self.progress

        if progress.completed:
            return self._reject(RejectionReason.ALREADY_COMPLETED, "This puzzle is already finished.")

        guess = (progress.current_guess if word is None else word.strip()).upper()
        if len(guess) != plan.length or not (guess.isascii() and guess.isalpha()):
            return self._reject(RejectionReason.LENGTH_MISMATCH, f"Enter a {plan.length}-letter word.", guess)

        if guess != plan.answer and not self.corpus.is_allowed(guess, plan.length):
            return self._reject(RejectionReason.NOT_ALLOWED, "Word not in the allowed list.", guess)

        progress.guesses.append(guess)
        progress.current_guess = ""
        guesses_submitted.inc()

        if guess == plan.answer:
            progress.completed = True
            progress.won = True
            if puzzle.is_ranked:
                self.ledger.record_stats(puzzle.key, len(progress.guesses))
        elif len(progress.guesses) >= plan.max_guesses:
            progress.completed = True
            progress.won = False
            if puzzle.is_ranked:
                self.ledger.record_stats(puzzle.key, None)

        self.persist()

        if progress.completed:
            puzzles_completed.labels(mode=puzzle.mode.value, result=progress.state.value).inc()
            logger.info(f"Puzzle {puzzle.key} finished: {progress.state.value} in {len(progress.guesses)}")

        return SubmissionResult(
            accepted=True,
            state=progress.state,
            guess=guess,
            evaluation=tuple(evaluate_guess(guess, plan.answer)),
            message=self.status_message(),
        )

    # Read-only views

    def keyboard_statuses(self) -> Dict[str, LetterStatus]:
        return keyboard_statuses(self.progress.guesses, self._require_puzzle().plan.answer)

    def board(self) -> List[Tuple[str, List[LetterStatus]]]:
        """Submitted guesses paired with their evaluations."""
        answer = self._require_puzzle().plan.answer
        return [(guess, evaluate_guess(guess, answer)) for guess in self.progress.guesses]

    def status_message(self) -> str:
        puzzle = self._require_puzzle()
        progress = self.progress
        plan = puzzle.plan

        if not progress.completed:
            if puzzle.mode is PuzzleMode.ARCHIVE:
                return "Replay the released Bible-themed puzzle."
            return "Guess the Bible-themed word."

        prefix = {
            PuzzleMode.DAILY: "",
            PuzzleMode.ARCHIVE: "Archive ",
            PuzzleMode.PREVIEW: "Preview ",
        }[puzzle.mode]
        if progress.won:
            solved = f"{prefix}solved" if prefix else "Solved"
            return f"{solved} in {len(progress.guesses)}/{plan.max_guesses}."
        if prefix:
            return f"{prefix}complete. The answer was {plan.answer}."
        return f"No more guesses. The answer was {plan.answer}."

    def share_text(self) -> Optional[str]:
        """Spoiler-free result grid, or None until the puzzle is finished."""
        puzzle = self._require_puzzle()
        progress = self.progress
        if not progress.completed:
            return None

        plan = puzzle.plan
        result = f"{len(progress.guesses)}/{plan.max_guesses}" if progress.won else f"X/{plan.max_guesses}"
        mode_label = {
            PuzzleMode.DAILY: "",
            PuzzleMode.ARCHIVE: " Archive",
            PuzzleMode.PREVIEW: " Preview",
        }[puzzle.mode]
        lines = [f"{GAME_TITLE}{mode_label} {puzzle.display_date} {result}"]
        lines.extend(share_row(guess, plan.answer) for guess in progress.guesses)
        return "\n".join(lines)

    def displayed_current_streak(self) -> int:
        return self.ledger.displayed_current_streak(self.today_key, self.start_date_key)

    def stats_summary(self) -> dict:
        """Figures shown on the statistics panel."""
        stats = self.ledger.stats
        return {
            "played": stats.played,
            "wins": stats.wins,
            "win_rate": stats.win_rate,
            "current_streak": self.displayed_current_streak(),
            "max_streak": stats.max_streak,
            "average_guesses": stats.average_guesses,
            "distribution": dict(sorted(stats.distribution.items())),
        }

    def day_status(self, date_key: str) -> DayStatus:
        if compare_date_keys(date_key, self.start_date_key) < 0:
            return DayStatus.EMPTY

        max_key = self.max_archive_date_key
        if max_key is None or compare_date_keys(date_key, max_key) > 0:
            return DayStatus.EMPTY

        progress = self.ledger.get_progress(date_key)
        if progress is not None and progress.completed:
            return DayStatus.WON if progress.won else DayStatus.LOST

        if date_key == self.today_key:
            return DayStatus.TODAY
        return DayStatus.MISSED if compare_date_keys(date_key, self.today_key) < 0 else DayStatus.TODAY

    def activity_calendar(self, total_days: Optional[int] = None) -> List[Tuple[str, DayStatus]]:
        """Statuses for the trailing window of days ending today."""
        total_days = total_days or settings.puzzle.calendar_window_days
        first_key = shift_date_key(self.today_key, -(total_days - 1))
        return [
            (key, self.day_status(key))
            for key in (shift_date_key(first_key, offset) for offset in range(total_days))
        ]

    def released_puzzle_count(self) -> int:
        """Number of dates playable in the archive so far."""
        max_key = self.max_archive_date_key
        if max_key is None:
            return 0
        return day_distance(max_key, self.start_date_key) + 1

    def seconds_until_next_puzzle(self, now: Optional[datetime] = None) -> Optional[int]:
        """Countdown to the next daily puzzle; None outside ranked play."""
        if self.puzzle is None or self.puzzle.mode is not PuzzleMode.DAILY:
            return None
        return seconds_until_next_day(now or datetime.now(UTC), self.time_zone)
