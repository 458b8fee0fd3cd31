"""Ledger owning per-date progress and lifetime statistics."""
import logging
from typing import Optional, Tuple

from bwordible.models.puzzle_models import PuzzleProgress, SaveState, StatsSnapshot
from bwordible.services.calendar_service import compare_date_keys, day_distance, shift_date_key

logger = logging.getLogger(__name__)


class Ledger:
    """Sole mutator of the save document.

    The stored ``current_streak`` only feeds ``max_streak``; what players
    see is ``displayed_current_streak``, recomputed from history so an
    unplayed today does not show a broken streak.
    """

    def __init__(self, state: Optional[SaveState] = None):
        """Initialize the ledger with a loaded save document."""
        self.state = state if state is not None else SaveState()

    @property
    def stats(self) -> StatsSnapshot:
        return self.state.stats

    def get_progress(self, date_key: str) -> Optional[PuzzleProgress]:
        """Get the progress record for a date, if it was ever visited."""
        return self.state.puzzles.get(date_key)

    def ensure_progress(self, date_key: str) -> Tuple[PuzzleProgress, bool]:
        """Get or lazily create the progress record; the flag tells if it was created."""
        progress = self.state.puzzles.get(date_key)
        if progress is not None:
            return progress, False
        progress = PuzzleProgress()
        self.state.puzzles[date_key] = progress
        logger.debug(f"Created progress record for {date_key}")
        return progress, True

    def is_won(self, date_key: str) -> bool:
        progress = self.state.puzzles.get(date_key)
        return progress is not None and progress.completed and progress.won

    def record_stats(self, date_key: str, winning_guesses: Optional[int]) -> bool:
        """Fold one completed ranked puzzle into the statistics.

        ``winning_guesses`` is None for a loss. Returns False without
        touching anything when the date was already recorded.
        """
        progress, _ = self.ensure_progress(date_key)
        if progress.stats_recorded:
            logger.debug(f"Stats already recorded for {date_key}")
            return False

        stats = self.state.stats
        stats.played += 1

        if winning_guesses:
            stats.wins += 1
            streak_continues = (
                stats.last_completed_date is not None
                and day_distance(date_key, stats.last_completed_date) == 1
            )
            stats.current_streak = stats.current_streak + 1 if streak_continues else 1
            stats.max_streak = max(stats.max_streak, stats.current_streak)
            stats.total_winning_guesses += winning_guesses
            stats.distribution[winning_guesses] = stats.distribution.get(winning_guesses, 0) + 1
        else:
            stats.current_streak = 0

        stats.last_completed_date = date_key
        progress.stats_recorded = True
        logger.info(
            f"Recorded {'win' if winning_guesses else 'loss'} for {date_key}: "
            f"played={stats.played}, wins={stats.wins}, streak={stats.current_streak}"
        )
        return True

    def displayed_current_streak(self, today_key: str, start_date_key: str) -> int:
        """Count consecutive won days ending today, or yesterday if today is not won yet."""
        if compare_date_keys(today_key, start_date_key) < 0:
            return 0

        cursor = today_key
        if not self.is_won(cursor):
            cursor = shift_date_key(cursor, -1)

        streak = 0
        while compare_date_keys(cursor, start_date_key) >= 0 and self.is_won(cursor):
            streak += 1
            cursor = shift_date_key(cursor, -1)
        return streak
