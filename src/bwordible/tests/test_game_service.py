"""Tests for the game session."""
from datetime import UTC, datetime

import pytest
from sqlalchemy.orm import Session

from bwordible.models.models import SaveDocument
from bwordible.models.puzzle_models import (
    DayStatus,
    LetterStatus,
    PuzzleMode,
    PuzzleState,
    RejectionReason,
)
from bwordible.services.calendar_service import shift_date_key
from bwordible.services.game_service import GameSession
from bwordible.services.puzzle_service import OutOfAnswersError, WordCorpus, select_puzzle
from bwordible.services.storage_service import SaveStore
from conftest import BASE_SEED, START_DATE


def new_session(corpus: WordCorpus, store: SaveStore, today: str, **kwargs) -> GameSession:
    return GameSession(
        corpus,
        store,
        simulated_today=today,
        time_zone="America/New_York",
        start_date_key=START_DATE,
        base_seed=BASE_SEED,
        **kwargs,
    )


def wrong_guess(session: GameSession) -> str:
    """An allowed word that is not today's answer."""
    return "CRANE" if session.puzzle.plan.answer != "CRANE" else "SLATE"


def test_end_to_end_ranked_win(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test solving the opening ranked puzzle in one guess."""
    session = new_session(small_corpus, store, START_DATE)
    puzzle = session.open_puzzle()

    assert puzzle.mode is PuzzleMode.DAILY
    assert puzzle.is_ranked
    assert puzzle.plan.length == 5
    assert puzzle.plan.max_guesses == 7
    assert puzzle.plan.answer in small_corpus.answers

    result = session.submit_guess(puzzle.plan.answer)

    assert result.accepted
    assert result.state is PuzzleState.WON
    assert result.evaluation == (LetterStatus.CORRECT,) * 5
    assert session.progress.completed and session.progress.won
    stats = session.ledger.stats
    assert stats.played == 1
    assert stats.wins == 1
    assert stats.current_streak == 1
    assert session.displayed_current_streak() == 1

    reloaded = store.load()
    assert reloaded.stats.wins == 1
    assert reloaded.puzzles[START_DATE].won is True


def test_ranked_win_after_malformed_saved_date(small_corpus: WordCorpus, db: Session, store: SaveStore) -> None:
    """Test that a foreign last completed date does not block recording a win."""
    db.add(SaveDocument(storage_key="test-save", payload='{"stats": {"lastCompletedDate": "2026-3-1"}}'))
    db.commit()
    today = shift_date_key(START_DATE, 1)
    session = new_session(small_corpus, store, today)
    puzzle = session.open_puzzle()

    result = session.submit_guess(puzzle.plan.answer)

    assert result.accepted
    assert result.state is PuzzleState.WON
    stats = session.ledger.stats
    assert stats.wins == 1
    assert stats.current_streak == 1
    assert stats.last_completed_date == today

    reloaded = store.load()
    assert reloaded.stats.wins == 1
    assert reloaded.stats.last_completed_date == today
    assert reloaded.puzzles[today].won is True


def test_opening_creates_and_persists_progress(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test lazy creation of the day's progress record."""
    session = new_session(small_corpus, store, START_DATE)
    session.open_puzzle()
    assert START_DATE in store.load().puzzles
    assert session.progress.state is PuzzleState.UNSTARTED


def test_typing_letters(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the pending guess editor."""
    session = new_session(small_corpus, store, START_DATE)
    session.open_puzzle()

    assert session.add_letter("r")
    assert session.progress.state is PuzzleState.IN_PROGRESS
    assert not session.add_letter("1")
    assert not session.add_letter("AB")
    for letter in "IVER":
        assert session.add_letter(letter)
    assert not session.add_letter("S")
    assert session.progress.current_guess == "RIVER"
    assert store.load().puzzles[START_DATE].current_guess == "RIVER"

    assert session.backspace()
    assert session.progress.current_guess == "RIVE"


def test_backspace_on_empty_guess(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test that there is nothing to delete at first."""
    session = new_session(small_corpus, store, START_DATE)
    session.open_puzzle()
    assert not session.backspace()


def test_submit_pending_letters(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test submitting letters typed one at a time."""
    session = new_session(small_corpus, store, START_DATE)
    session.open_puzzle()
    guess = wrong_guess(session)
    for letter in guess:
        session.add_letter(letter)

    result = session.submit_guess()

    assert result.accepted
    assert result.guess == guess
    assert session.progress.guesses == [guess]
    assert session.progress.current_guess == ""


def test_rejections_leave_board_unchanged(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test length and dictionary rejections."""
    session = new_session(small_corpus, store, START_DATE)
    session.open_puzzle()

    short = session.submit_guess("ARK")
    assert not short.accepted
    assert short.reason is RejectionReason.LENGTH_MISMATCH
    assert short.message == "Enter a 5-letter word."

    unknown = session.submit_guess("ZZZZZ")
    assert not unknown.accepted
    assert unknown.reason is RejectionReason.NOT_ALLOWED

    symbols = session.submit_guess("R1VER")
    assert symbols.reason is RejectionReason.LENGTH_MISMATCH

    assert session.progress.guesses == []
    assert session.progress.state is PuzzleState.UNSTARTED


def test_answers_are_always_accepted(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test that other answers are not automatically allowed, but the answer is."""
    session = new_session(small_corpus, store, START_DATE)
    plan = session.open_puzzle().plan
    other = next(word for word in small_corpus.answers if word != plan.answer)

    assert session.submit_guess(other).reason is RejectionReason.NOT_ALLOWED
    assert session.submit_guess(plan.answer.lower()).accepted


def test_ranked_loss(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test running out of guesses."""
    session = new_session(small_corpus, store, START_DATE)
    plan = session.open_puzzle().plan
    guess = wrong_guess(session)

    for _ in range(plan.max_guesses - 1):
        assert session.submit_guess(guess).state is PuzzleState.IN_PROGRESS
    result = session.submit_guess(guess)

    assert result.state is PuzzleState.LOST
    assert session.ledger.stats.played == 1
    assert session.ledger.stats.wins == 0
    assert session.ledger.stats.current_streak == 0
    assert session.status_message() == f"No more guesses. The answer was {plan.answer}."

    finished = session.submit_guess(plan.answer)
    assert finished.reason is RejectionReason.ALREADY_COMPLETED
    assert not session.add_letter("A")
    assert len(session.progress.guesses) == plan.max_guesses


def test_streak_across_days(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test ranked wins on consecutive days with fresh sessions."""
    for today in ["2026-03-01", "2026-03-02"]:
        session = new_session(small_corpus, store, today)
        session.open_puzzle()
        session.submit_guess(session.puzzle.plan.answer)

    assert session.ledger.stats.current_streak == 2
    assert session.ledger.stats.max_streak == 2

    later = new_session(small_corpus, store, "2026-03-03")
    assert later.displayed_current_streak() == 2
    assert new_session(small_corpus, store, "2026-03-04").displayed_current_streak() == 0


def test_archive_play_does_not_touch_stats(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test replaying a released date."""
    session = new_session(small_corpus, store, "2026-03-03")
    puzzle = session.open_puzzle("2026-03-01")

    assert puzzle.mode is PuzzleMode.ARCHIVE
    assert not puzzle.is_ranked
    assert puzzle.plan == select_puzzle(small_corpus.answers, "2026-03-01", START_DATE, BASE_SEED)

    session.submit_guess(puzzle.plan.answer)

    assert session.progress.won
    assert session.ledger.stats.played == 0
    assert session.status_message() == f"Archive solved in 1/{puzzle.plan.max_guesses}."
    assert session.seconds_until_next_puzzle() is None


def test_preview_before_launch(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the pre-launch preview puzzle."""
    session = new_session(small_corpus, store, "2026-02-20")
    puzzle = session.open_puzzle()

    assert puzzle.key == "2026-02-20"
    assert puzzle.mode is PuzzleMode.PREVIEW
    assert puzzle.plan == select_puzzle(small_corpus.answers, START_DATE, START_DATE, BASE_SEED)
    assert session.max_archive_date_key is None
    assert session.released_puzzle_count() == 0

    session.submit_guess(puzzle.plan.answer)
    assert session.ledger.stats.played == 0
    assert session.displayed_current_streak() == 0
    assert session.status_message().startswith("Preview solved")


@pytest.mark.parametrize(
    "requested,expected",
    [
        (None, "2026-03-03"),
        ("2026-02-30", "2026-03-03"),
        ("yesterday", "2026-03-03"),
        ("2026-02-28", "2026-03-03"),
        ("2026-03-04", "2026-03-03"),
        ("2026-03-01", "2026-03-01"),
        ("2026-03-03", "2026-03-03"),
    ],
)
def test_requested_date_normalization(small_corpus: WordCorpus, store: SaveStore, requested, expected) -> None:
    """Test fallback to today for unplayable requests."""
    session = new_session(small_corpus, store, "2026-03-03")
    assert session.normalize_requested_date_key(requested) == expected


def test_archive_locked_before_launch(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test that no archive date is reachable before launch."""
    session = new_session(small_corpus, store, "2026-02-20")
    assert session.normalize_requested_date_key("2026-03-01") == "2026-02-20"


def test_invalid_simulated_today_uses_clock(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the date override validation."""
    now = datetime(2026, 3, 3, 3, 0, tzinfo=UTC)  # 22:00 EST on Mar 2
    session = new_session(small_corpus, store, "2026-02-31", now=now)
    assert session.simulated_today is None
    assert session.today_key == "2026-03-02"


def test_share_text(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the shareable result."""
    session = new_session(small_corpus, store, START_DATE)
    plan = session.open_puzzle().plan
    assert session.share_text() is None

    session.submit_guess(plan.answer)

    assert session.share_text() == "bWORDibLE Mar 1, 2026 1/7\n⬛" + "\U0001F7E9" * 5


def test_keyboard_and_board(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the read-only views after a guess."""
    session = new_session(small_corpus, store, START_DATE)
    plan = session.open_puzzle().plan
    session.submit_guess(plan.answer)

    assert all(status is LetterStatus.CORRECT for status in session.keyboard_statuses().values())
    assert session.board() == [(plan.answer, [LetterStatus.CORRECT] * 5)]


def test_calendar_statuses(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the activity calendar window."""
    session = new_session(small_corpus, store, "2026-03-03")
    session.open_puzzle("2026-03-01")
    session.submit_guess(session.puzzle.plan.answer)

    calendar = session.activity_calendar(5)

    assert calendar == [
        ("2026-02-27", DayStatus.EMPTY),
        ("2026-02-28", DayStatus.EMPTY),
        ("2026-03-01", DayStatus.WON),
        ("2026-03-02", DayStatus.MISSED),
        ("2026-03-03", DayStatus.TODAY),
    ]
    assert session.day_status("2026-03-04") is DayStatus.EMPTY
    assert session.released_puzzle_count() == 3


def test_stats_summary(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the statistics panel figures."""
    session = new_session(small_corpus, store, START_DATE)
    plan = session.open_puzzle().plan
    session.submit_guess(wrong_guess(session))
    session.submit_guess(plan.answer)

    summary = session.stats_summary()

    assert summary["played"] == 1
    assert summary["wins"] == 1
    assert summary["win_rate"] == 100
    assert summary["current_streak"] == 1
    assert summary["max_streak"] == 1
    assert summary["average_guesses"] == 2.0
    assert summary["distribution"][2] == 1


def test_countdown_only_for_daily(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test the next-puzzle countdown."""
    session = new_session(small_corpus, store, START_DATE)
    session.open_puzzle()
    now = datetime(2026, 3, 2, 4, 0, tzinfo=UTC)  # 23:00 EST
    assert session.seconds_until_next_puzzle(now) == 3600


def test_corpus_too_small_for_date(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test that an exhausted corpus surfaces an error."""
    session = new_session(small_corpus, store, "2026-03-06")
    with pytest.raises(OutOfAnswersError):
        session.open_puzzle()


def test_actions_require_open_puzzle(small_corpus: WordCorpus, store: SaveStore) -> None:
    """Test that input before opening a puzzle is an error."""
    session = new_session(small_corpus, store, START_DATE)
    with pytest.raises(RuntimeError):
        session.submit_guess("RIVER")


if __name__ == "__main__":
    pytest.main([__file__])
