"""Terminal entry point for the daily puzzle."""
import argparse
import logging
import sys
from typing import List, Optional

from bwordible.config import ensure_directories, settings
from bwordible.models.base import SessionLocal, init_db
from bwordible.models.puzzle_models import LetterStatus
from bwordible.monitoring import start_monitoring
from bwordible.services.evaluation_service import SHARE_SQUARES
from bwordible.services.game_service import GameSession
from bwordible.services.puzzle_service import WordCorpus
from bwordible.services.storage_service import SaveStore


logger = None

# Configure logging
def setup_logging(first_message: str = "", level: Optional[int] = None) -> None:
    """Configure logging for the entire application.

    Args:
        first_message: Banner line written once the handlers are in place.
        level: Optional logging level. If None, uses LOG_LEVEL.
    """
    global logger

    # Set default level if not provided
    if level is None:
        level = settings.logging.level
    if isinstance(level, str):
        level = logging.getLevelName(level)

    formatter = logging.Formatter(settings.logging.format)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console output goes to stderr so it does not mix with the board
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.info(f"{first_message}")
    root_logger.info(f"Logging configured with level: {logging.getLevelName(level)}")

    # Add file handler with rotation
    dir = settings.logging.dir
    if dir is not None:
        from pathlib import Path
        from logging.handlers import TimedRotatingFileHandler

        log_dir = Path(dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / "bwordible.log"
        file_handler = TimedRotatingFileHandler(
            log_file,
            when=settings.logging.rotation,
            interval=settings.logging.interval,
            backupCount=settings.logging.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.info(f"Log file: {log_file} (rotation: {settings.logging.rotation})")

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="bwordible", description="Play the daily word puzzle.")
    parser.add_argument("--today", help="Override today's date key (YYYY-MM-DD)")
    parser.add_argument("--date", help="Replay a released date from the archive (YYYY-MM-DD)")
    parser.add_argument("--stats", action="store_true", help="Show statistics and exit")
    return parser.parse_args(argv)


def render_row(guess: str, statuses: List[LetterStatus]) -> str:
    return f"{' '.join(guess)}   {''.join(SHARE_SQUARES[status] for status in statuses)}"


def print_stats(session: GameSession) -> None:
    summary = session.stats_summary()
    average = summary["average_guesses"]
    print(f"Played: {summary['played']}  Win %: {summary['win_rate']}  "
          f"Current streak: {summary['current_streak']}  Max streak: {summary['max_streak']}  "
          f"Average: {average if average is not None else '-'}")
    for guesses, count in summary["distribution"].items():
        print(f"  {guesses}: {count}")


def play(session: GameSession) -> None:
    """Read guesses from stdin until the puzzle is finished."""
    puzzle = session.puzzle
    label = {"daily": "Today's puzzle", "archive": "Archive puzzle", "preview": "Preview puzzle"}[puzzle.mode.value]
    print(f"{label}: {puzzle.display_date} | {puzzle.plan.length} letters | {puzzle.plan.max_guesses} guesses")

    for guess, statuses in session.board():
        print(render_row(guess, statuses))
    print(session.status_message())

    while not session.progress.completed:
        try:
            word = input("> ")
        except EOFError:
            print()
            return

        result = session.submit_guess(word)
        if not result.accepted:
            print(result.message)
            continue
        print(render_row(result.guess, list(result.evaluation)))

    print(session.status_message())
    print()
    print(session.share_text())


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    corpus = WordCorpus.from_files(settings.paths.answers_path, settings.paths.guesses_path)

    init_db()
    db = SessionLocal()
    try:
        store = SaveStore(db, settings.puzzle.storage_key)
        session = GameSession(corpus, store, simulated_today=args.today)
        if args.stats:
            print_stats(session)
            return 0

        session.open_puzzle(args.date)
        play(session)
        print()
        print_stats(session)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    ensure_directories()

    setup_logging("Starting bWORDibLE ...")

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics server listening on port {settings.monitoring.port}")

    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
