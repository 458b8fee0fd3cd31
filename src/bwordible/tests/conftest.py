"""Test configuration."""
import os
from itertools import islice, product
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from sqlalchemy.orm import Session

from bwordible.models.base import SessionLocal, init_db
from bwordible.models.models import SaveDocument
from bwordible.services.puzzle_service import WordCorpus
from bwordible.services.storage_service import SaveStore

START_DATE = "2026-03-01"
BASE_SEED = "bwordible-v1"
SMALL_ANSWERS = ["RIVER", "TORAH", "MOSES", "FAITH", "GRACE"]
ALLOWED_GUESSES = {5: ["CRANE", "SLATE", "ERROR", "RAVEN", "EERIE"]}


def generated_words(count: int, length: int = 5) -> list[str]:
    """Distinct uppercase pseudo-words, enough to cover a whole cycle."""
    return ["".join(letters) for letters in islice(product("ABCDEFGHIJ", repeat=length), count)]


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.query(SaveDocument).delete()
        db.commit()
        db.close()


@pytest.fixture
def store(db: Session) -> SaveStore:
    """Create a save store on the test database."""
    return SaveStore(db, "test-save")


@pytest.fixture
def small_corpus() -> WordCorpus:
    """Five answers plus a handful of allowed guesses."""
    return WordCorpus.from_entries(SMALL_ANSWERS, ALLOWED_GUESSES)


@pytest.fixture
def cycle_corpus() -> WordCorpus:
    """Enough answers to cover a leap-year cycle."""
    return WordCorpus.from_entries(generated_words(400))
