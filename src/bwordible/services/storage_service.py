"""Service for loading and persisting the save document."""
import json
import logging

from sqlalchemy.orm import Session

from bwordible.models.models import SaveDocument
from bwordible.models.puzzle_models import SaveState
from bwordible.monitoring import save_load_failures

logger = logging.getLogger(__name__)


def serialize_save(state: SaveState) -> str:
    """Serialize a save document to JSON text."""
    return json.dumps(state.to_dict(), sort_keys=True)


def deserialize_save(payload: str) -> SaveState:
    """Parse JSON text into a save document, backfilling missing fields."""
    return SaveState.from_dict(json.loads(payload))


class SaveStore:
    """Read and write the whole save document under one storage key."""

    def __init__(self, db: Session, storage_key: str):
        """Initialize the store with a database session."""
        self.db = db
        self.storage_key = storage_key

    def _get_document(self):
        return (
            self.db.query(SaveDocument)
            .filter(SaveDocument.storage_key == self.storage_key)
            .first()
        )

    def load(self) -> SaveState:
        """Load the save; a missing or unreadable document yields an empty save."""
        document = self._get_document()
        if document is None:
            return SaveState()

        try:
            return deserialize_save(document.payload)
        except (json.JSONDecodeError, TypeError, ValueError, KeyError, AttributeError) as e:
            logger.warning(f"Failed to load saved game state for {self.storage_key}: {e}")
            save_load_failures.inc()
            return SaveState()

    def persist(self, state: SaveState) -> None:
        """Write the whole document back."""
        payload = serialize_save(state)
        document = self._get_document()
        if document is None:
            document = SaveDocument(storage_key=self.storage_key, payload=payload)
            self.db.add(document)
        else:
            document.payload = payload
        self.db.commit()
        logger.debug(f"Persisted save {self.storage_key} ({len(state.puzzles)} puzzles)")

    def clear(self) -> None:
        """Delete the stored document."""
        self.db.query(SaveDocument).filter(SaveDocument.storage_key == self.storage_key).delete()
        self.db.commit()
