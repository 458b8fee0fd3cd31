"""Database models for the save store."""
from sqlalchemy import Column, Integer, String, Text

from bwordible.models.base import Base, TimestampMixin


class SaveDocument(Base, TimestampMixin):
    """One serialized save document per storage key."""

    __tablename__ = "save_documents"

    id = Column(Integer, primary_key=True)
    storage_key = Column(String, unique=True, nullable=False, index=True)
    payload = Column(Text, nullable=False)  # JSON: {"puzzles": {...}, "stats": {...}}
