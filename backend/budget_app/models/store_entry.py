"""
Database model for durable key-value entries
"""
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from budget_app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreEntry(Base):
    """One key/value pair owned by a named store instance"""
    __tablename__ = "store_entries"

    namespace = Column(String(128), primary_key=True)  # logical store name, e.g. "chapter"
    key = Column(String(128), primary_key=True)
    value = Column(JSON, nullable=True)

    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<StoreEntry(namespace='{self.namespace}', key='{self.key}')>"
