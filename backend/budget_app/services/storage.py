"""
Durable key-value storage scoped to one named store instance
"""
from typing import Any, Optional

from sqlalchemy.orm import Session, sessionmaker

from budget_app.core.logging_config import LoggingConfig
from budget_app.models.store_entry import StoreEntry

logger = LoggingConfig.get_logger(__name__)


class DurableStorage:
    """
    Key-value entries persisted in the `store_entries` table.

    Every entry belongs to `namespace`; two storages with different
    namespaces never see each other's keys. Values must be JSON-serializable.
    """

    def __init__(self, session_factory: sessionmaker, namespace: str):
        self._session_factory = session_factory
        self.namespace = namespace

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for `key`, or `default` if absent"""
        with self._session_factory() as db:
            entry = self._find(db, key)
            if entry is None:
                return default
            return entry.value

    def put(self, key: str, value: Any) -> None:
        """Insert or overwrite `key`"""
        with self._session_factory() as db:
            try:
                entry = self._find(db, key)
                if entry is None:
                    db.add(StoreEntry(namespace=self.namespace, key=key, value=value))
                else:
                    entry.value = value
                db.commit()
            except Exception:
                db.rollback()
                logger.error(
                    "Failed to persist store entry",
                    exc_info=True,
                    extra={"namespace": self.namespace, "key": key},
                )
                raise

    def _find(self, db: Session, key: str) -> Optional[StoreEntry]:
        return db.get(StoreEntry, (self.namespace, key))
