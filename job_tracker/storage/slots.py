"""String-keyed slot stores holding each collection as a JSON array.

The tracker keeps four independent slots, one per collection, under keys
such as ``jobTracker-jobs``. A slot store only needs ``get``, ``set`` and
``set_many``; the in-memory variant serves tests and throwaway sessions,
the SQL variant persists to SQLite (or any SQLAlchemy database).
"""

import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from job_tracker.models import Base, StorageSlot, create_db_engine, create_session_factory

logger = logging.getLogger("job_tracker.slots")

DEFAULT_KEY_PREFIX = "jobTracker-"
COLLECTIONS = ("jobs", "contacts", "companies", "tasks")


def slot_key(collection: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    return f"{prefix}{collection}"


class MemorySlotStore:
    """Dict-backed slot store."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value

    def set_many(self, items: dict):
        self._data.update(items)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqlSlotStore:
    """Slot store backed by the ``storage_slots`` table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str) -> "SqlSlotStore":
        engine = create_db_engine(database_url)
        Base.metadata.create_all(engine)
        return cls(create_session_factory(engine))

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            row = session.get(StorageSlot, key)
            return row.value if row else None

    def set(self, key: str, value: str):
        self.set_many({key: value})

    def set_many(self, items: dict):
        """Write several slots in one transaction: all land or none do."""
        with self._session_factory() as session:
            for key, value in items.items():
                row = session.get(StorageSlot, key)
                if row is None:
                    session.add(StorageSlot(key=key, value=value))
                else:
                    row.value = value
            session.commit()
        logger.debug("Wrote slots: %s", ", ".join(items))

    def keys(self) -> list[str]:
        with self._session_factory() as session:
            return sorted(row.key for row in session.query(StorageSlot).all())


def open_slot_store(backend: str = "sql", database_url: str = ""):
    """Build the slot store named by the storage config."""
    if backend == "memory":
        return MemorySlotStore()
    if backend == "sql":
        return SqlSlotStore.from_url(database_url)
    raise ValueError(f"Unknown storage backend: {backend}")
