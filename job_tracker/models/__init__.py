"""ORM models for the persisted storage slots."""

from .base import Base, create_db_engine, create_session_factory, normalize_database_url
from .storage_slot import StorageSlot

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "normalize_database_url",
    "StorageSlot",
]
