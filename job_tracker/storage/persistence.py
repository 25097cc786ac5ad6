"""Writes store changes through to the slot store."""

import json
import logging
from contextlib import contextmanager
from typing import Callable, Optional

from job_tracker.storage.slots import DEFAULT_KEY_PREFIX, slot_key

logger = logging.getLogger("job_tracker.persistence")


def serialize_collection(records) -> str:
    return json.dumps([record.to_dict() for record in records], ensure_ascii=False)


class PersistenceAdapter:
    """Persists each changed collection to its slot.

    Writes happen right after a mutation, or once at the end of a
    ``batch()`` block. A failed write never reaches the caller of the
    mutation: it is logged, handed to ``on_error`` and the collection stays
    pending so the next flush retries it.
    """

    def __init__(
        self,
        slots,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._slots = slots
        self._key_prefix = key_prefix
        self._on_error = on_error
        self._pending: dict[str, tuple] = {}
        self._batch_depth = 0
        self.last_error: Optional[Exception] = None

    def attach(self, store) -> "PersistenceAdapter":
        store.subscribe(self.on_change)
        return self

    @property
    def pending(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def on_change(self, name: str, records: tuple):
        self._pending[name] = records
        if self._batch_depth == 0:
            self.flush()

    @contextmanager
    def batch(self):
        """Defer writes until the outermost batch block exits."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self.flush()

    def flush(self) -> bool:
        """Write every pending collection. Returns False if the write failed."""
        if not self._pending:
            return True

        items = {
            slot_key(name, self._key_prefix): serialize_collection(records)
            for name, records in self._pending.items()
        }
        try:
            self._slots.set_many(items)
        except Exception as e:
            self.last_error = e
            logger.error("Failed to persist %s: %s", ", ".join(self._pending), e)
            if self._on_error is not None:
                self._on_error(e)
            return False

        logger.debug("Persisted %s", ", ".join(self._pending))
        self._pending.clear()
        self.last_error = None
        return True
