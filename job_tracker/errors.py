"""Exceptions raised by the tracker core."""


class ValidationError(ValueError):
    """A record or patch failed validation; nothing was mutated."""


class DuplicateIdError(ValueError):
    """A record with the same id already exists in its collection."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"Duplicate id in {kind}: {record_id}")
        self.kind = kind
        self.record_id = record_id


class ImportFormatError(ValueError):
    """An import document is not a valid Job Tracker export."""


class StorageError(RuntimeError):
    """A persisted slot holds something other than a JSON array."""
