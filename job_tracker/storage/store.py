"""In-memory tracker store for jobs, contacts, companies and tasks."""

import json
import logging
from dataclasses import fields, replace
from datetime import date
from typing import Callable, Optional

from job_tracker.errors import DuplicateIdError, StorageError, ValidationError
from job_tracker.records.models import (
    NOTED_COLLECTIONS,
    RECORD_TYPES,
    Company,
    Contact,
    Job,
    Note,
    RelatedRef,
    Task,
)
from job_tracker.records.validation import validate_record
from job_tracker.storage.notes import append_note, mint_note
from job_tracker.storage.reconcile import company_to_create, find_company
from job_tracker.storage.slots import DEFAULT_KEY_PREFIX, slot_key

logger = logging.getLogger("job_tracker.store")

# Called with (collection kind, full collection) after every change to it
ChangeListener = Callable[[str, tuple], None]

# Fields an update patch may never touch
PROTECTED_FIELDS = {"id", "notes_list", "extra"}


class TrackerStore:
    """Owns the four record collections and every mutation on them.

    Jobs and contacts link to companies by free-text name. Creating or
    re-pointing one of them creates the missing Company record, so each
    company name in use has exactly one Company (compared ignoring case).
    """

    def __init__(self, jobs=(), contacts=(), companies=(), tasks=()):
        self._collections: dict[str, list] = {
            "jobs": list(jobs),
            "contacts": list(contacts),
            "companies": list(companies),
            "tasks": list(tasks),
        }
        self._listeners: list[ChangeListener] = []

    @classmethod
    def from_slots(cls, slots, key_prefix: str = DEFAULT_KEY_PREFIX) -> "TrackerStore":
        """Initialize from persisted slots. A missing slot is an empty collection."""
        loaded = {}
        for kind, record_cls in RECORD_TYPES.items():
            key = slot_key(kind, key_prefix)
            raw = slots.get(key)
            if raw is None:
                loaded[kind] = []
                continue
            try:
                items = json.loads(raw)
            except json.JSONDecodeError as e:
                raise StorageError(f"Slot '{key}' is not valid JSON: {e}") from e
            if not isinstance(items, list):
                raise StorageError(f"Slot '{key}' must hold a JSON array")
            try:
                loaded[kind] = [record_cls.from_dict(item) for item in items]
            except ValidationError as e:
                raise StorageError(f"Slot '{key}' holds an invalid record: {e}") from e

        logger.info(
            "Loaded %d jobs, %d contacts, %d companies, %d tasks",
            len(loaded["jobs"]),
            len(loaded["contacts"]),
            len(loaded["companies"]),
            len(loaded["tasks"]),
        )
        return cls(**loaded)

    # -- read access --------------------------------------------------------

    @property
    def jobs(self) -> tuple[Job, ...]:
        return tuple(self._collections["jobs"])

    @property
    def contacts(self) -> tuple[Contact, ...]:
        return tuple(self._collections["contacts"])

    @property
    def companies(self) -> tuple[Company, ...]:
        return tuple(self._collections["companies"])

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._collections["tasks"])

    def collection(self, kind: str) -> tuple:
        return tuple(self._records(kind))

    def get(self, kind: str, record_id: str):
        """Return the record with ``record_id``, or None."""
        for record in self._records(kind):
            if record.id == record_id:
                return record
        return None

    def find_company(self, name: str) -> Optional[Company]:
        """Case-insensitive lookup of a company by name."""
        return find_company(self._collections["companies"], name)

    def subscribe(self, listener: ChangeListener):
        self._listeners.append(listener)

    # -- mutations ----------------------------------------------------------

    def create(self, record):
        """Insert a new record and return it.

        Raises ValidationError or DuplicateIdError without mutating. An
        explicit Company whose name already exists (ignoring case) is not
        inserted and None is returned.
        """
        kind = self._collection_of(record)
        if isinstance(record, Task):
            if isinstance(record.related_to, dict):
                record = replace(record, related_to=RelatedRef.from_dict(record.related_to))
            record = _settle_completion(record)
        validate_record(record)
        if self.get(kind, record.id) is not None:
            raise DuplicateIdError(kind, record.id)

        if isinstance(record, Company) and self.find_company(record.name) is not None:
            logger.debug("Company '%s' already exists, not adding", record.name)
            return None

        self._collections[kind].append(record)
        logger.debug("Created %s %s", kind, record.id)
        self._changed(kind)

        if isinstance(record, (Job, Contact)):
            self._reconcile(record.company)
        return record

    def update(self, kind: str, record_id: str, /, **changes):
        """Merge ``changes`` into a record and return the updated record.

        Returns None when no record has ``record_id``. Fields not named in
        ``changes`` keep their values.
        """
        records = self._records(kind)
        index = self._index_of(records, record_id)
        if index is None:
            logger.debug("Update of unknown %s %s ignored", kind, record_id)
            return None

        current = records[index]
        _check_patch(current, changes)
        if "related_to" in changes and isinstance(changes["related_to"], dict):
            changes["related_to"] = RelatedRef.from_dict(changes["related_to"])

        updated = replace(current, **changes)
        if isinstance(updated, Task):
            updated = _settle_completion(updated)
        validate_record(updated)
        if isinstance(updated, Company):
            other = self.find_company(updated.name)
            if other is not None and other.id != updated.id:
                raise ValidationError(f"A company named '{other.name}' already exists")

        records[index] = updated
        logger.debug("Updated %s %s: %s", kind, record_id, ", ".join(sorted(changes)))
        self._changed(kind)

        if isinstance(updated, (Job, Contact)) and "company" in changes:
            self._reconcile(changes["company"])
        return updated

    def delete(self, kind: str, record_id: str) -> bool:
        """Remove a record. References to it elsewhere are left dangling.

        Returns False when no record has ``record_id``.
        """
        records = self._records(kind)
        index = self._index_of(records, record_id)
        if index is None:
            logger.debug("Delete of unknown %s %s ignored", kind, record_id)
            return False

        del records[index]
        logger.debug("Deleted %s %s", kind, record_id)
        self._changed(kind)
        return True

    def add_note(self, kind: str, parent_id: str, content: str, note_type: Optional[str] = None) -> Optional[Note]:
        """Append a new note to a job, contact or company ledger.

        Returns the note, or None when the parent does not exist.
        """
        if kind not in NOTED_COLLECTIONS:
            raise ValidationError(f"Records in '{kind}' do not carry notes")

        records = self._records(kind)
        index = self._index_of(records, parent_id)
        if index is None:
            logger.debug("Note for unknown %s %s ignored", kind, parent_id)
            return None

        note = mint_note(content, note_type)
        records[index] = append_note(records[index], note)
        logger.debug("Added %s note to %s %s", note.note_type, kind, parent_id)
        self._changed(kind)
        return note

    def toggle_task(self, task_id: str) -> Optional[Task]:
        """Flip a task between pending and completed."""
        task = self.get("tasks", task_id)
        if task is None:
            return None
        status = "pending" if task.is_completed else "completed"
        return self.update("tasks", task_id, status=status)

    # -- internals ----------------------------------------------------------

    def _records(self, kind: str) -> list:
        try:
            return self._collections[kind]
        except KeyError:
            raise ValidationError(f"Unknown collection '{kind}'") from None

    @staticmethod
    def _collection_of(record) -> str:
        kind = getattr(record, "collection", None)
        if kind not in RECORD_TYPES or not isinstance(record, RECORD_TYPES[kind]):
            raise ValidationError(f"Cannot store object of type {type(record).__name__}")
        return kind

    @staticmethod
    def _index_of(records: list, record_id: str) -> Optional[int]:
        for i, record in enumerate(records):
            if record.id == record_id:
                return i
        return None

    def _reconcile(self, company_name):
        company = company_to_create(self._collections["companies"], company_name)
        if company is not None:
            self._collections["companies"].append(company)
            self._changed("companies")

    def _changed(self, kind: str):
        snapshot = tuple(self._collections[kind])
        for listener in self._listeners:
            listener(kind, snapshot)


def _check_patch(record, changes: dict):
    allowed = {f.name for f in fields(record)} - PROTECTED_FIELDS
    for key in changes:
        if key in PROTECTED_FIELDS:
            raise ValidationError(f"Field '{key}' cannot be changed by update")
        if key not in allowed:
            raise ValidationError(f"{type(record).__name__} has no field '{key}'")


def _settle_completion(task: Task) -> Task:
    """Keep completed_date set exactly when the task is completed."""
    if task.is_completed and not task.completed_date:
        return replace(task, completed_date=date.today().isoformat())
    if not task.is_completed and task.completed_date is not None:
        return replace(task, completed_date=None)
    return task
