"""Tracker record models: jobs, contacts, companies, tasks and their notes.

Records are plain dataclasses with snake_case attributes. The persisted and
exported JSON form keeps the camelCase keys the tracker has always written
(``dateApplied``, ``notesList``, ``relatedTo`` ...). Keys this version does
not know about are carried in ``extra`` so a load/save cycle never drops
data written by another revision of the schema.
"""

from dataclasses import MISSING, dataclass, field, fields
from typing import ClassVar, Optional

from job_tracker.errors import ValidationError

# Pipeline statuses, in funnel order
JOB_STATUSES = (
    "applied",
    "hr-screen",
    "recruiter-call",
    "hiring-manager",
    "team-interview",
    "final-interview",
    "on-site",
    "offered",
    "offer-accepted",
    "offer-declined",
    "rejected",
    "pending-visa",
    "withdrawn",
)

# Statuses from the original five-value set that the pipeline set dropped
LEGACY_JOB_STATUSES = ("interviewing", "accepted")

INTERVIEW_STATUSES = (
    "hr-screen",
    "recruiter-call",
    "hiring-manager",
    "team-interview",
    "final-interview",
    "on-site",
)
CLOSED_STATUSES = ("rejected", "withdrawn", "offer-accepted", "offer-declined")
OFFER_STATUSES = ("offered", "offer-accepted", "offer-declined")

TASK_STATUSES = ("pending", "completed")
TASK_PRIORITIES = ("low", "medium", "high")
TASK_TYPES = ("call", "meeting", "follow-up", "research", "application", "other")
CALL_TASK_TYPES = ("call", "meeting")

NOTE_TYPES = ("general", "interview", "follow-up", "research", "update")
RELATED_TYPES = ("job", "contact", "company")


def _json_key(f) -> str:
    return f.metadata.get("json", f.name)


class JsonRecord:
    """Mixin giving a dataclass camelCase JSON conversion."""

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dict, omitting absent optionals."""
        data = {}
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "notes_list":
                value = [note.to_dict() for note in value]
            elif f.name == "related_to":
                value = value.to_dict()
            data[_json_key(f)] = value
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict):
        """Build a record from its JSON form.

        Raises ValidationError when a key without a default is missing.
        """
        if not isinstance(data, dict):
            raise ValidationError(f"{cls.__name__} must be a JSON object, got {type(data).__name__}")

        kwargs = {}
        known = set()
        for f in fields(cls):
            if f.name == "extra":
                continue
            key = _json_key(f)
            known.add(key)
            if key not in data:
                if _is_required(f):
                    raise ValidationError(f"{cls.__name__} is missing required key '{key}'")
                continue
            value = data[key]
            if f.name == "notes_list" and value is not None:
                value = [Note.from_dict(item) for item in value]
            elif f.name == "related_to" and value is not None:
                value = RelatedRef.from_dict(value)
            kwargs[f.name] = value

        kwargs["extra"] = {k: v for k, v in data.items() if k not in known}
        return cls(**kwargs)


def _is_required(f) -> bool:
    return f.default is MISSING and f.default_factory is MISSING


@dataclass(frozen=True)
class Note(JsonRecord):
    """An immutable, timestamped entry in a record's note ledger."""

    id: str
    content: str
    timestamp: str
    type: Optional[str] = None
    extra: dict = field(default_factory=dict)

    @property
    def note_type(self) -> str:
        # Notes written before types existed read as general
        return self.type or "general"


@dataclass(frozen=True)
class RelatedRef(JsonRecord):
    """Typed weak reference from a task to a job, contact or company."""

    type: str
    id: str
    extra: dict = field(default_factory=dict)


@dataclass
class Job(JsonRecord):
    """A job application."""

    collection: ClassVar[str] = "jobs"

    id: str
    title: str
    company: str
    location: str
    status: str
    date_applied: str = field(metadata={"json": "dateApplied"})
    description: Optional[str] = None
    salary: Optional[str] = None
    notes: Optional[str] = None  # legacy free-text notes
    notes_list: Optional[list[Note]] = field(default=None, metadata={"json": "notesList"})
    extra: dict = field(default_factory=dict)


@dataclass
class Contact(JsonRecord):
    """A person met during the search, linked to a company by name."""

    collection: ClassVar[str] = "contacts"

    id: str
    name: str
    company: str
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    notes: Optional[str] = None
    notes_list: Optional[list[Note]] = field(default=None, metadata={"json": "notesList"})
    extra: dict = field(default_factory=dict)


@dataclass
class Company(JsonRecord):
    """A company; its name is the natural key, compared case-insensitively."""

    collection: ClassVar[str] = "companies"

    id: str
    name: str
    website: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    notes_list: Optional[list[Note]] = field(default=None, metadata={"json": "notesList"})
    extra: dict = field(default_factory=dict)


@dataclass
class Task(JsonRecord):
    """A to-do item, optionally tied to a company name or a related record."""

    collection: ClassVar[str] = "tasks"

    id: str
    title: str
    status: str = "pending"
    priority: str = "medium"
    description: Optional[str] = None
    due_date: Optional[str] = field(default=None, metadata={"json": "dueDate"})
    type: Optional[str] = None
    company: Optional[str] = None
    related_to: Optional[RelatedRef] = field(default=None, metadata={"json": "relatedTo"})
    post_call_notes: Optional[str] = field(default=None, metadata={"json": "postCallNotes"})
    completed_date: Optional[str] = field(default=None, metadata={"json": "completedDate"})
    extra: dict = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


RECORD_TYPES = {cls.collection: cls for cls in (Job, Contact, Company, Task)}

# Collections whose records carry a note ledger
NOTED_COLLECTIONS = ("jobs", "contacts", "companies")
