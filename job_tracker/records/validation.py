"""Field checks applied before a record enters the store."""

from job_tracker.errors import ValidationError
from job_tracker.records.models import (
    JOB_STATUSES,
    LEGACY_JOB_STATUSES,
    NOTE_TYPES,
    RELATED_TYPES,
    TASK_PRIORITIES,
    TASK_STATUSES,
    TASK_TYPES,
    Company,
    Contact,
    Job,
    RelatedRef,
    Task,
)

# Required text fields per record type
REQUIRED_FIELDS = {
    Job: ("title", "company"),
    Contact: ("name",),
    Company: ("name",),
    Task: ("title",),
}


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def _check_choice(label: str, value, choices: tuple):
    if value not in choices:
        raise ValidationError(f"Unknown {label} '{value}' (expected one of: {', '.join(choices)})")


def validate_record(record) -> None:
    """Raise ValidationError if the record cannot be stored."""
    for name in REQUIRED_FIELDS.get(type(record), ()):
        if _is_blank(getattr(record, name)):
            raise ValidationError(f"{type(record).__name__} {name} is required")

    if not isinstance(record.id, str) or not record.id:
        raise ValidationError(f"{type(record).__name__} id must be a non-empty string")

    if isinstance(record, Job):
        _check_choice("job status", record.status, JOB_STATUSES + LEGACY_JOB_STATUSES)
    elif isinstance(record, Task):
        _check_choice("task status", record.status, TASK_STATUSES)
        _check_choice("task priority", record.priority, TASK_PRIORITIES)
        if record.type is not None:
            _check_choice("task type", record.type, TASK_TYPES)
        if record.related_to is not None:
            if not isinstance(record.related_to, RelatedRef):
                raise ValidationError("Task related_to must be a RelatedRef")
            _check_choice("related record type", record.related_to.type, RELATED_TYPES)


def validate_note_input(content, note_type) -> str:
    """Return the trimmed note content, or raise ValidationError."""
    if _is_blank(content):
        raise ValidationError("Note content is required")
    if note_type is not None:
        _check_choice("note type", note_type, NOTE_TYPES)
    return content.strip()
