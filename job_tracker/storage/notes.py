"""Append-only note ledger attached to jobs, contacts and companies."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from job_tracker.records.models import Note
from job_tracker.records.validation import validate_note_input
from job_tracker.utils.text_processing import new_id


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def mint_note(content: str, note_type: Optional[str] = None, now: Optional[datetime] = None) -> Note:
    """Create a new note with a fresh id and the current time.

    Raises ValidationError for blank content or an unknown type.
    """
    content = validate_note_input(content, note_type)
    return Note(
        id=new_id(),
        content=content,
        timestamp=utc_timestamp(now),
        type=note_type or "general",
    )


def append_note(record, note: Note):
    """Return a copy of ``record`` with ``note`` appended to its ledger.

    Existing notes are shared with the copy, never rewritten.
    """
    return replace(record, notes_list=[*(record.notes_list or []), note])


def newest_first(notes) -> list[Note]:
    """Notes ordered for display, most recent first. Stored order is untouched."""
    return sorted(notes or [], key=lambda note: note.timestamp, reverse=True)
