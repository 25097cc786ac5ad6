"""Export document and import contract.

An export is a single JSON object holding the four collections plus
``exportDate`` and ``version``. Importing replaces all four slots at once;
the running store is not touched and has to be rebuilt from the slots.
"""

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from job_tracker.errors import ImportFormatError, ValidationError
from job_tracker.records.models import RECORD_TYPES
from job_tracker.storage.notes import utc_timestamp
from job_tracker.storage.slots import COLLECTIONS, DEFAULT_KEY_PREFIX, slot_key

logger = logging.getLogger("job_tracker.transfer")

EXPORT_VERSION = "1.0"


def build_export(store, now: Optional[datetime] = None) -> dict:
    document = {name: [record.to_dict() for record in store.collection(name)] for name in COLLECTIONS}
    document["exportDate"] = utc_timestamp(now)
    document["version"] = EXPORT_VERSION
    return document


def dumps_export(document: dict) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"job-tracker-data-{day.isoformat()}.json"


def write_export(store, directory: str = "exports") -> Path:
    """Write an export file into ``directory`` and return its path."""
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename()
    document = build_export(store)
    path.write_text(dumps_export(document), encoding="utf-8")
    logger.info(
        "Exported %s to %s",
        ", ".join(f"{len(document[name])} {name}" for name in COLLECTIONS),
        path,
    )
    return path


def parse_import(text: str) -> dict:
    """Parse and validate an export document.

    Raises ImportFormatError when the text is not a complete export: not
    JSON, a collection key missing or not an array, a record that cannot be
    read, or an id used twice in one collection.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Not a valid JSON file: {e}") from e

    if not isinstance(document, dict):
        raise ImportFormatError("Invalid file format: expected a JSON object")

    missing = [name for name in COLLECTIONS if name not in document]
    if missing:
        raise ImportFormatError(f"Invalid file format: missing {', '.join(missing)}")

    for name in COLLECTIONS:
        items = document[name]
        if not isinstance(items, list):
            raise ImportFormatError(f"Invalid file format: '{name}' must be an array")
        seen = set()
        for position, item in enumerate(items):
            try:
                record = RECORD_TYPES[name].from_dict(item)
            except (ValidationError, TypeError) as e:
                raise ImportFormatError(f"Invalid record at {name}[{position}]: {e}") from e
            if record.id in seen:
                raise ImportFormatError(f"Duplicate id in {name}: {record.id}")
            seen.add(record.id)

    return document


def read_import_file(path: str) -> dict:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Import file not found: {path}")
    return parse_import(file_path.read_text(encoding="utf-8"))


def import_summary(store, document: dict) -> str:
    """Describe what an import would replace, for a confirmation prompt."""

    def counts(sizes: dict) -> str:
        return ", ".join(f"{sizes[name]} {name}" for name in COLLECTIONS)

    current = {name: len(store.collection(name)) for name in COLLECTIONS}
    incoming = {name: len(document[name]) for name in COLLECTIONS}
    return (
        "This will replace all your current data with the imported data.\n\n"
        f"Current data: {counts(current)}\n"
        f"Import data: {counts(incoming)}"
    )


def apply_import(slots, document: dict, key_prefix: str = DEFAULT_KEY_PREFIX):
    """Overwrite all four slots with the document's collections."""
    items = {
        slot_key(name, key_prefix): json.dumps(document[name], ensure_ascii=False)
        for name in COLLECTIONS
    }
    slots.set_many(items)
    logger.info(
        "Imported %s (export dated %s)",
        ", ".join(f"{len(document[name])} {name}" for name in COLLECTIONS),
        document.get("exportDate", "unknown"),
    )
