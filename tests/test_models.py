"""Tests for record models."""

import pytest

from job_tracker.errors import ValidationError
from job_tracker.records.models import Company, Job, Note, RelatedRef, Task


class TestJobJson:
    def test_to_dict_uses_camel_case_keys(self):
        job = Job(
            id="j1",
            title="Software Engineer",
            company="Acme Inc",
            location="SF, CA",
            status="applied",
            date_applied="2024-03-01",
        )
        d = job.to_dict()
        assert d["dateApplied"] == "2024-03-01"
        assert d["company"] == "Acme Inc"
        assert "date_applied" not in d

    def test_absent_optionals_are_omitted(self):
        job = Job(id="j1", title="SE", company="Acme", location="", status="applied", date_applied="2024-03-01")
        d = job.to_dict()
        assert "salary" not in d
        assert "notesList" not in d
        assert d["location"] == ""

    def test_from_dict_reads_notes(self):
        job = Job.from_dict({
            "id": "j1",
            "title": "SE",
            "company": "Acme",
            "location": "Remote",
            "status": "hr-screen",
            "dateApplied": "2024-03-01",
            "notesList": [{"id": "n1", "content": "Called", "timestamp": "2024-03-02T10:00:00.000Z"}],
        })
        assert job.status == "hr-screen"
        assert job.notes_list == [Note(id="n1", content="Called", timestamp="2024-03-02T10:00:00.000Z")]

    def test_unknown_keys_survive(self):
        data = {
            "id": "j1",
            "title": "SE",
            "company": "Acme",
            "location": "Remote",
            "status": "applied",
            "dateApplied": "2024-03-01",
            "favorite": True,
        }
        job = Job.from_dict(data)
        assert job.extra == {"favorite": True}
        assert job.to_dict() == data

    def test_missing_required_key_raises(self):
        with pytest.raises(ValidationError, match="title"):
            Job.from_dict({"id": "j1", "company": "Acme", "location": "", "status": "applied", "dateApplied": ""})

    def test_non_object_raises(self):
        with pytest.raises(ValidationError):
            Company.from_dict(["not", "an", "object"])


class TestTaskJson:
    def test_related_to_round_trip(self):
        data = {
            "id": "t1",
            "title": "Follow up",
            "status": "pending",
            "priority": "high",
            "type": "call",
            "relatedTo": {"type": "company", "id": "c1"},
            "postCallNotes": "Went well",
        }
        task = Task.from_dict(data)
        assert task.related_to == RelatedRef(type="company", id="c1")
        assert task.post_call_notes == "Went well"
        assert task.to_dict() == data

    def test_earlier_revision_without_type(self):
        task = Task.from_dict({"id": "t1", "title": "Research", "status": "pending", "priority": "low"})
        assert task.type is None
        assert "type" not in task.to_dict()


class TestNote:
    def test_missing_type_reads_as_general(self):
        note = Note(id="n1", content="Hi", timestamp="2024-01-01T00:00:00.000Z")
        assert note.note_type == "general"

    def test_note_is_immutable(self):
        note = Note(id="n1", content="Hi", timestamp="2024-01-01T00:00:00.000Z", type="interview")
        with pytest.raises(AttributeError):
            note.content = "changed"
