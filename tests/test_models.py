"""Tests for the pydantic models."""

import pytest
from pydantic import ValidationError

from anki_query.core.errors import UsageError
from anki_query.models import CardRecord, CollectionConfig, NewNote, NoteTypeSchema


@pytest.fixture
def basic_schema():
    return NoteTypeSchema(id=1, name="Basic", fields=["Front", "Back"])


class TestNoteTypeSchema:

    def test_unpack(self, basic_schema):
        assert basic_schema.unpack("Q\x1fA") == {"front": "Q", "back": "A"}

    def test_unpack_missing_field_is_none(self, basic_schema):
        assert basic_schema.unpack("Q") == {"front": "Q", "back": None}

    def test_unpack_keeps_empty_string(self, basic_schema):
        assert basic_schema.unpack("Q\x1f") == {"front": "Q", "back": ""}

    def test_pack_case_insensitive(self, basic_schema):
        assert basic_schema.pack({"back": "A", "FRONT": "Q"}) == "Q\x1fA"

    def test_pack_missing_field_is_empty(self, basic_schema):
        assert basic_schema.pack({"Front": "Q"}) == "Q\x1f"

    def test_pack_unknown_field(self, basic_schema):
        with pytest.raises(UsageError, match="Extra"):
            basic_schema.pack({"Front": "Q", "Extra": "x"})

    def test_custom_separator(self):
        schema = NoteTypeSchema(id=2, name="Three", fields=["A", "B", "C"])
        assert schema.pack({"a": "1", "c": "3"}, separator="|") == "1||3"
        assert schema.unpack("1|2|3", separator="|") == {"a": "1", "b": "2", "c": "3"}

    def test_requires_fields(self):
        with pytest.raises(ValidationError):
            NoteTypeSchema(id=1, name="Empty", fields=[])


class TestNewNote:

    def test_valid(self):
        note = NewNote(deck="ai_inbox", model_name="Basic", fields={"Front": "Q"})
        assert note.fields == {"Front": "Q"}

    def test_empty_fields_rejected(self):
        with pytest.raises(ValidationError):
            NewNote(deck="ai_inbox", model_name="Basic", fields={})

    def test_empty_deck_rejected(self):
        with pytest.raises(ValidationError):
            NewNote(deck="", model_name="Basic", fields={"Front": "Q"})


def test_collection_config_defaults(tmp_path):
    config = CollectionConfig(collection_path=tmp_path / "collection.anki2")
    assert config.inbox_deck == "ai_inbox"
    assert config.archive_deck == "to_delete"
    assert config.default_note_type == "Basic"
    assert config.search_limit == 50
    assert config.field_separator == "\x1f"
    assert config.default_fields == ["Front", "Back"]


def test_card_record_keeps_note_fields_in_dump():
    record = CardRecord(
        note_id=1, card_id=2, deck_name="Default", note_fields="Q\x1fA",
        queue=0, due=1, ivl=0, factor=0, reps=0, lapses=0,
        front="Q", back=None,
    )
    dumped = record.model_dump(mode="json")
    assert dumped["front"] == "Q"
    assert dumped["back"] is None
    assert dumped["review_count"] == 0
