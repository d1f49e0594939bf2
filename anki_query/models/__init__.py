# Path: anki_query/models/__init__.py
from .config import CollectionConfig, FIELD_SEPARATOR
from .note import NewNote, NoteTypeSchema
from .card import CardRecord, AddCardResult, ArchiveResult
from .stats import ReviewMetrics, Overview, DeckDetail

__all__ = [
    "CollectionConfig",
    "FIELD_SEPARATOR",
    "NewNote",
    "NoteTypeSchema",
    "CardRecord",
    "AddCardResult",
    "ArchiveResult",
    "ReviewMetrics",
    "Overview",
    "DeckDetail",
]
