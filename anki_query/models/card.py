# Path: anki_query/models/card.py
from typing import Optional
from pydantic import BaseModel, ConfigDict

__all__ = ["CardRecord", "AddCardResult", "ArchiveResult"]


class CardRecord(BaseModel):
    """
    Một dòng kết quả của search/find.

    Các field đã tách của note (front, back, ...) được gắn thêm như
    thuộc tính phụ (extra), vì tên field phụ thuộc vào Note Type.
    """

    model_config = ConfigDict(extra="allow")

    note_id: int
    card_id: int
    deck_name: str
    note_type: Optional[str] = None
    note_fields: str

    # Scheduling data, passed through as stored
    queue: int
    due: int
    ivl: int
    factor: int
    reps: int
    lapses: int

    review_count: int = 0
    avg_review_time: Optional[float] = None
    last_review_time: Optional[int] = None
    last_ease_factor: Optional[int] = None


class AddCardResult(BaseModel):
    note_id: int
    card_id: int


class ArchiveResult(BaseModel):
    card_id: int
    deck_id: int
    deck_name: str
    previous_deck_id: Optional[int] = None
    changes: int
