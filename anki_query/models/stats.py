# Path: anki_query/models/stats.py
from typing import Optional
from pydantic import BaseModel

__all__ = ["ReviewMetrics", "Overview", "DeckDetail"]


class ReviewMetrics(BaseModel):
    """Aggregate over graded review log entries (ease 1-4)."""

    total_reviews: int = 0
    avg_review_time: Optional[float] = None
    avg_ease: Optional[float] = None
    first_review: Optional[int] = None
    last_review: Optional[int] = None
    again_count: int = 0
    hard_count: int = 0
    good_count: int = 0
    easy_count: int = 0


class Overview(BaseModel):
    total_cards: int = 0
    total_decks: int = 0
    total_notes: int = 0
    total_reviews: int = 0


class DeckDetail(BaseModel):
    id: int
    name: str
    total_cards: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    review_cards: int = 0
