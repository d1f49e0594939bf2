# Path: anki_query/services/__init__.py
from .card_service import CardService, SortKey
from .stats_service import StatsService

__all__ = ["CardService", "SortKey", "StatsService"]
