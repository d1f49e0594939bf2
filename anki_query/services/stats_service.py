# Path: anki_query/services/stats_service.py
import logging
from typing import List, Optional

from anki_query.core.database import CollectionDatabase, fetch_all, fetch_one
from anki_query.core.query_builder import QueryBuilder
from anki_query.models import CollectionConfig, DeckDetail, Overview, ReviewMetrics
from anki_query.utils.text_utils import deck_name_forms, display_deck_name

logger = logging.getLogger(__name__)

# ease: 1=again, 2=hard, 3=good, 4=easy. ease 0 (manual reschedule) is not a grade.
REVIEW_METRICS_QUERY = """
SELECT
    COUNT(*) AS total_reviews,
    AVG(r.time) AS avg_review_time,
    AVG(r.ease) AS avg_ease,
    MIN(r.id) AS first_review,
    MAX(r.id) AS last_review,
    COALESCE(SUM(CASE WHEN r.ease = 1 THEN 1 ELSE 0 END), 0) AS again_count,
    COALESCE(SUM(CASE WHEN r.ease = 2 THEN 1 ELSE 0 END), 0) AS hard_count,
    COALESCE(SUM(CASE WHEN r.ease = 3 THEN 1 ELSE 0 END), 0) AS good_count,
    COALESCE(SUM(CASE WHEN r.ease = 4 THEN 1 ELSE 0 END), 0) AS easy_count
FROM revlog r
"""

OVERVIEW_QUERY = """
SELECT
    (SELECT COUNT(*) FROM cards) AS total_cards,
    (SELECT COUNT(DISTINCT did) FROM cards) AS total_decks,
    (SELECT COUNT(*) FROM notes) AS total_notes,
    (SELECT COUNT(*) FROM revlog) AS total_reviews
"""

# queue: 0=new, 1=learning, 2=review, 3=day learning
DECK_DETAILS_QUERY = """
SELECT
    d.id,
    d.name,
    COUNT(c.id) AS total_cards,
    COALESCE(SUM(CASE WHEN c.queue = 0 THEN 1 ELSE 0 END), 0) AS new_cards,
    COALESCE(SUM(CASE WHEN c.queue IN (1, 3) THEN 1 ELSE 0 END), 0) AS learning_cards,
    COALESCE(SUM(CASE WHEN c.queue = 2 THEN 1 ELSE 0 END), 0) AS review_cards
FROM decks d
LEFT JOIN cards c ON c.did = d.id
GROUP BY d.id, d.name
ORDER BY total_cards DESC, d.name
"""


class StatsService:
    """
    Thống kê tổng hợp (read-only) trên collection.
    """

    def __init__(self, config: CollectionConfig, db: Optional[CollectionDatabase] = None):
        self.config = config
        self.db = db or CollectionDatabase(config.collection_path)

    def get_review_metrics(
        self,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
        deck: Optional[str] = None,
    ) -> ReviewMetrics:
        """
        Tổng hợp revlog. `start_date`/`end_date` là epoch ms so với revlog.id
        (id chính là thời điểm review), cả hai cận đều tính.
        """
        base = REVIEW_METRICS_QUERY
        if deck:
            base += "JOIN cards c ON c.id = r.cid\nJOIN decks d ON d.id = c.did\n"

        qb = QueryBuilder(base)
        qb.where("r.ease BETWEEN 1 AND 4")
        qb.where_if(start_date is not None, "r.id >= ?", start_date)
        qb.where_if(end_date is not None, "r.id <= ?", end_date)
        qb.where_if(deck, "d.name IN (?, ?)", *deck_name_forms(deck or ""))

        sql, params = qb.build()
        with self.db.session(readonly=True) as conn:
            row = fetch_one(conn, sql, params)

        return ReviewMetrics(**row)

    def get_overview(self) -> Overview:
        with self.db.session(readonly=True) as conn:
            row = fetch_one(conn, OVERVIEW_QUERY)
        return Overview(**row)

    def get_deck_details(self) -> List[DeckDetail]:
        with self.db.session(readonly=True) as conn:
            rows = fetch_all(conn, DECK_DETAILS_QUERY)
        logger.debug(f"Loaded details for {len(rows)} decks")
        return [DeckDetail(**{**row, "name": display_deck_name(row["name"])}) for row in rows]
