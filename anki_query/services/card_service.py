# Path: anki_query/services/card_service.py
import sqlite3
import time
import uuid
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from anki_query.core.database import CollectionDatabase, fetch_all, fetch_one, table_exists
from anki_query.core.errors import NotFoundError, UsageError
from anki_query.core.id_allocator import IdAllocator
from anki_query.core.query_builder import QueryBuilder
from anki_query.models import (
    AddCardResult,
    ArchiveResult,
    CardRecord,
    CollectionConfig,
    NewNote,
    NoteTypeSchema,
)
from anki_query.utils.hashing import field_checksum
from anki_query.utils.text_utils import (
    LIKE_ESCAPE,
    deck_name_forms,
    display_deck_name,
    like_contains,
)

logger = logging.getLogger(__name__)

DEFAULT_FIELDS_TO_RETURN = ("front", "back")


class SortKey(str, Enum):
    REVIEW_COUNT = "review_count"
    AVG_REVIEW_TIME = "avg_review_time"
    LAST_REVIEW_TIME = "last_review_time"
    LAST_EASE_FACTOR = "last_ease_factor"


_SORT_COLUMNS = {
    SortKey.REVIEW_COUNT: "cs.review_count",
    SortKey.AVG_REVIEW_TIME: "cs.avg_review_time",
    SortKey.LAST_REVIEW_TIME: "cs.last_review_time",
    SortKey.LAST_EASE_FACTOR: "lr.ease",
}

# card_stats: one row per card, review_count = 0 for never reviewed cards.
# lr is the card's most recent review log entry.
CARD_QUERY = """
WITH card_stats AS (
    SELECT
        c.id AS card_id,
        COUNT(r.id) AS review_count,
        AVG(r.time) AS avg_review_time,
        MAX(r.id) AS last_review_time
    FROM cards c
    LEFT JOIN revlog r ON r.cid = c.id
    GROUP BY c.id
)
SELECT
    n.id AS note_id,
    c.id AS card_id,
    n.mid AS note_type_id,
    n.flds AS note_fields,
    d.name AS deck_name,
    c.queue, c.due, c.ivl, c.factor, c.reps, c.lapses,
    cs.review_count,
    cs.avg_review_time,
    cs.last_review_time,
    lr.ease AS last_ease_factor
FROM notes n
JOIN cards c ON c.nid = n.id
JOIN decks d ON d.id = c.did
JOIN card_stats cs ON cs.card_id = c.id
LEFT JOIN revlog lr ON lr.id = cs.last_review_time
"""

INSERT_NOTE = """
    INSERT INTO notes (id, guid, mid, mod, usn, tags, flds, sfld, csum, flags, data)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

INSERT_CARD = """
    INSERT INTO cards (id, nid, did, ord, mod, usn, type, queue, due, ivl, factor, reps, lapses, left, odue, odid, flags, data)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

# usn -1: thay đổi local, Anki sẽ sync lên ở lần sync tiếp theo
LOCAL_USN = -1


def load_note_type_schemas(conn: sqlite3.Connection, config: CollectionConfig) -> Dict[int, NoteTypeSchema]:
    """
    Đọc danh sách field của mọi Note Type.
    Ưu tiên bảng `fields` của Anki, sau đó tới cấu hình, cuối cùng là Front/Back.
    """
    if not table_exists(conn, "notetypes"):
        return {}

    collection_fields: Dict[int, List[str]] = {}
    if table_exists(conn, "fields"):
        for row in fetch_all(conn, "SELECT ntid, name FROM fields ORDER BY ntid, ord"):
            collection_fields.setdefault(row["ntid"], []).append(row["name"])

    schemas = {}
    for row in fetch_all(conn, "SELECT id, name FROM notetypes"):
        fields = (
            collection_fields.get(row["id"])
            or config.note_type_fields.get(row["name"])
            or config.default_fields
        )
        schemas[row["id"]] = NoteTypeSchema(id=row["id"], name=row["name"], fields=fields)
    return schemas


class CardService:
    """
    Tìm kiếm, thêm và archive thẻ trong collection.
    """

    def __init__(
        self,
        config: CollectionConfig,
        db: Optional[CollectionDatabase] = None,
        id_allocator: Optional[IdAllocator] = None,
    ):
        self.config = config
        self.db = db or CollectionDatabase(config.collection_path)
        self.ids = id_allocator or IdAllocator()

    # =========================================================================
    # SEARCH
    # =========================================================================

    def search(
        self,
        keyword: Optional[str] = None,
        deck: Optional[str] = None,
        sort_by: Union[SortKey, str] = SortKey.LAST_REVIEW_TIME,
        limit: Optional[int] = None,
        min_review_count: int = 0,
        ease_factor: Optional[int] = None,
        fields_to_return: Iterable[str] = DEFAULT_FIELDS_TO_RETURN,
        descending: bool = True,
    ) -> List[CardRecord]:
        """
        Tìm thẻ kèm thống kê review của từng thẻ.

        Thẻ chưa review lần nào luôn nằm cuối, bất kể chiều sắp xếp.
        """
        try:
            sort_key = SortKey(sort_by)
        except ValueError:
            choices = ", ".join(k.value for k in SortKey)
            raise UsageError(f"Invalid sort key '{sort_by}'. Choose one of: {choices}")

        limit = self.config.search_limit if limit is None else limit
        direction = "DESC" if descending else "ASC"

        qb = QueryBuilder(CARD_QUERY)
        qb.where_if(keyword, f"n.flds LIKE ? ESCAPE '{LIKE_ESCAPE}'", like_contains(keyword or ""))
        qb.where_if(deck, "d.name IN (?, ?)", *deck_name_forms(deck or ""))
        qb.where_if(min_review_count > 0, "cs.review_count >= ?", min_review_count)
        qb.where_if(ease_factor is not None, "lr.ease = ?", ease_factor)
        qb.order_by(
            "CASE WHEN cs.review_count > 0 THEN 0 ELSE 1 END",
            f"{_SORT_COLUMNS[sort_key]} {direction}",
            "c.id",
        )
        qb.limit(limit)

        sql, params = qb.build()
        logger.debug(f"search params={params}")

        with self.db.session(readonly=True) as conn:
            schemas = load_note_type_schemas(conn, self.config)
            rows = fetch_all(conn, sql, params)

        requested = [name.lower() for name in fields_to_return]
        return [self._to_record(row, schemas, requested) for row in rows]

    def find_cards_by_keyword(
        self,
        keyword: str,
        limit: int = 50,
        offset: int = 0,
        deck: Optional[str] = None,
        case_sensitive: bool = False,
    ) -> List[CardRecord]:
        """Substring search over note fields, paginated by card id."""
        if not keyword:
            raise UsageError("A keyword is required")

        qb = QueryBuilder(CARD_QUERY)
        if case_sensitive:
            qb.where("instr(n.flds, ?) > 0", keyword)
        else:
            qb.where(f"n.flds LIKE ? ESCAPE '{LIKE_ESCAPE}'", like_contains(keyword))
        qb.where_if(deck, "d.name IN (?, ?)", *deck_name_forms(deck or ""))
        qb.order_by("c.id")
        qb.limit(limit, offset)

        sql, params = qb.build()

        with self.db.session(readonly=True) as conn:
            schemas = load_note_type_schemas(conn, self.config)
            rows = fetch_all(conn, sql, params)

        return [self._to_record(row, schemas, None) for row in rows]

    def _to_record(
        self,
        row: Dict[str, Any],
        schemas: Dict[int, NoteTypeSchema],
        requested: Optional[List[str]],
    ) -> CardRecord:
        mid = row.pop("note_type_id")
        schema = schemas.get(mid) or NoteTypeSchema(id=mid, name="", fields=self.config.default_fields)

        values = schema.unpack(row["note_fields"], self.config.field_separator)
        if requested is not None:
            values = {key: values.get(key) for key in requested}

        row["deck_name"] = display_deck_name(row["deck_name"])
        return CardRecord(**{**values, **row, "note_type": schema.name or None})

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def add_card(
        self,
        deck: Optional[str] = None,
        fields: Optional[Dict[str, str]] = None,
        model_name: Optional[str] = None,
    ) -> AddCardResult:
        """
        Tạo một Note và một Card mới (thẻ mới, chưa học).
        Hai lệnh INSERT chạy trong cùng một transaction.
        """
        try:
            note = NewNote(
                deck=deck or self.config.inbox_deck,
                model_name=model_name or self.config.default_note_type,
                fields=fields or {},
            )
        except ValidationError as e:
            raise UsageError(f"Invalid note: {e.errors()[0]['msg']}")

        sep = self.config.field_separator

        with self.db.session(readonly=False) as conn:
            schema = self._get_note_type(conn, note.model_name)

            deck_row = fetch_one(
                conn, "SELECT id FROM decks WHERE name IN (?, ?)", deck_name_forms(note.deck)
            )
            if deck_row is None:
                raise NotFoundError("Deck", note.deck)

            flds = schema.pack(note.fields, sep)
            sort_field = flds.split(sep)[0]

            note_id = self.ids.next_note_id(conn)
            card_id = note_id + 1
            mod = int(time.time())
            due = conn.execute("SELECT COALESCE(MAX(due), 0) + 1 FROM cards WHERE type = 0").fetchone()[0]

            conn.execute(INSERT_NOTE, (
                note_id,
                uuid.uuid4().hex[:10],  # guid
                schema.id,
                mod,
                LOCAL_USN,
                "",  # tags
                flds,
                sort_field,
                field_checksum(sort_field),
                0,  # flags
                "",  # data
            ))

            conn.execute(INSERT_CARD, (
                card_id, note_id, deck_row["id"],
                0,  # ord: template đầu tiên
                mod, LOCAL_USN,
                0,  # type = new
                0,  # queue = new
                due,
                0, 0, 0, 0, 0,  # ivl, factor, reps, lapses, left
                0, 0,  # odue, odid
                0, "",  # flags, data
            ))

        logger.info(f"Added note {note_id} / card {card_id} to deck '{note.deck}'")
        return AddCardResult(note_id=note_id, card_id=card_id)

    def archive_card(self, card_id: int) -> ArchiveResult:
        """
        Chuyển thẻ sang deck archive (mặc định 'to_delete').
        Không xoá note, card hay lịch sử review.
        """
        archive_deck = self.config.archive_deck

        with self.db.session(readonly=False) as conn:
            target = fetch_one(
                conn, "SELECT id, name FROM decks WHERE name IN (?, ?)", deck_name_forms(archive_deck)
            )
            if target is None:
                raise NotFoundError("Deck", archive_deck)

            current = fetch_one(conn, "SELECT did FROM cards WHERE id = ?", (card_id,))
            cursor = conn.execute(
                "UPDATE cards SET did = ?, mod = ?, usn = ? WHERE id = ?",
                (target["id"], int(time.time()), LOCAL_USN, card_id),
            )
            changes = cursor.rowcount

        if changes == 0:
            logger.warning(f"Card {card_id} does not exist, nothing archived")
        else:
            logger.info(f"Archived card {card_id} into '{target['name']}'")

        return ArchiveResult(
            card_id=card_id,
            deck_id=target["id"],
            deck_name=display_deck_name(target["name"]),
            previous_deck_id=current["did"] if current else None,
            changes=changes,
        )

    def _get_note_type(self, conn: sqlite3.Connection, name: str) -> NoteTypeSchema:
        row = fetch_one(conn, "SELECT id FROM notetypes WHERE name = ?", (name,))
        if row is None:
            raise NotFoundError("Note type", name)
        return load_note_type_schemas(conn, self.config)[row["id"]]
