# Path: anki_query/core/id_allocator.py
import sqlite3
import time
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class IdAllocator:
    """
    Cấp ID cho note/card theo cách Anki làm: epoch milliseconds.

    ID luôn tăng dần trong một process, và được đẩy qua ID lớn nhất đang có
    trong bảng notes/cards để hai lần chạy trong cùng một millisecond
    không bị trùng.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._last: Optional[int] = None

    def next_id(self, floor: int = 0) -> int:
        candidate = max(self._clock(), floor)
        if self._last is not None and candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

    def reserve(self, count: int, floor: int = 0) -> int:
        """Reserve `count` consecutive ids and return the first one."""
        first = self.next_id(floor)
        self._last = first + count - 1
        return first

    def next_note_id(self, conn: sqlite3.Connection) -> int:
        """
        Note id with room for its card at note id + 1, both above every
        existing note and card id.
        """
        row = conn.execute(
            "SELECT MAX(COALESCE((SELECT MAX(id) FROM notes), 0),"
            " COALESCE((SELECT MAX(id) FROM cards), 0))"
        ).fetchone()
        floor = row[0] + 1
        note_id = self.reserve(2, floor)
        if note_id == floor:
            logger.debug(f"Clock behind existing ids, allocated {note_id} from table max")
        return note_id
