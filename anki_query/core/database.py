# Path: anki_query/core/database.py
import sqlite3
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from anki_query.core.errors import StorageError

logger = logging.getLogger(__name__)


def _unicase(a: str, b: str) -> int:
    """Collation Anki khai báo cho decks.name / notetypes.name."""
    a, b = a.casefold(), b.casefold()
    return (a > b) - (a < b)


class CollectionDatabase:
    """
    Quản lý kết nối tới file collection.anki2.

    Mỗi thao tác logic mở một kết nối riêng qua `session()` và luôn đóng lại
    khi kết thúc, kể cả khi có lỗi. Schema thuộc về Anki, ở đây không tạo
    hay migrate bảng nào.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path

    def _connect(self, readonly: bool) -> sqlite3.Connection:
        if not self.db_path.exists():
            raise StorageError(f"Collection file not found: {self.db_path}")

        if readonly:
            # mode=ro: SQLite từ chối mọi câu lệnh ghi
            uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
            conn = sqlite3.connect(uri, uri=True)
        else:
            conn = sqlite3.connect(self.db_path)

        conn.row_factory = sqlite3.Row
        conn.create_collation("unicase", _unicase)
        return conn

    @contextmanager
    def session(self, readonly: bool = True) -> Iterator[sqlite3.Connection]:
        """
        Scoped connection. Read-write sessions commit on success and roll back
        on error; every session is closed on exit.
        """
        mode = "read-only" if readonly else "read-write"
        logger.debug(f"Opening {mode} session on {self.db_path}")
        conn = self._connect(readonly)
        try:
            yield conn
            if not readonly:
                conn.commit()
        except BaseException:
            if not readonly:
                conn.rollback()
            raise
        finally:
            conn.close()
            logger.debug(f"Closed session on {self.db_path}")


def fetch_all(conn: sqlite3.Connection, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    rows = conn.execute(sql, tuple(params)).fetchall()
    return [dict(r) for r in rows]


def fetch_one(conn: sqlite3.Connection, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
    row = conn.execute(sql, tuple(params)).fetchone()
    return dict(row) if row else None


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    ).fetchone()
    return row is not None
