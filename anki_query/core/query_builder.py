# Path: anki_query/core/query_builder.py
from typing import Any, List, Optional, Sequence, Tuple


class QueryBuilder:
    """
    Gom các điều kiện WHERE dạng (predicate, params) rồi ghép lại.

    Giá trị luôn đi qua placeholder `?`; chỉ các đoạn SQL cố định trong code
    mới được nối vào câu lệnh.

        qb = QueryBuilder("SELECT * FROM decks d")
        qb.where("d.name = ?", "Default")
        sql, params = qb.build()
    """

    def __init__(self, base_sql: str):
        self.base_sql = base_sql
        self._predicates: List[str] = []
        self._params: List[Any] = []
        self._order_by: List[str] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    def where(self, predicate: str, *params: Any) -> "QueryBuilder":
        if predicate.count("?") != len(params):
            raise ValueError(f"Predicate '{predicate}' expects {predicate.count('?')} params, got {len(params)}")
        self._predicates.append(predicate)
        self._params.extend(params)
        return self

    def where_if(self, condition: Any, predicate: str, *params: Any) -> "QueryBuilder":
        """Add the predicate only when `condition` is truthy."""
        if condition:
            self.where(predicate, *params)
        return self

    def order_by(self, *terms: str) -> "QueryBuilder":
        self._order_by.extend(terms)
        return self

    def limit(self, limit: int, offset: Optional[int] = None) -> "QueryBuilder":
        self._limit = limit
        self._offset = offset
        return self

    def build(self) -> Tuple[str, Sequence[Any]]:
        parts = [self.base_sql.strip()]
        params = list(self._params)

        if self._predicates:
            parts.append("WHERE " + "\n  AND ".join(f"({p})" for p in self._predicates))
        if self._order_by:
            parts.append("ORDER BY " + ", ".join(self._order_by))
        if self._limit is not None:
            parts.append("LIMIT ?")
            params.append(self._limit)
            if self._offset is not None:
                parts.append("OFFSET ?")
                params.append(self._offset)

        return "\n".join(parts), tuple(params)
