# Path: anki_query/utils/dates.py
from datetime import date, datetime, time, timedelta
from typing import Optional

from anki_query.core.errors import UsageError


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def parse_date_bound(value: Optional[str], end: bool = False) -> Optional[int]:
    """
    Đổi tham số ngày của CLI sang epoch milliseconds (cùng đơn vị với revlog.id).

    Nhận số nguyên (ms) hoặc ngày ISO 'YYYY-MM-DD' theo giờ local.
    Với cận trên (end=True) ngày ISO bao gồm trọn ngày đó.
    """
    if value is None or value == "":
        return None

    value = value.strip()
    if value.lstrip("-").isdigit():
        return int(value)

    try:
        day = date.fromisoformat(value)
    except ValueError:
        raise UsageError(f"Invalid date '{value}': expected epoch milliseconds or YYYY-MM-DD")

    if end:
        return _to_ms(datetime.combine(day + timedelta(days=1), time.min)) - 1
    return _to_ms(datetime.combine(day, time.min))
