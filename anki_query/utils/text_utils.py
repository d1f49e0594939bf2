# Path: anki_query/utils/text_utils.py
import html
import re

LIKE_ESCAPE = "\\"


def strip_html(text: str) -> str:
    """
    Bỏ thẻ HTML và decode entity.
    Ví dụ: "<b>Hello</b>&nbsp;world" -> "Hello world"
    """
    s = re.sub(r'(?is)<(script|style).*?>.*?</\1>', "", text)
    s = re.sub(r'<[^>]+>', "", s)
    s = html.unescape(s).replace("\xa0", " ")
    return s.strip()


def escape_like(keyword: str) -> str:
    """Escape %, _ and the escape char itself so LIKE matches the keyword literally."""
    return (
        keyword.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def like_contains(keyword: str) -> str:
    """Pattern for a substring match: 'ab_c' -> '%ab\\_c%'."""
    return f"%{escape_like(keyword)}%"


# Anki hiển thị deck con là "Cha::Con" nhưng lưu trong bảng decks bằng \x1f.
DECK_SEPARATOR = "::"
STORED_DECK_SEPARATOR = "\x1f"


def deck_name_forms(name: str) -> tuple:
    """Both spellings of a deck name, for `d.name IN (?, ?)`."""
    return (
        name.replace(STORED_DECK_SEPARATOR, DECK_SEPARATOR),
        name.replace(DECK_SEPARATOR, STORED_DECK_SEPARATOR),
    )


def display_deck_name(name: str) -> str:
    """'Lang\\x1fVerbs' -> 'Lang::Verbs'."""
    return name.replace(STORED_DECK_SEPARATOR, DECK_SEPARATOR)
