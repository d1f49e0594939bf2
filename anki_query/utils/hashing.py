# Path: anki_query/utils/hashing.py
import hashlib

from anki_query.utils.text_utils import strip_html


def field_checksum(first_field: str) -> int:
    """
    Checksum Anki lưu ở cột notes.csum:
    8 ký tự hex đầu của SHA-1 (field đầu tiên đã bỏ HTML), đổi sang int.
    """
    digest = hashlib.sha1(strip_html(first_field).encode('utf-8')).hexdigest()
    return int(digest[:8], 16)
