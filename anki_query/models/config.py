# Path: anki_query/models/config.py
from pathlib import Path
from typing import Dict, List
from pydantic import BaseModel, Field

__all__ = ["CollectionConfig", "FIELD_SEPARATOR"]

# Anki nối các field của một note bằng ký tự "unit separator"
FIELD_SEPARATOR = "\x1f"


class CollectionConfig(BaseModel):
    """
    Cấu hình truyền vào các service truy cập collection.
    Mặc định lấy từ Settings, CLI có thể ghi đè từng giá trị.
    """

    collection_path: Path = Field(
        ...,
        description="Đường dẫn tới file collection.anki2"
    )

    inbox_deck: str = Field(
        default="ai_inbox",
        description="Deck mặc định khi thêm thẻ mới"
    )

    archive_deck: str = Field(
        default="to_delete",
        description="Deck dùng để lưu trữ (archive) thẻ thay vì xoá"
    )

    default_note_type: str = Field(
        default="Basic",
        description="Note Type dùng khi thêm thẻ mới"
    )

    search_limit: int = Field(
        default=50,
        gt=0,
        description="Số kết quả tối đa mặc định của search"
    )

    field_separator: str = Field(
        default=FIELD_SEPARATOR,
        min_length=1,
    )

    default_fields: List[str] = Field(
        default_factory=lambda: ["Front", "Back"],
        description="Field names used when a note type's fields cannot be read from the collection"
    )

    note_type_fields: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Per note type field names, e.g. {'Cloze': ['Text', 'Back Extra']}"
    )
