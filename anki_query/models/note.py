# Path: anki_query/models/note.py
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from anki_query.core.errors import UsageError
from anki_query.models.config import FIELD_SEPARATOR

__all__ = ["NewNote", "NoteTypeSchema"]


class NewNote(BaseModel):
    """
    Một Note sắp được thêm vào collection.
    """

    deck: str = Field(
        ...,
        min_length=1,
        description="Target Deck name in Anki (e.g. 'ai_inbox')"
    )

    model_name: str = Field(
        ...,
        min_length=1,
        description="Note Type (Model) name"
    )

    # Fields là dict dynamic: {"Front": "...", "Back": "..."}
    fields: Dict[str, str] = Field(
        ...,
        description="Key-value pairs matching the Note Type fields"
    )

    @field_validator('fields')
    @classmethod
    def check_fields_not_empty(cls, v: Dict[str, str]) -> Dict[str, str]:
        if not v:
            raise ValueError('Fields dictionary cannot be empty')
        return v


class NoteTypeSchema(BaseModel):
    """
    Danh sách field có thứ tự của một Note Type.
    Vị trí trong list chính là vị trí trong chuỗi `flds` của note.
    """

    id: int
    name: str
    fields: List[str] = Field(..., min_length=1)

    @property
    def keys(self) -> List[str]:
        """Lower-cased field names, used as record keys."""
        return [name.lower() for name in self.fields]

    def unpack(self, flds: str, separator: str = FIELD_SEPARATOR) -> Dict[str, Optional[str]]:
        """Tách chuỗi flds thành dict {field: value}. Field bị thiếu trả về None."""
        parts = flds.split(separator)
        return {
            key: parts[i] if i < len(parts) else None
            for i, key in enumerate(self.keys)
        }

    def pack(self, values: Dict[str, str], separator: str = FIELD_SEPARATOR) -> str:
        """
        Ghép các giá trị theo đúng thứ tự field của Note Type.
        Tên field không phân biệt hoa thường; field không được truyền sẽ là chuỗi rỗng.
        """
        keys = self.keys
        unknown = [name for name in values if name.lower() not in keys]
        if unknown:
            raise UsageError(
                f"Note type '{self.name}' has no field(s): {', '.join(unknown)}"
            )
        lookup = {name.lower(): value for name, value in values.items()}
        return separator.join(lookup.get(key) or "" for key in self.keys)
