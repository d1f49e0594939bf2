# Path: anki_query/core/config.py
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from anki_query.core.anki_detector import default_anki_base_dir


class Settings(BaseSettings):
    # Paths
    ANKI_BASE_DIR: Path = Field(default_factory=default_anki_base_dir)
    ANKI_PROFILE: Optional[str] = None
    COLLECTION_PATH: Optional[Path] = None
    LOG_DIR: Path = Path.home() / ".anki_query" / "logs"

    # Collection conventions
    INBOX_DECK: str = "ai_inbox"
    ARCHIVE_DECK: str = "to_delete"
    DEFAULT_NOTE_TYPE: str = "Basic"
    SEARCH_LIMIT: int = 50
    # Field names per note type, used when the collection has no fields table.
    # Env: ANKI_QUERY_NOTE_TYPE_FIELDS='{"Vocab": ["Word", "Meaning"]}'
    NOTE_TYPE_FIELDS: Dict[str, List[str]] = {}

    model_config = SettingsConfigDict(
        env_prefix="ANKI_QUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

settings = Settings()
