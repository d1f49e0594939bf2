# Path: anki_query/core/__init__.py
from .config import settings
from .logging_config import setup_logging
from .anki_detector import list_profiles, resolve_collection_path

__all__ = ["settings", "setup_logging", "list_profiles", "resolve_collection_path"]
