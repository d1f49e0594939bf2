# Path: anki_query/core/anki_detector.py
import sys
import logging
from pathlib import Path
from typing import List, Optional

from anki_query.core.errors import NotFoundError

logger = logging.getLogger(__name__)

COLLECTION_FILENAME = "collection.anki2"

# Folders Anki keeps next to the profiles
_NON_PROFILE_DIRS = {"addons21", "logs", "crash.log"}


def default_anki_base_dir() -> Path:
    """
    Thư mục dữ liệu Anki2 theo từng hệ điều hành.
    """
    platform = sys.platform
    home = Path.home()

    if platform == "darwin":  # macOS
        return home / "Library" / "Application Support" / "Anki2"
    if platform == "win32":  # Windows
        return home / "AppData" / "Roaming" / "Anki2"
    return home / ".local" / "share" / "Anki2"


def list_profiles(base_dir: Path) -> List[str]:
    """Profiles are sub folders of the Anki2 directory that hold a collection file."""
    if not base_dir.is_dir():
        logger.debug(f"Anki base directory does not exist: {base_dir}")
        return []

    profiles = [
        d.name for d in base_dir.iterdir()
        if d.is_dir() and d.name not in _NON_PROFILE_DIRS and (d / COLLECTION_FILENAME).exists()
    ]
    return sorted(profiles)


def resolve_collection_path(
    base_dir: Path,
    profile: Optional[str] = None,
    collection: Optional[Path] = None,
) -> Path:
    """
    Chọn file collection.anki2 cần mở.

    Thứ tự ưu tiên:
      1. Đường dẫn file chỉ định trực tiếp.
      2. Profile chỉ định.
      3. Profile duy nhất tìm thấy trong thư mục Anki2.
    """
    if collection is not None:
        return collection.expanduser()

    if profile:
        return base_dir / profile / COLLECTION_FILENAME

    logger.info("Attempting to detect Anki profile...")
    profiles = list_profiles(base_dir)

    if len(profiles) == 1:
        logger.info(f"Detected profile: {profiles[0]}")
        return base_dir / profiles[0] / COLLECTION_FILENAME

    if not profiles:
        raise NotFoundError(
            "Anki profile", str(base_dir),
            hint="No profile with a collection file was found. Use --profile or --collection",
        )

    raise NotFoundError(
        "Anki profile", "(auto)",
        hint=f"Several profiles found ({', '.join(profiles)}). Choose one with --profile",
    )
