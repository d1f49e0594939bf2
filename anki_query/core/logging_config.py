# Path: anki_query/core/logging_config.py
import logging
from pathlib import Path
from typing import Optional
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

from anki_query.core.config import settings


def setup_logging(log_level: str = "WARNING", log_dir: Optional[Path] = None) -> None:
    """
    Thiết lập hệ thống logging cho toàn bộ dự án.

    - Console: RichHandler ghi ra stderr, stdout dành riêng cho JSON.
    - File: RotatingFileHandler lưu log chi tiết, tự động xoay file.
      Không tạo được thư mục/file log thì chỉ log ra console.
    """
    log_dir = log_dir or settings.LOG_DIR

    # 1. Định dạng Log
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_formatter = logging.Formatter("%(message)s")

    # 2. Handlers
    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False
    )
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(log_level)
    handlers = [console_handler]

    # File Handler: 5MB, giữ lại 3 file cũ nhất
    file_error = None
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "anki_query.log",
            maxBytes=5*1024*1024,
            backupCount=3,
            encoding="utf-8"
        )
    except OSError as e:
        file_error = e
    else:
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    # 3. Root Logger Configuration
    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        force=True
    )

    if file_error is not None:
        logging.getLogger(__name__).warning(f"File logging disabled ({log_dir}): {file_error}")
