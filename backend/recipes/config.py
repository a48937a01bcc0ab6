from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class UploadConfig:
    upload_dir: Path = Path(os.getenv("UPLOAD_DIR", "uploads"))
    url_prefix: str = "uploads"
    max_file_size: int = 5 * 1024 * 1024  # 5MB
    allowed_types: tuple[str, ...] = field(default=("jpg", "jpeg", "png"))


DEFAULT_UPLOAD_CONFIG = UploadConfig()
