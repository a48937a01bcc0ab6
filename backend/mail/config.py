from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class MailConfig:
    api_key: str = os.getenv("SENDGRID_API_KEY", "")
    from_email: str = os.getenv("MAIL_FROM", "no-reply@ezycook.app")
    from_name: str = os.getenv("MAIL_FROM_NAME", "Ezy Cook Recipe App")


DEFAULT_MAIL_CONFIG = MailConfig()
