from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AuthConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "ezy-cook-secret-change-in-production")
    otp_ttl_seconds: int = int(os.getenv("OTP_TTL_SECONDS", "300"))
    otp_digits: int = 4
    admin_username: str = os.getenv("ADMIN_USERNAME", "admin")
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@ezycook.app")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "admin123")


DEFAULT_AUTH_CONFIG = AuthConfig()
