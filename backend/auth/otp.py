"""
One-time passwords for password reset.

At most one live OTP exists per email: issuing a new code replaces any
earlier one, and a successful reset discards it.
"""
from __future__ import annotations

import secrets
import time
from typing import Any

from .config import DEFAULT_AUTH_CONFIG, AuthConfig

_otps: dict[str, dict[str, Any]] = {}


class OtpError(ValueError):
    """The submitted OTP is unknown or has expired."""


def issue_otp(email: str, config: AuthConfig = DEFAULT_AUTH_CONFIG) -> str:
    low = 10 ** (config.otp_digits - 1)
    code = str(low + secrets.randbelow(9 * low))
    _otps[email] = {
        "email": email,
        "otp": code,
        "expires_at": time.time() + config.otp_ttl_seconds,
    }
    return code


def verify_otp(email: str, otp: str) -> None:
    """Raise ``OtpError`` unless *otp* is the live code for *email*."""
    record = _otps.get(email)
    if record is None or not secrets.compare_digest(record["otp"].encode(), otp.encode()):
        raise OtpError("Invalid OTP")
    if record["expires_at"] < time.time():
        raise OtpError("OTP expired")


def discard_otps(email: str) -> None:
    _otps.pop(email, None)


def clear_otps() -> None:
    _otps.clear()
