from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import bcrypt

from .config import DEFAULT_AUTH_CONFIG, AuthConfig

_users: dict[str, dict[str, Any]] = {}

PROFILE_FIELDS = ("name", "username", "email", "phoneNumber", "profileImage")


class UserExistsError(ValueError):
    """Username or email already belongs to another account."""


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _public(record: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in record.items() if k != "password_hash"}


def _find(username: str | None = None, email: str | None = None) -> dict[str, Any] | None:
    for record in _users.values():
        if username is not None and record["username"] == username:
            return record
        if email is not None and record["email"] == email:
            return record
    return None


def create_user(
    username: str, email: str, password: str, role: str = "user",
) -> dict[str, Any]:
    """Register a new account. Raises ``UserExistsError`` on a clash."""
    if _find(username=username, email=email):
        raise UserExistsError("Username or email already taken")
    now = datetime.now(timezone.utc)
    record = {
        "id": uuid.uuid4().hex,
        "username": username,
        "email": email,
        "password_hash": _hash_password(password),
        "role": role,
        "name": None,
        "phoneNumber": None,
        "profileImage": None,
        "createdAt": now,
        "updatedAt": now,
    }
    _users[record["id"]] = record
    return _public(record)


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the public user record or ``None``."""
    record = _find(username=username)
    if record and _verify_password(password, record["password_hash"]):
        return _public(record)
    return None


def get_user(user_id: str) -> dict[str, Any] | None:
    record = _users.get(user_id)
    return _public(record) if record else None


def get_user_by_email(email: str) -> dict[str, Any] | None:
    record = _find(email=email)
    return _public(record) if record else None


def set_password(email: str, new_password: str) -> bool:
    record = _find(email=email)
    if record is None:
        return False
    record["password_hash"] = _hash_password(new_password)
    record["updatedAt"] = datetime.now(timezone.utc)
    return True


def update_profile(
    user_id: str, changes: dict[str, str | None],
) -> tuple[dict[str, Any], list[str]] | None:
    """Apply non-empty profile *changes*.

    Returns ``(user, changed_field_names)``, or ``None`` for an unknown user.
    """
    record = _users.get(user_id)
    if record is None:
        return None

    updates = {k: v for k, v in changes.items() if k in PROFILE_FIELDS and v}
    for key in ("username", "email"):
        if key in updates:
            other = _find(**{key: updates[key]})
            if other is not None and other["id"] != user_id:
                raise UserExistsError("Username or email already taken")

    changed = [k for k in PROFILE_FIELDS if k in updates and updates[k] != record[k]]
    record.update(updates)
    if changed:
        record["updatedAt"] = datetime.now(timezone.utc)
    return _public(record), changed


def _seed_users(config: AuthConfig = DEFAULT_AUTH_CONFIG) -> None:
    """Pre-seed the admin account that curates system recipes."""
    create_user(
        config.admin_username, config.admin_email, config.admin_password, role="admin",
    )


def clear_users() -> None:
    _users.clear()
    _seed_users()


_seed_users()
