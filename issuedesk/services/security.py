from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict

import jwt
import bcrypt

from issuedesk.core.config import settings


def hash_password(password: str) -> str:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        raise ValueError("Password exceeds bcrypt maximum length")
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _load_key(path: Path) -> str:
    if not path.exists():
        raise FileNotFoundError(f"Key file missing: {path}")
    return path.read_text()


_KEY_CACHE: dict[Path, str] = {}


def _key(path: Path) -> str:
    if path not in _KEY_CACHE:
        _KEY_CACHE[path] = _load_key(path)
    return _KEY_CACHE[path]


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, _key(settings.jwt_private_key_path), algorithm=settings.jwt_alg)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token, _key(settings.jwt_public_key_path), algorithms=[settings.jwt_alg]
        )
    except jwt.PyJWTError as exc:
        raise ValueError("Invalid token") from exc


def mask_sensitive(value: str, visible: int = 4) -> str:
    if not value:
        return value
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}***"
