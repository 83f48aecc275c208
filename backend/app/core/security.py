from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.core.config import settings


ADMIN_ROLE = "admin"


def create_access_token(*, subject: str, expires_minutes: Optional[int] = None, extra: Optional[Dict[str, Any]] = None) -> str:
    minutes = int(expires_minutes or settings.ADMIN_TOKEN_EXPIRE_MINUTES or 720)
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=minutes)

    to_encode: Dict[str, Any] = {
        "sub": str(subject),
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp()),
    }
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_admin_token() -> str:
    return create_access_token(subject=ADMIN_ROLE, extra={"role": ADMIN_ROLE})


def decode_token(token: str, *, secret_key: str, algorithm: str) -> Dict[str, Any]:
    return jwt.decode(token, secret_key, algorithms=[algorithm])


def safe_decode_token(token: str, *, secret_key: str, algorithm: str) -> Optional[Dict[str, Any]]:
    try:
        return decode_token(token, secret_key=secret_key, algorithm=algorithm)
    except JWTError:
        return None


def is_valid_admin_token(token: Optional[str], *, secret_key: str, algorithm: str) -> bool:
    """True when ``token`` is an unexpired admin token signed with ``secret_key``."""
    if not token:
        return False
    claims = safe_decode_token(token, secret_key=secret_key, algorithm=algorithm)
    if not claims:
        return False
    return claims.get("role") == ADMIN_ROLE
