"""Common FastAPI dependencies."""

from __future__ import annotations

from typing import Optional

from fastapi import Query

from app.core.config import settings
from app.core.errors import UnauthorizedError
from app.core.security import is_valid_admin_token
from app.db.session import get_db

__all__ = ["get_db", "require_admin_token"]


def require_admin_token(admin_token: Optional[str] = Query(default=None, alias="adminToken")) -> str:
    if not is_valid_admin_token(admin_token, secret_key=settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM):
        raise UnauthorizedError("Forbidden. Admin access required.", status_code=403)
    return str(admin_token)
