from __future__ import annotations

from pydantic import BaseModel


class AdminAuthRequest(BaseModel):
    name: str = ""
