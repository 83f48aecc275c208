from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from fastapi import Request


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def envelope(
    request_id: str,
    data: Any = None,
    error: Optional[Dict[str, Any]] = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "request_id": request_id,
        "success": error is None,
        "message": message if message is not None else (error or {}).get("message"),
        "data": data,
        "error": error,
    }


def ok(request: Request, data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    return envelope(request_id_of(request), data=data, message=message)
