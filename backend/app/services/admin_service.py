from __future__ import annotations

import logging
import secrets
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InternalError, UnauthorizedError
from app.core.security import create_admin_token
from app.models.quiz_session import QuizSession
from app.services.quiz_session_service import isoformat_utc

logger = logging.getLogger(__name__)

SORT_KEYS = ("recency", "score", "speed")
DEFAULT_SORT_KEY = "recency"


def authenticate_admin(name: Optional[str], *, admin_name: Optional[str] = None) -> Dict[str, Any]:
    """Grant an admin token iff ``name`` equals the reserved admin name exactly."""
    expected = settings.ADMIN_NAME if admin_name is None else admin_name
    given = name if isinstance(name, str) else ""
    if not expected or not secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Admin access denied")
        raise UnauthorizedError()

    logger.info("Admin access granted")
    return {"adminToken": create_admin_token(), "isAdmin": True}


def _order_by(sort_by: str):
    if sort_by == "score":
        # Highest score first; faster wins ties
        return (QuizSession.final_score.desc(), QuizSession.elapsed_seconds.asc(), QuizSession.id.asc())
    if sort_by == "speed":
        return (QuizSession.avg_seconds_per_question.asc(), QuizSession.id.asc())
    return (QuizSession.ended_at.desc(), QuizSession.id.desc())


def list_submitted_sessions(db: Session, sort_by: Optional[str] = None) -> Dict[str, Any]:
    key = sort_by if sort_by in SORT_KEYS else DEFAULT_SORT_KEY

    try:
        rows = (
            db.query(QuizSession)
            .filter(QuizSession.is_submitted.is_(True))
            .order_by(*_order_by(key))
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Leaderboard query failed")
        raise InternalError("Failed to fetch participants data") from exc

    participants = [
        {
            "rank": rank,
            "name": r.display_name,
            "totalScore": int(r.final_score or 0),
            "totalCorrect": int(r.correct_count or 0),
            "bonusTimeUsed": int(r.bonus_minutes or 0),
            "bonusPenalty": int(r.bonus_penalty or 0),
            "totalTimeSpent": int(r.elapsed_seconds or 0),
            "averageSpeed": float(r.avg_seconds_per_question or 0.0),
            "submittedAt": isoformat_utc(r.ended_at),
        }
        for rank, r in enumerate(rows, start=1)
    ]

    logger.info("Admin accessed leaderboard: %s participants (sort=%s)", len(participants), key)
    return {"participants": participants, "total": len(participants)}
