"""Participant session lifecycle and server-side scoring.

A session moves through three server-visible states:

    active -> active_bonus (optional, once) -> submitted (terminal)

Both transitions are one-way booleans on the row (``bonus_granted`` and
``is_submitted``) and are applied with conditional UPDATEs so that, of two
concurrent requests, exactly one wins and the other sees the guard error.
The "bonus pending" phase between the base countdown and the extension is a
client-side timer event and has no server representation.

Answer saves are a read-merge-write; the write is a compare-and-swap on
``answers_version`` that also requires ``is_submitted`` to still be false, so
a save never lands on a submitted row and two saves never drop each other.
"""

from __future__ import annotations

import logging
import math
import secrets
import string
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    AlreadyGrantedError,
    AlreadySubmittedError,
    InternalError,
    NotFoundError,
    QuizError,
    ValidationError,
)
from app.models.question import Question
from app.models.quiz_session import QuizSession

logger = logging.getLogger(__name__)

# Extension length (minutes) -> score penalty
BONUS_PENALTIES: Dict[int, int] = {15: -3, 20: -5, 30: -8}

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
OPTION_COUNT = 4

SESSION_ID_ALPHABET = string.ascii_lowercase + string.digits
SESSION_ID_RANDOM_LENGTH = 12
_CREATE_ATTEMPTS = 3
_SAVE_ATTEMPTS = 5


class SessionState(str, Enum):
    ACTIVE = "active"
    ACTIVE_BONUS = "active_bonus"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class SessionResult:
    correct_count: int
    final_score: int
    elapsed_seconds: int
    answered_count: int
    avg_seconds_per_question: float


def generate_session_id() -> str:
    """Millisecond timestamp plus a random alphanumeric suffix."""
    stamp = int(time.time() * 1000)
    suffix = "".join(secrets.choice(SESSION_ID_ALPHABET) for _ in range(SESSION_ID_RANDOM_LENGTH))
    return f"{stamp}-{suffix}"


def session_state(row: Any) -> SessionState:
    if row.is_submitted:
        return SessionState.SUBMITTED
    if row.bonus_granted:
        return SessionState.ACTIVE_BONUS
    return SessionState.ACTIVE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on round-trip
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    value = _as_utc(value)
    return value.isoformat() if value is not None else None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def stored_answers(row: Any) -> Dict[int, Any]:
    """Decode ``answers_json`` (string keys) into an int-keyed mapping."""
    out: Dict[int, Any] = {}
    for key, value in (row.answers_json or {}).items():
        try:
            out[int(key)] = value
        except (TypeError, ValueError):
            continue
    return out


def score_answers(questions: Iterable[Any], answers: Mapping[int, Any]) -> int:
    correct = 0
    for q in questions:
        chosen = answers.get(int(q.number))
        if chosen is not None and chosen == q.correct_option_index:
            correct += 1
    return correct


def compute_results(
    *,
    questions: Iterable[Any],
    answers: Mapping[int, Any],
    bonus_penalty: int,
    started_at: datetime,
    ended_at: datetime,
) -> SessionResult:
    correct_count = score_answers(questions, answers)
    # Penalty is <= 0; the score never drops below zero
    final_score = max(0, correct_count + int(bonus_penalty or 0))

    delta = _as_utc(ended_at) - _as_utc(started_at)
    elapsed_seconds = max(0, math.floor(delta.total_seconds()))

    answered_count = len(answers)
    avg = round(elapsed_seconds / answered_count, 2) if answered_count > 0 else 0.0

    return SessionResult(
        correct_count=correct_count,
        final_score=final_score,
        elapsed_seconds=elapsed_seconds,
        answered_count=answered_count,
        avg_seconds_per_question=avg,
    )


def public_question(q: Question) -> Dict[str, Any]:
    return {
        "id": int(q.id),
        "number": int(q.number),
        "question": q.text,
        "options": list(q.options or []),
        "category": q.category,
    }


@contextmanager
def _store_guard(db: Session, failure_message: str) -> Iterator[None]:
    """Roll back on any failure; store errors surface as InternalError."""
    try:
        yield
    except QuizError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s", failure_message)
        raise InternalError(failure_message) from exc


def _require_session_id(session_id: Optional[str]) -> str:
    sid = (session_id or "").strip()
    if not sid:
        raise ValidationError("Session ID required")
    return sid


def _get_session(db: Session, session_id: str, *, for_update: bool = False, not_found_message: str = "Invalid session") -> QuizSession:
    # Always reload; a losing guard must see the row the winner committed
    q = db.query(QuizSession).filter(QuizSession.session_id == session_id).populate_existing()
    if for_update:
        q = q.with_for_update()
    row = q.first()
    if not row:
        raise NotFoundError(not_found_message)
    return row


def _validate_answer_delta(answers: Optional[Mapping[Any, Any]]) -> Dict[int, int]:
    if answers is None:
        return {}
    if not isinstance(answers, Mapping):
        raise ValidationError("Answers must be an object of question number to option index")

    delta: Dict[int, int] = {}
    for key, value in answers.items():
        if _is_int(key):
            number = key
        elif isinstance(key, str) and key.strip().isdigit():
            number = int(key.strip())
        else:
            raise ValidationError(f"Invalid question number: {key!r}")
        if number < 1:
            raise ValidationError(f"Invalid question number: {key!r}")
        if not _is_int(value) or not 0 <= value < OPTION_COUNT:
            raise ValidationError(f"Invalid option index for question {number}")
        delta[number] = value
    return delta


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def create_session(db: Session, display_name: Optional[str]) -> Dict[str, Any]:
    name = (display_name or "").strip()
    if len(name) < NAME_MIN_LENGTH:
        raise ValidationError("Name must be at least 2 characters long")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError("Name must be at most 100 characters long")

    for attempt in range(1, _CREATE_ATTEMPTS + 1):
        row = QuizSession(
            session_id=generate_session_id(),
            display_name=name,
            started_at=_utcnow(),
            answers_json={},
            answers_version=0,
            bonus_granted=False,
            bonus_minutes=0,
            bonus_penalty=0,
            is_submitted=False,
        )
        try:
            db.add(row)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Session id collision, regenerating (attempt %s)", attempt)
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to start quiz")
            raise InternalError("Failed to start quiz. Please try again.") from exc

        db.refresh(row)
        logger.info("Quiz started for %s (session %s)", row.display_name, row.session_id)
        return {
            "sessionId": row.session_id,
            "name": row.display_name,
            "startTime": isoformat_utc(row.started_at),
            "baseMinutes": settings.QUIZ_BASE_MINUTES,
        }

    raise InternalError("Failed to start quiz. Please try again.")


def list_questions_for_session(db: Session, session_id: Optional[str]) -> Dict[str, Any]:
    sid = _require_session_id(session_id)
    with _store_guard(db, "Failed to fetch questions"):
        row = _get_session(db, sid)
        if row.is_submitted:
            raise AlreadySubmittedError()
        questions = db.query(Question).order_by(Question.number.asc()).all()

    return {
        "questions": [public_question(q) for q in questions],
        "totalQuestions": len(questions),
    }


def save_answers(db: Session, session_id: Optional[str], answers: Optional[Mapping[Any, Any]]) -> Dict[str, Any]:
    """Merge ``answers`` into the stored map; last write wins per question."""
    sid = _require_session_id(session_id)
    delta = _validate_answer_delta(answers)

    with _store_guard(db, "Failed to save answers"):
        for attempt in range(1, _SAVE_ATTEMPTS + 1):
            row = _get_session(db, sid, for_update=True)
            if row.is_submitted:
                raise AlreadySubmittedError()

            version = int(row.answers_version or 0)
            merged = dict(row.answers_json or {})
            for number, index in delta.items():
                merged[str(number)] = index

            # Lands only if nobody submitted or saved since the read above
            saved = (
                db.query(QuizSession)
                .filter(
                    QuizSession.session_id == sid,
                    QuizSession.is_submitted.is_(False),
                    QuizSession.answers_version == version,
                )
                .update(
                    {QuizSession.answers_json: merged, QuizSession.answers_version: version + 1},
                    synchronize_session=False,
                )
            )
            if saved:
                db.commit()
                return {"savedCount": len(merged)}

            db.rollback()
            logger.info("Concurrent write on session %s, re-reading answers (attempt %s)", sid, attempt)

    raise InternalError("Failed to save answers. Please try again.")


def select_bonus(db: Session, session_id: Optional[str], bonus_minutes: Any) -> Dict[str, Any]:
    sid = _require_session_id(session_id)
    penalty = BONUS_PENALTIES.get(bonus_minutes) if _is_int(bonus_minutes) else None
    if penalty is None:
        raise ValidationError("Invalid bonus time selection")

    with _store_guard(db, "Failed to apply bonus time"):
        granted = (
            db.query(QuizSession)
            .filter(
                QuizSession.session_id == sid,
                QuizSession.bonus_granted.is_(False),
                QuizSession.is_submitted.is_(False),
            )
            .update(
                {
                    QuizSession.bonus_granted: True,
                    QuizSession.bonus_minutes: bonus_minutes,
                    QuizSession.bonus_penalty: penalty,
                },
                synchronize_session=False,
            )
        )
        if not granted:
            row = _get_session(db, sid)
            if row.bonus_granted:
                raise AlreadyGrantedError()
            raise AlreadySubmittedError()
        db.commit()

    logger.info("Bonus applied: %s min (penalty %s) for session %s", bonus_minutes, penalty, sid)
    return {"bonusMinutes": bonus_minutes, "penalty": penalty}


def submit_session(db: Session, session_id: Optional[str]) -> Dict[str, Any]:
    """Close the session and score it. Runs once; later calls fail."""
    sid = _require_session_id(session_id)

    with _store_guard(db, "Failed to submit quiz"):
        ended_at = _utcnow()
        claimed = (
            db.query(QuizSession)
            .filter(QuizSession.session_id == sid, QuizSession.is_submitted.is_(False))
            .update(
                {QuizSession.is_submitted: True, QuizSession.ended_at: ended_at},
                synchronize_session=False,
            )
        )
        if not claimed:
            _get_session(db, sid)
            raise AlreadySubmittedError()

        row = db.query(QuizSession).filter(QuizSession.session_id == sid).populate_existing().one()
        questions = db.query(Question).all()
        result = compute_results(
            questions=questions,
            answers=stored_answers(row),
            bonus_penalty=row.bonus_penalty,
            started_at=row.started_at,
            ended_at=ended_at,
        )

        row.correct_count = result.correct_count
        row.final_score = result.final_score
        row.elapsed_seconds = result.elapsed_seconds
        row.avg_seconds_per_question = result.avg_seconds_per_question
        db.commit()

    logger.info(
        "Quiz submitted by %s: correct=%s/%s score=%s time=%ss",
        row.display_name,
        result.correct_count,
        len(questions),
        result.final_score,
        result.elapsed_seconds,
    )

    return {
        "name": row.display_name,
        "totalCorrect": result.correct_count,
        "totalQuestions": len(questions),
        "totalScore": result.final_score,
        "bonusTimeUsed": int(row.bonus_minutes or 0),
        "bonusPenalty": int(row.bonus_penalty or 0),
        "totalTimeSpent": result.elapsed_seconds,
        "averageTimePerQuestion": result.avg_seconds_per_question,
        "submittedAt": isoformat_utc(ended_at),
    }


def session_status(db: Session, session_id: Optional[str]) -> Dict[str, Any]:
    sid = _require_session_id(session_id)
    with _store_guard(db, "Failed to fetch session status"):
        row = _get_session(db, sid, not_found_message="Session not found")

    return {
        "isSubmitted": bool(row.is_submitted),
        "bonusSelected": bool(row.bonus_granted),
        "startTime": isoformat_utc(row.started_at),
        "answeredCount": len(row.answers_json or {}),
        "state": session_state(row).value,
        "baseMinutes": settings.QUIZ_BASE_MINUTES,
        "bonusMinutes": int(row.bonus_minutes or 0),
    }
