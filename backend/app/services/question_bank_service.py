"""Bulk loading of the quiz question set.

Questions are loaded once at setup time and are read-only while a quiz runs.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InternalError, ValidationError
from app.models.question import CATEGORIES, DIFFICULTIES, Question

logger = logging.getLogger(__name__)

BASE_BANK_PATH = Path(__file__).resolve().parents[1] / "data" / "base_questions.json"


def _difficulty_for(position: int, total: int) -> str:
    # First 30% easy, next 30% medium, the rest hard
    if position < int(total * 0.3):
        return "easy"
    if position < int(total * 0.6):
        return "medium"
    return "hard"


def read_base_bank(path: Path = BASE_BANK_PATH) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as fh:
        items = json.load(fh)
    if not isinstance(items, list) or not items:
        raise ValidationError(f"Question bank {path.name} is empty")
    return items


def build_default_bank(total: Optional[int] = None, *, base: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
    """Expand the base bank to ``total`` numbered questions by cycling it."""
    total = int(total or settings.QUIZ_TOTAL_QUESTIONS)
    base = base if base is not None else read_base_bank()

    out: List[Dict[str, Any]] = []
    for i in range(total):
        item = base[i % len(base)]
        out.append(
            {
                "number": i + 1,
                "text": f"{str(item['q']).strip()} (Q{i + 1})",
                "options": list(item["options"]),
                "correct_option_index": int(item["answer"]),
                "category": item.get("category") or "general",
                "difficulty": _difficulty_for(i, total),
            }
        )
    return out


def normalize_question(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a question definition and return the cleaned column values."""
    try:
        number = int(payload["number"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError("Question number is required")
    if number < 1:
        raise ValidationError(f"Question {number}: number must be positive")

    text = str(payload.get("text") or "").strip()
    if not text:
        raise ValidationError(f"Question {number}: text must not be empty")

    options = payload.get("options") or []
    if not isinstance(options, list) or len(options) != 4:
        raise ValidationError(f"Question {number}: exactly four options are required")
    options = [str(o).strip() for o in options]
    if any(not o for o in options):
        raise ValidationError(f"Question {number}: option text cannot be empty")

    correct = payload.get("correct_option_index")
    if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < 4:
        raise ValidationError(f"Question {number}: correct option index must be between 0 and 3")

    category = str(payload.get("category") or "general").strip().lower()
    if category not in CATEGORIES:
        raise ValidationError(f"Question {number}: unknown category {category!r}")
    difficulty = str(payload.get("difficulty") or "medium").strip().lower()
    if difficulty not in DIFFICULTIES:
        raise ValidationError(f"Question {number}: unknown difficulty {difficulty!r}")

    return {
        "number": number,
        "text": text,
        "options": options,
        "correct_option_index": correct,
        "category": category,
        "difficulty": difficulty,
    }


def load_questions(db: Session, questions: Iterable[Mapping[str, Any]]) -> int:
    """Replace the whole question set in one transaction. Returns the count."""
    rows = [normalize_question(q) for q in questions]
    if not rows:
        raise ValidationError("Quiz must contain at least one question")

    seen: set[int] = set()
    for r in rows:
        if r["number"] in seen:
            raise ValidationError(f"Duplicate question number {r['number']}")
        seen.add(r["number"])

    try:
        deleted = db.query(Question).delete(synchronize_session=False)
        db.add_all(Question(**r) for r in rows)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Seeding questions failed")
        raise InternalError("Failed to seed questions") from exc

    logger.info("Question bank replaced: removed=%s inserted=%s", deleted, len(rows))
    return len(rows)


def seed_default_questions(db: Session, total: Optional[int] = None) -> int:
    return load_questions(db, build_default_bank(total))


def count_questions(db: Session) -> int:
    return int(db.query(func.count(Question.id)).scalar() or 0)
