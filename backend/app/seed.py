"""Seed the question bank.

Usage (from backend/):
    python -m app.seed            # QUIZ_TOTAL_QUESTIONS questions
    python -m app.seed 100        # custom size
"""

from __future__ import annotations

import sys

from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.question_bank_service import count_questions, seed_default_questions


def main(argv: list[str] | None = None) -> int:
    logger = configure_logging()
    args = sys.argv[1:] if argv is None else argv
    total = int(args[0]) if args else settings.QUIZ_TOTAL_QUESTIONS

    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        inserted = seed_default_questions(db, total)
        logger.info("Seeded %s questions; %s in database", inserted, count_questions(db))
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
