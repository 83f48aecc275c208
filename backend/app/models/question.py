from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text, func
from sqlalchemy import text as sa_text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


CATEGORIES = ("aptitude", "logic", "cs-basics", "puzzles", "general")
DIFFICULTIES = ("easy", "medium", "hard")


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True)
    # Stable 1..N identifier; answers are keyed by it
    number: Mapped[int] = mapped_column(Integer, unique=True, index=True, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list[str]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)
    # Never serialized to participants
    correct_option_index: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="general",
        server_default=sa_text("'general'"),
    )
    difficulty: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="medium",
        server_default=sa_text("'medium'"),
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
