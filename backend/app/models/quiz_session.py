from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


class QuizSession(Base):
    __tablename__ = "quiz_sessions"

    id: Mapped[int] = mapped_column(primary_key=True)
    # Capability token handed to the participant; the only way to act on the row
    session_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # {"<question number>": <option index>}
    answers_json: Mapped[dict[str, int]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    # Bumped on every answer write; saves compare-and-swap on it
    answers_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    bonus_granted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    bonus_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    bonus_penalty: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))

    is_submitted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"), index=True)

    # Set once, at submission
    correct_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    final_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    elapsed_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    avg_seconds_per_question: Mapped[float | None] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
