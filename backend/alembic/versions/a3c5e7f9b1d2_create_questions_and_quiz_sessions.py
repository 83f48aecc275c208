"""create questions and quiz_sessions

Revision ID: a3c5e7f9b1d2
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "a3c5e7f9b1d2"
down_revision = None
branch_labels = None
depends_on = None


def _json():
    return sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("options", _json(), nullable=False),
        sa.Column("correct_option_index", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=20), server_default=sa.text("'general'"), nullable=False),
        sa.Column("difficulty", sa.String(length=10), server_default=sa.text("'medium'"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_questions_number"), "questions", ["number"], unique=True)

    op.create_table(
        "quiz_sessions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("session_id", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("answers_json", _json(), nullable=False),
        sa.Column("answers_version", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("bonus_granted", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("bonus_minutes", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("bonus_penalty", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("is_submitted", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("correct_count", sa.Integer(), nullable=True),
        sa.Column("final_score", sa.Integer(), nullable=True),
        sa.Column("elapsed_seconds", sa.Integer(), nullable=True),
        sa.Column("avg_seconds_per_question", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_quiz_sessions_session_id"), "quiz_sessions", ["session_id"], unique=True)
    op.create_index(op.f("ix_quiz_sessions_is_submitted"), "quiz_sessions", ["is_submitted"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_quiz_sessions_is_submitted"), table_name="quiz_sessions")
    op.drop_index(op.f("ix_quiz_sessions_session_id"), table_name="quiz_sessions")
    op.drop_table("quiz_sessions")
    op.drop_index(op.f("ix_questions_number"), table_name="questions")
    op.drop_table("questions")
