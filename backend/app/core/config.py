import json

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Resolve backend root (…/backend/) regardless of current working directory
BASE_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BASE_DIR / ".env"


class Settings(BaseSettings):
    # Read backend/.env; tolerate BOM and unknown keys
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Timed Quiz API"
    ENV: str = "dev"
    # JSON list in env files; a comma separated string is accepted when set directly
    # Example: ["http://localhost:5173","https://example.com"]
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    DATABASE_URL: str = "sqlite:///./quiz.db"
    # Create tables at startup (dev). Production runs `alembic upgrade head` instead.
    DB_AUTO_CREATE: bool = True

    LOG_LEVEL: str = "INFO"

    # ===== Admin =====
    # Exact, case-sensitive name that unlocks the leaderboard.
    ADMIN_NAME: str = "sam altman"
    JWT_SECRET_KEY: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 720

    # ===== Quiz =====
    # Size of the bank built by the seeder.
    QUIZ_TOTAL_QUESTIONS: int = 500
    # Base countdown shown by the client before the bonus prompt.
    QUIZ_BASE_MINUTES: int = 30

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if v is None or v == "":
            return []

        if isinstance(v, list):
            return v

        # Prefer a JSON list, fall back to comma separated
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                try:
                    return json.loads(s)
                except ValueError:
                    pass
            return [item.strip() for item in s.split(",") if item.strip()]

        return v

    @field_validator("QUIZ_TOTAL_QUESTIONS")
    @classmethod
    def _check_total_questions(cls, v: int) -> int:
        if v < 1:
            raise ValueError("QUIZ_TOTAL_QUESTIONS must be positive")
        return v


settings = Settings()
