from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.services import quiz_session_service
from app.services.question_bank_service import load_questions

# number -> correct option index
ANSWER_KEY = {1: 0, 2: 2, 3: 1, 4: 3, 5: 1}


def make_questions(answer_key=None):
    answer_key = ANSWER_KEY if answer_key is None else answer_key
    return [
        {
            "number": number,
            "text": f"Question {number}",
            "options": ["A", "B", "C", "D"],
            "correct_option_index": correct,
            "category": "general",
        }
        for number, correct in answer_key.items()
    ]


class FixedClock(datetime):
    """Stand-in for ``datetime`` inside the service module; advance ``current`` to move time."""

    current = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)

    @classmethod
    def now(cls, tz=None):
        if tz is not None:
            return cls.current.astimezone(tz)
        return cls.current


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def seeded_db(db):
    load_questions(db, make_questions())
    return db


@pytest.fixture()
def clock(monkeypatch):
    FixedClock.current = datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(quiz_session_service, "datetime", FixedClock)
    return FixedClock


@pytest.fixture()
def client(session_factory):
    seed = session_factory()
    try:
        load_questions(seed, make_questions())
    finally:
        seed.close()

    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def file_session_factory(tmp_path):
    """Seeded on-disk database; every session gets its own connection."""
    eng = create_engine(
        f"sqlite:///{tmp_path / 'quiz.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=eng)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=eng)
    seed = factory()
    try:
        load_questions(seed, make_questions())
    finally:
        seed.close()
    yield factory
    eng.dispose()
