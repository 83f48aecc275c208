from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.responses import ok
from app.db.session import get_db
from app.schemas.quiz_session import SaveAnswersRequest, SelectBonusRequest, SessionRequest, StartQuizRequest
from app.services import quiz_session_service

router = APIRouter(tags=["quiz"])


@router.post("/start-quiz", status_code=201)
def start_quiz(request: Request, payload: StartQuizRequest, db: Session = Depends(get_db)):
    data = quiz_session_service.create_session(db, payload.name)
    return ok(request, data, message="Quiz started successfully")


@router.get("/questions")
def list_questions(request: Request, session_id: Optional[str] = Query(default=None, alias="sessionId"), db: Session = Depends(get_db)):
    data = quiz_session_service.list_questions_for_session(db, session_id)
    return ok(request, data)


@router.post("/save-answers")
def save_answers(request: Request, payload: SaveAnswersRequest, db: Session = Depends(get_db)):
    data = quiz_session_service.save_answers(db, payload.session_id, payload.answers)
    resp = ok(request, data, message="Answers saved")
    resp["savedCount"] = data["savedCount"]
    return resp


@router.post("/select-bonus")
def select_bonus(request: Request, payload: SelectBonusRequest, db: Session = Depends(get_db)):
    data = quiz_session_service.select_bonus(db, payload.session_id, payload.bonus_minutes)
    return ok(request, data, message="Bonus time applied")


@router.post("/submit-quiz")
def submit_quiz(request: Request, payload: SessionRequest, db: Session = Depends(get_db)):
    data = quiz_session_service.submit_session(db, payload.session_id)
    return ok(request, data, message="Quiz submitted successfully")


@router.get("/session-status")
def session_status(request: Request, session_id: Optional[str] = Query(default=None, alias="sessionId"), db: Session = Depends(get_db)):
    data = quiz_session_service.session_status(db, session_id)
    return ok(request, data)
