from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.responses import ok
from app.db.session import get_db
from app.services.question_bank_service import count_questions


router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request, db: Session = Depends(get_db)):
    return ok(request, {"status": "ok", "questions": count_questions(db)}, message="Quiz API is running")
