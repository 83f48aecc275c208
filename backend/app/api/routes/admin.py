from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import require_admin_token
from app.api.responses import ok
from app.db.session import get_db
from app.schemas.admin import AdminAuthRequest
from app.services import admin_service, question_bank_service

router = APIRouter(tags=["admin"])


@router.post("/admin/authenticate")
def authenticate(request: Request, payload: AdminAuthRequest):
    data = admin_service.authenticate_admin(payload.name)
    return ok(request, data, message="Admin authenticated")


@router.get("/admin/participants")
def list_participants(
    request: Request,
    sort_by: str = Query(default="recency", alias="sortBy"),
    db: Session = Depends(get_db),
    _admin_token: str = Depends(require_admin_token),
):
    data = admin_service.list_submitted_sessions(db, sort_by)
    return ok(request, data)


@router.post("/admin/seed")
def seed_questions(
    request: Request,
    db: Session = Depends(get_db),
    _admin_token: str = Depends(require_admin_token),
):
    inserted = question_bank_service.seed_default_questions(db)
    return ok(request, {"inserted": inserted}, message=f"Database seeded successfully with {inserted} questions")
