from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StartQuizRequest(_CamelModel):
    name: str = ""


class SessionRequest(_CamelModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class SaveAnswersRequest(SessionRequest):
    # Keys arrive as strings ("12"); values are checked strictly by the service
    answers: Dict[str, Any] = Field(default_factory=dict)


class SelectBonusRequest(SessionRequest):
    # Checked against the offered options by the service; no coercion here
    bonus_minutes: Any = Field(default=None, alias="bonusMinutes")
