"""Error taxonomy for the quiz services.

Services raise these; the handlers registered in ``app.main`` turn them into
the standard ``{success: false, message}`` envelope with the matching status.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class QuizError(Exception):
    code = "QUIZ_ERROR"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_error(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return error


class ValidationError(QuizError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(QuizError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Invalid session"


class AlreadySubmittedError(QuizError):
    code = "ALREADY_SUBMITTED"
    status_code = 400
    default_message = "Quiz already submitted"


class AlreadyGrantedError(QuizError):
    code = "ALREADY_GRANTED"
    status_code = 400
    default_message = "Bonus time already selected"


class UnauthorizedError(QuizError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Unauthorized. Invalid credentials."


class InternalError(QuizError):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"
