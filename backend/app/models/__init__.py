from app.models.question import Question
from app.models.quiz_session import QuizSession

__all__ = [
    "Question",
    "QuizSession",
]
