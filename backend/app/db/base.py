from app.db.base_class import Base

# Import every model so Base.metadata knows all tables
from app.models.question import Question
from app.models.quiz_session import QuizSession
