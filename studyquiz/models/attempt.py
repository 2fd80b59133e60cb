"""
Attempt and Answer models - quiz submission history per user
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from studyquiz.database import Base
from studyquiz.utils.ids import generate_id
from studyquiz.utils.clock import utcnow


class Attempt(Base):
    """
    Attempts table - one numbered pass of a user through a quiz
    """
    __tablename__ = "attempts"
    __table_args__ = (
        UniqueConstraint("quiz_id", "user_id", "attempt_number", name="uq_attempts_number"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    quiz_id = Column(
        String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(64), nullable=False, index=True)
    attempt_number = Column(Integer, nullable=False)
    mode = Column(String(20))  # snapshot of quiz.mode
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    finished_at = Column(DateTime(timezone=True))

    answers = relationship(
        "Answer",
        back_populates="attempt",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Attempt(id={self.id}, quiz_id={self.quiz_id}, user_id={self.user_id}, number={self.attempt_number})>"


class Answer(Base):
    """
    Answers table - the option a user picked for one question of an attempt
    """
    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_answers_attempt_question"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    attempt_id = Column(
        String(36), ForeignKey("attempts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(
        String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    option_id = Column(String(36), ForeignKey("options.id", ondelete="CASCADE"), nullable=False)
    is_correct = Column(Boolean, nullable=False)
    answered_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    attempt = relationship("Attempt", back_populates="answers")

    def __repr__(self):
        return f"<Answer(attempt_id={self.attempt_id}, question_id={self.question_id}, correct={self.is_correct})>"
