"""
Quiz model - one generated round of questions for a content
"""
import enum

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from studyquiz.database import Base
from studyquiz.utils.ids import generate_id
from studyquiz.utils.clock import utcnow


class QuizMode(str, enum.Enum):
    """How a follow-up quiz was generated; the first quiz of a content has no mode"""
    REINFORCEMENT = "reinforcement"
    PROGRESSION = "progression"


class Quiz(Base):
    """
    Quizzes table - ordered rounds of a content
    """
    __tablename__ = "quizzes"
    __table_args__ = (
        UniqueConstraint("content_id", "order_index", name="uq_quizzes_content_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    content_id = Column(
        String(36), ForeignKey("contents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_index = Column(Integer, nullable=False)
    mode = Column(String(20))  # None | QuizMode value
    feedback = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    content = relationship("Content", back_populates="quizzes")
    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.order_index",
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, content_id={self.content_id}, order={self.order_index}, mode={self.mode})>"
