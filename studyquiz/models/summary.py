"""
Summary model - append-only review texts produced after each finalize
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from studyquiz.database import Base
from studyquiz.utils.ids import generate_id
from studyquiz.utils.clock import utcnow


class Summary(Base):
    """
    Summaries table - the current summary of a quiz is the newest row
    """
    __tablename__ = "summaries"

    id = Column(String(36), primary_key=True, default=generate_id)
    quiz_id = Column(
        String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Summary(id={self.id}, quiz_id={self.quiz_id})>"
