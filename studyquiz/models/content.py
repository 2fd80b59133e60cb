"""
Content model - study material submitted by a user
"""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship
from studyquiz.database import Base
from studyquiz.utils.ids import generate_id
from studyquiz.utils.clock import utcnow


class Content(Base):
    """
    Contents table - raw study text plus its generated title and description
    """
    __tablename__ = "contents"

    id = Column(String(36), primary_key=True, default=generate_id)
    raw_input = Column(Text, nullable=False)
    title = Column(String(255))
    description = Column(Text)
    owner_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    quizzes = relationship(
        "Quiz",
        back_populates="content",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Quiz.order_index",
    )

    def __repr__(self):
        return f"<Content(id={self.id}, title={self.title})>"
