"""
Question and Option models - the normalized question graph of a quiz
"""
from sqlalchemy import Column, String, Integer, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from studyquiz.database import Base
from studyquiz.utils.ids import generate_id


class Question(Base):
    """
    Questions table - correct_option_id is set once the options exist
    """
    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("quiz_id", "order_index", name="uq_questions_quiz_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    quiz_id = Column(
        String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_index = Column(Integer, nullable=False)
    statement = Column(Text, nullable=False)
    explanation = Column(Text)
    # Plain column: a FK here would make questions and options mutually dependent
    correct_option_id = Column(String(36))

    quiz = relationship("Quiz", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Option.order_index",
    )

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, order={self.order_index})>"


class Option(Base):
    """
    Options table - four answer choices per question, immutable
    """
    __tablename__ = "options"
    __table_args__ = (
        UniqueConstraint("question_id", "order_index", name="uq_options_question_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    question_id = Column(
        String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_index = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)

    question = relationship("Question", back_populates="options")

    def __repr__(self):
        return f"<Option(id={self.id}, question_id={self.question_id}, order={self.order_index})>"
