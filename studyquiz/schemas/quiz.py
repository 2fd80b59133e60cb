"""
Pydantic schemas for quiz-related requests and responses
"""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional


class AnswerSubmission(BaseModel):
    """One chosen option"""
    question_id: str = Field(..., min_length=1)
    option_id: str = Field(..., min_length=1)


class FinalizeRequest(BaseModel):
    """Schema for quiz submission"""
    answers: List[AnswerSubmission] = Field(..., description="One answer per question of the quiz")


class DetailedAnswer(BaseModel):
    """Grading details for a single question"""
    question_id: str
    statement: str
    chosen_option_id: str
    chosen_text: str
    correct_option_id: str
    correct_text: str
    is_correct: bool
    explanation: Optional[str] = None


class FinalizeResult(BaseModel):
    """Response after a quiz is finalized"""
    attempt_id: str
    quiz_id: str
    total_questions: int
    correct_count: int
    incorrect_count: int
    percentage: int
    detailed_answers: List[DetailedAnswer]
    summary_text: str
    attempt_number: int


class OptionView(BaseModel):
    id: str
    order_index: int
    text: str
    correct: bool


class QuestionView(BaseModel):
    id: str
    order_index: int
    statement: str
    explanation: Optional[str] = None
    options: List[OptionView]


class AnswerHistoryItem(BaseModel):
    """An answer of the last finalized attempt"""
    question_id: str
    statement: str
    chosen_option_id: str
    chosen_text: str
    is_correct: bool
    answered_at: datetime
    correct_option_id: Optional[str] = None
    correct_text: Optional[str] = None


class QuizForTaking(BaseModel):
    """A quiz with its questions, options and the last finalized attempt"""
    quiz_id: str
    content_id: str
    title: str
    description: Optional[str] = None
    mode: Optional[str] = None
    order_index: int
    questions: List[QuestionView]
    total_questions: int
    finalized: bool
    finished_at: Optional[datetime] = None
    finalized_attempt_number: Optional[int] = None
    answer_history: Optional[List[AnswerHistoryItem]] = None


class QuizListItem(BaseModel):
    quiz_id: str
    content_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    mode: Optional[str] = None
    order_index: int
    total_questions: int
    created_at: datetime


class SummaryResponse(BaseModel):
    text: Optional[str] = None
