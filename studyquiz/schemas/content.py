"""
Pydantic schemas for content-related requests and responses
"""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from studyquiz.config import settings
from studyquiz.schemas.quiz import QuestionView


class ContentCreateRequest(BaseModel):
    """Request schema for new study material"""
    raw_text: str = Field(
        ...,
        min_length=1,
        max_length=settings.MAX_CONTENT_LENGTH,
        description="Text the user wants to study",
    )


class FollowUpRequest(BaseModel):
    """Request schema for the next quiz of a content"""
    progression: bool = Field(
        ...,
        description="True drills into recent mistakes, False asks new questions on the same material",
    )


class ContentView(BaseModel):
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    owner_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class QuizView(BaseModel):
    id: str
    content_id: str
    order_index: int
    mode: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class QuizCreatedResponse(BaseModel):
    """Response after a quiz is generated for a content"""
    content: ContentView
    quiz: QuizView
    questions_created: int


class QuizDetail(BaseModel):
    id: str
    order_index: int
    mode: Optional[str] = None
    feedback: Optional[str] = None
    created_at: datetime
    questions: List[QuestionView]
    latest_summary: Optional[str] = None
    finalized: bool
    finished_at: Optional[datetime] = None
    finalized_attempt_number: Optional[int] = None


class ContentDetail(BaseModel):
    """A content with every quiz generated for it"""
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    raw_input: str
    owner_id: str
    created_at: datetime
    quizzes: List[QuizDetail]


class ContentListItem(BaseModel):
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    total_quizzes: int
    total_questions: int
