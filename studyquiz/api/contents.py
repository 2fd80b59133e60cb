"""
Content creation, follow-up generation and content read API endpoints
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List
import logging
from studyquiz.api.deps import get_current_user_id, get_generator
from studyquiz.database import get_db
from studyquiz.schemas.content import (
    ContentCreateRequest,
    ContentDetail,
    ContentListItem,
    ContentView,
    FollowUpRequest,
    QuizCreatedResponse,
    QuizView,
)
from studyquiz.services.content_service import ContentService
from studyquiz.services.follow_up_service import FollowUpService


router = APIRouter(prefix="/api/contents", tags=["contents"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuizCreatedResponse, status_code=201)
def create_content(
    request: ContentCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator=Depends(get_generator),
):
    """
    Create study material and its first quiz

    - Generates title and description with Gemini
    - Generates 7 multiple-choice questions with 4 options each
    - Stores content, quiz, questions and options
    """
    result = ContentService(db, generator).create_content(request.raw_text, user_id)

    return QuizCreatedResponse(
        content=ContentView.model_validate(result.content),
        quiz=QuizView.model_validate(result.quiz),
        questions_created=result.questions_created,
    )


@router.post("/{content_id}/follow-up", response_model=QuizCreatedResponse, status_code=201)
def generate_follow_up(
    content_id: str,
    request: FollowUpRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator=Depends(get_generator),
):
    """
    Generate the next quiz of a content

    - progression=true: targets the sub-topics of the most recent wrong answers
    - progression=false: new questions on the same material, no repeats
    """
    result = FollowUpService(db, generator).generate_follow_up(
        content_id, user_id, request.progression
    )

    return QuizCreatedResponse(
        content=ContentView.model_validate(result.content),
        quiz=QuizView.model_validate(result.quiz),
        questions_created=result.questions_created,
    )


@router.get("", response_model=List[ContentListItem])
def list_contents(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator=Depends(get_generator),
):
    """List the user's contents with quiz and question totals"""
    return ContentService(db, generator).list_contents(user_id)


@router.get("/{content_id}", response_model=ContentDetail)
def get_content(
    content_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator=Depends(get_generator),
):
    """Content with every quiz, its questions and options, latest summaries"""
    return ContentService(db, generator).get_content_detail(content_id, user_id)


@router.delete("/{content_id}", status_code=204)
def delete_content(
    content_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator=Depends(get_generator),
):
    """Delete a content and all quizzes, attempts and summaries under it"""
    ContentService(db, generator).delete_content(content_id, user_id)
    return Response(status_code=204)
