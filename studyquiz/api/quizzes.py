"""
Quiz taking, finalization and summary API endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
import logging
from studyquiz.api.deps import get_current_user_id, get_generator
from studyquiz.database import get_db
from studyquiz.schemas.quiz import (
    FinalizeRequest,
    FinalizeResult,
    QuizForTaking,
    QuizListItem,
    SummaryResponse,
)
from studyquiz.services.finalization_service import FinalizationService
from studyquiz.services.quiz_service import QuizService


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[QuizListItem])
def list_quizzes(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List every quiz of the user's contents, newest first"""
    return QuizService(db).list_quizzes(user_id)


@router.get("/by-content/{content_id}", response_model=QuizForTaking)
def get_quiz_for_content(
    content_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """First quiz of a content, ready to be taken"""
    return QuizService(db).get_quiz_for_content(content_id, user_id)


@router.get("/{quiz_id}", response_model=QuizForTaking)
def get_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Quiz for taking

    Returns questions with options and the correct flag, plus the answer
    history of the last finalized attempt when there is one.
    """
    return QuizService(db).get_quiz_for_taking(quiz_id, user_id)


@router.post("/{quiz_id}/finalize", response_model=FinalizeResult)
def finalize_quiz(
    quiz_id: str,
    submission: FinalizeRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator=Depends(get_generator),
):
    """
    Submit and score a quiz

    - Every question must be answered exactly once
    - Stores the attempt and its answers
    - Generates a review summary of the wrong answers
    """
    logger.info(f"Finalizing quiz {quiz_id} with {len(submission.answers)} answers")
    return FinalizationService(db, generator).finalize(quiz_id, user_id, submission.answers)


@router.get("/{quiz_id}/summary", response_model=SummaryResponse)
def get_summary(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    generator=Depends(get_generator),
):
    """Most recent review summary of a quiz, null until it is finalized"""
    text = FinalizationService(db, generator).get_summary(quiz_id, user_id)
    return SummaryResponse(text=text)
