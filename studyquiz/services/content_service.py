"""
Content workflows - create study material with its first quiz, read, list, delete
"""
import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from studyquiz.config import settings
from studyquiz.errors import ErrorKind, QuizEngineError, wrap_error
from studyquiz.models import Content, Quiz
from studyquiz.repositories import Repositories
from studyquiz.schemas.content import ContentDetail, ContentListItem, QuizDetail
from studyquiz.services.access import load_owned_content
from studyquiz.services.quiz_builder import QuizBuildEngine
from studyquiz.services.quiz_service import build_question_views
from studyquiz.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ContentWithQuiz:
    content: Content
    quiz: Quiz
    questions_created: int


class ContentService:
    """Service for study material and its first generated quiz"""

    def __init__(self, db: Session, generator):
        self.db = db
        self.repos = Repositories(db)
        self.generator = generator
        self.builder = QuizBuildEngine(self.repos)

    def create_content(self, raw_text: str, owner_id: str) -> ContentWithQuiz:
        """
        Create a content and its first quiz

        Steps:
        1. Generate title and description
        2. Generate the first question set
        3. Persist content, quiz (order 1, no mode) and questions in one transaction
        """
        try:
            raw_text = self._validate_raw_text(raw_text)
            logger.info(f"Creating content for user {owner_id}: {raw_text[:50]}...")

            generated = self.generator.generate_title_description(raw_text)
            logger.info(f"Generated title: {generated.title!r}")

            question_set = self.generator.generate_quiz(
                raw_text, generated.title, generated.description
            )

            content = self.repos.contents.create(
                raw_input=raw_text,
                title=generated.title,
                description=generated.description,
                owner_id=owner_id,
                created_at=utcnow(),
            )
            quiz = self.repos.quizzes.create(
                content_id=content.id,
                order_index=1,
                mode=None,
                created_at=utcnow(),
            )
            questions_created = self.builder.build_quiz(quiz.id, question_set.questions)

            self.db.commit()
            logger.info(f"Content {content.id} created with {questions_created} questions")
            return ContentWithQuiz(content=content, quiz=quiz, questions_created=questions_created)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create content: {str(e)}", exc_info=True)
            raise wrap_error("failed to create content", e, ErrorKind.GENERATION_FAILURE)

    def get_content_detail(self, content_id: str, user_id: str) -> ContentDetail:
        """Content with every quiz, its questions, latest summary and finalized status"""
        content = load_owned_content(self.repos, content_id, user_id)

        quizzes = []
        for quiz in self.repos.quizzes.find_by_parent(content.id):
            questions = self.repos.questions.find_by_parent(quiz.id)
            last_finished = self.repos.attempts.find_last_finished(quiz.id, user_id)
            summary = self.repos.summaries.find_latest(quiz.id)

            quizzes.append(
                QuizDetail(
                    id=quiz.id,
                    order_index=quiz.order_index,
                    mode=quiz.mode,
                    feedback=quiz.feedback,
                    created_at=quiz.created_at,
                    questions=build_question_views(self.repos, questions),
                    latest_summary=summary.text if summary else None,
                    finalized=last_finished is not None,
                    finished_at=last_finished.finished_at if last_finished else None,
                    finalized_attempt_number=last_finished.attempt_number if last_finished else None,
                )
            )

        return ContentDetail(
            id=content.id,
            title=content.title,
            description=content.description,
            raw_input=content.raw_input,
            owner_id=content.owner_id,
            created_at=content.created_at,
            quizzes=quizzes,
        )

    def list_contents(self, user_id: str) -> List[ContentListItem]:
        """The user's contents with quiz and question totals"""
        items = []
        for content in self.repos.contents.find_by_parent(user_id):
            quizzes = self.repos.quizzes.find_by_parent(content.id)
            counts = self.repos.questions.count_by_quizzes([quiz.id for quiz in quizzes])
            items.append(
                ContentListItem(
                    id=content.id,
                    title=content.title,
                    description=content.description,
                    created_at=content.created_at,
                    total_quizzes=len(quizzes),
                    total_questions=sum(counts.values()),
                )
            )
        return items

    def delete_content(self, content_id: str, user_id: str) -> None:
        """Hard delete a content and everything generated for it"""
        try:
            content = load_owned_content(self.repos, content_id, user_id)
            self.repos.contents.delete(content.id)
            self.db.commit()
            logger.info(f"Content {content_id} deleted")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete content {content_id}: {str(e)}")
            raise wrap_error("failed to delete content", e)

    def _validate_raw_text(self, raw_text: str) -> str:
        if not isinstance(raw_text, str) or not raw_text.strip():
            raise QuizEngineError.validation("Field 'raw_text' is required and must be non-empty text")

        raw_text = raw_text.strip()
        if len(raw_text) > settings.MAX_CONTENT_LENGTH:
            raise QuizEngineError.validation(
                f"Content cannot be longer than {settings.MAX_CONTENT_LENGTH} characters"
            )
        return raw_text
