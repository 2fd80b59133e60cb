"""
Quiz read workflows - quiz for taking, quiz by content, quiz listing
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from studyquiz.errors import QuizEngineError
from studyquiz.models import Attempt, Question, Quiz
from studyquiz.repositories import Repositories
from studyquiz.schemas.quiz import (
    AnswerHistoryItem,
    OptionView,
    QuestionView,
    QuizForTaking,
    QuizListItem,
)
from studyquiz.services.access import load_owned_content, load_owned_quiz

logger = logging.getLogger(__name__)


def build_question_views(repos: Repositories, questions: List[Question]) -> List[QuestionView]:
    """Questions with their options, the correct one flagged"""
    views = []
    for question in questions:
        options = repos.options.find_by_parent(question.id)
        views.append(
            QuestionView(
                id=question.id,
                order_index=question.order_index,
                statement=question.statement,
                explanation=question.explanation,
                options=[
                    OptionView(
                        id=option.id,
                        order_index=option.order_index,
                        text=option.text,
                        correct=option.id == question.correct_option_id,
                    )
                    for option in options
                ],
            )
        )
    return sorted(views, key=lambda view: view.order_index)


class QuizService:
    """Read-only access to quizzes owned by a user"""

    def __init__(self, db: Session):
        self.db = db
        self.repos = Repositories(db)

    def get_quiz_for_taking(self, quiz_id: str, user_id: str) -> QuizForTaking:
        """
        Quiz with questions, options (correct flag included) and the last
        finalized attempt of the user, if any
        """
        quiz, content = load_owned_quiz(self.repos, quiz_id, user_id)

        questions = self.repos.questions.find_by_parent(quiz.id)
        if not questions:
            raise QuizEngineError.policy("This quiz has no questions")

        views = build_question_views(self.repos, questions)

        last_finished = self.repos.attempts.find_last_finished(quiz.id, user_id)
        history = self._answer_history(last_finished, views) if last_finished else None

        return QuizForTaking(
            quiz_id=quiz.id,
            content_id=content.id,
            title=content.title or "Untitled",
            description=content.description,
            mode=quiz.mode,
            order_index=quiz.order_index,
            questions=views,
            total_questions=len(views),
            finalized=last_finished is not None,
            finished_at=last_finished.finished_at if last_finished else None,
            finalized_attempt_number=last_finished.attempt_number if last_finished else None,
            answer_history=history,
        )

    def get_quiz_for_content(self, content_id: str, user_id: str) -> QuizForTaking:
        """First quiz of a content, ready to be taken"""
        content = load_owned_content(self.repos, content_id, user_id)

        quizzes = self.repos.quizzes.find_by_parent(content.id)
        if not quizzes:
            raise QuizEngineError.not_found("No quiz found for this content")

        return self.get_quiz_for_taking(quizzes[0].id, user_id)

    def list_quizzes(self, user_id: str) -> List[QuizListItem]:
        """Every quiz of the user's contents, newest first"""
        contents = {content.id: content for content in self.repos.contents.find_by_parent(user_id)}
        quizzes: List[Quiz] = self.repos.quizzes.find_by_contents(list(contents))
        counts = self.repos.questions.count_by_quizzes([quiz.id for quiz in quizzes])

        return [
            QuizListItem(
                quiz_id=quiz.id,
                content_id=quiz.content_id,
                title=contents[quiz.content_id].title,
                description=contents[quiz.content_id].description,
                mode=quiz.mode,
                order_index=quiz.order_index,
                total_questions=counts.get(quiz.id, 0),
                created_at=quiz.created_at,
            )
            for quiz in quizzes
        ]

    def _answer_history(
        self,
        attempt: Attempt,
        views: List[QuestionView],
    ) -> List[AnswerHistoryItem]:
        by_question = {view.id: view for view in views}
        history = []

        for answer in self.repos.answers.find_by_parent(attempt.id):
            view: Optional[QuestionView] = by_question.get(answer.question_id)
            options = view.options if view else []
            chosen = next((o for o in options if o.id == answer.option_id), None)
            correct = next((o for o in options if o.correct), None)

            history.append(
                AnswerHistoryItem(
                    question_id=answer.question_id,
                    statement=view.statement if view else "",
                    chosen_option_id=answer.option_id,
                    chosen_text=chosen.text if chosen else "",
                    is_correct=answer.is_correct,
                    answered_at=answer.answered_at,
                    correct_option_id=correct.id if correct else None,
                    correct_text=correct.text if correct else None,
                )
            )
        return history
