"""
Attempt scoring engine

Scores a submitted attempt against the stored question graph, records the
attempt with its answers and stores a review summary, all in one
transaction.
"""
import logging
import math
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from studyquiz.config import settings
from studyquiz.errors import QuizEngineError, wrap_error
from studyquiz.repositories import Repositories
from studyquiz.schemas.generation import NO_EXPLANATION, WrongAnswerDetail
from studyquiz.schemas.quiz import AnswerSubmission, DetailedAnswer, FinalizeResult
from studyquiz.services.access import load_owned_quiz
from studyquiz.services.summary_service import SummaryGenerator
from studyquiz.utils.clock import utcnow

logger = logging.getLogger(__name__)


def score_percentage(correct: int, total: int) -> int:
    """Percentage of correct answers rounded half up"""
    if total <= 0:
        return 0
    return int(math.floor(correct / total * 100 + 0.5))


class FinalizationService:
    """Service for finalizing quiz attempts and reading their summaries"""

    def __init__(self, db: Session, generator):
        self.db = db
        self.repos = Repositories(db)
        self.summary_generator = SummaryGenerator(generator)

    def finalize(
        self,
        quiz_id: str,
        user_id: str,
        answers: List[AnswerSubmission],
    ) -> FinalizeResult:
        """
        Score a full submission and store the attempt

        The attempt number is count + 1, guarded by a unique constraint; a
        concurrent finalize for the same (quiz, user) makes the loser retry.
        """
        try:
            logger.info(f"Finalizing quiz {quiz_id} for user {user_id}")
            retries = max(settings.ATTEMPT_NUMBER_RETRIES, 1)

            for retry_number in range(1, retries + 1):
                try:
                    result = self._finalize_once(quiz_id, user_id, answers)
                    self.db.commit()
                    break
                except IntegrityError:
                    self.db.rollback()
                    if retry_number == retries:
                        raise
                    logger.warning(
                        f"Attempt number conflict on quiz {quiz_id} for user {user_id}, "
                        f"retrying ({retry_number}/{retries})"
                    )

            logger.info(
                f"Attempt {result.attempt_number} of quiz {quiz_id} finalized: "
                f"{result.correct_count} correct, {result.incorrect_count} incorrect"
            )
            return result

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to finalize quiz {quiz_id}: {str(e)}", exc_info=True)
            raise wrap_error("failed to finalize quiz", e)

    def _finalize_once(
        self,
        quiz_id: str,
        user_id: str,
        answers: List[AnswerSubmission],
    ) -> FinalizeResult:
        quiz, content = load_owned_quiz(self.repos, quiz_id, user_id)

        questions = self.repos.questions.find_by_parent(quiz.id)
        if not questions:
            raise QuizEngineError.policy("This quiz has no questions")

        total = len(questions)
        if len(answers) != total:
            raise QuizEngineError.validation(
                f"You must answer all {total} questions (received {len(answers)} answers)"
            )

        seen = set()
        for submitted in answers:
            if submitted.question_id in seen:
                raise QuizEngineError.validation(
                    f"Question {submitted.question_id} was answered more than once"
                )
            seen.add(submitted.question_id)

        questions_by_id = {question.id: question for question in questions}

        attempt_number = self.repos.attempts.count_for(quiz.id, user_id) + 1
        attempt = self.repos.attempts.create(
            quiz_id=quiz.id,
            user_id=user_id,
            attempt_number=attempt_number,
            mode=quiz.mode,
            started_at=utcnow(),
        )
        logger.info(f"Attempt {attempt_number} created: {attempt.id}")

        detailed: List[DetailedAnswer] = []
        correct_count = 0
        incorrect_count = 0

        for submitted in answers:
            question = questions_by_id.get(submitted.question_id)
            if question is None:
                raise QuizEngineError.validation(
                    f"Question {submitted.question_id} does not belong to this quiz"
                )

            chosen = self.repos.options.find_by_id(submitted.option_id)
            if chosen is None or chosen.question_id != question.id:
                raise QuizEngineError.validation(
                    f"Option {submitted.option_id} is not valid for question {question.id}"
                )

            correct = self.repos.options.find_by_id(question.correct_option_id)
            if correct is None or correct.question_id != question.id:
                raise QuizEngineError.internal(
                    f"Question {question.id} has no correct option defined"
                )

            is_correct = chosen.id == correct.id
            if is_correct:
                correct_count += 1
            else:
                incorrect_count += 1

            self.repos.answers.create(
                attempt_id=attempt.id,
                question_id=question.id,
                option_id=chosen.id,
                is_correct=is_correct,
                answered_at=utcnow(),
            )

            detailed.append(
                DetailedAnswer(
                    question_id=question.id,
                    statement=question.statement,
                    chosen_option_id=chosen.id,
                    chosen_text=chosen.text,
                    correct_option_id=correct.id,
                    correct_text=correct.text,
                    is_correct=is_correct,
                    explanation=question.explanation,
                )
            )

        if attempt.finished_at is None:
            self.repos.attempts.update(attempt.id, finished_at=utcnow())

        wrong_answers = [
            WrongAnswerDetail(
                statement=item.statement,
                chosen_text=item.chosen_text,
                correct_text=item.correct_text,
                explanation=item.explanation or NO_EXPLANATION,
            )
            for item in detailed
            if not item.is_correct
        ]

        summary_text = self.summary_generator.generate_summary(
            content.title or "this content", wrong_answers, total
        )
        self.repos.summaries.create(quiz_id=quiz.id, text=summary_text, created_at=utcnow())

        return FinalizeResult(
            attempt_id=attempt.id,
            quiz_id=quiz.id,
            total_questions=total,
            correct_count=correct_count,
            incorrect_count=incorrect_count,
            percentage=score_percentage(correct_count, total),
            detailed_answers=detailed,
            summary_text=summary_text,
            attempt_number=attempt_number,
        )

    def get_summary(self, quiz_id: str, user_id: str) -> Optional[str]:
        """Text of the most recent summary of a quiz, or None"""
        load_owned_quiz(self.repos, quiz_id, user_id)
        summary = self.repos.summaries.find_latest(quiz_id)
        return summary.text if summary else None
