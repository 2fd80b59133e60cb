"""
Follow-up quiz generation

Two strategies for the next quiz of an existing content:

- reinforcement (progression=False): new questions on the same material,
  avoiding every question asked in any earlier quiz
- progression (progression=True): questions drilling into the sub-topics
  the user got wrong in their most recent attempt
"""
import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from studyquiz.errors import ErrorKind, QuizEngineError, wrap_error
from studyquiz.models import Content, Quiz, QuizMode
from studyquiz.repositories import Repositories
from studyquiz.schemas.generation import NO_EXPLANATION, MissedQuestion, PriorQuestion, QuestionSet
from studyquiz.services.access import load_owned_content
from studyquiz.services.quiz_builder import QuizBuildEngine
from studyquiz.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class FollowUpResult:
    content: Content
    quiz: Quiz
    questions_created: int


class FollowUpService:
    """Chooses the follow-up strategy, gathers its context and builds the quiz"""

    def __init__(self, db: Session, generator):
        self.db = db
        self.repos = Repositories(db)
        self.generator = generator
        self.builder = QuizBuildEngine(self.repos)

    def generate_follow_up(self, content_id: str, user_id: str, progression: bool) -> FollowUpResult:
        strategy = "progression" if progression else "reinforcement"
        try:
            logger.info(f"Generating {strategy} follow-up quiz for content {content_id}")

            content = load_owned_content(self.repos, content_id, user_id)

            existing = self.repos.quizzes.find_by_parent(content.id)
            if not existing:
                raise QuizEngineError.policy("This content has no previous quiz to follow up on")

            next_order = max(quiz.order_index or 0 for quiz in existing) + 1
            title = content.title or "this content"

            if progression:
                missed = self._collect_missed_questions(existing, user_id)
                question_set = self.generator.generate_progression_quiz(
                    title, content.raw_input, missed
                )
                mode = QuizMode.PROGRESSION
            else:
                prior = self._collect_prior_questions(existing)
                question_set = self.generator.generate_reinforcement_quiz(
                    title, content.raw_input, prior
                )
                mode = QuizMode.REINFORCEMENT

            quiz = self._persist_quiz(content.id, next_order, mode, question_set)
            questions_created = self.builder.build_quiz(quiz.id, question_set.questions)

            self.db.commit()
            logger.info(
                f"Follow-up quiz {quiz.id} ({mode.value}, order {next_order}) created "
                f"with {questions_created} questions"
            )
            return FollowUpResult(content=content, quiz=quiz, questions_created=questions_created)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to generate follow-up quiz: {str(e)}", exc_info=True)
            raise wrap_error("failed to generate follow-up quiz", e, ErrorKind.GENERATION_FAILURE)

    def _collect_missed_questions(self, quizzes: List[Quiz], user_id: str) -> List[MissedQuestion]:
        """Wrong answers of the user's most recent attempt on any quiz of the content"""
        latest = self.repos.attempts.find_most_recent([quiz.id for quiz in quizzes], user_id)
        if latest is None:
            raise QuizEngineError.policy(
                "There is no previous attempt to base a progression quiz on"
            )

        answers = self.repos.answers.find_by_parent(latest.id)
        wrong = [answer for answer in answers if not answer.is_correct]
        if not wrong:
            raise QuizEngineError.policy(
                "You got every answer right! There are no gaps to progress on."
            )

        logger.info(f"{len(wrong)} wrong answer(s) found in attempt {latest.id}")

        missed = []
        for answer in wrong:
            question = self.repos.questions.find_by_id(answer.question_id)
            if question is None:
                logger.warning(f"Question {answer.question_id} no longer exists, skipping")
                continue

            correct = self.repos.options.find_by_id(question.correct_option_id)
            if correct is None:
                logger.warning(f"Question {question.id} has no correct option, skipping")
                continue

            missed.append(
                MissedQuestion(
                    statement=question.statement,
                    correct_text=correct.text,
                    explanation=question.explanation or NO_EXPLANATION,
                )
            )
        return missed

    def _collect_prior_questions(self, quizzes: List[Quiz]) -> List[PriorQuestion]:
        """Every question with its option texts, across all quizzes of the content"""
        prior = []
        for quiz in quizzes:
            for question in self.repos.questions.find_by_parent(quiz.id):
                options = self.repos.options.find_by_parent(question.id)
                prior.append(
                    PriorQuestion(
                        statement=question.statement,
                        options=[option.text for option in options],
                    )
                )

        # TODO: cap or summarize this context once contents reach many follow-up rounds
        logger.info(f"{len(prior)} previous question(s) found")
        return prior

    def _persist_quiz(
        self,
        content_id: str,
        order_index: int,
        mode: QuizMode,
        question_set: QuestionSet,
    ) -> Quiz:
        logger.info(f"Creating quiz with mode {mode.value} for {len(question_set.questions)} questions")
        return self.repos.quizzes.create(
            content_id=content_id,
            order_index=order_index,
            mode=mode.value,
            created_at=utcnow(),
        )
