"""
Quiz build engine - persists a generated question set as questions and options
"""
import logging
from typing import List

from studyquiz.repositories import Repositories
from studyquiz.schemas.generation import GeneratedQuestion

logger = logging.getLogger(__name__)


class QuizBuildEngine:
    """
    Turns generated questions into Question/Option rows

    Each question is written first with no correct option, then its options
    are inserted in one batch, then the question is pointed at the option
    flagged correct. The steps are strictly sequential in array order.
    """

    def __init__(self, repos: Repositories):
        self.repos = repos

    def build_quiz(self, quiz_id: str, questions: List[GeneratedQuestion]) -> int:
        """
        Persist the questions of a quiz

        Args:
            quiz_id: Quiz the questions belong to
            questions: Generated questions, in display order

        Returns:
            Number of questions created
        """
        created = 0

        for position, data in enumerate(questions):
            question = self.repos.questions.create(
                quiz_id=quiz_id,
                order_index=position + 1,
                statement=data.statement,
                explanation=data.explanation,
                correct_option_id=None,
            )

            options = self.repos.options.create_many(
                {
                    "question_id": question.id,
                    "order_index": option_position + 1,
                    "text": option.text,
                }
                for option_position, option in enumerate(data.options)
            )

            correct_positions = [i for i, option in enumerate(data.options) if option.correct]
            if correct_positions:
                correct = options[correct_positions[0]]
                self.repos.questions.update(question.id, correct_option_id=correct.id)
                logger.debug(
                    f"Question {position + 1} built (correct: option {correct.order_index})"
                )
            else:
                logger.warning(
                    f"Question {position + 1} of quiz {quiz_id} has no option flagged correct"
                )

            created += 1

        logger.info(f"Built quiz {quiz_id}: {created} questions")
        return created
