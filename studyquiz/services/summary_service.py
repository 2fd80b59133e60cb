"""
Summary generator - personalized review text after a finalized attempt
"""
import logging
from typing import List

from studyquiz.errors import QuizEngineError
from studyquiz.schemas.generation import WrongAnswerDetail

logger = logging.getLogger(__name__)

PERFECT_SCORE_MESSAGE = (
    "Congratulations! You got every question right! Keep it up and go deeper "
    "into this topic."
)


class SummaryGenerator:
    """Builds the review paragraph for the wrong answers of an attempt"""

    def __init__(self, generator):
        self.generator = generator

    def generate_summary(
        self,
        content_title: str,
        wrong_answers: List[WrongAnswerDetail],
        total_questions: int,
    ) -> str:
        if not wrong_answers:
            logger.info("Perfect score, using the fixed congratulation message")
            return PERFECT_SCORE_MESSAGE

        logger.info(f"Generating review summary for {len(wrong_answers)} wrong answer(s)")
        text = self.generator.generate_summary_text(
            content_title, wrong_answers, total_questions
        )

        if not text or not text.strip():
            raise QuizEngineError.generation_failure("summary generation returned no text")

        return text.strip()
