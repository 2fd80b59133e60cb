"""
Gemini AI service for title, quiz and review-summary generation
"""
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from pydantic import ValidationError
from studyquiz.config import settings
from studyquiz.errors import QuizEngineError
from studyquiz.schemas.generation import (
    MissedQuestion,
    PriorQuestion,
    QuestionSet,
    TitleDescription,
    WrongAnswerDetail,
    decode_question_set,
    strip_code_fences,
)
from studyquiz.services import prompts
import logging
from typing import List

logger = logging.getLogger(__name__)

# Configure Gemini API
genai.configure(api_key=settings.GEMINI_API_KEY)

# Transport-level failures worth another try; bad output is never retried
TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
    google_exceptions.TooManyRequests,
    google_exceptions.RetryError,
    ConnectionError,
    TimeoutError,
)


class GeminiService:
    """Service for all Gemini AI operations"""

    def __init__(self):
        self.json_model = genai.GenerativeModel(
            settings.GEMINI_MODEL, system_instruction=prompts.JSON_SYSTEM_INSTRUCTION
        )
        self.text_model = genai.GenerativeModel(
            settings.GEMINI_MODEL, system_instruction=prompts.SUMMARY_SYSTEM_INSTRUCTION
        )

    def generate_title_description(self, raw_text: str) -> TitleDescription:
        """Generate a title and a description for new study material"""
        raw = self._generate_raw(
            self.json_model,
            prompts.title_description_prompt(raw_text),
            temperature=0.7,
            json_mode=True,
        )
        try:
            return TitleDescription.model_validate_json(strip_code_fences(raw))
        except ValidationError as e:
            logger.error(f"Invalid title/description payload: {raw[:500]}")
            raise QuizEngineError.generation_failure(
                f"invalid title/description response: {e.error_count()} validation error(s)"
            )

    def generate_quiz(self, raw_text: str, title: str, description: str) -> QuestionSet:
        """Generate the first quiz of a content"""
        return self.generate_structured(prompts.fresh_quiz_prompt(raw_text, title, description))

    def generate_reinforcement_quiz(
        self,
        title: str,
        raw_text: str,
        prior_questions: List[PriorQuestion],
    ) -> QuestionSet:
        """Generate new questions that avoid every question already asked"""
        return self.generate_structured(
            prompts.reinforcement_quiz_prompt(title, raw_text, prior_questions)
        )

    def generate_progression_quiz(
        self,
        title: str,
        raw_text: str,
        missed: List[MissedQuestion],
    ) -> QuestionSet:
        """Generate questions drilling into the sub-topics of recent mistakes"""
        return self.generate_structured(prompts.progression_quiz_prompt(title, raw_text, missed))

    def generate_summary_text(
        self,
        content_title: str,
        wrong_answers: List[WrongAnswerDetail],
        total_questions: int,
    ) -> str:
        """Generate a free-text review of the wrong answers of an attempt"""
        return self.generate_text(
            prompts.summary_prompt(content_title, wrong_answers, total_questions)
        )

    def generate_structured(self, prompt: str) -> QuestionSet:
        """
        Generate a quiz and validate it against the question schema

        Raises:
            QuizEngineError: generation failure naming the invalid question/field
        """
        raw = self._generate_raw(
            self.json_model, prompt, temperature=settings.GENERATION_TEMPERATURE, json_mode=True
        )

        result = decode_question_set(raw)
        if not result.ok:
            logger.error(f"Rejected generated quiz: {result.error}")
            logger.debug(f"Response text: {raw[:500]}")
            raise QuizEngineError.generation_failure(f"invalid quiz response: {result.error}")

        return result.question_set

    def generate_text(self, prompt: str) -> str:
        """Generate free-form prose; only non-emptiness is checked"""
        text = self._generate_raw(self.text_model, prompt, temperature=0.7, json_mode=False)
        return text.strip()

    def _generate_raw(self, model, prompt: str, temperature: float, json_mode: bool) -> str:
        try:
            text = _call_model(model, prompt, temperature, json_mode)
        except QuizEngineError:
            raise
        except Exception as e:
            logger.error(f"Gemini call failed: {str(e)}")
            raise QuizEngineError.generation_failure(f"Gemini call failed: {str(e)}")

        if not text or not text.strip():
            raise QuizEngineError.generation_failure("Gemini returned an empty response")
        return text


@retry(
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    stop=stop_after_attempt(max(settings.GENERATION_MAX_RETRIES, 1)),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
def _call_model(model, prompt: str, temperature: float, json_mode: bool) -> str:
    config = {"temperature": temperature}
    if json_mode:
        config["response_mime_type"] = "application/json"

    response = model.generate_content(
        prompt,
        generation_config=genai.GenerationConfig(**config),
        request_options={"timeout": settings.GENERATION_TIMEOUT_SECONDS},
    )

    try:
        return response.text
    except ValueError as e:
        # Raised by the SDK when the candidate was blocked or has no parts
        raise QuizEngineError.generation_failure(f"Gemini returned no usable text: {str(e)}")


# Global instance
gemini_service = GeminiService()
