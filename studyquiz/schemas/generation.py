"""
Schemas and decoder for language-model quiz output
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, StrictBool, ValidationError, field_validator, model_validator

from studyquiz.config import settings

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)

NO_EXPLANATION = "No explanation available"


class GeneratedOption(BaseModel):
    """One answer choice as produced by the model"""
    text: str
    correct: StrictBool

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class GeneratedQuestion(BaseModel):
    """One multiple-choice question with exactly one correct option"""
    statement: str
    explanation: Optional[str] = None
    options: List[GeneratedOption] = Field(
        ...,
        min_length=settings.OPTIONS_PER_QUESTION,
        max_length=settings.OPTIONS_PER_QUESTION,
    )

    @field_validator("statement")
    @classmethod
    def statement_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("explanation")
    @classmethod
    def blank_explanation_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def exactly_one_correct(self) -> "GeneratedQuestion":
        correct_count = sum(1 for option in self.options if option.correct)
        if correct_count != 1:
            raise ValueError(f"must have exactly 1 correct option, found {correct_count}")
        return self


class QuestionSet(BaseModel):
    """A full generated quiz"""
    questions: List[GeneratedQuestion] = Field(
        ...,
        min_length=settings.QUESTIONS_PER_QUIZ,
        max_length=settings.QUESTIONS_PER_QUIZ,
    )


class TitleDescription(BaseModel):
    title: str = Field(..., max_length=255)
    description: str


@dataclass
class DecodeResult:
    """Tagged outcome of decoding a model response"""
    ok: bool
    question_set: Optional[QuestionSet] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, question_set: QuestionSet) -> "DecodeResult":
        return cls(ok=True, question_set=question_set)

    @classmethod
    def failure(cls, error: str) -> "DecodeResult":
        return cls(ok=False, error=error)


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a payload"""
    cleaned = text.strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def decode_question_set(raw_text: str) -> DecodeResult:
    """
    Decode and validate a generated quiz

    The payload must be an object holding a ``questions`` array of exactly
    QUESTIONS_PER_QUIZ items. Every question needs a non-empty statement and
    OPTIONS_PER_QUESTION options of which exactly one is flagged correct.
    Any violation rejects the whole batch; the error names the first
    offending question and field.
    """
    if not raw_text or not raw_text.strip():
        return DecodeResult.failure("empty response")

    try:
        question_set = QuestionSet.model_validate_json(strip_code_fences(raw_text))
    except ValidationError as e:
        return DecodeResult.failure(describe_validation_error(e.errors()[0]))

    return DecodeResult.success(question_set)


def describe_validation_error(error: Dict[str, Any]) -> str:
    """Turn one pydantic error of a ``QuestionSet`` into a readable message"""
    loc = error["loc"]
    kind = error["type"]

    if not loc:
        if kind == "json_invalid":
            detail = error.get("ctx", {}).get("error")
            return f"response is not valid JSON: {detail}" if detail else "response is not valid JSON"
        return "response is not a JSON object"

    if loc == ("questions",):
        if kind in ("too_short", "too_long"):
            return f"expected {settings.QUESTIONS_PER_QUIZ} questions, received {len(error['input'])}"
        return "field 'questions' is missing or not an array"

    if loc[0] != "questions":
        return f"field '{loc[0]}': {error['msg']}"

    prefix = f"question {loc[1] + 1}"
    field = loc[2:]

    if not field:
        if kind == "value_error":
            return f"{prefix}: {error['ctx']['error']}"
        return f"{prefix}: not an object"

    if field == ("options",):
        if kind in ("too_short", "too_long"):
            return (
                f"{prefix}: expected {settings.OPTIONS_PER_QUESTION} options, "
                f"received {len(error['input'])}"
            )
        return f"{prefix}: field 'options' is missing or not an array"

    if field[0] == "options":
        option = f"option {field[1] + 1}"
        if len(field) == 2:
            return f"{prefix}: {option} is not an object"
        if field[2] == "correct":
            return f"{prefix}: {option}: field 'correct' is missing or not a boolean"
        return f"{prefix}: {option}: field '{field[2]}' is missing or empty"

    if field[0] == "explanation":
        return f"{prefix}: field 'explanation' is not a string"
    return f"{prefix}: field '{field[0]}' is missing or empty"


class PriorQuestion(BaseModel):
    """A question already asked for a content (reinforcement context)"""
    statement: str
    options: List[str]


class MissedQuestion(BaseModel):
    """A question the learner got wrong (progression context)"""
    statement: str
    correct_text: str
    explanation: str


class WrongAnswerDetail(BaseModel):
    """A wrong answer of a finalized attempt (summary context)"""
    statement: str
    chosen_text: str
    correct_text: str
    explanation: str
