"""
Shared fixtures: in-memory database, scripted generator, seeded content
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("GEMINI_API_KEY", "test-key-123")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Iterable, List, Optional, Sequence

import pytest

from studyquiz.database import Database
from studyquiz.errors import QuizEngineError
from studyquiz.repositories import Repositories
from studyquiz.schemas.generation import (
    GeneratedOption,
    GeneratedQuestion,
    QuestionSet,
    TitleDescription,
)
from studyquiz.schemas.quiz import AnswerSubmission
from studyquiz.services.content_service import ContentService

PHOTOSYNTHESIS = "Photosynthesis converts light into chemical energy"


def make_question_set(
    prefix: str = "Q",
    correct: Optional[Sequence[Optional[int]]] = None,
    num_questions: int = 7,
) -> QuestionSet:
    """
    Question set whose statements and options are prefixed for traceability

    ``correct`` holds the 0-based correct option index per question (None for a
    question without a correct option); defaults to index 1 everywhere.
    """
    correct = list(correct) if correct is not None else [1] * num_questions
    questions = []
    for i in range(num_questions):
        fields = dict(
            statement=f"{prefix} statement {i + 1}",
            explanation=f"{prefix} explanation {i + 1}",
            options=[
                GeneratedOption(text=f"{prefix} q{i + 1} option {j + 1}", correct=correct[i] == j)
                for j in range(4)
            ],
        )
        if correct[i] is None:
            # A question without a correct option never validates
            questions.append(GeneratedQuestion.model_construct(**fields))
        else:
            questions.append(GeneratedQuestion(**fields))
    return QuestionSet(questions=questions)


class FakeGenerator:
    """Stands in for the Gemini collaborator and records every call"""

    def __init__(self):
        self.calls = []
        self.queued_sets: List[QuestionSet] = []
        self.summary_text = "Review the light-dependent reactions and the Calvin cycle."
        self.title = TitleDescription(
            title="Photosynthesis basics",
            description="How plants turn light into chemical energy",
        )
        self.fail_with: Optional[Exception] = None

    def calls_of(self, kind: str) -> list:
        return [call for call in self.calls if call[0] == kind]

    def generate_title_description(self, raw_text):
        self.calls.append(("title", raw_text))
        self._maybe_fail()
        return self.title

    def generate_quiz(self, raw_text, title, description):
        self.calls.append(("fresh", raw_text, title, description))
        return self._next_set("fresh")

    def generate_reinforcement_quiz(self, title, raw_text, prior_questions):
        self.calls.append(("reinforcement", title, raw_text, list(prior_questions)))
        return self._next_set("reinforcement")

    def generate_progression_quiz(self, title, raw_text, missed):
        self.calls.append(("progression", title, raw_text, list(missed)))
        return self._next_set("progression")

    def generate_summary_text(self, content_title, wrong_answers, total_questions):
        self.calls.append(("summary", content_title, list(wrong_answers), total_questions))
        self._maybe_fail()
        return self.summary_text

    def _next_set(self, kind: str) -> QuestionSet:
        self._maybe_fail()
        if self.queued_sets:
            return self.queued_sets.pop(0)
        return make_question_set(prefix=f"{kind}-{len(self.calls)}")

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with


@pytest.fixture
def database():
    db = Database("sqlite:///:memory:").open()
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def repos(db_session):
    return Repositories(db_session)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def owner_id():
    return "user-1"


@pytest.fixture
def seeded(db_session, generator, owner_id):
    """A content with its first quiz built from a fresh question set"""
    return ContentService(db_session, generator).create_content(PHOTOSYNTHESIS, owner_id)


def answers_for(repos: Repositories, quiz_id: str, wrong: Iterable[int] = ()) -> List[AnswerSubmission]:
    """
    One answer per question of a quiz, correct except at the given
    1-based question positions
    """
    wrong = set(wrong)
    answers = []
    for question in repos.questions.find_by_parent(quiz_id):
        options = repos.options.find_by_parent(question.id)
        if question.order_index in wrong:
            chosen = next(o for o in options if o.id != question.correct_option_id)
        else:
            chosen = next(o for o in options if o.id == question.correct_option_id)
        answers.append(AnswerSubmission(question_id=question.id, option_id=chosen.id))
    return answers


def generation_error(message: str = "upstream unavailable") -> QuizEngineError:
    return QuizEngineError.generation_failure(message)
