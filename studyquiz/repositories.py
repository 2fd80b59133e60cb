"""
Persistence gateway - generic CRUD over the SQLAlchemy models

Repositories only ``flush``; committing or rolling back is the job of the
workflow that owns the session, so a whole workflow is one transaction.
"""
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from studyquiz.models import Answer, Attempt, Content, Option, Question, Quiz, Summary
from studyquiz.utils.ids import generate_id

ModelT = TypeVar("ModelT")


class Repository(Generic[ModelT]):
    """CRUD operations for one model class"""

    model: Type[ModelT]
    parent_field: str
    order_by: tuple = ()
    immutable_fields = frozenset({"id"})

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> ModelT:
        fields.setdefault("id", generate_id())
        entity = self.model(**fields)
        self.db.add(entity)
        self.db.flush()
        return entity

    def create_many(self, rows: Iterable[Dict[str, Any]]) -> List[ModelT]:
        """Insert several rows with one flush"""
        entities = []
        for fields in rows:
            fields = dict(fields)
            fields.setdefault("id", generate_id())
            entities.append(self.model(**fields))
        self.db.add_all(entities)
        self.db.flush()
        return entities

    def find_by_id(self, entity_id: Optional[str]) -> Optional[ModelT]:
        if not entity_id:
            return None
        return self.db.get(self.model, entity_id)

    def find_by_parent(self, parent_id: str) -> List[ModelT]:
        column = getattr(self.model, self.parent_field)
        stmt = select(self.model).where(column == parent_id)
        if self.order_by:
            stmt = stmt.order_by(*self._order_columns())
        return list(self.db.scalars(stmt))

    def update(self, entity_id: str, **fields: Any) -> Optional[ModelT]:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return None
        for key, value in fields.items():
            if key in self.immutable_fields:
                continue
            setattr(entity, key, value)
        self.db.flush()
        return entity

    def delete(self, entity_id: str) -> bool:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.db.delete(entity)
        self.db.flush()
        return True

    def _order_columns(self):
        return [getattr(self.model, name) for name in self.order_by]


class ContentRepository(Repository[Content]):
    model = Content
    parent_field = "owner_id"
    order_by = ("created_at", "id")
    immutable_fields = frozenset({"id", "owner_id"})


class QuizRepository(Repository[Quiz]):
    model = Quiz
    parent_field = "content_id"
    order_by = ("order_index", "created_at")
    immutable_fields = frozenset({"id", "content_id"})

    def find_by_contents(self, content_ids: List[str]) -> List[Quiz]:
        if not content_ids:
            return []
        stmt = select(Quiz).where(Quiz.content_id.in_(content_ids)).order_by(
            Quiz.created_at.desc(), Quiz.id.desc()
        )
        return list(self.db.scalars(stmt))


class QuestionRepository(Repository[Question]):
    model = Question
    parent_field = "quiz_id"
    order_by = ("order_index",)
    immutable_fields = frozenset({"id", "quiz_id"})

    def count_by_quizzes(self, quiz_ids: List[str]) -> Dict[str, int]:
        """Question totals per quiz in one grouped query"""
        if not quiz_ids:
            return {}
        stmt = (
            select(Question.quiz_id, func.count(Question.id))
            .where(Question.quiz_id.in_(quiz_ids))
            .group_by(Question.quiz_id)
        )
        counts = {quiz_id: 0 for quiz_id in quiz_ids}
        counts.update({quiz_id: total for quiz_id, total in self.db.execute(stmt)})
        return counts


class OptionRepository(Repository[Option]):
    model = Option
    parent_field = "question_id"
    order_by = ("order_index",)
    immutable_fields = frozenset({"id", "question_id", "order_index", "text"})


class AttemptRepository(Repository[Attempt]):
    model = Attempt
    parent_field = "quiz_id"
    order_by = ("attempt_number",)
    immutable_fields = frozenset({"id", "quiz_id", "user_id", "attempt_number"})

    def count_for(self, quiz_id: str, user_id: str) -> int:
        stmt = select(func.count(Attempt.id)).where(
            Attempt.quiz_id == quiz_id, Attempt.user_id == user_id
        )
        return self.db.scalar(stmt) or 0

    def find_for(self, quiz_id: str, user_id: str) -> List[Attempt]:
        stmt = (
            select(Attempt)
            .where(Attempt.quiz_id == quiz_id, Attempt.user_id == user_id)
            .order_by(Attempt.attempt_number.desc())
        )
        return list(self.db.scalars(stmt))

    def find_most_recent(self, quiz_ids: List[str], user_id: str) -> Optional[Attempt]:
        """Newest attempt by start time across several quizzes"""
        if not quiz_ids:
            return None
        stmt = (
            select(Attempt)
            .where(Attempt.quiz_id.in_(quiz_ids), Attempt.user_id == user_id)
            .order_by(Attempt.started_at.desc(), Attempt.id.desc())
            .limit(1)
        )
        return self.db.scalars(stmt).first()

    def find_last_finished(self, quiz_id: str, user_id: str) -> Optional[Attempt]:
        stmt = (
            select(Attempt)
            .where(
                Attempt.quiz_id == quiz_id,
                Attempt.user_id == user_id,
                Attempt.finished_at.is_not(None),
            )
            .order_by(Attempt.finished_at.desc(), Attempt.id.desc())
            .limit(1)
        )
        return self.db.scalars(stmt).first()


class AnswerRepository(Repository[Answer]):
    model = Answer
    parent_field = "attempt_id"
    order_by = ("answered_at", "id")
    immutable_fields = frozenset({"id", "attempt_id", "question_id", "option_id", "is_correct"})


class SummaryRepository(Repository[Summary]):
    model = Summary
    parent_field = "quiz_id"
    order_by = ("created_at", "id")
    immutable_fields = frozenset({"id", "quiz_id", "text"})

    def find_latest(self, quiz_id: str) -> Optional[Summary]:
        stmt = (
            select(Summary)
            .where(Summary.quiz_id == quiz_id)
            .order_by(Summary.created_at.desc(), Summary.id.desc())
            .limit(1)
        )
        return self.db.scalars(stmt).first()


class Repositories:
    """All repositories bound to one session"""

    def __init__(self, db: Session):
        self.db = db
        self.contents = ContentRepository(db)
        self.quizzes = QuizRepository(db)
        self.questions = QuestionRepository(db)
        self.options = OptionRepository(db)
        self.attempts = AttemptRepository(db)
        self.answers = AnswerRepository(db)
        self.summaries = SummaryRepository(db)
