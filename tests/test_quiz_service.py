import pytest

from studyquiz.errors import ErrorKind, QuizEngineError
from studyquiz.services.finalization_service import FinalizationService
from studyquiz.services.follow_up_service import FollowUpService
from studyquiz.services.quiz_service import QuizService

from conftest import answers_for


def test_quiz_for_taking_before_finalize(db_session, seeded, owner_id):
    service = QuizService(db_session)

    first = service.get_quiz_for_taking(seeded.quiz.id, owner_id)
    second = service.get_quiz_for_taking(seeded.quiz.id, owner_id)

    assert first == second
    assert first.finalized is False
    assert first.answer_history is None
    assert first.finalized_attempt_number is None
    assert first.title == "Photosynthesis basics"
    assert first.total_questions == 7
    assert [q.order_index for q in first.questions] == list(range(1, 8))
    for question in first.questions:
        assert len(question.options) == 4
        assert sum(o.correct for o in question.options) == 1


def test_quiz_for_taking_after_finalize_has_history(db_session, repos, generator, seeded, owner_id):
    finalization = FinalizationService(db_session, generator)
    finalization.finalize(seeded.quiz.id, owner_id, answers_for(repos, seeded.quiz.id))
    finalization.finalize(seeded.quiz.id, owner_id, answers_for(repos, seeded.quiz.id, wrong={3}))

    quiz = QuizService(db_session).get_quiz_for_taking(seeded.quiz.id, owner_id)

    assert quiz.finalized is True
    assert quiz.finalized_attempt_number == 2
    assert quiz.finished_at is not None
    assert len(quiz.answer_history) == 7
    wrong = [item for item in quiz.answer_history if not item.is_correct]
    assert len(wrong) == 1
    assert wrong[0].statement == "fresh-2 statement 3"
    assert wrong[0].correct_text == "fresh-2 q3 option 2"
    assert wrong[0].chosen_text != wrong[0].correct_text


def test_other_user_cannot_read_quiz(db_session, repos, generator, seeded, owner_id):
    FinalizationService(db_session, generator).finalize(
        seeded.quiz.id, owner_id, answers_for(repos, seeded.quiz.id)
    )

    with pytest.raises(QuizEngineError) as exc_info:
        QuizService(db_session).get_quiz_for_taking(seeded.quiz.id, "user-2")

    assert exc_info.value.kind == ErrorKind.FORBIDDEN


def test_quiz_without_questions_is_policy_error(db_session, repos, owner_id):
    content = repos.contents.create(raw_input="Cells", title="Cells", owner_id=owner_id)
    quiz = repos.quizzes.create(content_id=content.id, order_index=1, mode=None)
    db_session.commit()

    with pytest.raises(QuizEngineError) as exc_info:
        QuizService(db_session).get_quiz_for_taking(quiz.id, owner_id)

    assert exc_info.value.kind == ErrorKind.POLICY


def test_quiz_for_content_returns_the_first_quiz(db_session, generator, seeded, owner_id):
    FollowUpService(db_session, generator).generate_follow_up(seeded.content.id, owner_id, False)

    quiz = QuizService(db_session).get_quiz_for_content(seeded.content.id, owner_id)

    assert quiz.quiz_id == seeded.quiz.id
    assert quiz.order_index == 1


def test_quiz_for_content_without_quiz_is_not_found(db_session, repos, owner_id):
    content = repos.contents.create(raw_input="Cells", title="Cells", owner_id=owner_id)
    db_session.commit()

    with pytest.raises(QuizEngineError) as exc_info:
        QuizService(db_session).get_quiz_for_content(content.id, owner_id)

    assert exc_info.value.status_code == 404


def test_list_quizzes_newest_first(db_session, generator, seeded, owner_id):
    follow_up = FollowUpService(db_session, generator).generate_follow_up(
        seeded.content.id, owner_id, False
    )

    items = QuizService(db_session).list_quizzes(owner_id)

    assert [item.quiz_id for item in items] == [follow_up.quiz.id, seeded.quiz.id]
    assert all(item.total_questions == 7 for item in items)
    assert QuizService(db_session).list_quizzes("user-2") == []
