import pytest

from studyquiz.errors import ErrorKind, QuizEngineError
from studyquiz.models import Quiz, QuizMode
from studyquiz.services.finalization_service import FinalizationService
from studyquiz.services.follow_up_service import FollowUpService

from conftest import answers_for, generation_error


def _finalize(db_session, repos, generator, quiz_id, owner_id, wrong=()):
    return FinalizationService(db_session, generator).finalize(
        quiz_id, owner_id, answers_for(repos, quiz_id, wrong=wrong)
    )


def test_progression_targets_wrong_answers_of_latest_attempt(
    db_session, repos, generator, seeded, owner_id
):
    _finalize(db_session, repos, generator, seeded.quiz.id, owner_id, wrong={2, 4, 6})

    result = FollowUpService(db_session, generator).generate_follow_up(
        seeded.content.id, owner_id, progression=True
    )

    calls = generator.calls_of("progression")
    assert len(calls) == 1
    _, title, raw_text, missed = calls[0]
    assert title == seeded.content.title
    assert raw_text == seeded.content.raw_input
    assert [m.statement for m in missed] == [
        "fresh-2 statement 2",
        "fresh-2 statement 4",
        "fresh-2 statement 6",
    ]
    assert [m.correct_text for m in missed] == [
        "fresh-2 q2 option 2",
        "fresh-2 q4 option 2",
        "fresh-2 q6 option 2",
    ]
    assert missed[0].explanation == "fresh-2 explanation 2"

    assert result.quiz.mode == QuizMode.PROGRESSION.value
    assert result.quiz.order_index == 2
    assert result.questions_created == 7
    assert len(repos.questions.find_by_parent(result.quiz.id)) == 7


def test_progression_uses_most_recent_attempt_across_quizzes(
    db_session, repos, generator, seeded, owner_id
):
    _finalize(db_session, repos, generator, seeded.quiz.id, owner_id, wrong={1, 2, 3})
    second = FollowUpService(db_session, generator).generate_follow_up(
        seeded.content.id, owner_id, progression=False
    )
    _finalize(db_session, repos, generator, second.quiz.id, owner_id, wrong={7})

    FollowUpService(db_session, generator).generate_follow_up(
        seeded.content.id, owner_id, progression=True
    )

    _, _, _, missed = generator.calls_of("progression")[0]
    assert len(missed) == 1
    assert missed[0].statement.endswith("statement 7")
    assert missed[0].statement.startswith("reinforcement")


def test_progression_without_attempt_is_policy_error(db_session, generator, seeded, owner_id):
    with pytest.raises(QuizEngineError) as exc_info:
        FollowUpService(db_session, generator).generate_follow_up(
            seeded.content.id, owner_id, progression=True
        )

    assert exc_info.value.kind == ErrorKind.POLICY
    assert exc_info.value.status_code == 400
    assert exc_info.value.message.startswith("failed to generate follow-up quiz:")
    assert generator.calls_of("progression") == []
    assert db_session.query(Quiz).count() == 1


def test_progression_after_perfect_attempt_is_policy_error(
    db_session, repos, generator, seeded, owner_id
):
    _finalize(db_session, repos, generator, seeded.quiz.id, owner_id)

    with pytest.raises(QuizEngineError) as exc_info:
        FollowUpService(db_session, generator).generate_follow_up(
            seeded.content.id, owner_id, progression=True
        )

    assert exc_info.value.kind == ErrorKind.POLICY
    assert "every answer right" in exc_info.value.message
    assert db_session.query(Quiz).count() == 1


def test_reinforcement_sends_questions_of_every_prior_quiz(
    db_session, repos, generator, seeded, owner_id
):
    service = FollowUpService(db_session, generator)
    second = service.generate_follow_up(seeded.content.id, owner_id, progression=False)

    third = service.generate_follow_up(seeded.content.id, owner_id, progression=False)

    _, _, _, prior = generator.calls_of("reinforcement")[1]
    statements = [p.statement for p in prior]
    assert len(prior) == 14
    assert "fresh-2 statement 1" in statements
    assert any(s.startswith("reinforcement") for s in statements)
    assert all(len(p.options) == 4 for p in prior)

    assert second.quiz.mode == QuizMode.REINFORCEMENT.value
    assert (second.quiz.order_index, third.quiz.order_index) == (2, 3)


def test_content_without_quiz_is_policy_error(db_session, repos, generator, owner_id):
    content = repos.contents.create(raw_input="Cells", title="Cells", owner_id=owner_id)
    db_session.commit()

    with pytest.raises(QuizEngineError) as exc_info:
        FollowUpService(db_session, generator).generate_follow_up(content.id, owner_id, False)

    assert exc_info.value.kind == ErrorKind.POLICY
    assert "no previous quiz" in exc_info.value.message


def test_foreign_content_is_forbidden(db_session, generator, seeded):
    with pytest.raises(QuizEngineError) as exc_info:
        FollowUpService(db_session, generator).generate_follow_up(
            seeded.content.id, "intruder", progression=False
        )

    assert exc_info.value.kind == ErrorKind.FORBIDDEN


def test_generation_failure_leaves_nothing_behind(db_session, generator, seeded, owner_id):
    generator.fail_with = generation_error("invalid quiz response: question 3: expected 4 options")

    with pytest.raises(QuizEngineError) as exc_info:
        FollowUpService(db_session, generator).generate_follow_up(
            seeded.content.id, owner_id, progression=False
        )

    assert exc_info.value.kind == ErrorKind.GENERATION_FAILURE
    assert exc_info.value.status_code == 500
    assert "question 3" in exc_info.value.message
    assert db_session.query(Quiz).count() == 1


def test_unexpected_error_is_wrapped_as_generation_failure(db_session, generator, seeded, owner_id):
    generator.fail_with = RuntimeError("socket closed")

    with pytest.raises(QuizEngineError) as exc_info:
        FollowUpService(db_session, generator).generate_follow_up(
            seeded.content.id, owner_id, progression=False
        )

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "failed to generate follow-up quiz: socket closed"
