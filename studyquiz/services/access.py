"""
Ownership checks shared by the workflows
"""
from typing import Tuple

from studyquiz.errors import QuizEngineError
from studyquiz.models import Content, Quiz
from studyquiz.repositories import Repositories


def load_owned_content(repos: Repositories, content_id: str, user_id: str) -> Content:
    content = repos.contents.find_by_id(content_id)
    if content is None:
        raise QuizEngineError.not_found("Content not found")
    if content.owner_id != user_id:
        raise QuizEngineError.forbidden("You do not have permission to access this content")
    return content


def load_owned_quiz(repos: Repositories, quiz_id: str, user_id: str) -> Tuple[Quiz, Content]:
    quiz = repos.quizzes.find_by_id(quiz_id)
    if quiz is None:
        raise QuizEngineError.not_found("Quiz not found")

    content = repos.contents.find_by_id(quiz.content_id)
    if content is None:
        raise QuizEngineError.not_found("Content not found")
    if content.owner_id != user_id:
        raise QuizEngineError.forbidden("You do not have permission to access this quiz")
    return quiz, content
