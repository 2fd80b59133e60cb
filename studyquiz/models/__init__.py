"""
Database models package
"""
from studyquiz.models.content import Content
from studyquiz.models.quiz import Quiz, QuizMode
from studyquiz.models.question import Question, Option
from studyquiz.models.attempt import Attempt, Answer
from studyquiz.models.summary import Summary

__all__ = ["Content", "Quiz", "QuizMode", "Question", "Option", "Attempt", "Answer", "Summary"]
