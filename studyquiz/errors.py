"""
Application error type

Every failure raised by the services is a ``QuizEngineError`` tagged with an
``ErrorKind``. The HTTP boundary maps kinds to status codes and error codes.
"""
import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    POLICY = "policy_error"
    GENERATION_FAILURE = "generation_failure"
    INTERNAL_INVARIANT = "internal_invariant_error"


DEFAULT_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.POLICY: 400,
    ErrorKind.GENERATION_FAILURE: 500,
    ErrorKind.INTERNAL_INVARIANT: 500,
}


class QuizEngineError(Exception):
    """Error carrying a kind, a status code and a human-readable message"""

    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code if status_code is not None else DEFAULT_STATUS[kind]

    def __repr__(self):
        return f"QuizEngineError(kind={self.kind.value}, status_code={self.status_code}, message={self.message!r})"

    @classmethod
    def validation(cls, message: str) -> "QuizEngineError":
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> "QuizEngineError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def forbidden(cls, message: str) -> "QuizEngineError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def policy(cls, message: str) -> "QuizEngineError":
        return cls(ErrorKind.POLICY, message)

    @classmethod
    def generation_failure(cls, message: str) -> "QuizEngineError":
        return cls(ErrorKind.GENERATION_FAILURE, message)

    @classmethod
    def internal(cls, message: str) -> "QuizEngineError":
        return cls(ErrorKind.INTERNAL_INVARIANT, message)


def wrap_error(
    context: str,
    exc: Exception,
    default_kind: ErrorKind = ErrorKind.INTERNAL_INVARIANT,
) -> QuizEngineError:
    """
    Wrap an exception with workflow context

    The kind and status code of a ``QuizEngineError`` cause are preserved;
    any other exception becomes ``default_kind`` with status 500.
    """
    if isinstance(exc, QuizEngineError):
        return QuizEngineError(exc.kind, f"{context}: {exc.message}", exc.status_code)
    return QuizEngineError(default_kind, f"{context}: {exc}", 500)
