"""
Domain error taxonomy.

Services raise these; ``studyquiz.main`` maps each one onto an HTTP status and
the common ``{"error": {...}}`` envelope.
"""
from fastapi import status


class StudyQuizError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(StudyQuizError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "unauthorized"


class NotFoundError(StudyQuizError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class ValidationError(StudyQuizError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "validation_error"


class PersistenceError(StudyQuizError):
    """Storage failure. The message is shown to callers, so keep it opaque."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "persistence_error"
