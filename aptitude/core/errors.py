from typing import Optional

from fastapi import HTTPException, status


class AptitudeError(HTTPException):
    """Base error for the assessment engine; rendered by FastAPI like any HTTPException."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request failed"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class ValidationError(AptitudeError):
    """Malformed input the caller can fix."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NotFoundError(AptitudeError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class EmptyPoolError(AptitudeError):
    """No eligible questions exist for the requested test."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No questions found"
