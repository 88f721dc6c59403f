from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from aptitude.schemas.aptitude import Difficulty, OptionDoc


class AnswerIn(BaseModel):
    question_id: str
    selected_index: int


class SubmissionRequest(BaseModel):
    topic: str
    answers: List[AnswerIn]


class SubmissionResult(BaseModel):
    total: int
    score: int


class AnswerSnapshot(BaseModel):
    """Self-contained copy of an answered question, frozen at grading time."""

    question_id: str
    question: str
    options: List[OptionDoc]
    explanation: Optional[str] = None
    difficulty: Difficulty = Difficulty.medium
    selected_index: int
    correct_index: int
    is_correct: bool


class GradedSubmission(SubmissionResult):
    topic: str
    answers: List[AnswerSnapshot]


class AttemptCreate(BaseModel):
    """Payload to archive an already graded attempt."""

    topic: str = Field(..., min_length=1)
    time_taken_seconds: int = Field(..., ge=0)
    answers: List[AnswerSnapshot] = Field(default_factory=list)


class SubmitAndArchiveRequest(SubmissionRequest):
    time_taken_seconds: int = Field(..., ge=0)


class AttemptRecord(BaseModel):
    attempt_id: str
    user_id: str
    topic: str
    total_questions: int
    correct_answers: int
    percentage: int
    time_taken_seconds: int
    answers: List[AnswerSnapshot]
    created_at: datetime


class PaginatedAttempts(BaseModel):
    items: List[AttemptRecord]
    total: int
    skip: int
    limit: int
