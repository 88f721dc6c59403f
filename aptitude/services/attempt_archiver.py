import logging
import math
import uuid
from datetime import datetime
from typing import Optional, Sequence

from aptitude.core.errors import NotFoundError
from aptitude.db.attempts_repo import AttemptRepo, get_attempt_repo
from aptitude.db.topics_repo import TopicRepo
from aptitude.schemas.attempt import (
    AnswerIn,
    AttemptCreate,
    AttemptRecord,
    PaginatedAttempts,
)
from aptitude.services.evaluator import grade_submission

logger = logging.getLogger(__name__)


def compute_percentage(correct: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 for an empty attempt."""

    if total <= 0:
        return 0
    return int(math.floor(100 * correct / total + 0.5))


def archive_attempt(user_id: str, data: AttemptCreate, repo: Optional[AttemptRepo] = None) -> AttemptRecord:
    """Store a graded attempt as an immutable, self-contained record."""

    repo = repo or get_attempt_repo()
    total = len(data.answers)
    correct = sum(1 for answer in data.answers if answer.is_correct)
    record = AttemptRecord(
        attempt_id=f"attempt_{uuid.uuid4()}",
        user_id=user_id,
        topic=data.topic,
        total_questions=total,
        correct_answers=correct,
        percentage=compute_percentage(correct, total),
        time_taken_seconds=data.time_taken_seconds,
        answers=[answer.model_copy(deep=True) for answer in data.answers],
        created_at=datetime.utcnow(),
    )
    doc = record.model_dump(mode="json")
    doc["created_at"] = record.created_at
    repo.insert(doc)
    logger.info(
        "Archived attempt %s for user %s (%s: %d/%d)",
        record.attempt_id,
        user_id,
        record.topic,
        correct,
        total,
    )
    return record


def submit_and_archive(
    user_id: str,
    topic: str,
    time_taken_seconds: int,
    answers: Sequence[AnswerIn],
    topic_repo: Optional[TopicRepo] = None,
    attempt_repo: Optional[AttemptRepo] = None,
) -> AttemptRecord:
    """Grade against the current bank, then archive the resulting snapshots."""

    graded = grade_submission(topic, answers, repo=topic_repo)
    payload = AttemptCreate(topic=graded.topic, time_taken_seconds=time_taken_seconds, answers=graded.answers)
    return archive_attempt(user_id, payload, repo=attempt_repo)


def list_attempts(
    user_id: str, skip: int = 0, limit: int = 20, repo: Optional[AttemptRepo] = None
) -> PaginatedAttempts:
    repo = repo or get_attempt_repo()
    skip = max(0, skip)
    limit = max(1, min(limit, 100))
    items = [AttemptRecord(**doc) for doc in repo.list_for_user(user_id, skip=skip, limit=limit)]
    return PaginatedAttempts(items=items, total=repo.count_for_user(user_id), skip=skip, limit=limit)


def get_attempt(user_id: str, attempt_id: str, repo: Optional[AttemptRepo] = None) -> AttemptRecord:
    repo = repo or get_attempt_repo()
    doc = repo.find_for_user(user_id, attempt_id)
    if not doc:
        raise NotFoundError("Attempt not found")
    return AttemptRecord(**doc)
