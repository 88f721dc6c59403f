import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from aptitude.core.errors import NotFoundError, ValidationError
from aptitude.db.topics_repo import TopicRepo, get_topic_repo
from aptitude.schemas.aptitude import (
    OPTION_COUNT,
    QuestionBase,
    QuestionCreate,
    QuestionDoc,
    QuestionUpdate,
    TopicResponse,
    TopicSummary,
)

logger = logging.getLogger(__name__)


def normalize_topic_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def _require_topic_name(name: Optional[str]) -> str:
    normalized = normalize_topic_name(name)
    if not normalized:
        raise ValidationError("topic is required")
    return normalized


def _validate_question(question: QuestionBase) -> None:
    if not question.question or not question.question.strip():
        raise ValidationError("question text is required")
    if len(question.options) != OPTION_COUNT:
        raise ValidationError(f"Exactly {OPTION_COUNT} options are required")
    if any(not opt.text.strip() for opt in question.options):
        raise ValidationError("option text must not be empty")
    if not 0 <= question.correct_index < OPTION_COUNT:
        raise ValidationError(f"correct_index must be between 0 and {OPTION_COUNT - 1}")


def _question_payload(question: QuestionBase) -> Dict[str, Any]:
    return {
        "question": question.question.strip(),
        "options": [{"text": opt.text.strip()} for opt in question.options],
        "correct_index": question.correct_index,
        "difficulty": question.difficulty.value,
        "explanation": question.explanation.strip() if question.explanation else None,
    }


def _ensure_topic(name: str, repo: TopicRepo, now: datetime) -> None:
    """Create the topic if missing; a concurrent creator winning the race is fine."""

    if repo.find_by_name(name):
        return
    try:
        repo.insert_topic(
            {"topic": name, "questions": [], "is_active": True, "created_at": now, "updated_at": now}
        )
        logger.info("Created aptitude topic %r", name)
    except DuplicateKeyError:
        logger.info("Topic %r created concurrently; appending to existing document", name)


def upsert_question(data: QuestionCreate, repo: Optional[TopicRepo] = None) -> TopicResponse:
    """Append a question to its topic, creating the topic on first use."""

    repo = repo or get_topic_repo()
    name = _require_topic_name(data.topic)
    _validate_question(data)

    now = datetime.utcnow()
    question = {
        "id": f"q_{uuid.uuid4()}",
        **_question_payload(data),
        "created_at": now,
        "updated_at": now,
    }
    _ensure_topic(name, repo, now)
    doc = repo.push_question(name, question, now)
    if doc is None:
        raise NotFoundError("Topic not found")
    return TopicResponse(**doc)


def update_question(
    topic: str, question_id: str, patch: QuestionUpdate, repo: Optional[TopicRepo] = None
) -> TopicResponse:
    """Edit a stored question in place, re-validating the merged result."""

    repo = repo or get_topic_repo()
    name = _require_topic_name(topic)
    existing = repo.find_question(name, question_id)
    if existing is None:
        raise NotFoundError("Question not found")

    merged = QuestionBase(**{**existing, **patch.model_dump(exclude_unset=True, exclude_none=True)})
    _validate_question(merged)
    now = datetime.utcnow()
    doc = repo.set_question_fields(name, question_id, {**_question_payload(merged), "updated_at": now}, now)
    if doc is None:
        raise NotFoundError("Question not found")
    return TopicResponse(**doc)


def set_topic_active(topic: str, is_active: bool, repo: Optional[TopicRepo] = None) -> TopicSummary:
    repo = repo or get_topic_repo()
    name = _require_topic_name(topic)
    doc = repo.set_active(name, is_active, datetime.utcnow())
    if doc is None:
        raise NotFoundError("Topic not found")
    logger.info("Topic %r is_active=%s", name, is_active)
    return TopicSummary(topic=doc["topic"], is_active=doc["is_active"], question_count=len(doc.get("questions", [])))


def find_topic_by_name(name: str, repo: Optional[TopicRepo] = None) -> Optional[TopicResponse]:
    repo = repo or get_topic_repo()
    normalized = normalize_topic_name(name)
    if not normalized:
        return None
    doc = repo.find_by_name(normalized)
    return TopicResponse(**doc) if doc else None


def get_topic(name: str, repo: Optional[TopicRepo] = None) -> TopicResponse:
    topic = find_topic_by_name(name, repo=repo)
    if topic is None:
        raise NotFoundError("Topic not found")
    return topic


def find_active_topics(repo: Optional[TopicRepo] = None) -> List[TopicResponse]:
    repo = repo or get_topic_repo()
    return [TopicResponse(**doc) for doc in repo.find_active()]


def list_topics(include_inactive: bool = False, repo: Optional[TopicRepo] = None) -> List[TopicSummary]:
    repo = repo or get_topic_repo()
    return [TopicSummary(**doc) for doc in repo.summaries(include_inactive=include_inactive)]


def resolve_question(topic: str, question_id: str, repo: Optional[TopicRepo] = None) -> Optional[QuestionDoc]:
    """Look up a question; unknown topics or ids resolve to None, never an error."""

    repo = repo or get_topic_repo()
    normalized = normalize_topic_name(topic)
    if not normalized or not question_id:
        return None
    doc = repo.find_question(normalized, question_id)
    return QuestionDoc(**doc) if doc else None
