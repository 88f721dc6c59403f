import random
from typing import Any, Dict, List, Optional

from aptitude.core.config import get_settings
from aptitude.core.errors import EmptyPoolError, NotFoundError, ValidationError
from aptitude.db.topics_repo import TopicRepo, get_topic_repo
from aptitude.schemas.aptitude import MixedTestMeta, QuestionView, TestInstance
from aptitude.services.question_store import normalize_topic_name

QUESTIONS_PER_TOPIC = 1
MAX_SAMPLE_LIMIT = 500


def _view(question: Dict[str, Any], topic: str) -> QuestionView:
    """Strip the answer key before anything leaves the service layer."""

    fields = {k: v for k, v in question.items() if k != "correct_index"}
    fields["topic"] = topic
    return QuestionView(**fields)


def _check_limit(limit: Optional[int]) -> None:
    if limit is not None and limit < 1:
        raise ValidationError("limit must be at least 1")


def build_topic_test(
    topic: str,
    limit: Optional[int] = None,
    repo: Optional[TopicRepo] = None,
    rng: Optional[random.Random] = None,
) -> TestInstance:
    """All questions of one active topic, or a uniform random subset of `limit`."""

    repo = repo or get_topic_repo()
    rng = rng or random.Random()
    _check_limit(limit)
    name = normalize_topic_name(topic)
    doc = repo.find_by_name(name) if name else None
    if not doc or not doc.get("is_active", True):
        raise NotFoundError("Topic not found")

    questions = doc.get("questions", [])
    if limit is not None:
        questions = rng.sample(questions, min(limit, len(questions)))
    return TestInstance(topic=doc["topic"], questions=[_view(q, doc["topic"]) for q in questions])


def build_random_test(limit: Optional[int] = None, repo: Optional[TopicRepo] = None) -> TestInstance:
    """Sample across the whole active pool; a pool smaller than `limit` is returned whole."""

    repo = repo or get_topic_repo()
    settings = get_settings()
    if limit is None:
        limit = settings.default_sample_limit
    _check_limit(limit)
    if limit > MAX_SAMPLE_LIMIT:
        raise ValidationError(f"limit must be at most {MAX_SAMPLE_LIMIT}")

    rows = repo.sample_questions(limit)
    if not rows:
        raise EmptyPoolError()
    return TestInstance(questions=[_view(row, row["topic"]) for row in rows])


def build_mixed_test(repo: Optional[TopicRepo] = None, rng: Optional[random.Random] = None) -> TestInstance:
    """One uniformly chosen question from every active topic that has any."""

    repo = repo or get_topic_repo()
    rng = rng or random.Random()
    topics = repo.find_active()

    views: List[QuestionView] = []
    for doc in topics:
        questions = doc.get("questions") or []
        if not questions:
            continue
        for question in rng.sample(questions, min(QUESTIONS_PER_TOPIC, len(questions))):
            views.append(_view(question, doc["topic"]))

    meta = MixedTestMeta(
        questions_per_topic=QUESTIONS_PER_TOPIC,
        topics_count=len(topics),
        total_questions=len(views),
    )
    return TestInstance(questions=views, meta=meta)
