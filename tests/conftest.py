import random
from typing import Callable, Generator, List, Optional

import pytest

from aptitude.core.config import get_settings
from aptitude.db.attempts_repo import InMemoryAttemptRepo
from aptitude.db.topics_repo import InMemoryTopicRepo
from aptitude.schemas.aptitude import QuestionCreate
from aptitude.services.question_store import upsert_question


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch) -> Generator[None, None, None]:
    """Keep tests independent of the developer's environment and .env file."""

    monkeypatch.delenv("APTITUDE_ADMIN_KEY", raising=False)
    monkeypatch.delenv("ADMIN_MASTER_KEY", raising=False)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def topic_repo() -> InMemoryTopicRepo:
    return InMemoryTopicRepo(rng=random.Random(1234))


@pytest.fixture
def attempt_repo() -> InMemoryAttemptRepo:
    return InMemoryAttemptRepo()


def make_question(
    topic: str = "logic",
    text: str = "Which shape has three sides?",
    options: Optional[List[str]] = None,
    correct_index: int = 0,
    **extra,
) -> QuestionCreate:
    return QuestionCreate(
        topic=topic,
        question=text,
        options=[{"text": opt} for opt in (options or ["Triangle", "Square", "Circle", "Hexagon"])],
        correct_index=correct_index,
        **extra,
    )


@pytest.fixture
def add_question(topic_repo) -> Callable[..., str]:
    """Insert a question through the store and return its id."""

    def _add(topic: str = "logic", text: str = "Which shape has three sides?", **kwargs) -> str:
        doc = upsert_question(make_question(topic=topic, text=text, **kwargs), repo=topic_repo)
        return doc.questions[-1].id

    return _add
