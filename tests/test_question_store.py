from datetime import datetime

import pytest
from pymongo.errors import DuplicateKeyError

from aptitude.core.errors import NotFoundError, ValidationError
from aptitude.db.topics_repo import InMemoryTopicRepo
from aptitude.schemas.aptitude import QuestionUpdate
from aptitude.services.question_store import (
    find_active_topics,
    find_topic_by_name,
    get_topic,
    list_topics,
    normalize_topic_name,
    resolve_question,
    set_topic_active,
    update_question,
    upsert_question,
)

from conftest import make_question


def test_normalize_topic_name_trims_and_lowercases():
    assert normalize_topic_name("  Logical Reasoning ") == "logical reasoning"
    assert normalize_topic_name(None) == ""


def test_upsert_creates_topic_and_appends_once(topic_repo):
    created = upsert_question(make_question(topic="  Logic "), repo=topic_repo)
    assert created.topic == "logic"
    assert created.is_active is True
    assert len(created.questions) == 1

    updated = upsert_question(make_question(topic="LOGIC", text="Second?"), repo=topic_repo)
    assert len(updated.questions) == 2
    assert [q.question for q in updated.questions] == ["Which shape has three sides?", "Second?"]
    assert list(topic_repo.storage) == ["logic"]


def test_upsert_assigns_distinct_ids_and_defaults(topic_repo):
    upsert_question(make_question(), repo=topic_repo)
    doc = upsert_question(make_question(text="Another"), repo=topic_repo)
    ids = [q.id for q in doc.questions]
    assert len(set(ids)) == 2
    assert all(q.difficulty.value == "easy" for q in doc.questions)
    assert doc.questions[0].explanation is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"options": ["A", "B", "C"]},
        {"options": ["A", "B", "C", "D", "E"]},
        {"options": ["A", " ", "C", "D"]},
        {"options": ["A", "", "C", "D"]},
        {"correct_index": 4},
        {"correct_index": -1},
        {"text": "   "},
        {"text": ""},
        {"topic": "   "},
        {"topic": ""},
    ],
)
def test_upsert_rejects_invalid_questions(topic_repo, overrides):
    with pytest.raises(ValidationError):
        upsert_question(make_question(**overrides), repo=topic_repo)
    assert topic_repo.storage == {}


def test_upsert_survives_concurrent_topic_creation():
    class RacingRepo(InMemoryTopicRepo):
        """Another writer creates the topic between our lookup and our insert."""

        def __init__(self):
            super().__init__()
            self.raced = False

        def find_by_name(self, name):
            now = datetime.utcnow()
            if not self.raced:
                self.raced = True
                super().insert_topic(
                    {"topic": name, "questions": [], "is_active": True, "created_at": now, "updated_at": now}
                )
                return None
            return super().find_by_name(name)

    repo = RacingRepo()
    doc = upsert_question(make_question(), repo=repo)
    assert len(doc.questions) == 1
    assert list(repo.storage) == ["logic"]


def test_in_memory_repo_enforces_unique_topic(topic_repo):
    topic_repo.insert_topic({"topic": "logic", "questions": [], "is_active": True})
    with pytest.raises(DuplicateKeyError):
        topic_repo.insert_topic({"topic": "logic", "questions": [], "is_active": True})


def test_update_question_in_place(topic_repo, add_question):
    question_id = add_question()
    doc = update_question(
        "Logic",
        question_id,
        QuestionUpdate(correct_index=2, explanation="Changed key", difficulty="hard"),
        repo=topic_repo,
    )
    question = doc.questions[0]
    assert question.id == question_id
    assert question.correct_index == 2
    assert question.explanation == "Changed key"
    assert question.difficulty.value == "hard"
    assert question.question == "Which shape has three sides?"


def test_update_question_revalidates(topic_repo, add_question):
    question_id = add_question()
    with pytest.raises(ValidationError):
        update_question("logic", question_id, QuestionUpdate(options=[{"text": "only one"}]), repo=topic_repo)
    with pytest.raises(ValidationError):
        update_question("logic", question_id, QuestionUpdate(correct_index=9), repo=topic_repo)
    assert len(resolve_question("logic", question_id, repo=topic_repo).options) == 4


def test_update_unknown_question_raises(topic_repo, add_question):
    add_question()
    with pytest.raises(NotFoundError):
        update_question("logic", "q_missing", QuestionUpdate(correct_index=1), repo=topic_repo)
    with pytest.raises(NotFoundError):
        update_question("verbal", "q_missing", QuestionUpdate(correct_index=1), repo=topic_repo)


def test_find_and_list_topics(topic_repo, add_question):
    add_question(topic="logic")
    add_question(topic="verbal")
    add_question(topic="verbal", text="Synonym?")
    set_topic_active("verbal", False, repo=topic_repo)

    assert [t.topic for t in find_active_topics(repo=topic_repo)] == ["logic"]
    assert find_topic_by_name(" VERBAL ", repo=topic_repo).is_active is False
    assert find_topic_by_name("missing", repo=topic_repo) is None
    with pytest.raises(NotFoundError):
        get_topic("missing", repo=topic_repo)

    summaries = {s.topic: s for s in list_topics(include_inactive=True, repo=topic_repo)}
    assert summaries["verbal"].question_count == 2
    assert summaries["verbal"].is_active is False
    assert [s.topic for s in list_topics(repo=topic_repo)] == ["logic"]


def test_set_topic_active_unknown_topic(topic_repo):
    with pytest.raises(NotFoundError):
        set_topic_active("ghost", False, repo=topic_repo)


def test_resolve_question_never_raises(topic_repo, add_question):
    question_id = add_question()
    assert resolve_question("logic", question_id, repo=topic_repo).correct_index == 0
    assert resolve_question("logic", "q_unknown", repo=topic_repo) is None
    assert resolve_question("ghost", question_id, repo=topic_repo) is None
    assert resolve_question("", question_id, repo=topic_repo) is None


def test_every_stored_question_has_four_options(topic_repo, add_question):
    for idx in range(5):
        add_question(topic=f"t{idx % 2}", text=f"Q{idx}")
    for topic in find_active_topics(repo=topic_repo):
        assert all(len(q.options) == 4 for q in topic.questions)


def test_update_question_rejects_empty_text(topic_repo, add_question):
    question_id = add_question()
    for text in ("", "  "):
        with pytest.raises(ValidationError):
            update_question("logic", question_id, QuestionUpdate(question=text), repo=topic_repo)
