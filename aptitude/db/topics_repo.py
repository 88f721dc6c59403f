import copy
import random
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from aptitude.db.session import get_db

# Fields copied out of a question subdocument into a sampled row.
QUESTION_FIELDS = ("id", "question", "options", "correct_index", "difficulty", "explanation")


class TopicRepo:
    """Mongo-backed repository for aptitude topics and their embedded questions."""

    def __init__(self, collection: Optional[Collection] = None) -> None:
        self.collection = collection if collection is not None else get_db().topics

    def insert_topic(self, doc: Dict[str, Any]) -> None:
        """Insert a new topic; raises DuplicateKeyError if the name is taken."""

        self.collection.insert_one(doc)

    def find_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"topic": name}, {"_id": 0})

    def find_active(self) -> List[Dict[str, Any]]:
        cursor = self.collection.find({"is_active": True}, {"_id": 0}).sort([("_id", ASCENDING)])
        return list(cursor)

    def summaries(self, include_inactive: bool = True) -> List[Dict[str, Any]]:
        match: Dict[str, Any] = {} if include_inactive else {"is_active": True}
        pipeline: List[Dict[str, Any]] = [
            {"$match": match},
            {"$sort": {"_id": 1}},
            {
                "$project": {
                    "_id": 0,
                    "topic": 1,
                    "is_active": 1,
                    "question_count": {"$size": {"$ifNull": ["$questions", []]}},
                }
            },
        ]
        return list(self.collection.aggregate(pipeline))

    def push_question(self, name: str, question: Dict[str, Any], now: datetime) -> Optional[Dict[str, Any]]:
        return self.collection.find_one_and_update(
            {"topic": name},
            {"$push": {"questions": question}, "$set": {"updated_at": now}},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )

    def set_question_fields(
        self, name: str, question_id: str, fields: Dict[str, Any], now: datetime
    ) -> Optional[Dict[str, Any]]:
        patch = {f"questions.$.{key}": value for key, value in fields.items()}
        patch["updated_at"] = now
        return self.collection.find_one_and_update(
            {"topic": name, "questions.id": question_id},
            {"$set": patch},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )

    def set_active(self, name: str, is_active: bool, now: datetime) -> Optional[Dict[str, Any]]:
        return self.collection.find_one_and_update(
            {"topic": name},
            {"$set": {"is_active": is_active, "updated_at": now}},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )

    def find_question(self, name: str, question_id: str) -> Optional[Dict[str, Any]]:
        doc = self.collection.find_one(
            {"topic": name, "questions.id": question_id},
            {"_id": 0, "questions.$": 1},
        )
        if not doc or not doc.get("questions"):
            return None
        return doc["questions"][0]

    def sample_questions(self, limit: int) -> List[Dict[str, Any]]:
        """Uniformly sample up to `limit` questions across every active topic."""

        project: Dict[str, Any] = {"_id": 0, "topic": "$topic"}
        for field in QUESTION_FIELDS:
            project[field] = f"$questions.{field}"
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"is_active": True}},
            {"$unwind": "$questions"},
            {"$sample": {"size": max(0, limit)}},
            {"$project": project},
        ]
        return list(self.collection.aggregate(pipeline))


class InMemoryTopicRepo(TopicRepo):
    """Simple in-memory repo for unit tests."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.storage: Dict[str, Dict[str, Any]] = {}
        self.rng = rng or random.Random()
        self._lock = threading.Lock()

    def insert_topic(self, doc: Dict[str, Any]) -> None:
        with self._lock:
            if doc["topic"] in self.storage:
                raise DuplicateKeyError(f"E11000 duplicate key error topic: {doc['topic']}")
            self.storage[doc["topic"]] = copy.deepcopy(doc)

    def find_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        doc = self.storage.get(name)
        return copy.deepcopy(doc) if doc else None

    def find_active(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self.storage.values() if doc.get("is_active", True)]

    def summaries(self, include_inactive: bool = True) -> List[Dict[str, Any]]:
        return [
            {"topic": doc["topic"], "is_active": doc["is_active"], "question_count": len(doc.get("questions", []))}
            for doc in self.storage.values()
            if include_inactive or doc["is_active"]
        ]

    def push_question(self, name: str, question: Dict[str, Any], now: datetime) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self.storage.get(name)
            if doc is None:
                return None
            doc.setdefault("questions", []).append(copy.deepcopy(question))
            doc["updated_at"] = now
            return copy.deepcopy(doc)

    def set_question_fields(
        self, name: str, question_id: str, fields: Dict[str, Any], now: datetime
    ) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self.storage.get(name)
            if doc is None:
                return None
            for question in doc.get("questions", []):
                if question["id"] == question_id:
                    question.update(copy.deepcopy(fields))
                    doc["updated_at"] = now
                    return copy.deepcopy(doc)
            return None

    def set_active(self, name: str, is_active: bool, now: datetime) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self.storage.get(name)
            if doc is None:
                return None
            doc["is_active"] = is_active
            doc["updated_at"] = now
            return copy.deepcopy(doc)

    def find_question(self, name: str, question_id: str) -> Optional[Dict[str, Any]]:
        doc = self.storage.get(name)
        if not doc:
            return None
        for question in doc.get("questions", []):
            if question["id"] == question_id:
                return copy.deepcopy(question)
        return None

    def sample_questions(self, limit: int) -> List[Dict[str, Any]]:
        pool = [
            {"topic": doc["topic"], **{field: question.get(field) for field in QUESTION_FIELDS}}
            for doc in self.storage.values()
            if doc.get("is_active", True)
            for question in doc.get("questions", [])
        ]
        return copy.deepcopy(self.rng.sample(pool, min(max(0, limit), len(pool))))


def get_topic_repo() -> TopicRepo:
    """Return a repo bound to the shared Database instance."""

    return TopicRepo()
