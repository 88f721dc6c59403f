import copy
import threading
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection

from aptitude.db.session import get_db


class AttemptRepo:
    """Append-only store of archived aptitude attempts, keyed by owning user."""

    def __init__(self, collection: Optional[Collection] = None) -> None:
        self.collection = collection if collection is not None else get_db().attempts

    def insert(self, doc: Dict[str, Any]) -> None:
        # insert_one mutates its argument with an ObjectId
        self.collection.insert_one(dict(doc))

    def find_for_user(self, user_id: str, attempt_id: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"user_id": user_id, "attempt_id": attempt_id}, {"_id": 0})

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 20) -> List[Dict[str, Any]]:
        cursor = (
            self.collection.find({"user_id": user_id}, {"_id": 0})
            .sort([("created_at", DESCENDING), ("attempt_id", DESCENDING)])
            .skip(max(0, skip))
        )
        if limit:
            cursor = cursor.limit(max(0, limit))
        return list(cursor)

    def count_for_user(self, user_id: str) -> int:
        return self.collection.count_documents({"user_id": user_id})


class InMemoryAttemptRepo(AttemptRepo):
    """Simple in-memory repo for unit tests."""

    def __init__(self) -> None:
        self.storage: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def insert(self, doc: Dict[str, Any]) -> None:
        with self._lock:
            self.storage.append(copy.deepcopy(doc))

    def find_for_user(self, user_id: str, attempt_id: str) -> Optional[Dict[str, Any]]:
        for doc in self.storage:
            if doc["user_id"] == user_id and doc["attempt_id"] == attempt_id:
                return copy.deepcopy(doc)
        return None

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 20) -> List[Dict[str, Any]]:
        # Insertion order stands in for created_at; newest first.
        docs = [copy.deepcopy(doc) for doc in reversed(self.storage) if doc["user_id"] == user_id]
        docs = docs[max(0, skip):]
        if limit:
            docs = docs[:limit]
        return docs

    def count_for_user(self, user_id: str) -> int:
        return len([1 for doc in self.storage if doc["user_id"] == user_id])


def get_attempt_repo() -> AttemptRepo:
    """Return a repo bound to the shared Database instance."""

    return AttemptRepo()
