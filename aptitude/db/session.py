import logging
import threading
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient

from aptitude.core.config import get_settings

logger = logging.getLogger(__name__)

TOPICS_COLLECTION = "aptitude_topics"
ATTEMPTS_COLLECTION = "aptitude_attempts"


class Database:
    """
    Mongo connection holder.

    Repositories receive collections from here; swapping the store should only
    require replacing this class and the repositories built on top of it.
    """

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None) -> None:
        settings = get_settings()
        self.uri = uri or settings.mongo_uri
        self.db_name = db_name or settings.mongo_db_name
        self.client = MongoClient(self.uri)
        self.db = self.client[self.db_name]

    @property
    def topics(self):
        return self.db[TOPICS_COLLECTION]

    @property
    def attempts(self):
        return self.db[ATTEMPTS_COLLECTION]

    def init_indexes(self) -> None:
        # At most one topic document per normalized name.
        self.topics.create_index([("topic", ASCENDING)], unique=True)
        self.topics.create_index([("is_active", ASCENDING)])
        self.topics.create_index([("questions.id", ASCENDING)])
        self.attempts.create_index([("attempt_id", ASCENDING)], unique=True)
        self.attempts.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])

    def close(self) -> None:
        self.client.close()


_db_lock = threading.Lock()
_db_instance: Optional[Database] = None


def get_db() -> Database:
    """Return the shared Database, connecting on first use."""

    global _db_instance
    if _db_instance is None:
        with _db_lock:
            if _db_instance is None:
                _db_instance = Database()
    return _db_instance


def init_db() -> None:
    """Ensure indexes exist. Safe to call on every startup."""

    db = get_db()
    db.init_indexes()
    logger.info("Aptitude indexes ensured on %s/%s", db.uri.split("@")[-1], db.db_name)
