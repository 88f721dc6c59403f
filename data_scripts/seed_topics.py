"""
Seed a small aptitude question bank directly into MongoDB.

- Creates topics on first use through the regular upsert path
- Skips questions whose text already exists in the topic, so re-runs are safe

How to run:
1) Ensure MongoDB is reachable per your `.env` (APTITUDE_MONGO_URI/APTITUDE_MONGO_DB_NAME)
2) python data_scripts/seed_topics.py
"""

import logging
import os
import sys
from typing import Any, Dict, List

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from aptitude.db.session import init_db  # noqa: E402
from aptitude.db.topics_repo import TopicRepo  # noqa: E402
from aptitude.schemas.aptitude import QuestionCreate  # noqa: E402
from aptitude.services.question_store import find_topic_by_name, upsert_question  # noqa: E402

logger = logging.getLogger("seed_topics")


def build_bank() -> List[Dict[str, Any]]:
    return [
        {
            "topic": "Logic",
            "question": "If all bloops are razzies and all razzies are lazzies, are all bloops lazzies?",
            "options": ["Yes", "No", "Only some", "Cannot be determined"],
            "correct_index": 0,
            "difficulty": "easy",
            "explanation": "Set inclusion is transitive.",
        },
        {
            "topic": "Logic",
            "question": "Which number comes next: 2, 6, 12, 20, 30, ?",
            "options": ["40", "42", "44", "36"],
            "correct_index": 1,
            "difficulty": "medium",
            "explanation": "Differences grow by 2: +4, +6, +8, +10, +12.",
        },
        {
            "topic": "Quantitative",
            "question": "A train covers 180 km in 3 hours. What is its speed in m/s?",
            "options": ["16.67", "60", "50", "18"],
            "correct_index": 0,
            "difficulty": "easy",
            "explanation": "60 km/h * 5/18 = 16.67 m/s.",
        },
        {
            "topic": "Quantitative",
            "question": "What is 15% of 240?",
            "options": ["32", "36", "38", "24"],
            "correct_index": 1,
            "difficulty": "easy",
        },
        {
            "topic": "Verbal",
            "question": "Choose the synonym of 'candid'.",
            "options": ["Frank", "Secretive", "Bitter", "Careful"],
            "correct_index": 0,
            "difficulty": "easy",
        },
        {
            "topic": "Verbal",
            "question": "Choose the antonym of 'ephemeral'.",
            "options": ["Fleeting", "Permanent", "Brief", "Fragile"],
            "correct_index": 1,
            "difficulty": "hard",
        },
    ]


def seed() -> None:
    init_db()
    repo = TopicRepo()
    inserted = 0
    skipped = 0
    for item in build_bank():
        existing = find_topic_by_name(item["topic"], repo=repo)
        if existing and any(q.question == item["question"] for q in existing.questions):
            skipped += 1
            continue
        payload = QuestionCreate(
            topic=item["topic"],
            question=item["question"],
            options=[{"text": text} for text in item["options"]],
            correct_index=item["correct_index"],
            difficulty=item.get("difficulty", "easy"),
            explanation=item.get("explanation"),
        )
        upsert_question(payload, repo=repo)
        inserted += 1
    logger.info("Seed complete: %d inserted, %d skipped", inserted, skipped)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    seed()
