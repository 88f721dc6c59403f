"""
Scoring of submitted answers.

Answers are always checked against the question bank as it is now, not as it
was when the test was assembled. An answer whose question can no longer be
found earns nothing, but `total` stays the number of answers submitted.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from aptitude.core.errors import NotFoundError, ValidationError
from aptitude.db.topics_repo import TopicRepo, get_topic_repo
from aptitude.schemas.aptitude import QuestionDoc
from aptitude.schemas.attempt import AnswerIn, AnswerSnapshot, GradedSubmission, SubmissionResult
from aptitude.services.question_store import normalize_topic_name

logger = logging.getLogger(__name__)


def _load_answer_key(topic: str, answers: Sequence[AnswerIn], repo: TopicRepo) -> Tuple[str, Dict[str, QuestionDoc]]:
    name = normalize_topic_name(topic)
    if not name:
        raise ValidationError("topic is required")
    if not answers:
        raise ValidationError("answers must not be empty")

    # Inactive topics stay gradeable.
    doc = repo.find_by_name(name)
    if not doc:
        raise NotFoundError("Topic not found")
    return doc["topic"], {q["id"]: QuestionDoc(**q) for q in doc.get("questions", [])}


def _resolved(answers: Sequence[AnswerIn], key: Dict[str, QuestionDoc], topic: str) -> List[Tuple[AnswerIn, QuestionDoc]]:
    pairs = []
    missing = 0
    for answer in answers:
        question = key.get(answer.question_id)
        if question is None:
            missing += 1
            continue
        pairs.append((answer, question))
    if missing:
        logger.warning("%d submitted answer(s) for topic %r reference unknown questions", missing, topic)
    return pairs


def evaluate_submission(
    topic: str, answers: Sequence[AnswerIn], repo: Optional[TopicRepo] = None
) -> SubmissionResult:
    repo = repo or get_topic_repo()
    name, key = _load_answer_key(topic, answers, repo)
    score = sum(1 for answer, question in _resolved(answers, key, name) if answer.selected_index == question.correct_index)
    return SubmissionResult(total=len(answers), score=score)


def grade_submission(
    topic: str, answers: Sequence[AnswerIn], repo: Optional[TopicRepo] = None
) -> GradedSubmission:
    """Score and snapshot every resolvable answer for later review."""

    repo = repo or get_topic_repo()
    name, key = _load_answer_key(topic, answers, repo)
    snapshots: List[AnswerSnapshot] = []
    for answer, question in _resolved(answers, key, name):
        snapshots.append(
            AnswerSnapshot(
                question_id=question.id,
                question=question.question,
                options=[opt.model_copy() for opt in question.options],
                explanation=question.explanation,
                difficulty=question.difficulty,
                selected_index=answer.selected_index,
                correct_index=question.correct_index,
                is_correct=answer.selected_index == question.correct_index,
            )
        )
    score = sum(1 for snap in snapshots if snap.is_correct)
    return GradedSubmission(topic=name, total=len(answers), score=score, answers=snapshots)
