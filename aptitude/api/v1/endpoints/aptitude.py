from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from aptitude.core.errors import NotFoundError
from aptitude.db.topics_repo import TopicRepo, get_topic_repo
from aptitude.schemas.aptitude import (
    QuestionCreate,
    QuestionDoc,
    QuestionUpdate,
    TestInstance,
    TopicActivation,
    TopicResponse,
    TopicSummary,
)
from aptitude.schemas.attempt import GradedSubmission, SubmissionRequest, SubmissionResult
from aptitude.security.identity import admin_guard
from aptitude.services.evaluator import evaluate_submission, grade_submission
from aptitude.services.question_store import (
    list_topics,
    resolve_question,
    set_topic_active,
    update_question,
    upsert_question,
)
from aptitude.services.test_assembler import MAX_SAMPLE_LIMIT, build_mixed_test, build_random_test, build_topic_test

router = APIRouter(prefix="/aptitude")


# --- Admin ---

@router.post(
    "/questions", response_model=TopicResponse, status_code=201, dependencies=[Depends(admin_guard)]
)
def add_question_endpoint(payload: QuestionCreate, repo: TopicRepo = Depends(get_topic_repo)) -> TopicResponse:
    return upsert_question(payload, repo=repo)


@router.patch(
    "/topics/{topic}/questions/{question_id}",
    response_model=TopicResponse,
    dependencies=[Depends(admin_guard)],
)
def update_question_endpoint(
    topic: str, question_id: str, payload: QuestionUpdate, repo: TopicRepo = Depends(get_topic_repo)
) -> TopicResponse:
    return update_question(topic, question_id, payload, repo=repo)


@router.get(
    "/topics/{topic}/questions/{question_id}",
    response_model=QuestionDoc,
    dependencies=[Depends(admin_guard)],
)
def get_question_endpoint(topic: str, question_id: str, repo: TopicRepo = Depends(get_topic_repo)) -> QuestionDoc:
    question = resolve_question(topic, question_id, repo=repo)
    if question is None:
        raise NotFoundError("Question not found")
    return question


@router.patch("/topics/{topic}", response_model=TopicSummary, dependencies=[Depends(admin_guard)])
def set_topic_active_endpoint(
    topic: str, payload: TopicActivation, repo: TopicRepo = Depends(get_topic_repo)
) -> TopicSummary:
    return set_topic_active(topic, payload.is_active, repo=repo)


# --- Test assembly ---

@router.get("/topics", response_model=List[TopicSummary])
def list_topics_endpoint(
    include_inactive: bool = False, repo: TopicRepo = Depends(get_topic_repo)
) -> List[TopicSummary]:
    return list_topics(include_inactive=include_inactive, repo=repo)


@router.get("/topics/{topic}/test", response_model=TestInstance, response_model_exclude_none=True)
def topic_test_endpoint(
    topic: str,
    limit: Optional[int] = Query(default=None, ge=1),
    repo: TopicRepo = Depends(get_topic_repo),
) -> TestInstance:
    return build_topic_test(topic, limit=limit, repo=repo)


@router.get("/questions/random", response_model=TestInstance, response_model_exclude_none=True)
def random_questions_endpoint(
    limit: Optional[int] = Query(default=None, ge=1, le=MAX_SAMPLE_LIMIT),
    repo: TopicRepo = Depends(get_topic_repo),
) -> TestInstance:
    return build_random_test(limit=limit, repo=repo)


@router.get("/test/mixed", response_model=TestInstance, response_model_exclude_none=True)
def mixed_test_endpoint(repo: TopicRepo = Depends(get_topic_repo)) -> TestInstance:
    return build_mixed_test(repo=repo)


# --- Submission ---

@router.post("/submit", response_model=SubmissionResult)
def submit_endpoint(payload: SubmissionRequest, repo: TopicRepo = Depends(get_topic_repo)) -> SubmissionResult:
    return evaluate_submission(payload.topic, payload.answers, repo=repo)


@router.post("/submit/graded", response_model=GradedSubmission)
def submit_graded_endpoint(
    payload: SubmissionRequest, repo: TopicRepo = Depends(get_topic_repo)
) -> GradedSubmission:
    return grade_submission(payload.topic, payload.answers, repo=repo)
