from fastapi import APIRouter, Depends, Query

from aptitude.db.attempts_repo import AttemptRepo, get_attempt_repo
from aptitude.db.topics_repo import TopicRepo, get_topic_repo
from aptitude.schemas.attempt import AttemptCreate, AttemptRecord, PaginatedAttempts, SubmitAndArchiveRequest
from aptitude.security.identity import current_user_id
from aptitude.services.attempt_archiver import archive_attempt, get_attempt, list_attempts, submit_and_archive

router = APIRouter(prefix="/aptitude/attempts")


@router.post("", response_model=AttemptRecord, status_code=201)
def archive_attempt_endpoint(
    payload: AttemptCreate,
    user_id: str = Depends(current_user_id),
    repo: AttemptRepo = Depends(get_attempt_repo),
) -> AttemptRecord:
    return archive_attempt(user_id, payload, repo=repo)


@router.post("/submit", response_model=AttemptRecord, status_code=201)
def submit_and_archive_endpoint(
    payload: SubmitAndArchiveRequest,
    user_id: str = Depends(current_user_id),
    topic_repo: TopicRepo = Depends(get_topic_repo),
    attempt_repo: AttemptRepo = Depends(get_attempt_repo),
) -> AttemptRecord:
    return submit_and_archive(
        user_id,
        payload.topic,
        payload.time_taken_seconds,
        payload.answers,
        topic_repo=topic_repo,
        attempt_repo=attempt_repo,
    )


@router.get("", response_model=PaginatedAttempts)
def list_attempts_endpoint(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    repo: AttemptRepo = Depends(get_attempt_repo),
) -> PaginatedAttempts:
    return list_attempts(user_id, skip=skip, limit=limit, repo=repo)


@router.get("/{attempt_id}", response_model=AttemptRecord)
def get_attempt_endpoint(
    attempt_id: str,
    user_id: str = Depends(current_user_id),
    repo: AttemptRepo = Depends(get_attempt_repo),
) -> AttemptRecord:
    return get_attempt(user_id, attempt_id, repo=repo)
