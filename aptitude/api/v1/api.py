from fastapi import APIRouter

from aptitude.api.v1.endpoints import aptitude, attempts

api_router = APIRouter()
api_router.include_router(aptitude.router, tags=["aptitude"])
api_router.include_router(attempts.router, tags=["attempts"])
