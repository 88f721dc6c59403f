import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aptitude.api.v1.api import api_router
from aptitude.core.config import get_settings
from aptitude.db.session import init_db
from aptitude.security.identity import warn_if_admin_open

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.project_name)

# CORS for frontend apps; configure origins via APTITUDE_CORS_ORIGINS / CORS_ORIGINS env (comma-separated)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup() -> None:
    init_db()
    warn_if_admin_open()


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.api_prefix)
