"""Version 1 API router."""
from fastapi import APIRouter

from launchit.api.v1.endpoints import drafts, submissions

api_router = APIRouter(prefix="/v1")
api_router.include_router(drafts.router)
api_router.include_router(submissions.router)
