"""Draft listing for the caller."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from launchit.api.deps import get_gateway
from launchit.auth.jwt import require_auth
from launchit.db.models.project import ProjectStatus
from launchit.schemas.project import DraftSummary
from launchit.services.gateway import ProjectGateway


router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.get("", response_model=List[DraftSummary])
async def list_drafts(
    auth=Depends(require_auth),
    gateway: ProjectGateway = Depends(get_gateway),
):
    rows = await gateway.list_by_owner_and_status(auth["user_id"], ProjectStatus.DRAFT)
    return [
        DraftSummary.model_validate(row.model_dump())
        for row in rows
        if row.is_meaningful
    ]
