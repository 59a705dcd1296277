"""Endpoints driving a submission editing session."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status

from launchit.api.deps import get_registry
from launchit.auth.jwt import require_auth
from launchit.schemas.requests import (
    CategoryRequest,
    ContinueRequest,
    FieldsPatch,
    ImageUrlRequest,
    LinkRequest,
    ListRequest,
    OpenSessionRequest,
    SessionResponse,
    SmartFillRequest,
    StepRequest,
)
from launchit.schemas.submission import LocalImage, RemoteImage
from launchit.services.limits import check_ai_rate_limit
from launchit.services.sessions import SessionRegistry
from launchit.services.submission import SubmissionSession


router = APIRouter(prefix="/submissions", tags=["submissions"])


def _respond(session_id: UUID, session: SubmissionSession) -> SessionResponse:
    return SessionResponse(session_id=session_id, view=session.view())


def _session(session_id: UUID, auth: dict, registry: SessionRegistry) -> SubmissionSession:
    return registry.get(session_id, auth["user_id"])


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(
    body: OpenSessionRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session_id, session = registry.open(auth["user_id"], body.client_key)
    await session.start(body.project_id)
    return _respond(session_id, session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    return _respond(session_id, _session(session_id, auth, registry))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    registry.close(session_id, auth["user_id"])


@router.post("/{session_id}/continue", response_model=SessionResponse)
async def continue_draft(
    session_id: UUID,
    body: ContinueRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.continue_draft(body.project_id)
    return _respond(session_id, session)


@router.post("/{session_id}/start-new", response_model=SessionResponse)
async def start_new(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.start_new()
    return _respond(session_id, session)


@router.patch("/{session_id}/fields", response_model=SessionResponse)
async def update_fields(
    session_id: UUID,
    body: FieldsPatch,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    for field, value in body.model_dump(exclude_unset=True).items():
        await session.update_field(field, value)
    return _respond(session_id, session)


@router.put("/{session_id}/category", response_model=SessionResponse)
async def select_category(
    session_id: UUID,
    body: CategoryRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.select_category(body.value)
    return _respond(session_id, session)


@router.post("/{session_id}/links", response_model=SessionResponse)
async def add_link(
    session_id: UUID,
    body: LinkRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.add_link(body.url)
    return _respond(session_id, session)


@router.put("/{session_id}/links/{index}", response_model=SessionResponse)
async def update_link(
    session_id: UUID,
    index: int,
    body: LinkRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.update_link(index, body.url)
    return _respond(session_id, session)


@router.delete("/{session_id}/links/{index}", response_model=SessionResponse)
async def remove_link(
    session_id: UUID,
    index: int,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.remove_link(index)
    return _respond(session_id, session)


@router.put("/{session_id}/tags", response_model=SessionResponse)
async def set_tags(
    session_id: UUID,
    body: ListRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.set_tags(body.items)
    return _respond(session_id, session)


@router.put("/{session_id}/built-with", response_model=SessionResponse)
async def set_built_with(
    session_id: UUID,
    body: ListRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.set_built_with(body.items)
    return _respond(session_id, session)


@router.put("/{session_id}/step", response_model=SessionResponse)
async def change_step(
    session_id: UUID,
    body: StepRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    session.change_step(body.step)
    return _respond(session_id, session)


@router.post("/{session_id}/images/{slot}", response_model=SessionResponse)
async def upload_image(
    session_id: UUID,
    slot: str,
    file: UploadFile = File(...),
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    image = LocalImage(
        data=await file.read(),
        filename=file.filename or f"{slot}.png",
        mime_type=file.content_type or "application/octet-stream",
    )
    await session.set_image(slot, image)
    return _respond(session_id, session)


@router.put("/{session_id}/images/{slot}/url", response_model=SessionResponse)
async def set_image_url(
    session_id: UUID,
    slot: str,
    body: ImageUrlRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.set_image(slot, RemoteImage(url=body.url) if body.url else None)
    return _respond(session_id, session)


@router.post("/{session_id}/validate-url", response_model=SessionResponse)
async def validate_url(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    session.validate_url()
    return _respond(session_id, session)


@router.post("/{session_id}/ai-fill", response_model=SessionResponse)
async def ai_fill(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await check_ai_rate_limit(str(auth["user_id"]))
    await session.generate_with_ai()
    return _respond(session_id, session)


@router.post("/{session_id}/smart-fill", response_model=SessionResponse)
async def smart_fill(
    session_id: UUID,
    body: SmartFillRequest,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.accept_smart_fill(body.mode)
    return _respond(session_id, session)


@router.post("/{session_id}/draft", response_model=SessionResponse)
async def save_draft(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.save_draft()
    return _respond(session_id, session)


@router.post("/{session_id}/autosave/retry", response_model=SessionResponse)
async def retry_autosave(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    await session.autosave()
    return _respond(session_id, session)


@router.post("/{session_id}/publish", response_model=SessionResponse)
async def publish(
    session_id: UUID,
    auth=Depends(require_auth),
    registry: SessionRegistry = Depends(get_registry),
):
    session = _session(session_id, auth, registry)
    record = await session.publish()
    response = _respond(session_id, session)
    if record is not None:
        registry.close(session_id, auth["user_id"])
    return response
