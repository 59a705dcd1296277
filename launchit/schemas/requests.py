"""Request and response bodies for the submission API."""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from launchit.schemas.submission import SessionView, SmartFillMode


class OpenSessionRequest(BaseModel):
    project_id: Optional[UUID] = Field(default=None, description="Project to edit")
    client_key: Optional[str] = Field(
        default=None, description="Key of the local draft snapshot for this client"
    )


class FieldsPatch(BaseModel):
    name: Optional[str] = None
    website_url: Optional[str] = None
    tagline: Optional[str] = None
    description: Optional[str] = None


class CategoryRequest(BaseModel):
    value: Optional[str] = None


class LinkRequest(BaseModel):
    url: str = ""


class ListRequest(BaseModel):
    items: List[str] = Field(default_factory=list)


class StepRequest(BaseModel):
    step: int


class ImageUrlRequest(BaseModel):
    url: Optional[str] = Field(default=None, description="Empty clears the slot")


class SmartFillRequest(BaseModel):
    mode: SmartFillMode


class ContinueRequest(BaseModel):
    project_id: UUID


class SessionResponse(BaseModel):
    session_id: UUID
    view: SessionView
