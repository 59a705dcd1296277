"""Schemas describing a submission editing session."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from launchit.schemas.project import DraftSummary


class RemoteImage(BaseModel):
    """An image referenced by URL (AI-provided or already hosted)."""

    kind: Literal["remote"] = "remote"
    url: str


class LocalImage(BaseModel):
    """An image uploaded by the user and not yet hosted anywhere."""

    kind: Literal["local"] = "local"
    data: bytes = Field(default=b"", exclude=True, repr=False)
    filename: str
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


ImageRef = Annotated[Union[RemoteImage, LocalImage], Field(discriminator="kind")]


class CategoryOption(BaseModel):
    value: str
    label: str
    is_new: bool = False


class CategoryGroup(BaseModel):
    label: str
    options: List[CategoryOption] = Field(default_factory=list)


class DraftForm(BaseModel):
    """In-memory form state for one project."""

    name: str = ""
    website_url: str = ""
    tagline: str = ""
    description: str = ""
    category: Optional[CategoryOption] = None
    links: List[str] = Field(default_factory=lambda: [""])
    built_with: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    logo: Optional[ImageRef] = None
    thumbnail: Optional[ImageRef] = None
    covers: List[Optional[ImageRef]] = Field(default_factory=lambda: [None] * 4)
    media_urls: List[str] = Field(default_factory=list)

    @property
    def filled_links(self) -> List[str]:
        return [link.strip() for link in self.links if link and link.strip()]

    @property
    def filled_covers(self) -> List[ImageRef]:
        return [cover for cover in self.covers if cover is not None]


class AIEnrichmentResult(BaseModel):
    """Normalized payload returned by the enrichment service."""

    name: str = ""
    website_url: str = ""
    tagline: str = ""
    description: str = ""
    category: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    logo_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    links: List[str] = Field(default_factory=list)

    @property
    def missing_essentials(self) -> List[str]:
        return [
            field
            for field in ("name", "description", "tagline")
            if not getattr(self, field)
        ]


class UrlPreview(BaseModel):
    """Basic page metadata scraped when AI enrichment fails."""

    domain: str
    title: str
    description: str = ""
    logo: Optional[str] = None
    screenshot: Optional[str] = None


class LocalDraft(BaseModel):
    """Ephemeral snapshot kept outside the data service."""

    name: str = ""
    website_url: str = ""
    tagline: str = ""
    description: str = ""
    category_value: Optional[str] = None
    links: List[str] = Field(default_factory=lambda: [""])


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVING_ENTRY_POINT = "resolving_entry_point"
    DRAFT_SELECTION = "draft_selection"
    LOADING_EXISTING = "loading_existing"
    EDITING = "editing"
    SAVING_DRAFT = "saving_draft"
    PUBLISHING = "publishing"
    PUBLISHED = "published"


class SmartFillMode(str, enum.Enum):
    ALL = "all"
    EMPTY = "empty"
    CANCEL = "cancel"


class Severity(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    message: str
    severity: Severity = Severity.INFO


class AutosaveStatus(BaseModel):
    status: Literal["idle", "saving", "error", "saved"] = "idle"
    message: Optional[str] = None
    last_saved_at: Optional[datetime] = None
    label: str = ""


class AIStatus(BaseModel):
    status: Literal["idle", "generating", "retrying", "smart_fill_pending"] = "idle"
    retry_count: int = 0
    pending: Optional[AIEnrichmentResult] = None


class SessionView(BaseModel):
    """Read-only snapshot handed to the presentation layer."""

    state: SessionState
    step: int = 0
    form: DraftForm
    link_types: List[str] = Field(default_factory=list)
    project_id: Optional[UUID] = None
    autosave_target_id: Optional[UUID] = None
    already_launched: bool = False
    has_unsaved_changes: bool = False
    should_warn_before_unload: bool = False
    validation_error: Optional[str] = None
    autosave: AutosaveStatus = Field(default_factory=AutosaveStatus)
    ai: AIStatus = Field(default_factory=AIStatus)
    url_preview: Optional[UrlPreview] = None
    drafts: List[DraftSummary] = Field(default_factory=list)
    categories: List[CategoryGroup] = Field(default_factory=list)
    notification: Optional[Notification] = None
    redirect_to: Optional[str] = None
    slug: Optional[str] = None
