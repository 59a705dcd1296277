"""Pydantic schemas for Project resources"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from launchit.db.models.project import ProjectStatus


class ProjectWrite(BaseModel):
    """Column values sent to the data service on create or update."""

    user_id: UUID
    status: ProjectStatus = ProjectStatus.DRAFT
    name: str = ""
    website_url: str = ""
    tagline: str = ""
    description: str = ""
    category_type: str = ""
    links: List[str] = Field(default_factory=list)
    built_with: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    media_urls: List[str] = Field(default_factory=list)
    logo_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    cover_urls: List[str] = Field(default_factory=list)
    slug: Optional[str] = Field(
        default=None, description="Only sent when a slug is being assigned"
    )


class ProjectRead(BaseModel):
    """Schema returned when reading a project."""

    id: UUID = Field(..., description="Project identifier")
    user_id: UUID = Field(..., description="Owner identifier")
    slug: Optional[str] = Field(default=None, description="Public URL slug")
    status: ProjectStatus = Field(..., description="Lifecycle status")
    name: str = ""
    website_url: str = ""
    tagline: str = ""
    description: str = ""
    category_type: str = ""
    links: List[str] = Field(default_factory=list)
    built_with: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    media_urls: List[str] = Field(default_factory=list)
    logo_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    cover_urls: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(
        default=None, description="Creation timestamp"
    )
    updated_at: Optional[datetime] = Field(
        default=None, description="Last write timestamp"
    )

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_meaningful(self) -> bool:
        """Drafts with no primary content are never offered for resumption."""

        return any(
            (value or "").strip()
            for value in (
                self.name,
                self.website_url,
                self.tagline,
                self.description,
                self.category_type,
            )
        )


class DraftSummary(BaseModel):
    """Compact draft listing used by the draft-selection screen."""

    id: UUID
    name: str = ""
    website_url: str = ""
    tagline: str = ""
    description: str = ""
    category_type: str = ""
    logo_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
