"""Project model definition"""
from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from launchit.db.base import Base


class ProjectStatus(str, enum.Enum):
    DRAFT = "draft"
    LAUNCHED = "launched"


class Project(Base):
    """A startup submission, either an in-progress draft or a launch."""

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), nullable=False, index=True
    )
    slug: Mapped[Optional[str]] = mapped_column(String, unique=True, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ProjectStatus.DRAFT.value, index=True
    )

    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    tagline: Mapped[str] = mapped_column(String, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    website_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    category_type: Mapped[str] = mapped_column(String, nullable=False, default="")

    links: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    built_with: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    media_urls: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    logo_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    cover_urls: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Project {self.id} user={self.user_id} status={self.status}>"
