"""Repository utilities for working with Project records."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from launchit.db.models.project import Project, ProjectStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProjectRepo:
    """Simple data-access helper for Project entities."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_owned(self, project_id: UUID, user_id: UUID) -> Optional[Project]:
        """Return the project only when ``user_id`` owns it."""

        result = await self.session.execute(
            select(Project).where(
                Project.id == project_id,
                Project.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Optional[Project]:
        result = await self.session.execute(select(Project).where(Project.slug == slug))
        return result.scalar_one_or_none()

    async def list_by_owner_and_status(
        self, user_id: UUID, status: ProjectStatus
    ) -> List[Project]:
        result = await self.session.execute(
            select(Project)
            .where(
                Project.user_id == user_id,
                Project.status == status.value,
            )
            .order_by(Project.updated_at.desc())
        )
        return list(result.scalars().all())

    async def find_draft_by_name(self, user_id: UUID, name: str) -> Optional[Project]:
        result = await self.session.execute(
            select(Project)
            .where(
                Project.user_id == user_id,
                Project.name == name,
                Project.status == ProjectStatus.DRAFT.value,
            )
            .order_by(Project.updated_at.desc())
        )
        return result.scalars().first()

    async def create(self, values: Dict[str, Any]) -> Project:
        now = _utcnow()
        project = Project(**values, created_at=now, updated_at=now)
        self.session.add(project)
        await self.session.flush()
        await self.session.refresh(project)
        return project

    async def update(
        self, project_id: UUID, user_id: UUID, values: Dict[str, Any]
    ) -> Optional[Project]:
        project = await self.get_owned(project_id, user_id)
        if project is None:
            return None
        for key, value in values.items():
            if key in {"id", "user_id", "created_at"}:
                continue
            setattr(project, key, value)
        project.updated_at = _utcnow()
        self.session.add(project)
        await self.session.flush()
        await self.session.refresh(project)
        return project
