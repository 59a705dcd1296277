"""Persistence gateway: project rows and object storage.

The submission session only talks to these protocols, so it can be exercised
without a live database or storage bucket.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from launchit.core.config import settings
from launchit.core.exceptions import GatewayError, StorageError
from launchit.db.models.project import ProjectStatus
from launchit.repositories.project_repo import ProjectRepo
from launchit.schemas.project import ProjectRead, ProjectWrite

logger = logging.getLogger(__name__)


class ProjectGateway(Protocol):
    async def create(self, values: ProjectWrite) -> ProjectRead: ...

    async def update(self, project_id: UUID, values: ProjectWrite) -> ProjectRead: ...

    async def get_owned(self, project_id: UUID, user_id: UUID) -> Optional[ProjectRead]: ...

    async def list_by_owner_and_status(
        self, user_id: UUID, status: ProjectStatus
    ) -> List[ProjectRead]: ...

    async def find_draft_by_name(self, user_id: UUID, name: str) -> Optional[ProjectRead]: ...


class ObjectStorage(Protocol):
    def public_url(self, path: str) -> str: ...

    def is_hosted(self, url: str) -> bool: ...

    async def upload(self, path: str, data: bytes, content_type: str) -> str: ...


def _write_values(values: ProjectWrite) -> dict:
    data = values.model_dump(mode="python")
    data["status"] = values.status.value
    if data.get("slug") is None:
        data.pop("slug", None)
    return data


class SqlProjectGateway:
    """Project rows via SQLAlchemy; each call commits its own session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, values: ProjectWrite) -> ProjectRead:
        try:
            async with self._session_factory() as session:
                project = await ProjectRepo(session).create(_write_values(values))
                await session.commit()
                return ProjectRead.model_validate(project)
        except SQLAlchemyError as exc:
            logger.error(f"Insert failed: {exc}")
            raise GatewayError(f"Insert failed: {exc}") from exc

    async def update(self, project_id: UUID, values: ProjectWrite) -> ProjectRead:
        try:
            async with self._session_factory() as session:
                project = await ProjectRepo(session).update(
                    project_id, values.user_id, _write_values(values)
                )
                if project is None:
                    raise GatewayError("Update failed: project not found")
                await session.commit()
                return ProjectRead.model_validate(project)
        except SQLAlchemyError as exc:
            logger.error(f"Update of {project_id} failed: {exc}")
            raise GatewayError(f"Update failed: {exc}") from exc

    async def get_owned(self, project_id: UUID, user_id: UUID) -> Optional[ProjectRead]:
        try:
            async with self._session_factory() as session:
                project = await ProjectRepo(session).get_owned(project_id, user_id)
                return ProjectRead.model_validate(project) if project else None
        except SQLAlchemyError as exc:
            raise GatewayError(f"Lookup failed: {exc}") from exc

    async def list_by_owner_and_status(
        self, user_id: UUID, status: ProjectStatus
    ) -> List[ProjectRead]:
        try:
            async with self._session_factory() as session:
                rows = await ProjectRepo(session).list_by_owner_and_status(user_id, status)
                return [ProjectRead.model_validate(row) for row in rows]
        except SQLAlchemyError as exc:
            raise GatewayError(f"Listing failed: {exc}") from exc

    async def find_draft_by_name(self, user_id: UUID, name: str) -> Optional[ProjectRead]:
        try:
            async with self._session_factory() as session:
                project = await ProjectRepo(session).find_draft_by_name(user_id, name)
                return ProjectRead.model_validate(project) if project else None
        except SQLAlchemyError as exc:
            raise GatewayError(f"Lookup failed: {exc}") from exc


class HttpObjectStorage:
    """Bucket storage reached over its REST API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        bucket: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> None:
        self._http = http_client
        self._base_url = (base_url or settings.storage.base_url).rstrip("/")
        self._bucket = bucket or settings.storage.bucket
        self._api_key = api_key if api_key is not None else settings.storage.api_key

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/object/public/{self._bucket}/{path}"

    def is_hosted(self, url: str) -> bool:
        return url.startswith(f"{self._base_url}/object/public/{self._bucket}/")

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        headers = {
            "Content-Type": content_type or "application/octet-stream",
            "Cache-Control": f"max-age={settings.storage.cache_control}",
            "x-upsert": "false",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key

        try:
            response = await self._http.post(
                f"{self._base_url}/object/{self._bucket}/{path}",
                content=data,
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(f"Upload of {path} failed: {exc}")
            raise StorageError(f"upload failed: {exc}") from exc
        return self.public_url(path)
