"""
Pytest configuration and in-memory fakes for the submission service
"""
import asyncio
import io
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID, uuid4

import httpx
import pytest
import pytest_asyncio
from PIL import Image

from launchit.core.config import settings
from launchit.core.exceptions import AIEnrichmentError, AITransientError, GatewayError, StorageError
from launchit.db.models.project import ProjectStatus
from launchit.schemas.project import ProjectRead, ProjectWrite
from launchit.services.media import MediaUploader
from launchit.services.submission import SubmissionSession


# Keep the test run away from external services
os.environ["ENV"] = "test"
settings.ENV = "test"


class _VirtualTimer:
    def __init__(self, when: float, seq: int, callback) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """Deterministic clock; ``advance`` runs due callbacks in time order."""

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = 0
        self._timers: List[_VirtualTimer] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback) -> _VirtualTimer:
        timer = _VirtualTimer(self._now + delay, self._seq, callback)
        self._seq += 1
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled)

    async def advance(self, seconds: float) -> None:
        target = self._now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when, t.seq))
            self._timers.remove(timer)
            self._now = timer.when
            await timer.callback()
        self._now = target
        self._timers = [t for t in self._timers if not t.cancelled]


class FakeGateway:
    """In-memory project table; writes can be gated or made to fail."""

    def __init__(self) -> None:
        self.rows: Dict[UUID, ProjectRead] = {}
        self.calls: List[str] = []
        self.fail_with: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.entered = asyncio.Event()

    def seed(self, user_id: UUID, status: ProjectStatus = ProjectStatus.DRAFT, **fields: Any) -> ProjectRead:
        stamp = fields.pop("updated_at", datetime.now(timezone.utc))
        row = ProjectRead(
            id=uuid4(),
            user_id=user_id,
            status=status,
            created_at=stamp,
            updated_at=stamp,
            **fields,
        )
        self.rows[row.id] = row
        return row

    def count(self, op: str) -> int:
        return self.calls.count(op)

    async def _write(self, op: str) -> None:
        self.calls.append(op)
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, values: ProjectWrite) -> ProjectRead:
        await self._write("create")
        now = datetime.now(timezone.utc)
        row = ProjectRead(id=uuid4(), created_at=now, updated_at=now, **values.model_dump())
        self.rows[row.id] = row
        return row

    async def update(self, project_id: UUID, values: ProjectWrite) -> ProjectRead:
        await self._write("update")
        existing = self.rows.get(project_id)
        if existing is None or existing.user_id != values.user_id:
            raise GatewayError("Update failed: project not found")
        data = values.model_dump()
        if data["slug"] is None:
            data["slug"] = existing.slug
        row = existing.model_copy(update={**data, "updated_at": datetime.now(timezone.utc)})
        self.rows[project_id] = row
        return row

    async def get_owned(self, project_id: UUID, user_id: UUID) -> Optional[ProjectRead]:
        self.calls.append("get_owned")
        row = self.rows.get(project_id)
        return row if row is not None and row.user_id == user_id else None

    async def list_by_owner_and_status(self, user_id: UUID, status: ProjectStatus) -> List[ProjectRead]:
        self.calls.append("list")
        rows = [r for r in self.rows.values() if r.user_id == user_id and r.status == status]
        return sorted(rows, key=lambda r: r.updated_at, reverse=True)

    async def find_draft_by_name(self, user_id: UUID, name: str) -> Optional[ProjectRead]:
        self.calls.append("find_by_name")
        for row in await self.list_by_owner_and_status(user_id, ProjectStatus.DRAFT):
            if row.name == name:
                return row
        return None


class FakeStorage:
    base = "https://cdn.test/object/public/startup-media"

    def __init__(self) -> None:
        self.uploads: List[tuple] = []
        self.fail = False

    def public_url(self, path: str) -> str:
        return f"{self.base}/{path}"

    def is_hosted(self, url: str) -> bool:
        return url.startswith(f"{self.base}/")

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        if self.fail:
            raise StorageError("upload failed: bucket unavailable")
        self.uploads.append((path, content_type, data))
        return self.public_url(path)


class ScriptedAI:
    """Stands in for the enrichment client, replaying queued outcomes."""

    def __init__(self) -> None:
        self.outcomes: List[Any] = []
        self.calls: List[str] = []
        self.preview = None
        self.preview_calls = 0

    def queue(self, *outcomes: Any) -> None:
        self.outcomes.extend(outcomes)

    async def generate(self, url: str, user_id: Optional[UUID]):
        self.calls.append(url)
        outcome = self.outcomes.pop(0) if self.outcomes else AITransientError("timeout")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def basic_preview(self, url: str):
        self.preview_calls += 1
        if self.preview is None:
            raise AIEnrichmentError("Preview fetch failed: unreachable")
        return self.preview


class FakeRedis:
    """Minimal async Redis stub for rate limiting and local drafts."""

    def __init__(self) -> None:
        self.store: Dict[str, Any] = {}
        self.ttl: Dict[str, int] = {}

    async def get(self, key: str):
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None, nx: bool = False) -> bool:
        if nx and key in self.store:
            return False
        self.store[key] = value
        if ex is not None:
            self.ttl[key] = ex
        return True

    async def delete(self, key: str) -> int:
        self.ttl.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0

    async def incr(self, key: str) -> int:
        current = int(self.store.get(key, 0)) + 1
        self.store[key] = current
        return current

    async def expire(self, key: str, seconds: int) -> None:
        self.ttl[key] = seconds


def encode_image(fmt: str = "PNG", size=(16, 16), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def ai() -> ScriptedAI:
    return ScriptedAI()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    return encode_image


@pytest_asyncio.fixture
async def http_client():
    """HTTP client whose every request answers 404."""

    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    async with httpx.AsyncClient(transport=transport) as client:
        yield client


@pytest.fixture
def make_session(gateway, storage, ai, clock, user_id, http_client):
    def _make(**kwargs: Any) -> SubmissionSession:
        kwargs.setdefault("user_id", user_id)
        return SubmissionSession(
            gateway,
            MediaUploader(storage, http_client),
            ai,
            clock,
            **kwargs,
        )

    return _make
