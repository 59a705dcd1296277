"""In-process registry of open submission sessions."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Dict, Optional, Tuple
from uuid import UUID

from launchit.core.exceptions import ProjectAccessError
from launchit.schemas.submission import SessionState
from launchit.services.submission import SubmissionSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[UUID, Optional[str]], SubmissionSession]


class SessionRegistry:
    """Maps session ids to live sessions, scoped to the owning user.

    Sessions untouched for ``idle_ttl_seconds`` and sessions that have
    been published are closed on the next ``open``.
    """

    def __init__(
        self,
        factory: SessionFactory,
        idle_ttl_seconds: Optional[float] = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._idle_ttl = idle_ttl_seconds
        self._now = now
        self._sessions: Dict[UUID, Tuple[UUID, SubmissionSession]] = {}
        self._last_seen: Dict[UUID, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, user_id: UUID, client_key: Optional[str] = None) -> Tuple[UUID, SubmissionSession]:
        self.sweep()
        session_id = uuid.uuid4()
        session = self._factory(user_id, client_key)
        self._sessions[session_id] = (user_id, session)
        self._last_seen[session_id] = self._now()
        logger.info(f"Opened submission session {session_id} for {user_id}")
        return session_id, session

    def get(self, session_id: UUID, user_id: UUID) -> SubmissionSession:
        entry = self._sessions.get(session_id)
        if entry is None or entry[0] != user_id:
            raise ProjectAccessError("Submission session not found")
        self._last_seen[session_id] = self._now()
        return entry[1]

    def close(self, session_id: UUID, user_id: UUID) -> None:
        self.get(session_id, user_id)
        self._discard(session_id)
        logger.info(f"Closed submission session {session_id}")

    def sweep(self) -> int:
        """Close idle and published sessions; returns how many were dropped."""

        now = self._now()
        stale = [
            session_id
            for session_id, (_, session) in self._sessions.items()
            if session.state == SessionState.PUBLISHED
            or (
                self._idle_ttl is not None
                and now - self._last_seen[session_id] > self._idle_ttl
            )
        ]
        for session_id in stale:
            self._discard(session_id)
        if stale:
            logger.info(f"Evicted {len(stale)} submission session(s)")
        return len(stale)

    def _discard(self, session_id: UUID) -> None:
        _, session = self._sessions.pop(session_id)
        self._last_seen.pop(session_id, None)
        session.close()

    def close_all(self) -> None:
        for _, session in self._sessions.values():
            session.close()
        self._sessions.clear()
        self._last_seen.clear()
