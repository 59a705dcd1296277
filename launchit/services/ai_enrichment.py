"""Client for the external launch-data enrichment service."""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse
from uuid import UUID

import httpx

from launchit.core.config import settings
from launchit.core.exceptions import (
    AIEnrichmentError,
    AIPartialError,
    AITransientError,
)
from launchit.schemas.submission import AIEnrichmentResult, UrlPreview

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_DESCRIPTION_RES = (
    re.compile(r"<meta\s+name=[\"']description[\"']\s+content=[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<meta\s+property=[\"']og:description[\"']\s+content=[\"']([^\"']+)[\"']", re.IGNORECASE),
)
_OG_IMAGE_RE = re.compile(
    r"<meta\s+property=[\"']og:image[\"']\s+content=[\"']([^\"']+)[\"']", re.IGNORECASE
)
_ICON_RES = (
    _OG_IMAGE_RE,
    re.compile(r"<link\s+rel=[\"']apple-touch-icon[\"']\s+href=[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<link\s+rel=[\"']icon[\"']\s+href=[\"']([^\"']+)[\"']", re.IGNORECASE),
)


def classify_error(message: str) -> AIEnrichmentError:
    """Map a service error message onto retryable / partial / fatal."""

    lowered = (message or "").lower()
    if "microlink" in lowered or "image" in lowered or "screenshot" in lowered:
        return AIPartialError(message)
    if "openai" in lowered or "timeout" in lowered or "temporarily" in lowered:
        return AITransientError(message)
    return AIEnrichmentError(message)


def _error_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict) and (payload.get("error") or payload.get("err")):
        message = payload.get("message")
        if not message and isinstance(payload.get("error"), str):
            message = payload["error"]
        return message or "AI generation failed"
    return None


def _first_match(patterns, html: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(html)
        if match:
            return match.group(1).strip()
    return None


class AIEnrichmentClient:
    """Thin async wrapper around ``POST /generatelaunchdata``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        path: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._http = http_client
        self._endpoint = (base_url or settings.ai.base_url).rstrip("/") + (
            path or settings.ai.generate_path
        )
        self._timeout = timeout if timeout is not None else settings.ai.timeout_seconds

    async def generate(self, url: str, user_id: Optional[UUID]) -> AIEnrichmentResult:
        body: Dict[str, Any] = {"url": url, "user_id": str(user_id) if user_id else None}
        try:
            response = await self._http.post(self._endpoint, json=body, timeout=self._timeout)
        except httpx.TransportError as exc:
            logger.warning(f"Enrichment request for {url} failed: {exc!r}")
            raise AITransientError(f"Network error: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = _error_message(payload)
            if message is None:
                raise AITransientError(
                    f"HTTP {response.status_code}: {response.reason_phrase}"
                )
            if response.status_code < 500:
                # explicit rejection of the request itself
                raise AIEnrichmentError(message)
            error = classify_error(message)
            if isinstance(error, AIPartialError):
                raise error
            raise AITransientError(message)

        message = _error_message(payload)
        if message is not None:
            raise classify_error(message)
        if not isinstance(payload, dict):
            raise AITransientError("Malformed enrichment response")

        return AIEnrichmentResult(
            name=payload.get("name") or "",
            website_url=payload.get("website_url") or url,
            tagline=payload.get("tagline") or "",
            description=payload.get("description") or "",
            category=payload.get("category") or None,
            features=list(payload.get("features") or []),
            logo_url=payload.get("logo_url") or None,
            thumbnail_url=payload.get("thumbnail_url") or None,
            links=[link for link in payload.get("links") or [] if isinstance(link, str) and link],
        )

    async def basic_preview(self, url: str) -> UrlPreview:
        """Scrape title, description and icons straight from the page."""

        try:
            response = await self._http.get(
                url,
                headers={"User-Agent": "Mozilla/5.0"},
                timeout=settings.ai.preview_timeout_seconds,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise AIEnrichmentError(f"Preview fetch failed: {exc}") from exc
        html = response.text

        domain = urlparse(url).hostname or url
        domain = domain.replace("www.", "", 1)
        logo = _first_match(_ICON_RES, html)
        screenshot = _first_match((_OG_IMAGE_RE,), html)
        return UrlPreview(
            domain=domain,
            title=_first_match((_TITLE_RE,), html) or domain,
            description=_first_match(_DESCRIPTION_RES, html) or "",
            logo=urljoin(url, logo) if logo else None,
            screenshot=urljoin(url, screenshot) if screenshot else None,
        )
