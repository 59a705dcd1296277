"""Pure field checks and small helpers for the submission form."""
from __future__ import annotations

import re
import secrets
import string
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from launchit.schemas.submission import DraftForm

NAME_MAX_CHARS = 30
TAGLINE_MAX_CHARS = 60
DESCRIPTION_MAX_WORDS = 260
MIN_COVER_IMAGES = 2

_SUFFIX_ALPHABET = string.ascii_letters + string.digits + "_-"

_LINK_TYPES = (
    (("youtube.com", "youtu.be"), "YouTube"),
    (("instagram.com",), "Instagram"),
    (("play.google.com",), "Play Store"),
    (("apps.apple.com",), "App Store"),
    (("linkedin.com",), "LinkedIn"),
    (("twitter.com", "x.com"), "Twitter/X"),
    (("facebook.com",), "Facebook"),
)


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def is_valid_url(value: Optional[str]) -> bool:
    """True for absolute http(s) URLs with a host."""

    if not value or not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    netloc = parsed.netloc
    return (
        parsed.scheme in {"http", "https"}
        and bool(netloc)
        and not any(char.isspace() for char in netloc)
    )


def is_form_empty(form: DraftForm) -> bool:
    return (
        _blank(form.name)
        and _blank(form.tagline)
        and _blank(form.description)
        and _blank(form.website_url)
        and form.category is None
    )


def validate_form(form: DraftForm) -> Optional[str]:
    """Return the first publish-gate violation, or ``None`` when publishable.

    Only one message is produced per attempt; the user fixes it and tries
    again.
    """

    name = (form.name or "").strip()
    if not name:
        return "Startup name is required"
    if len(name) > NAME_MAX_CHARS:
        return f"Startup name must be at most {NAME_MAX_CHARS} characters long"

    website_url = (form.website_url or "").strip()
    if not website_url:
        return "Website URL is required"
    if not is_valid_url(website_url):
        return "Please enter a valid website URL (e.g., https://example.com)"

    description = (form.description or "").strip()
    if not description:
        return "Description is required"
    if len(description.split()) > DESCRIPTION_MAX_WORDS:
        return f"Description must be at most {DESCRIPTION_MAX_WORDS} words"

    tagline = (form.tagline or "").strip()
    if not tagline:
        return "Tagline is required"
    if len(tagline) > TAGLINE_MAX_CHARS:
        return f"Tagline must be at most {TAGLINE_MAX_CHARS} characters long"

    if form.category is None:
        return "Please select a category for your startup"

    if len(form.filled_covers) < MIN_COVER_IMAGES:
        return f"Please upload at least {MIN_COVER_IMAGES} cover images for your startup"

    return None


def filled_fields_count(form: DraftForm) -> int:
    """Count populated fields when deciding whether AI output may overwrite."""

    checks = (
        not _blank(form.name),
        not _blank(form.website_url),
        not _blank(form.tagline),
        not _blank(form.description),
        form.category is not None,
        bool(form.filled_links),
        form.logo is not None,
        form.thumbnail is not None,
        bool(form.filled_covers),
        bool(form.tags),
        bool(form.built_with),
    )
    return sum(1 for check in checks if check)


def slugify(text: Optional[str]) -> str:
    if not text or not isinstance(text, str):
        return ""
    slug = re.sub(r"\s+", "-", text.lower())
    return re.sub(r"[^\w-]+", "", slug, flags=re.ASCII)


def random_suffix(length: int = 6) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


def make_slug(name: str) -> str:
    """Slug for a newly launched project; unique via the random suffix."""

    return f"{slugify(name)}-{random_suffix()}"


def sanitize_file_name(file_name: Optional[str]) -> str:
    if not file_name or not isinstance(file_name, str):
        return "file"
    cleaned = re.sub(r"\s+", "-", file_name)
    cleaned = re.sub(r"[^a-zA-Z0-9._-]", "", cleaned).lower()
    return cleaned or "file"


def link_type(url: Optional[str]) -> str:
    """Label a link by the domain it points at."""

    if not url:
        return "Website"
    for needles, label in _LINK_TYPES:
        if any(needle in url for needle in needles):
            return label
    return "Website"


def format_time_ago(then: Optional[datetime], now: Optional[datetime] = None) -> str:
    if then is None:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = int((now - then).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
