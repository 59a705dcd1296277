"""Merging AI enrichment results into the form."""
from __future__ import annotations

from launchit.schemas.submission import AIEnrichmentResult, DraftForm, RemoteImage
from launchit.services.taxonomy import Taxonomy
from launchit.services.validators import filled_fields_count


def needs_confirmation(form: DraftForm, threshold: int) -> bool:
    """Ask before applying once the user has put real work into the form."""

    return filled_fields_count(form) >= threshold


def _pick(current: str, generated: str, only_empty: bool) -> str:
    if only_empty:
        return current if (current or "").strip() else (generated or "")
    return generated or current


def apply_ai_data(
    form: DraftForm,
    result: AIEnrichmentResult,
    *,
    only_empty: bool,
    taxonomy: Taxonomy,
) -> DraftForm:
    """Return a copy of ``form`` with ``result`` merged in.

    With ``only_empty`` a value the user already entered is never replaced.
    An unknown AI category is added to ``taxonomy`` as a side effect.
    """

    merged = form.model_copy(deep=True)

    merged.name = _pick(form.name, result.name, only_empty)
    merged.website_url = _pick(form.website_url, result.website_url, only_empty)
    merged.tagline = _pick(form.tagline, result.tagline, only_empty)
    merged.description = _pick(form.description, result.description, only_empty)

    if result.links and (not only_empty or not form.filled_links):
        merged.links = list(result.links)

    if result.logo_url and (not only_empty or form.logo is None):
        merged.logo = RemoteImage(url=result.logo_url)

    if result.thumbnail_url and (not only_empty or form.thumbnail is None):
        merged.thumbnail = RemoteImage(url=result.thumbnail_url)

    if result.features and (not only_empty or not form.tags):
        merged.tags = list(result.features)

    if result.category and (not only_empty or form.category is None):
        merged.category = taxonomy.resolve_detected(result.category)

    return merged
