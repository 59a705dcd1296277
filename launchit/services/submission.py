"""Draft/submission state machine for one editing session.

A :class:`SubmissionSession` owns every piece of form state for a single
project: it resolves where editing starts (resume a draft, load a project or
start blank), debounces autosaves onto a single draft row, runs AI-assisted
fill with smart-fill conflict resolution and finally publishes the project.
The presentation layer reads :meth:`SubmissionSession.view` or subscribes to
changes; it never mutates state directly.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID

from launchit.core.config import Settings, settings as default_settings
from launchit.core.exceptions import (
    AIEnrichmentError,
    AIPartialError,
    InvalidStateError,
    LaunchitError,
)
from launchit.db.models.project import ProjectStatus
from launchit.schemas.project import DraftSummary, ProjectRead, ProjectWrite
from launchit.schemas.submission import (
    AIEnrichmentResult,
    AIStatus,
    AutosaveStatus,
    DraftForm,
    ImageRef,
    LocalDraft,
    RemoteImage,
    SessionState,
    SessionView,
    Severity,
    SmartFillMode,
    UrlPreview,
)
from launchit.services.ai_enrichment import AIEnrichmentClient
from launchit.services.gateway import ProjectGateway
from launchit.services.local_drafts import LocalDraftStore
from launchit.services.media import MediaUploader
from launchit.services.notifications import Notifier
from launchit.services.smart_fill import apply_ai_data, needs_confirmation
from launchit.services.taxonomy import Taxonomy
from launchit.services.timers import Clock, Debouncer, TimerHandle
from launchit.services.validators import (
    format_time_ago,
    is_form_empty,
    is_valid_url,
    link_type,
    make_slug,
    validate_form,
)

logger = logging.getLogger(__name__)

Listener = Callable[[SessionView], None]

TEXT_FIELDS = ("name", "website_url", "tagline", "description")
FORM_STEPS = ("basic_info", "media", "additional_details")
COVER_SLOTS = 4

_EDITABLE = frozenset({SessionState.EDITING, SessionState.SAVING_DRAFT})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _local_draft_key(user_id: Optional[UUID], client_key: Optional[str]) -> Optional[str]:
    """Snapshot key; signed-in users only ever reach keys under their own id."""

    if user_id is not None:
        return f"{user_id}:{client_key or 'default'}"
    if client_key:
        return f"anonymous:{client_key}"
    return None


def _remote_url(ref: Optional[ImageRef]) -> Optional[str]:
    return ref.url if isinstance(ref, RemoteImage) else None


class SubmissionSession:
    """State machine behind the multi-step launch form."""

    def __init__(
        self,
        gateway: ProjectGateway,
        media: MediaUploader,
        ai_client: AIEnrichmentClient,
        clock: Clock,
        *,
        user_id: Optional[UUID] = None,
        local_drafts: Optional[LocalDraftStore] = None,
        client_key: Optional[str] = None,
        taxonomy: Optional[Taxonomy] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.gateway = gateway
        self.media = media
        self.ai_client = ai_client
        self.clock = clock
        self.user_id = user_id
        self.local_drafts = local_drafts
        self.local_key = _local_draft_key(user_id, client_key)
        self.taxonomy = taxonomy or Taxonomy()
        self.config = config or default_settings

        self.state = SessionState.UNINITIALIZED
        self.form = DraftForm()
        self.step = 0
        self.project_id: Optional[UUID] = None
        self.autosave_target_id: Optional[UUID] = None
        self.slug: Optional[str] = None
        self.already_launched = False
        self.has_unsaved_changes = False
        self.validation_error: Optional[str] = None
        self.drafts: List[DraftSummary] = []
        self.url_preview: Optional[UrlPreview] = None
        self.redirect_to: Optional[str] = None
        self.published: Optional[ProjectRead] = None

        self._autosave = AutosaveStatus()
        self._ai = AIStatus()
        self._save_lock = asyncio.Lock()
        self._revision = 0
        self._resave_requested = False
        self._ai_in_flight = False
        self._ai_retry_handle: Optional[TimerHandle] = None
        self._preview_in_flight = False
        self._listeners: List[Listener] = []

        self.notifier = Notifier(
            clock, self.config.notifications.dismiss_after_seconds, self._emit
        )
        self._debouncer = Debouncer(
            clock, self.config.autosave.quiet_period_seconds, self._autosave_fired
        )

    # ------------------------------------------------------------------
    # observation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def should_warn_before_unload(self) -> bool:
        return self.has_unsaved_changes and not is_form_empty(self.form)

    @property
    def autosave_pending(self) -> bool:
        return self._debouncer.pending

    def view(self) -> SessionView:
        last_saved_at = self._autosave.last_saved_at
        autosave = self._autosave.model_copy(
            update={"label": format_time_ago(last_saved_at, _utcnow()) if last_saved_at else ""}
        )
        return SessionView(
            state=self.state,
            step=self.step,
            form=self.form.model_copy(deep=True),
            link_types=[link_type(url) for url in self.form.links],
            project_id=self.project_id,
            autosave_target_id=self.autosave_target_id,
            already_launched=self.already_launched,
            has_unsaved_changes=self.has_unsaved_changes,
            should_warn_before_unload=self.should_warn_before_unload,
            validation_error=self.validation_error,
            autosave=autosave,
            ai=self._ai.model_copy(deep=True),
            url_preview=self.url_preview,
            drafts=list(self.drafts),
            categories=[group.model_copy(deep=True) for group in self.taxonomy.groups],
            notification=self.notifier.current,
            redirect_to=self.redirect_to,
            slug=self.slug,
        )

    def _emit(self) -> None:
        if not self._listeners:
            return
        snapshot = self.view()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener failed")

    def _require_editable(self) -> None:
        if self.state not in _EDITABLE:
            raise InvalidStateError(
                f"Session is {self.state.value}; editing is not available"
            )

    # ------------------------------------------------------------------
    # entry resolution

    async def start(self, project_id: Optional[UUID] = None) -> SessionState:
        """Decide where editing begins for this session."""

        if self.state != SessionState.UNINITIALIZED:
            raise InvalidStateError(f"Session already started ({self.state.value})")

        self.state = SessionState.RESOLVING_ENTRY_POINT
        self._emit()

        if project_id is not None:
            await self.load_project(project_id)
            return self.state

        await self._restore_local_draft()
        if self.user_id is None:
            self.state = SessionState.EDITING
            self._emit()
            return self.state

        self.drafts = await self._meaningful_drafts()
        self.state = (
            SessionState.DRAFT_SELECTION if self.drafts else SessionState.EDITING
        )
        self._emit()
        return self.state

    async def _meaningful_drafts(self) -> List[DraftSummary]:
        try:
            rows = await self.gateway.list_by_owner_and_status(
                self.user_id, ProjectStatus.DRAFT
            )
        except LaunchitError as exc:
            logger.error(f"Error fetching drafts for {self.user_id}: {exc.message}")
            return []

        drafts = [
            DraftSummary.model_validate(row.model_dump())
            for row in rows
            if row.is_meaningful
        ]
        drafts.sort(
            key=lambda draft: draft.updated_at.timestamp() if draft.updated_at else 0.0,
            reverse=True,
        )
        return drafts

    async def continue_draft(self, project_id: UUID) -> bool:
        if self.state != SessionState.DRAFT_SELECTION:
            raise InvalidStateError("No draft selection is in progress")
        self.drafts = []
        return await self.load_project(project_id)

    async def start_new(self) -> None:
        """Discard any local snapshot and begin with a blank form."""

        if self.state not in _EDITABLE | {SessionState.DRAFT_SELECTION}:
            raise InvalidStateError(f"Cannot start a new launch while {self.state.value}")
        await self._clear_local_draft()
        self._reset()
        self._autosave = AutosaveStatus()
        self.state = SessionState.EDITING
        self._emit()

    def _reset(self) -> None:
        self._debouncer.cancel()
        self._cancel_ai_retry()
        self.form = DraftForm()
        self.step = 0
        self.project_id = None
        self.autosave_target_id = None
        self.slug = None
        self.already_launched = False
        self.has_unsaved_changes = False
        self.validation_error = None
        self.drafts = []
        self.url_preview = None
        self._ai = AIStatus()
        self._resave_requested = False

    # ------------------------------------------------------------------
    # loading

    async def load_project(self, project_id: UUID) -> bool:
        """Load an owned project for editing; a miss returns to a neutral state."""

        if self.user_id is None:
            self.state = SessionState.UNINITIALIZED
            self.notifier.notify("Please sign in to edit a project.", Severity.WARNING)
            return False

        self.state = SessionState.LOADING_EXISTING
        self._emit()
        try:
            project = await self.gateway.get_owned(project_id, self.user_id)
        except LaunchitError as exc:
            logger.error(f"Failed to load project {project_id}: {exc.message}")
            self.state = SessionState.UNINITIALIZED
            self.notifier.notify("Failed to load project for editing.", Severity.ERROR)
            return False

        if project is None:
            self.state = SessionState.UNINITIALIZED
            self.notifier.notify("Project not found or access denied.", Severity.ERROR)
            return False

        self._populate(project)
        self.state = SessionState.EDITING
        self._emit()
        return True

    def _populate(self, project: ProjectRead) -> None:
        self._reset()
        covers: List[Optional[ImageRef]] = [RemoteImage(url=url) for url in project.cover_urls]
        covers.extend([None] * max(0, COVER_SLOTS - len(covers)))

        self.form = DraftForm(
            name=project.name or "",
            website_url=project.website_url or "",
            tagline=project.tagline or "",
            description=project.description or "",
            category=self.taxonomy.find_by_value(project.category_type),
            links=list(project.links) or [""],
            built_with=list(project.built_with),
            tags=list(project.tags),
            logo=RemoteImage(url=project.logo_url) if project.logo_url else None,
            thumbnail=RemoteImage(url=project.thumbnail_url) if project.thumbnail_url else None,
            covers=covers,
            media_urls=list(project.media_urls),
        )
        self.project_id = project.id
        self.slug = project.slug
        self.already_launched = project.status != ProjectStatus.DRAFT
        if not self.already_launched:
            self.autosave_target_id = project.id
        self._autosave = AutosaveStatus()

    # ------------------------------------------------------------------
    # local ephemeral draft

    async def _restore_local_draft(self) -> None:
        if self.local_drafts is None or self.local_key is None:
            return
        try:
            draft = await self.local_drafts.load(self.local_key)
        except Exception as exc:
            logger.warning(f"Local draft unavailable for {self.local_key}: {exc!r}")
            return
        if draft is None:
            return
        self.form = DraftForm(
            name=draft.name,
            website_url=draft.website_url,
            tagline=draft.tagline,
            description=draft.description,
            category=self.taxonomy.find_by_value(draft.category_value),
            links=list(draft.links) or [""],
        )

    async def _store_local_draft(self) -> None:
        if self.local_drafts is None or self.local_key is None:
            return
        snapshot = LocalDraft(
            name=self.form.name,
            website_url=self.form.website_url,
            tagline=self.form.tagline,
            description=self.form.description,
            category_value=self.form.category.value if self.form.category else None,
            links=list(self.form.links),
        )
        try:
            await self.local_drafts.save(self.local_key, snapshot)
        except Exception as exc:
            logger.warning(f"Could not store local draft for {self.local_key}: {exc!r}")

    async def _clear_local_draft(self) -> None:
        if self.local_drafts is None or self.local_key is None:
            return
        try:
            await self.local_drafts.clear(self.local_key)
        except Exception as exc:
            logger.warning(f"Could not clear local draft for {self.local_key}: {exc!r}")

    # ------------------------------------------------------------------
    # mutations

    async def update_field(self, field: str, value: Optional[str]) -> None:
        self._require_editable()
        if field not in TEXT_FIELDS:
            raise LaunchitError(f"Unknown field: {field}")
        setattr(self.form, field, value or "")
        await self._mutated()

    async def select_category(self, value: Optional[str]) -> None:
        self._require_editable()
        if value:
            option = self.taxonomy.find_by_value(value)
            if option is None:
                raise LaunchitError(f"Unknown category: {value}")
            self.form.category = option
        else:
            self.form.category = None
        await self._mutated()

    async def add_link(self, url: str = "") -> None:
        self._require_editable()
        self.form.links.append(url)
        await self._mutated()

    async def update_link(self, index: int, url: str) -> None:
        self._require_editable()
        if not 0 <= index < len(self.form.links):
            raise LaunchitError(f"No link at position {index}")
        self.form.links[index] = url
        await self._mutated()

    async def remove_link(self, index: int) -> None:
        self._require_editable()
        if not 0 <= index < len(self.form.links):
            raise LaunchitError(f"No link at position {index}")
        del self.form.links[index]
        if not self.form.links:
            self.form.links = [""]
        await self._mutated()

    async def set_tags(self, tags: List[str]) -> None:
        self._require_editable()
        self.form.tags = [tag.strip() for tag in tags if tag and tag.strip()]
        await self._mutated()

    async def set_built_with(self, technologies: List[str]) -> None:
        self._require_editable()
        self.form.built_with = [tech.strip() for tech in technologies if tech and tech.strip()]
        await self._mutated()

    async def set_image(self, slot: str, image: Optional[ImageRef]) -> None:
        """Assign ``logo``, ``thumbnail`` or ``cover-N``; ``None`` clears it."""

        self._require_editable()
        if slot == "logo":
            self.form.logo = image
        elif slot == "thumbnail":
            self.form.thumbnail = image
        elif slot.startswith("cover-") and slot[6:].isdigit():
            index = int(slot[6:])
            if index >= COVER_SLOTS:
                raise LaunchitError(f"Unknown image slot: {slot}")
            while len(self.form.covers) < COVER_SLOTS:
                self.form.covers.append(None)
            self.form.covers[index] = image
        else:
            raise LaunchitError(f"Unknown image slot: {slot}")
        await self._mutated()

    def change_step(self, step: int) -> None:
        if self.state not in _EDITABLE:
            raise InvalidStateError(f"Session is {self.state.value}")
        if not 0 <= step < len(FORM_STEPS):
            raise LaunchitError(f"Unknown step: {step}")
        self.step = step
        self._emit()

    def validate_url(self) -> bool:
        """Live check of the website URL (on blur)."""

        url = self.form.website_url.strip()
        if url and not is_valid_url(url):
            self.validation_error = "Please enter a valid website URL (e.g., https://example.com)"
            self.notifier.notify(self.validation_error, Severity.WARNING)
            return False
        return True

    async def _mutated(self) -> None:
        self._revision += 1
        self.redirect_to = None
        self.validation_error = None
        if not is_form_empty(self.form):
            self.has_unsaved_changes = True
        await self._store_local_draft()
        if self._autosave_eligible():
            self._debouncer.trigger()
        self._emit()

    # ------------------------------------------------------------------
    # autosave and manual draft save

    def _autosave_eligible(self) -> bool:
        return (
            self.user_id is not None
            and self.state in _EDITABLE
            and not self.already_launched
            and not is_form_empty(self.form)
            and bool(self.form.name.strip())
        )

    async def _autosave_fired(self) -> None:
        if not self.has_unsaved_changes:
            return
        await self.autosave()

    async def autosave(self) -> bool:
        """Background draft write; also the manual retry after a failure."""

        if not self._autosave_eligible():
            return False
        if self._save_lock.locked():
            self._resave_requested = True
            return False
        return await self._write_draft()

    async def save_draft(self) -> bool:
        """User-initiated draft save, followed by a redirect to the landing view."""

        self.redirect_to = None
        if self.user_id is None:
            self.notifier.notify("Please sign in to save", Severity.WARNING)
            return False
        self._require_editable()
        if is_form_empty(self.form):
            self.notifier.notify("Cannot save an empty draft.", Severity.WARNING)
            return False
        if self.already_launched:
            self.notifier.notify("Cannot save launched project as draft.", Severity.WARNING)
            return False
        if not self.form.name.strip():
            self.notifier.notify(
                "Please enter a project name before saving.", Severity.WARNING
            )
            return False

        self._debouncer.cancel()
        saved = await self._write_draft()
        if saved:
            self.notifier.notify("Draft saved!", Severity.SUCCESS)
        else:
            self.notifier.notify("Failed to save draft. Please try again.", Severity.ERROR)
        self.redirect_to = self.config.autosave.landing_view
        self._emit()
        return saved

    async def _write_draft(self) -> bool:
        async with self._save_lock:
            self.state = SessionState.SAVING_DRAFT
            self._autosave = AutosaveStatus(
                status="saving", last_saved_at=self._autosave.last_saved_at
            )
            self._emit()

            revision = self._revision
            values = self._draft_values()
            try:
                record = await self._persist_draft(values)
            except LaunchitError as exc:
                logger.error(f"Draft save failed for {self.user_id}: {exc.message}")
                self._autosave = AutosaveStatus(
                    status="error",
                    message=exc.message,
                    last_saved_at=self._autosave.last_saved_at,
                )
                saved = False
            else:
                self.autosave_target_id = record.id
                self.project_id = record.id
                if revision == self._revision:
                    self.has_unsaved_changes = False
                self._autosave = AutosaveStatus(status="saved", last_saved_at=_utcnow())
                saved = True
            finally:
                if self.state == SessionState.SAVING_DRAFT:
                    self.state = SessionState.EDITING

        if self._resave_requested:
            self._resave_requested = False
            if self.has_unsaved_changes and self._autosave_eligible():
                self._debouncer.trigger()
        self._emit()
        return saved

    async def _persist_draft(self, values: ProjectWrite) -> ProjectRead:
        target = self.autosave_target_id
        if target is None and self.config.autosave.reuse_draft_by_name:
            try:
                existing = await self.gateway.find_draft_by_name(self.user_id, values.name)
            except LaunchitError as exc:
                logger.error(f"Error checking existing draft: {exc.message}")
                existing = None
            if existing is not None:
                target = existing.id
                self.autosave_target_id = target

        if target is not None:
            return await self.gateway.update(target, values)
        return await self.gateway.create(values)

    def _draft_values(self) -> ProjectWrite:
        form = self.form
        return ProjectWrite(
            user_id=self.user_id,
            status=ProjectStatus.DRAFT,
            name=form.name,
            website_url=form.website_url,
            tagline=form.tagline,
            description=form.description,
            category_type=form.category.value if form.category else "",
            links=form.filled_links,
            built_with=list(form.built_with),
            tags=list(form.tags),
            media_urls=list(form.media_urls),
            logo_url=_remote_url(form.logo),
            thumbnail_url=_remote_url(form.thumbnail),
            cover_urls=[
                cover.url for cover in form.covers if isinstance(cover, RemoteImage)
            ],
        )

    # ------------------------------------------------------------------
    # AI-assisted fill

    async def generate_with_ai(self) -> None:
        self._require_editable()
        url = self.form.website_url.strip()
        if not url:
            self.notifier.notify("Please enter a website URL first.", Severity.WARNING)
            return
        if not is_valid_url(url):
            self.notifier.notify("Please enter a valid URL", Severity.WARNING)
            return
        if self._ai_in_flight:
            return

        self._cancel_ai_retry()
        self.notifier.notify("AI is analyzing your website...", Severity.INFO)
        await self._run_ai(url, attempt=0)

    async def _run_ai(self, url: str, attempt: int) -> None:
        self._ai_in_flight = True
        self._ai = AIStatus(
            status="generating" if attempt == 0 else "retrying", retry_count=attempt
        )
        self._emit()

        error: Optional[AIEnrichmentError] = None
        result: Optional[AIEnrichmentResult] = None
        try:
            result = await self.ai_client.generate(url, self.user_id)
        except AIEnrichmentError as exc:
            error = exc
        finally:
            self._ai_in_flight = False

        if self.state not in _EDITABLE:
            # published or closed while the call was running
            self._ai = AIStatus()
            return
        if error is not None:
            await self._ai_failed(url, attempt, error)
        else:
            await self._ai_succeeded(result)

    async def _retry_ai(self, url: str, attempt: int) -> None:
        self._ai_retry_handle = None
        if self.state not in _EDITABLE or self._ai_in_flight:
            return
        await self._run_ai(url, attempt)

    def _cancel_ai_retry(self) -> None:
        if self._ai_retry_handle is not None:
            self._ai_retry_handle.cancel()
            self._ai_retry_handle = None

    async def _ai_failed(self, url: str, attempt: int, exc: AIEnrichmentError) -> None:
        logger.warning(f"AI generation for {url} failed (attempt {attempt + 1}): {exc.message}")
        await self._ensure_preview(url)

        ai = self.config.ai
        if exc.retryable and attempt < ai.max_retries:
            delay = min(ai.retry_max_delay, ai.retry_initial_delay * (2 ** attempt))
            self._ai = AIStatus(status="retrying", retry_count=attempt + 1)
            self.notifier.notify("Generating...", Severity.INFO)
            self._ai_retry_handle = self.clock.call_later(
                delay, functools.partial(self._retry_ai, url, attempt + 1)
            )
        else:
            self._ai = AIStatus()
            if isinstance(exc, AIPartialError):
                self.notifier.notify(
                    "AI extracted text but failed to generate logo/thumbnail. "
                    "You can upload them manually!",
                    Severity.WARNING,
                )
            elif exc.retryable:
                self.notifier.notify(
                    "AI service temporarily unavailable. Please try again in a few minutes.",
                    Severity.ERROR,
                )
            else:
                self.notifier.notify(
                    f"AI failed to extract startup info: {exc.message}", Severity.ERROR
                )
        self._emit()

    async def _ensure_preview(self, url: str) -> None:
        if self.url_preview is not None or self._preview_in_flight:
            return
        self._preview_in_flight = True
        try:
            self.url_preview = await self.ai_client.basic_preview(url)
        except LaunchitError as exc:
            logger.info(f"Basic preview for {url} unavailable: {exc.message}")
        finally:
            self._preview_in_flight = False

    async def _ai_succeeded(self, result: AIEnrichmentResult) -> None:
        missing = result.missing_essentials
        if missing:
            self.notifier.notify(
                f"AI generated partial data. Missing: {', '.join(missing)}",
                Severity.WARNING,
            )

        if needs_confirmation(self.form, self.config.smart_fill.threshold):
            self._ai = AIStatus(status="smart_fill_pending", pending=result)
            self._emit()
            return

        self._ai = AIStatus()
        self.form = apply_ai_data(
            self.form, result, only_empty=False, taxonomy=self.taxonomy
        )
        if not missing:
            found = f" Found: {result.name}" if result.name else ""
            self.notifier.notify(f"AI generated data successfully!{found}", Severity.SUCCESS)
        await self._mutated()

    async def accept_smart_fill(self, mode: SmartFillMode) -> None:
        """Resolve a pending smart-fill prompt."""

        self._require_editable()
        pending = self._ai.pending
        if self._ai.status != "smart_fill_pending" or pending is None:
            raise InvalidStateError("No AI result is waiting for confirmation")
        self._ai = AIStatus()

        if mode == SmartFillMode.CANCEL:
            self._emit()
            return

        only_empty = mode == SmartFillMode.EMPTY
        self.form = apply_ai_data(
            self.form, pending, only_empty=only_empty, taxonomy=self.taxonomy
        )
        self.notifier.notify(
            "Empty fields filled with AI data!" if only_empty else "All fields updated with AI data!",
            Severity.SUCCESS,
        )
        await self._mutated()

    # ------------------------------------------------------------------
    # publish

    async def publish(self) -> Optional[ProjectRead]:
        """Validate, host images and write the project as launched."""

        self._require_editable()
        if self.user_id is None:
            self.notifier.notify("Please sign in to launch", Severity.WARNING)
            return None

        error = validate_form(self.form)
        if error is not None:
            self.validation_error = error
            self.notifier.notify(error, Severity.ERROR)
            self._emit()
            return None
        self.validation_error = None

        self._debouncer.cancel()
        self._cancel_ai_retry()
        updating_launch = self.already_launched

        async with self._save_lock:
            self.state = SessionState.PUBLISHING
            self._emit()
            try:
                record = await self._write_launch()
            except LaunchitError as exc:
                logger.error(f"Publish failed for {self.user_id}: {exc.message}")
                self.state = SessionState.EDITING
                self.notifier.notify(exc.message, Severity.ERROR)
                self._emit()
                return None
            except Exception:
                logger.exception(f"Unexpected publish failure for {self.user_id}")
                self.state = SessionState.EDITING
                self.notifier.notify("Launch failed, please try again", Severity.ERROR)
                self._emit()
                raise

        await self._clear_local_draft()
        self._reset()
        self._autosave = AutosaveStatus()
        self.published = record
        self.project_id = record.id
        self.slug = record.slug
        self.state = SessionState.PUBLISHED
        self.notifier.notify(
            "Project updated successfully!" if updating_launch else "Launch submitted successfully!",
            Severity.SUCCESS,
        )
        self._emit()
        return record

    async def _write_launch(self) -> ProjectRead:
        form = self.form
        logo_url = await self.media.resolve(form.logo, "logo")
        thumbnail_url = await self.media.resolve(form.thumbnail, "thumbnail")
        cover_urls: List[str] = []
        for index, cover in enumerate(form.covers):
            url = await self.media.resolve(cover, f"cover-{index}")
            if url:
                cover_urls.append(url)

        values = ProjectWrite(
            user_id=self.user_id,
            status=ProjectStatus.LAUNCHED,
            name=form.name.strip(),
            website_url=form.website_url.strip(),
            tagline=form.tagline.strip(),
            description=form.description.strip(),
            category_type=form.category.value if form.category else "",
            links=form.filled_links,
            built_with=list(form.built_with),
            tags=list(form.tags),
            media_urls=list(form.media_urls),
            logo_url=logo_url,
            thumbnail_url=thumbnail_url,
            cover_urls=cover_urls,
            slug=None if self.slug else make_slug(form.name.strip()),
        )
        if self.project_id is not None:
            return await self.gateway.update(self.project_id, values)
        return await self.gateway.create(values)

    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop timers; in-flight calls are left to finish on their own."""

        self._debouncer.cancel()
        self._cancel_ai_retry()
        self.notifier.dismiss()
        self._listeners.clear()
