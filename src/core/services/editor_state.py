"""Form/modal editor state machine.

Modes:
    CLOSED -> CREATE_DRAFT -> SUBMITTING -> CLOSED
    CLOSED -> EDIT_DRAFT   -> SUBMITTING -> CLOSED

A `submit()` with invalid data keeps the draft mode and fills
`field_errors` (the validation self-loop). A failed request puts the editor
back in the draft mode it came from, with `error_message` set, so the user
can retry.
"""

from __future__ import annotations

import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

from core.domain.errors import AdminError, UploadFailed, ValidationFailed
from core.domain.schema import EntitySchema
from core.interfaces.gateway import EntityGateway
from core.interfaces.uploader import FileUploader

logger = logging.getLogger(__name__)

SavedCallback = Callable[[dict[str, Any]], Awaitable[Any]]


class EditorMode(str, Enum):
    CLOSED = "closed"
    CREATE_DRAFT = "create_draft"
    EDIT_DRAFT = "edit_draft"
    SUBMITTING = "submitting"


class SubmitOutcome(str, Enum):
    SAVED = "saved"
    INVALID = "invalid"
    FAILED = "failed"
    IGNORED = "ignored"


_DRAFT_MODES = (EditorMode.CREATE_DRAFT, EditorMode.EDIT_DRAFT)


class EntityEditor:
    """Create/edit form for one entity schema."""

    def __init__(
        self,
        gateway: EntityGateway,
        schema: EntitySchema,
        *,
        on_saved: SavedCallback | None = None,
        scope: str | int | None = None,
        owner_id: int | None = None,
    ) -> None:
        self._gateway = gateway
        self.schema = schema
        self.on_saved = on_saved
        self.scope = scope
        self.owner_id = owner_id

        self.mode = EditorMode.CLOSED
        self.draft: dict[str, Any] = {}
        self.identifier: Any = None
        self.field_errors: dict[str, str] = {}
        self.error_message: str | None = None
        # Incremented on every open/cancel so a late response can tell it was abandoned.
        self._session = 0

    @property
    def is_open(self) -> bool:
        return self.mode is not EditorMode.CLOSED

    @property
    def is_draft(self) -> bool:
        return self.mode in _DRAFT_MODES

    def _reset(self) -> None:
        self.mode = EditorMode.CLOSED
        self.draft = {}
        self.identifier = None
        self.field_errors = {}
        self.error_message = None

    def open_create(self) -> None:
        self._session += 1
        self._reset()
        self.draft = self.schema.default_draft()
        self.mode = EditorMode.CREATE_DRAFT

    def open_edit(self, entity: dict[str, Any]) -> None:
        identifier = self.schema.identifier_of(entity)
        if identifier is None:
            raise ValueError(f"{self.schema.key} row has no {self.schema.id_field!r}")
        self._session += 1
        self._reset()
        self.draft = self.schema.seed_draft(entity)
        self.identifier = identifier
        self.mode = EditorMode.EDIT_DRAFT

    def set_field(self, name: str, value: Any) -> None:
        spec = self.schema.field_spec(name)
        if not self.is_draft:
            raise RuntimeError(f"Editor is {self.mode.value}; open a draft first")
        self.draft[name] = spec.coerce(value)
        self.field_errors.pop(name, None)

    def cancel(self) -> None:
        self._session += 1
        self._reset()

    async def submit(self) -> SubmitOutcome:
        if not self.is_draft:
            return SubmitOutcome.IGNORED

        try:
            self.schema.validate(self.draft)
        except ValidationFailed as exc:
            self.field_errors = dict(exc.errors)
            self.error_message = None
            logger.debug("Invalid %s draft: %s", self.schema.key, exc.errors)
            return SubmitOutcome.INVALID

        prior_mode = self.mode
        creating = prior_mode is EditorMode.CREATE_DRAFT
        session = self._session
        self.field_errors = {}
        self.error_message = None
        self.mode = EditorMode.SUBMITTING

        payload = self.schema.build_payload(self.draft, owner_id=self.owner_id, creating=creating)
        try:
            if creating:
                saved = await self._gateway.create(self.schema, payload, scope=self.scope)
            else:
                saved = await self._gateway.update(self.schema, self.identifier, payload, scope=self.scope)
        except AdminError as exc:
            if session == self._session:
                self.mode = prior_mode
                self.error_message = str(exc)
            logger.warning("Saving %s failed: %s", self.schema.key, exc)
            return SubmitOutcome.FAILED

        if session == self._session:
            self._reset()
        if self.on_saved is not None:
            await self.on_saved(saved)
        return SubmitOutcome.SAVED

    async def attach_upload(
        self,
        name: str,
        path: Path,
        uploader: FileUploader,
        *,
        content_type: str | None = None,
    ) -> bool:
        """Upload `path` and store its public URL in draft field `name`."""

        spec = self.schema.field_spec(name)
        if not self.is_draft:
            raise RuntimeError(f"Editor is {self.mode.value}; open a draft first")

        content_type = content_type or mimetypes.guess_type(Path(path).name)[0] or "application/octet-stream"
        if spec.accept and not content_type.startswith(spec.accept):
            self.field_errors[name] = "Please upload a valid image file." if spec.accept == "image/" else (
                f"{spec.label} must be a {spec.accept.rstrip('/')} file."
            )
            return False

        session = self._session
        try:
            result = await uploader.upload(Path(path), content_type=content_type)
        except UploadFailed as exc:
            logger.warning("Upload for %s.%s failed: %s", self.schema.key, name, exc)
            if session == self._session:
                self.field_errors[name] = f"{spec.label} upload failed. Try again."
            return False
        except AdminError as exc:
            logger.warning("Upload for %s.%s failed: %s", self.schema.key, name, exc)
            if session == self._session:
                self.error_message = str(exc)
            return False

        if session == self._session and self.is_draft:
            self.draft[name] = result.file_url
            self.field_errors.pop(name, None)
        return True
