"""List-editor composite: one paginated list wired to one editor.

Mutations are never applied to `rows` locally. A row disappears or changes
only after the server confirmed the mutation and the following refetch
brought back the new page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from core.config import AppSettings
from core.domain.errors import ActionNotAllowed, AdminError
from core.domain.schema import EntitySchema
from core.interfaces.gateway import EntityGateway
from core.services.editor_state import EntityEditor
from core.services.list_state import PaginatedList

logger = logging.getLogger(__name__)


@dataclass
class ListEditorHooks:
    """Optional callbacks used to surface notices and ask for confirmation.

    `notify(kind, message)` receives `"success"` or `"error"`.
    `confirm(prompt)` must return True before any destructive request is sent.
    """

    notify: Callable[[str, str], None] | None = None
    confirm: Callable[[str], bool] | None = None


class ListEditor:
    def __init__(
        self,
        gateway: EntityGateway,
        schema: EntitySchema,
        *,
        settings: AppSettings | None = None,
        hooks: ListEditorHooks | None = None,
        scope: str | int | None = None,
        filters: dict[str, Any] | None = None,
    ) -> None:
        settings = settings or AppSettings()
        self._gateway = gateway
        self.schema = schema
        self.scope = scope
        self.hooks = hooks or ListEditorHooks()

        self.list = PaginatedList(
            gateway,
            schema,
            page_size=settings.page_size,
            debounce_seconds=settings.search_debounce_seconds,
            scope=scope,
            filters=filters,
        )
        self.editor = EntityEditor(
            gateway,
            schema,
            on_saved=self._after_save,
            scope=scope,
            owner_id=settings.owner_user_id,
        )

    async def _after_save(self, saved: dict[str, Any]) -> None:
        self._notify("success", f"{self.schema.title}: saved")
        await self.list.refetch()

    def _notify(self, kind: str, message: str) -> None:
        if self.hooks.notify:
            self.hooks.notify(kind, message)

    def _require(self, allowed: bool, action: str) -> None:
        if not allowed:
            raise ActionNotAllowed(f"{self.schema.title} does not support {action}")

    def find_row(self, identifier: Any) -> dict[str, Any]:
        """Row with `identifier` among the loaded rows (ids compared as text)."""

        wanted = str(identifier)
        for row in self.list.rows:
            if str(self.schema.identifier_of(row)) == wanted:
                return row
        raise KeyError(f"No {self.schema.key} row with {self.schema.id_field}={identifier!r} on this page")

    async def locate(self, identifier: Any) -> dict[str, Any]:
        """Walk pages from the first one until the row shows up."""

        if self.list.current_page != 1 or not self.list.rows:
            self.list.current_page = 1
            await self.list.refetch()
        while True:
            if self.list.error is not None:
                raise self.list.error
            try:
                return self.find_row(identifier)
            except KeyError:
                if not await self.list.set_page(self.list.current_page + 1):
                    if self.list.error is not None:
                        raise self.list.error
                    raise

    def open_create(self) -> None:
        self._require(self.schema.can_create, "creating records")
        self.editor.open_create()

    def edit_row(self, identifier: Any) -> None:
        self._require(self.schema.can_update, "editing records")
        self.editor.open_edit(self.find_row(identifier))

    async def delete_row(self, identifier: Any) -> bool:
        """Delete after confirmation. Returns True if the server deleted it."""

        self._require(self.schema.can_delete, "deleting records")
        prompt = f"Delete {self.schema.title} {identifier}? This cannot be undone."
        if self.hooks.confirm is None or not self.hooks.confirm(prompt):
            logger.debug("Delete of %s %s declined", self.schema.key, identifier)
            return False

        try:
            await self._gateway.delete(self.schema, identifier, scope=self.scope)
        except AdminError as exc:
            logger.warning("Delete of %s %s failed: %s", self.schema.key, identifier, exc)
            self._notify("error", f"Failed to delete: {exc}")
            return False

        self._notify("success", f"{self.schema.title} {identifier} deleted")
        await self.list.refetch()
        return True

    async def change_status(self, identifier: Any, status: str) -> bool:
        """PATCH the schema's status field (document checks, course applications)."""

        self._require(bool(self.schema.status_field), "status changes")
        if status not in self.schema.status_choices:
            raise ValueError(f"Status must be one of: {', '.join(self.schema.status_choices)}")

        try:
            await self._gateway.update(
                self.schema,
                identifier,
                {self.schema.status_field: status},
                scope=self.scope,
            )
        except AdminError as exc:
            logger.warning("Status change of %s %s failed: %s", self.schema.key, identifier, exc)
            self._notify("error", f"Failed to update status: {exc}")
            return False

        self._notify("success", f"{self.schema.title} {identifier} marked {status}")
        await self.list.refetch()
        return True

    async def view_row(self, identifier: Any) -> dict[str, Any]:
        self._require(self.schema.can_view, "detail views")
        return await self._gateway.get_one(self.schema, identifier, scope=self.scope)

    def close(self) -> None:
        self.list.close()
        self.editor.cancel()
