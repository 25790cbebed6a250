"""Paginated list state machine.

One instance backs one admin list screen: it owns the search text, the
current page, the loaded rows and the server-reported page count, and it
refetches whenever one of those filters changes.

Ordering: every `refetch()` takes a new generation number and only the most
recently started fetch may commit. A slower, older response that arrives
after a newer one is dropped. `close()` bumps the generation as well, so
nothing commits after the owning screen goes away.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from core.domain.errors import AdminError
from core.domain.schema import EntitySchema
from core.interfaces.gateway import EntityGateway

logger = logging.getLogger(__name__)


class PaginatedList:
    """Search + page + rows for a single entity schema."""

    def __init__(
        self,
        gateway: EntityGateway,
        schema: EntitySchema,
        *,
        page_size: int = 10,
        debounce_seconds: float = 0.5,
        scope: str | int | None = None,
        filters: dict[str, Any] | None = None,
        on_change: Callable[["PaginatedList"], None] | None = None,
    ) -> None:
        self._gateway = gateway
        self.schema = schema
        self.page_size = page_size
        self.debounce_seconds = debounce_seconds
        self.scope = scope
        self.on_change = on_change

        self.search_text = ""
        self.current_page = 1
        self.rows: list[dict[str, Any]] = []
        self.total_pages = 1
        self.loading = False
        self.error: AdminError | None = None
        self.filters: dict[str, Any] = {**schema.default_filters, **(filters or {})}

        self._generation = 0
        self._debounce_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def search_pending(self) -> bool:
        return self._debounce_task is not None and not self._debounce_task.done()

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self)

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    async def _debounced_refetch(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # From here on a new keystroke must not cancel this fetch; the
        # generation check already discards it if it gets superseded.
        self._debounce_task = None
        await self.refetch()

    def set_search_text(self, text: str) -> None:
        """Update the search box; the fetch fires after the debounce delay.

        Must be called from inside a running event loop.
        """

        if self._closed:
            return
        self.search_text = text
        self.current_page = 1
        self._cancel_debounce()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounced_refetch())
        self._notify()

    async def wait_for_search(self) -> None:
        """Wait until a scheduled search fetch (if any) has run."""

        task = self._debounce_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def set_page(self, page: int) -> bool:
        """Move to `page` and refetch; out-of-range pages are ignored.

        If the fetch fails, `current_page` goes back to the page whose rows
        are still shown and False is returned.
        """

        if self._closed or page < 1 or page > self.total_pages:
            logger.debug("Ignoring page %s (total pages %s)", page, self.total_pages)
            return False
        previous = self.current_page
        self.current_page = page
        committed = await self.refetch()
        if committed and self.error is not None:
            self.current_page = previous
            return False
        return True

    async def set_filter(self, name: str, value: Any) -> None:
        """Change a server-side filter (role tab, activity, date range)."""

        if self.schema.filters and name not in self.schema.filters:
            raise KeyError(f"{self.schema.key} does not filter by {name!r}")
        if value is None or value == "":
            self.filters.pop(name, None)
        else:
            self.filters[name] = value
        self.current_page = 1
        await self.refetch()

    async def refetch(self) -> bool:
        """Reload the current page. Returns True if this fetch committed."""

        if self._closed:
            return False

        self._generation += 1
        generation = self._generation
        self.loading = True
        self._notify()
        try:
            page = await self._gateway.list_page(
                self.schema,
                page=self.current_page,
                page_size=self.page_size,
                search=self.search_text,
                filters=dict(self.filters),
                scope=self.scope,
            )
        except AdminError as exc:
            if not self._is_current(generation):
                logger.debug("Dropping stale %s error: %s", self.schema.key, exc)
                return False
            logger.warning("Failed to fetch %s: %s", self.schema.key, exc)
            self.error = exc
            return True
        finally:
            if self._is_current(generation):
                self.loading = False
                self._notify()

        if not self._is_current(generation):
            logger.debug("Dropping stale %s page %s", self.schema.key, self.current_page)
            return False

        self.rows = page.rows
        self.total_pages = page.total_pages
        self.error = None
        self._notify()

        # The last page can vanish under us (e.g. its only row was deleted).
        if self.current_page > self.total_pages:
            logger.debug(
                "%s page %s no longer exists, moving to %s",
                self.schema.key,
                self.current_page,
                self.total_pages,
            )
            self.current_page = self.total_pages
            return await self.refetch()
        return True

    def close(self) -> None:
        """Abandon pending work; later responses will not touch the state."""

        self._closed = True
        self._cancel_debounce()
        self._generation += 1
        self.loading = False
