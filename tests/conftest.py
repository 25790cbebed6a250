from __future__ import annotations

import asyncio
from typing import Any, Mapping

import pytest

from core.config import AppSettings
from core.domain.errors import AdminError
from core.domain.models import Page
from core.domain.schema import EntitySchema


class FakeGateway:
    """In-memory gateway: a server-side table plus a call log."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, *, page_size: int = 10) -> None:
        self.rows = list(rows or [])
        self.page_size = page_size
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: dict[str, AdminError] = {}
        # Optional gates: list_page waits on the next queued event before answering.
        self.list_gates: list[asyncio.Event] = []
        self._next_id = 1000

    def _maybe_fail(self, op: str) -> None:
        error = self.fail_with.get(op)
        if error is not None:
            raise error

    def _matches(self, row: Mapping[str, Any], search: str | None) -> bool:
        if not search:
            return True
        needle = search.strip().lower()
        return any(needle in str(value).lower() for value in row.values())

    async def list_page(
        self,
        schema: EntitySchema,
        *,
        page: int,
        page_size: int,
        search: str | None = None,
        filters: Mapping[str, Any] | None = None,
        scope: str | int | None = None,
    ) -> Page:
        self.calls.append(("list", {"page": page, "search": search, "filters": dict(filters or {}), "scope": scope}))
        snapshot = [dict(row) for row in self.rows if self._matches(row, search)]
        if self.list_gates:
            gate = self.list_gates.pop(0)
            await gate.wait()
        self._maybe_fail("list")
        total_pages = max(1, -(-len(snapshot) // page_size))
        start = (page - 1) * page_size
        return Page(rows=snapshot[start : start + page_size], total_pages=total_pages, total=len(snapshot), page=page)

    async def get_one(self, schema: EntitySchema, identifier: Any, *, scope: str | int | None = None) -> dict[str, Any]:
        self.calls.append(("get", identifier))
        self._maybe_fail("get")
        for row in self.rows:
            if str(row.get(schema.id_field)) == str(identifier):
                return dict(row)
        raise AdminError(f"{identifier} not found")

    async def create(self, schema: EntitySchema, payload: Mapping[str, Any], *, scope: str | int | None = None) -> dict[str, Any]:
        self.calls.append(("create", dict(payload)))
        self._maybe_fail("create")
        self._next_id += 1
        row = {schema.id_field: self._next_id, **payload}
        self.rows.append(row)
        return dict(row)

    async def update(
        self,
        schema: EntitySchema,
        identifier: Any,
        payload: Mapping[str, Any],
        *,
        scope: str | int | None = None,
    ) -> dict[str, Any]:
        self.calls.append(("update", (identifier, dict(payload))))
        self._maybe_fail("update")
        for row in self.rows:
            if str(row.get(schema.id_field)) == str(identifier):
                row.update(payload)
                return dict(row)
        raise AdminError(f"{identifier} not found")

    async def delete(self, schema: EntitySchema, identifier: Any, *, scope: str | int | None = None) -> None:
        self.calls.append(("delete", identifier))
        self._maybe_fail("delete")
        self.rows = [row for row in self.rows if str(row.get(schema.id_field)) != str(identifier)]

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)


@pytest.fixture()
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        _env_file=None,
        api_base_url="http://api.test/dev",
        page_size=10,
        search_debounce_seconds=0.01,
        owner_user_id=1,
        token=None,
        token_file=tmp_path / "token",
    )


@pytest.fixture()
def blog_rows() -> list[dict[str, Any]]:
    return [
        {
            "id": i,
            "title": f"Post {i}",
            "image": f"https://cdn.test/{i}.png",
            "textSummary": f"Summary {i}",
            "redirectLink": "",
            "active": i % 2 == 0,
        }
        for i in range(1, 26)
    ]
