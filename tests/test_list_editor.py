from __future__ import annotations

import asyncio

import pytest

from conftest import FakeGateway
from core.domain.catalog import BLOGS, COURSE_APPLICATIONS, DOCUMENTS, ORDERS, USER_REPORTS
from core.domain.errors import ActionNotAllowed, RequestFailed
from core.services.editor_state import EditorMode, SubmitOutcome
from core.services.list_editor import ListEditor, ListEditorHooks


def _composite(gw, settings, schema=BLOGS, *, confirm=True, **kwargs):
    notices: list[tuple[str, str]] = []
    prompts: list[str] = []

    def _confirm(prompt: str) -> bool:
        prompts.append(prompt)
        return confirm

    hooks = ListEditorHooks(notify=lambda kind, msg: notices.append((kind, msg)), confirm=_confirm)
    return ListEditor(gw, schema, settings=settings, hooks=hooks, **kwargs), notices, prompts


def test_create_then_exactly_one_refetch(settings, blog_rows):
    gw = FakeGateway(blog_rows[:3])
    composite, notices, _ = _composite(gw, settings)

    async def _go():
        await composite.list.refetch()
        composite.open_create()
        composite.editor.set_field("title", "Fresh")
        composite.editor.set_field("image", "https://cdn.test/fresh.png")
        composite.editor.set_field("textSummary", "New post")
        return await composite.editor.submit()

    assert asyncio.run(_go()) is SubmitOutcome.SAVED
    ops = [name for name, _ in gw.calls]
    assert ops == ["list", "create", "list"]
    assert any(row["title"] == "Fresh" for row in composite.list.rows)
    assert notices == [("success", "Blogs: saved")]


def test_edit_row_then_patch_and_refetch(settings, blog_rows):
    gw = FakeGateway(blog_rows[:3])
    composite, _, _ = _composite(gw, settings)

    async def _go():
        await composite.list.refetch()
        composite.edit_row(2)
        assert composite.editor.mode is EditorMode.EDIT_DRAFT
        composite.editor.set_field("title", "Renamed")
        return await composite.editor.submit()

    assert asyncio.run(_go()) is SubmitOutcome.SAVED
    assert [name for name, _ in gw.calls] == ["list", "update", "list"]
    assert composite.find_row(2)["title"] == "Renamed"


def test_invalid_submit_does_not_refetch(settings, blog_rows):
    gw = FakeGateway(blog_rows[:3])
    composite, _, _ = _composite(gw, settings)

    async def _go():
        await composite.list.refetch()
        composite.edit_row(1)
        composite.editor.set_field("image", "")
        return await composite.editor.submit()

    assert asyncio.run(_go()) is SubmitOutcome.INVALID
    assert [name for name, _ in gw.calls] == ["list"]


def test_edit_unknown_row(settings, blog_rows):
    gw = FakeGateway(blog_rows[:3])
    composite, _, _ = _composite(gw, settings)
    asyncio.run(composite.list.refetch())
    with pytest.raises(KeyError):
        composite.edit_row(999)


def test_confirmed_delete_removes_row_after_refetch(settings):
    gw = FakeGateway([{"id": 41, "title": "keep"}, {"id": 42, "title": "drop"}])
    composite, notices, prompts = _composite(gw, settings)

    async def _go():
        await composite.list.refetch()
        return await composite.delete_row(42)

    assert asyncio.run(_go()) is True
    assert [name for name, _ in gw.calls] == ["list", "delete", "list"]
    assert [row["id"] for row in composite.list.rows] == [41]
    assert len(prompts) == 1
    assert notices[-1][0] == "success"


def test_declined_delete_sends_nothing(settings):
    gw = FakeGateway([{"id": 42}])
    composite, notices, prompts = _composite(gw, settings, confirm=False)

    async def _go():
        await composite.list.refetch()
        return await composite.delete_row(42)

    assert asyncio.run(_go()) is False
    assert gw.count("delete") == 0
    assert len(prompts) == 1
    assert notices == []


def test_delete_without_confirm_hook_is_declined(settings):
    gw = FakeGateway([{"id": 42}])
    composite = ListEditor(gw, BLOGS, settings=settings)
    assert asyncio.run(composite.delete_row(42)) is False
    assert gw.calls == []


def test_failed_delete_keeps_rows(settings):
    gw = FakeGateway([{"id": 41}, {"id": 42}])
    gw.fail_with["delete"] = RequestFailed(409, "Blog is referenced")
    composite, notices, _ = _composite(gw, settings)

    async def _go():
        await composite.list.refetch()
        return await composite.delete_row(42)

    assert asyncio.run(_go()) is False
    assert [row["id"] for row in composite.list.rows] == [41, 42]
    assert notices == [("error", "Failed to delete: HTTP 409: Blog is referenced")]
    assert gw.count("list") == 1


def test_capabilities_are_enforced(settings):
    gw = FakeGateway([{"id": 1}])
    composite, _, _ = _composite(gw, settings, ORDERS)
    with pytest.raises(ActionNotAllowed):
        composite.open_create()
    with pytest.raises(ActionNotAllowed):
        asyncio.run(composite.delete_row(1))
    with pytest.raises(ActionNotAllowed):
        asyncio.run(composite.change_status(1, "shipped"))
    assert gw.calls == []


def test_change_status_patches_status_field_and_refetches(settings):
    gw = FakeGateway([{"documentId": "d1", "status": "pending"}])
    composite, notices, _ = _composite(gw, settings, DOCUMENTS)

    assert asyncio.run(composite.change_status("d1", "verified")) is True
    assert gw.calls[0] == ("update", ("d1", {"status": "verified"}))
    assert gw.calls[-1][0] == "list"
    assert composite.list.rows[0]["status"] == "verified"
    assert notices[-1] == ("success", "Document Verification d1 marked verified")


def test_change_status_rejects_unknown_values(settings):
    gw = FakeGateway()
    composite, _, _ = _composite(gw, settings, COURSE_APPLICATIONS, scope=5)
    with pytest.raises(ValueError):
        asyncio.run(composite.change_status(1, "maybe"))
    assert gw.calls == []


def test_view_row_fetches_detail(settings):
    gw = FakeGateway([{"id": 3, "reason": "spam"}])
    composite, _, _ = _composite(gw, settings, USER_REPORTS)
    assert asyncio.run(composite.view_row(3)) == {"id": 3, "reason": "spam"}


def test_locate_walks_pages(settings):
    gw = FakeGateway([{"id": i, "title": f"t{i}"} for i in range(1, 26)])
    composite, _, _ = _composite(gw, settings)

    row = asyncio.run(composite.locate(23))
    assert row["id"] == 23
    assert composite.list.current_page == 3

    with pytest.raises(KeyError):
        asyncio.run(composite.locate(99))


def test_close_abandons_everything(settings, blog_rows):
    gw = FakeGateway(blog_rows)
    composite, _, _ = _composite(gw, settings)
    composite.open_create()
    composite.close()
    assert composite.editor.mode is EditorMode.CLOSED
    assert asyncio.run(composite.list.refetch()) is False
    assert gw.calls == []


def test_deleting_last_row_of_last_page_moves_back_a_page(settings):
    gw = FakeGateway([{"id": i, "title": f"t{i}"} for i in range(1, 22)])
    composite, _, _ = _composite(gw, settings)

    async def _go():
        await composite.list.refetch()
        assert await composite.list.set_page(3)
        assert await composite.delete_row(21)
        return await composite.list.set_page(composite.list.current_page)

    assert asyncio.run(_go()) is True
    assert composite.list.total_pages == 2
    assert composite.list.current_page == 2
    assert [row["id"] for row in composite.list.rows] == list(range(11, 21))
    pages = [args["page"] for name, args in gw.calls if name == "list"]
    assert pages == [1, 3, 3, 2, 2]
