"""CLI principal (Typer).

Cada comando es un "one-shot" sobre el mismo motor que usaría una UI
interactiva: `ListEditor` (listado + editor) contra `RemoteDataClient`.

Reglas:
- Ningún `AdminError` escapa como traceback: se imprime y se sale con código 1.
- Los borrados piden confirmación salvo `--yes`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Optional, TypeVar

import typer
from rich.console import Console

from adapters.auth import login as login_request
from adapters.credential_store import FileCredentialStore, credentials_from_settings
from adapters.json_exporter import export_rows_json
from adapters.rest_client import RemoteDataClient
from adapters.uploader import S3Uploader
from cli import doctor
from cli.logging_setup import configure_logging
from cli.ui_components import (
    build_detail_panel,
    build_entities_table,
    build_rows_table,
    print_banner,
    print_field_errors,
    print_notice,
)
from core.config import AppSettings
from core.domain.catalog import ENTITY_SCHEMAS, get_schema
from core.domain.errors import AdminError
from core.domain.schema import EntitySchema
from core.interfaces.uploader import FileUploader
from core.services.editor_state import EntityEditor, SubmitOutcome
from core.services.list_editor import ListEditor, ListEditorHooks

app = typer.Typer(no_args_is_help=True, help="Marketplace admin console.")
app.add_typer(doctor.app, name="doctor")
app.add_typer(doctor.config_app, name="config")

console = Console()

T = TypeVar("T")


def build_gateway(settings: AppSettings) -> RemoteDataClient:
    return RemoteDataClient(settings, credentials_from_settings(settings))


def build_uploader(settings: AppSettings) -> FileUploader:
    return S3Uploader(settings, credentials_from_settings(settings))


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]{message}[/red]")
    return typer.Exit(code=1)


def _run(coro: Awaitable[T]) -> T:
    try:
        return asyncio.run(coro)
    except AdminError as exc:
        raise _fail(str(exc)) from exc


def _schema(entity: str, scope: str | None) -> EntitySchema:
    try:
        schema = get_schema(entity)
    except KeyError as exc:
        raise typer.BadParameter(exc.args[0], param_hint="ENTITY") from exc
    if schema.scoped and not scope:
        raise typer.BadParameter(f"{schema.key} needs --scope (e.g. a user id)", param_hint="--scope")
    return schema


def _parse_assignments(items: list[str] | None, option: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise typer.BadParameter(f"expected name=value, got {item!r}", param_hint=option)
        name, value = item.split("=", 1)
        name = name.strip()
        if not name:
            raise typer.BadParameter(f"missing field name in {item!r}", param_hint=option)
        values[name] = value
    return values


def _hooks(*, assume_yes: bool = False) -> ListEditorHooks:
    def confirm(prompt: str) -> bool:
        return assume_yes or typer.confirm(prompt, default=False)

    return ListEditorHooks(notify=lambda kind, message: print_notice(console, kind, message), confirm=confirm)


async def _load_page(composite: ListEditor, *, page: int, search: str | None) -> None:
    lst = composite.list
    # One-shot: no keystrokes to debounce.
    lst.search_text = (search or "").strip()
    await lst.refetch()
    if lst.error is not None:
        raise lst.error
    if page != 1:
        moved = await lst.set_page(page)
        if lst.error is not None:
            raise lst.error
        if not moved:
            raise _fail(f"Page {page} is out of range (1-{lst.total_pages}).")


async def _fill_draft(
    editor: EntityEditor,
    values: dict[str, str],
    uploads: dict[str, str],
    uploader_settings: AppSettings,
) -> None:
    for name, value in values.items():
        try:
            editor.set_field(name, value)
        except KeyError as exc:
            raise typer.BadParameter(exc.args[0], param_hint="--set") from exc
        except ValueError as exc:
            editor.field_errors[name] = str(exc)

    if uploads:
        uploader = build_uploader(uploader_settings)
        for name, raw_path in uploads.items():
            try:
                await editor.attach_upload(name, Path(raw_path), uploader)
            except KeyError as exc:
                raise typer.BadParameter(exc.args[0], param_hint="--upload") from exc


async def _submit(composite: ListEditor) -> None:
    editor = composite.editor
    if editor.field_errors or editor.error_message:
        print_field_errors(console, composite.schema, editor.field_errors)
        raise _fail(editor.error_message or "Fix the fields above and try again.")

    outcome = await editor.submit()
    if outcome is SubmitOutcome.INVALID:
        print_field_errors(console, composite.schema, editor.field_errors)
        raise _fail("Validation failed; nothing was sent.")
    if outcome is SubmitOutcome.FAILED:
        raise _fail(editor.error_message or "Request failed")

    lst = composite.list
    console.print(build_rows_table(composite.schema, lst.rows, page=lst.current_page, total_pages=lst.total_pages))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging (requests, stale pages)."),
) -> None:
    configure_logging("DEBUG" if verbose else AppSettings().log_level)


@app.command()
def entities() -> None:
    """List the administrable entities and what each supports."""

    print_banner(console)
    console.print(build_entities_table(list(ENTITY_SCHEMAS.values())))


@app.command(name="list")
def list_rows(
    entity: str = typer.Argument(..., help="Entity key (see `entities`)."),
    page: int = typer.Option(1, "--page", "-p", min=1),
    search: Optional[str] = typer.Option(None, "--search", "-s"),
    scope: Optional[str] = typer.Option(None, "--scope", help="Owner id for per-user endpoints."),
    filters: Optional[list[str]] = typer.Option(None, "--filter", "-f", help="Server filter name=value."),
) -> None:
    """Show one page of an entity list."""

    schema = _schema(entity, scope)
    extra = _parse_assignments(filters, "--filter")
    settings = AppSettings()

    async def _go() -> ListEditor:
        async with build_gateway(settings) as gateway:
            composite = ListEditor(gateway, schema, settings=settings, scope=scope, filters=extra)
            try:
                await _load_page(composite, page=page, search=search)
            finally:
                composite.close()
            return composite

    composite = _run(_go())
    lst = composite.list
    console.print(build_rows_table(schema, lst.rows, page=lst.current_page, total_pages=lst.total_pages))


@app.command()
def show(
    entity: str = typer.Argument(...),
    identifier: str = typer.Argument(..., metavar="ID"),
    scope: Optional[str] = typer.Option(None, "--scope"),
) -> None:
    """Show a single record (report details)."""

    schema = _schema(entity, scope)
    settings = AppSettings()

    async def _go() -> dict[str, Any]:
        async with build_gateway(settings) as gateway:
            composite = ListEditor(gateway, schema, settings=settings, scope=scope)
            return await composite.view_row(identifier)

    record = _run(_go())
    console.print(build_detail_panel(schema, record))


@app.command()
def create(
    entity: str = typer.Argument(...),
    values: Optional[list[str]] = typer.Option(None, "--set", help="Field value name=value (repeatable)."),
    uploads: Optional[list[str]] = typer.Option(None, "--upload", help="Upload a file into a field name=path."),
    scope: Optional[str] = typer.Option(None, "--scope"),
) -> None:
    """Create a record from field values."""

    schema = _schema(entity, scope)
    assignments = _parse_assignments(values, "--set")
    files = _parse_assignments(uploads, "--upload")
    settings = AppSettings()

    async def _go() -> None:
        async with build_gateway(settings) as gateway:
            composite = ListEditor(gateway, schema, settings=settings, hooks=_hooks(), scope=scope)
            try:
                composite.open_create()
                await _fill_draft(composite.editor, assignments, files, settings)
                await _submit(composite)
            finally:
                composite.close()

    _run(_go())


@app.command()
def update(
    entity: str = typer.Argument(...),
    identifier: str = typer.Argument(..., metavar="ID"),
    values: Optional[list[str]] = typer.Option(None, "--set", help="Field value name=value (repeatable)."),
    uploads: Optional[list[str]] = typer.Option(None, "--upload", help="Upload a file into a field name=path."),
    scope: Optional[str] = typer.Option(None, "--scope"),
) -> None:
    """Edit a record: the draft is seeded from the current row, then patched."""

    schema = _schema(entity, scope)
    if not schema.can_update:
        raise _fail(f"{schema.title} does not support editing records")
    assignments = _parse_assignments(values, "--set")
    files = _parse_assignments(uploads, "--upload")
    settings = AppSettings()

    async def _go() -> None:
        async with build_gateway(settings) as gateway:
            composite = ListEditor(gateway, schema, settings=settings, hooks=_hooks(), scope=scope)
            try:
                try:
                    await composite.locate(identifier)
                except KeyError as exc:
                    raise _fail(exc.args[0]) from exc
                composite.edit_row(identifier)
                await _fill_draft(composite.editor, assignments, files, settings)
                await _submit(composite)
            finally:
                composite.close()

    _run(_go())


@app.command()
def delete(
    entity: str = typer.Argument(...),
    identifier: str = typer.Argument(..., metavar="ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    scope: Optional[str] = typer.Option(None, "--scope"),
) -> None:
    """Delete a record after confirmation."""

    schema = _schema(entity, scope)
    settings = AppSettings()
    hooks = _hooks(assume_yes=yes)
    answers: list[bool] = []
    ask = hooks.confirm

    def confirm(prompt: str) -> bool:
        answers.append(ask(prompt))
        return answers[-1]

    hooks.confirm = confirm

    async def _go() -> bool:
        async with build_gateway(settings) as gateway:
            composite = ListEditor(gateway, schema, settings=settings, hooks=hooks, scope=scope)
            try:
                deleted = await composite.delete_row(identifier)
                if deleted and composite.list.error is None:
                    lst = composite.list
                    console.print(build_rows_table(schema, lst.rows, page=lst.current_page, total_pages=lst.total_pages))
                return deleted
            finally:
                composite.close()

    if _run(_go()):
        return
    if answers and not answers[-1]:
        console.print("[yellow]Cancelled.[/yellow]")
        return
    raise typer.Exit(code=1)


@app.command()
def status(
    entity: str = typer.Argument(...),
    identifier: str = typer.Argument(..., metavar="ID"),
    value: str = typer.Argument(..., metavar="STATUS"),
    scope: Optional[str] = typer.Option(None, "--scope"),
) -> None:
    """Change a record's status (document verification, course applications)."""

    schema = _schema(entity, scope)
    settings = AppSettings()

    async def _go() -> bool:
        async with build_gateway(settings) as gateway:
            composite = ListEditor(gateway, schema, settings=settings, hooks=_hooks(), scope=scope)
            try:
                return await composite.change_status(identifier, value)
            except ValueError as exc:
                raise typer.BadParameter(str(exc), param_hint="STATUS") from exc
            finally:
                composite.close()

    if not _run(_go()):
        raise typer.Exit(code=1)


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    content_type: Optional[str] = typer.Option(None, "--content-type"),
) -> None:
    """Upload a file through a signed URL and print its public URL."""

    settings = AppSettings()
    result = _run(build_uploader(settings).upload(path, content_type=content_type))
    console.print(result.file_url)


@app.command()
def export(
    entity: str = typer.Argument(...),
    output: Path = typer.Argument(..., dir_okay=False),
    page: int = typer.Option(1, "--page", "-p", min=1),
    search: Optional[str] = typer.Option(None, "--search", "-s"),
    scope: Optional[str] = typer.Option(None, "--scope"),
    filters: Optional[list[str]] = typer.Option(None, "--filter", "-f"),
) -> None:
    """Export one page of rows to JSON."""

    schema = _schema(entity, scope)
    extra = _parse_assignments(filters, "--filter")
    settings = AppSettings()

    async def _go() -> ListEditor:
        async with build_gateway(settings) as gateway:
            composite = ListEditor(gateway, schema, settings=settings, scope=scope, filters=extra)
            try:
                await _load_page(composite, page=page, search=search)
            finally:
                composite.close()
            return composite

    lst = _run(_go()).list
    written = export_rows_json(
        schema=schema,
        rows=lst.rows,
        output_path=output,
        page=lst.current_page,
        total_pages=lst.total_pages,
    )
    console.print(f"[green]Exported {len(lst.rows)} rows to:[/green] {written}")


@app.command()
def login(
    email: str = typer.Option(..., "--email", prompt=True),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
) -> None:
    """Exchange email/password for a token and store it."""

    settings = AppSettings()
    token = _run(login_request(settings=settings, email=email, password=password))
    path = FileCredentialStore(settings.resolved_token_file()).save_token(token)
    console.print(f"[green]Logged in. Token saved to:[/green] {path}")


@app.command()
def logout() -> None:
    """Forget the stored token."""

    settings = AppSettings()
    if FileCredentialStore(settings.resolved_token_file()).clear():
        console.print("[green]Logged out.[/green]")
    else:
        console.print("[yellow]No stored token.[/yellow]")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
