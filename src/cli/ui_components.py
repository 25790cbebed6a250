"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.schema import EntitySchema

_MAX_CELL = 60


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("MARKET-ADMIN", style="bold cyan")
    subtitle = Text("Marketplace admin console • Listings • Moderation", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def lookup(row: Mapping[str, Any], path: str) -> Any:
    """Resuelve columnas anidadas tipo `user.email`."""

    value: Any = row
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def format_cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    text = str(value)
    if len(text) > _MAX_CELL:
        return text[: _MAX_CELL - 1] + "…"
    return text


def build_rows_table(
    schema: EntitySchema,
    rows: Sequence[Mapping[str, Any]],
    *,
    page: int | None = None,
    total_pages: int | None = None,
) -> Table:
    """Tabla Rich con las columnas declaradas por el schema."""

    title = schema.title
    if page is not None and total_pages is not None:
        title = f"{schema.title} (page {page}/{total_pages})"

    columns = list(schema.columns) or sorted({key for row in rows for key in row})
    table = Table(title=title)
    for index, column in enumerate(columns):
        table.add_column(column, style="cyan" if index == 0 else "white", no_wrap=index == 0)
    for row in rows:
        table.add_row(*(format_cell(lookup(row, column)) for column in columns))
    if not rows:
        table.caption = "No records found."
    return table


def build_detail_panel(schema: EntitySchema, record: Mapping[str, Any]) -> Panel:
    """Panel clave/valor para la vista de detalle (reportes)."""

    body = Text()
    for key in sorted(record):
        body.append(f"{key}: ", style="bold")
        value = record[key]
        if isinstance(value, Mapping):
            value = ", ".join(f"{k}={format_cell(v)}" for k, v in value.items())
        body.append(f"{format_cell(value)}\n")
    identifier = schema.identifier_of(record)
    return Panel(body, title=f"{schema.title} #{identifier}", border_style="yellow")


def build_entities_table(schemas: Sequence[EntitySchema]) -> Table:
    table = Table(title="Entities")
    table.add_column("Key", style="bright_green", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Endpoint", style="magenta")
    table.add_column("Actions", style="dim")
    for schema in schemas:
        actions = ["list"]
        if schema.can_create:
            actions.append("create")
        if schema.can_update:
            actions.append("update")
        if schema.can_delete:
            actions.append("delete")
        if schema.can_view:
            actions.append("show")
        if schema.status_field:
            actions.append("status")
        table.add_row(schema.key, schema.title, schema.base_path, ", ".join(actions))
    return table


def print_field_errors(console: Console, schema: EntitySchema, errors: Mapping[str, str]) -> None:
    """Un error por línea, junto al campo afectado."""

    for name, message in errors.items():
        console.print(f"[red]✗[/red] [bold]{name}[/bold]: {message}")


def print_notice(console: Console, kind: str, message: str) -> None:
    style = "green" if kind == "success" else "red"
    console.print(f"[{style}]{message}[/{style}]")
