"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.credential_store import credentials_from_settings
from adapters.http_client import build_async_client
from adapters.rest_client import clean_token
from core.config import AppSettings, get_user_env_file, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")
config_app = typer.Typer(no_args_is_help=True, help="Persist settings in the user config .env.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get("")
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Market Admin Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("API base_url", "OK", settings.api_base_url)
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))

    # Token
    token = clean_token(credentials_from_settings(settings).get_token())
    if settings.token:
        source = "MARKET_ADMIN_TOKEN"
    else:
        source = str(settings.resolved_token_file())
    if token:
        table.add_row("Token", "OK", source)
    else:
        table.add_row("Token", "MISSING", "Run `market-admin login` first")

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("API connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not token:
        _console.print("\n[yellow]Note:[/yellow] Every list/edit command needs a bearer token.")


@config_app.command(name="set-url")
def set_url(
    url: str = typer.Argument(..., help="Backend base URL, e.g. https://api.example.com/dev"),
) -> None:
    """Store the backend base URL (no manual .env editing)."""

    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        raise typer.BadParameter("URL must start with http:// or https://")

    env_path = write_user_env_vars({"MARKET_ADMIN_API_BASE_URL": url.rstrip("/")})
    _console.print(f"[green]Saved API config to:[/green] {env_path}")
