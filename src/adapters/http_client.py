"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y base URL para todas las llamadas al backend.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

from typing import Any

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    with_base_url: bool = True,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los adaptadores se comporten igual.
    - `with_base_url=False` sirve para URLs absolutas de terceros (URLs firmadas).
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }

    kwargs: dict[str, Any] = {
        "timeout": httpx.Timeout(settings.http_timeout_seconds),
        "follow_redirects": True,
        "headers": headers,
    }
    if with_base_url:
        kwargs["base_url"] = settings.api_base_url.rstrip("/") + "/"
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


def error_message_from(response: httpx.Response) -> str:
    """Extrae el mensaje de error que envía el backend, si lo hay."""

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, list) and value:
                return "; ".join(str(v) for v in value)
    return response.reason_phrase or "Request failed"
