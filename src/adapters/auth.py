"""Login contra el backend.

Único endpoint que se llama sin bearer: intercambia email/password por un token.
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import build_async_client, error_message_from
from core.config import AppSettings
from core.domain.errors import RequestFailed

logger = logging.getLogger(__name__)


async def login(
    *,
    settings: AppSettings,
    email: str,
    password: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Devuelve el token emitido por `POST auth/login`."""

    async with build_async_client(settings, transport=transport) as client:
        try:
            response = await client.post("auth/login", json={"email": email, "password": password})
        except httpx.HTTPError as exc:
            raise RequestFailed(None, str(exc) or exc.__class__.__name__) from exc

    if not response.is_success:
        raise RequestFailed(response.status_code, error_message_from(response))

    try:
        body = response.json()
    except ValueError:
        body = None
    token = body.get("token") if isinstance(body, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise RequestFailed(response.status_code, "Login failed: No token received.")

    logger.info("Logged in as %s", email)
    return token.strip()
