"""Almacenes de credenciales.

Por qué en adapters:
- Leer/escribir el token en disco es I/O; el Core solo conoce
  `core.interfaces.credentials.CredentialProvider`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from core.config import AppSettings
from core.interfaces.credentials import CredentialProvider

logger = logging.getLogger(__name__)


class StaticCredentials:
    """Token fijo (env var `MARKET_ADMIN_TOKEN` o tests)."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    def get_token(self) -> str | None:
        return self._token


class FileCredentialStore:
    """Token persistido en un fichero del directorio de configuración del usuario."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def get_token(self) -> str | None:
        if not self.path.is_file():
            return None
        token = self.path.read_text(encoding="utf-8").strip()
        return token or None

    def save_token(self, token: str) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token.strip() + "\n", encoding="utf-8")
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.path)
        return self.path

    def clear(self) -> bool:
        if self.path.exists():
            self.path.unlink()
            return True
        return False


def credentials_from_settings(settings: AppSettings) -> CredentialProvider:
    """El token de configuración tiene prioridad sobre el fichero de `login`."""

    if settings.token:
        return StaticCredentials(settings.token)
    return FileCredentialStore(settings.resolved_token_file())
