"""Contrato del colaborador de subida de ficheros."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import UploadResult


@runtime_checkable
class FileUploader(Protocol):
    async def upload(self, path: Path, *, content_type: str | None = None) -> UploadResult:
        """Sube `path` y devuelve la URL pública resultante."""

        ...
