"""Taxonomía de errores de la consola.

Por qué un módulo propio:
- Core y adapters lanzan los mismos tipos; la CLI y los servicios los recuperan
  en el borde del componente sin conocer httpx.
"""

from __future__ import annotations


class AdminError(Exception):
    """Base de todos los errores recuperables de la consola."""


class Unauthenticated(AdminError):
    """No hay credencial disponible; la petición no se envía."""

    def __init__(self, message: str = "No token found. Please log in again.") -> None:
        super().__init__(message)


class ValidationFailed(AdminError):
    """Validación de campos en cliente (mapa campo -> mensaje)."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid fields: {fields}")


class RequestFailed(AdminError):
    """Respuesta no-2xx del backend o fallo de red."""

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        prefix = f"HTTP {status}: " if status is not None else ""
        super().__init__(f"{prefix}{message}")


class UploadFailed(AdminError):
    """Falla cualquiera de los dos pasos de la subida firmada."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        self.message = message
        super().__init__(f"Upload failed ({step}): {message}")


class ActionNotAllowed(AdminError):
    """La entidad no admite la acción pedida (p.ej. borrar pedidos)."""
