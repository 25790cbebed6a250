"""Contrato del almacén de credenciales.

Por qué Protocol:
- El cliente REST recibe el proveedor de token en su constructor en lugar de
  leerlo de un almacenamiento global dentro de cada petición.
- En tests basta un objeto con `get_token`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialProvider(Protocol):
    """Fuente del bearer token del administrador."""

    def get_token(self) -> str | None:
        """Devuelve el token vigente o `None` si no hay sesión."""

        ...
