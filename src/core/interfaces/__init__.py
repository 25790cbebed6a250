"""Interfaces/abstracciones del Core.

Por qué:
- Los servicios (listado/editor) dependen del gateway, no de httpx.
- El cliente REST recibe credenciales y subidas como dependencias explícitas.
"""

from core.interfaces.credentials import CredentialProvider
from core.interfaces.gateway import EntityGateway
from core.interfaces.uploader import FileUploader

__all__ = ["CredentialProvider", "EntityGateway", "FileUploader"]
