"""Dominio de la consola de administración.

Por qué:
- Schemas de entidad, catálogo, páginas normalizadas y errores: datos puros.
- El dominio no conoce HTTP ni la CLI; los servicios lo combinan con un gateway.
"""
