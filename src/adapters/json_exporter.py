"""Exportación JSON de un listado.

Por qué JSON:
- Interoperabilidad con hojas de cálculo/pipelines sin pasar por la CLI.
- Deja constancia de lo que devolvió el backend para una página concreta.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from core.domain.schema import EntitySchema


def export_rows_json(
    *,
    schema: EntitySchema,
    rows: Sequence[dict[str, Any]],
    output_path: Path,
    page: int | None = None,
    total_pages: int | None = None,
) -> Path:
    """Exporta filas a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "entity": schema.key,
        "page": page,
        "total_pages": total_pages,
        "rows": list(rows),
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True, default=str) + "\n",
        encoding="utf-8",
    )
    return output_path
