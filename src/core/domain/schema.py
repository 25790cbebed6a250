"""Descriptores de entidad (schema-driven).

Idea:
- En vez de reimplementar cada pantalla de administración, una sola máquina de
  estados genérica (listado + editor) se configura con un `EntitySchema`.
- El schema sabe qué campos hay, cómo se validan, cómo se siembra un borrador
  desde una fila y cómo se construye el payload que viaja al backend.

Estos descriptores son datos puros: no conocen HTTP ni la CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping

from core.domain.errors import ValidationFailed


class FieldKind(str, Enum):
    """Tipos de campo editables."""

    TEXT = "text"
    LONG_TEXT = "long_text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    CHOICE = "choice"
    URL = "url"


_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "no", "n", "off", ""}


@dataclass(frozen=True)
class FieldSpec:
    """Un campo escalar editable de una entidad."""

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    choices: tuple[str, ...] = ()
    # Prefijo de mime-type aceptado por subidas a este campo (p.ej. "image/").
    accept: str | None = None
    message: str | None = None

    def default(self) -> Any:
        if self.kind is FieldKind.BOOLEAN:
            return False
        if self.kind is FieldKind.CHOICE and self.choices:
            return self.choices[0]
        return ""

    def required_message(self) -> str:
        return self.message or f"{self.label} is required"

    def coerce(self, value: Any) -> Any:
        """Normaliza el valor que llega de un input (la CLI siempre manda texto)."""

        if self.kind is FieldKind.BOOLEAN and isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise ValueError(f"{self.label} expects a boolean, got {value!r}")
        if value is None:
            return self.default()
        return value

    def seed(self, value: Any) -> Any:
        """Valor de borrador a partir del valor almacenado en el servidor."""

        if value is None:
            return self.default()
        if self.kind is FieldKind.DATE:
            return to_date_input(value)
        if self.kind is FieldKind.DATETIME:
            return to_datetime_input(value)
        if self.kind is FieldKind.BOOLEAN:
            return bool(value)
        return value

    def check(self, value: Any) -> str | None:
        """Devuelve el mensaje de error del campo o `None` si es válido."""

        if is_blank(value):
            return self.required_message() if self.required else None

        if self.kind is FieldKind.NUMBER and parse_number(value) is None:
            return f"{self.label} must be a number"
        if self.kind is FieldKind.CHOICE and self.choices and str(value) not in self.choices:
            return f"{self.label} must be one of: {', '.join(self.choices)}"
        if self.kind is FieldKind.URL and not str(value).strip().lower().startswith(("http://", "https://")):
            return f"{self.label} must be a valid URL"
        if self.kind is FieldKind.DATE and _parse_date(value) is None:
            return f"{self.label} must be a date (YYYY-MM-DD)"
        if self.kind is FieldKind.DATETIME and _parse_datetime(value) is None:
            return f"{self.label} must be a date and time (YYYY-MM-DDTHH:MM)"
        return None


@dataclass(frozen=True)
class EntitySchema:
    """Configuración completa de una pantalla de administración."""

    key: str
    title: str
    base_path: str
    fields: tuple[FieldSpec, ...] = ()
    columns: tuple[str, ...] = ()
    id_field: str = "id"

    rows_key: str | None = "data"
    page_param: str = "page"
    page_size_param: str = "limit"
    search_param: str | None = "search"
    paginated: bool = True
    filters: tuple[str, ...] = ()
    default_filters: Mapping[str, str] = field(default_factory=dict)

    can_create: bool = False
    can_update: bool = False
    can_delete: bool = False
    can_view: bool = False

    # Campo de propietario que se rellena al crear (userId / createdById).
    owner_field: str | None = None
    status_field: str | None = None
    status_choices: tuple[str, ...] = ()
    # "midnight": las fechas DATE viajan como ISO a medianoche UTC.
    date_payload: str = "plain"

    @property
    def scoped(self) -> bool:
        return "{scope}" in self.base_path

    @property
    def editable(self) -> bool:
        return self.can_create or self.can_update

    def field_spec(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.key} has no field {name!r}")

    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    def path(self, scope: str | int | None = None) -> str:
        if self.scoped:
            if scope is None or str(scope).strip() == "":
                raise ValueError(f"{self.key} needs a scope (e.g. a user id)")
            return self.base_path.replace("{scope}", str(scope).strip())
        return self.base_path

    def item_path(self, identifier: str | int, scope: str | int | None = None) -> str:
        return f"{self.path(scope)}/{identifier}"

    def identifier_of(self, row: Mapping[str, Any]) -> Any:
        return row.get(self.id_field)

    def default_draft(self) -> dict[str, Any]:
        return {spec.name: spec.default() for spec in self.fields}

    def seed_draft(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        """Copia los campos editables de `entity`, sin el identificador."""

        return {
            spec.name: spec.seed(entity.get(spec.name))
            for spec in self.fields
            if spec.name != self.id_field
        }

    def errors_for(self, draft: Mapping[str, Any]) -> dict[str, str]:
        errors: dict[str, str] = {}
        for spec in self.fields:
            message = spec.check(draft.get(spec.name))
            if message:
                errors[spec.name] = message
        return errors

    def validate(self, draft: Mapping[str, Any]) -> None:
        errors = self.errors_for(draft)
        if errors:
            raise ValidationFailed(errors)

    def build_payload(
        self,
        draft: Mapping[str, Any],
        *,
        owner_id: int | None = None,
        creating: bool = False,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if creating and self.owner_field and owner_id is not None:
            payload[self.owner_field] = owner_id

        for spec in self.fields:
            if spec.name not in draft:
                continue
            value = draft[spec.name]
            if spec.kind is FieldKind.NUMBER:
                value = parse_number(value) if not is_blank(value) else None
            elif spec.kind is FieldKind.DATE:
                if self.date_payload == "midnight":
                    value = to_midnight_iso(value)
            elif spec.kind is FieldKind.DATETIME:
                value = to_iso_utc(value)
            elif spec.kind is FieldKind.BOOLEAN:
                value = bool(value)
            payload[spec.name] = value
        return payload


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        # Inputs sin zona se interpretan como UTC.
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # Offsets que salen del rango de datetime (p.ej. 9999-12-31T23:59-05:00).
        return None


def _iso_z(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    millis = moment.microsecond // 1000
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def to_date_input(value: Any) -> str:
    """`2025-01-02T00:00:00.000Z` -> `2025-01-02` (formato de input date)."""

    if is_blank(value):
        return ""
    parsed = _parse_date(value)
    return parsed.isoformat() if parsed else str(value)


def to_datetime_input(value: Any) -> str:
    """ISO-8601 -> `YYYY-MM-DDTHH:MM` en UTC (formato de input datetime-local)."""

    if is_blank(value):
        return ""
    parsed = _parse_datetime(value)
    return parsed.strftime("%Y-%m-%dT%H:%M") if parsed else str(value)


def to_midnight_iso(value: Any) -> str:
    if is_blank(value):
        return ""
    parsed = _parse_date(value)
    if parsed is None:
        return str(value)
    return _iso_z(datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc))


def to_iso_utc(value: Any) -> str:
    if is_blank(value):
        return ""
    parsed = _parse_datetime(value)
    return _iso_z(parsed) if parsed else str(value)
