"""
Venue Admin — Listing Filters
===============================

What:  Query-string parsing and the search / status / id / pagination /
       sort layers that listings stack on top of the scope conditions.
How:   Array-valued query parameters arrive JSON-encoded
       (`is_active=[true,false]`, `ground=["<uuid>"]`) or as a single bare
       value. Parsers accept both and raise ValidationError (406) naming
       the parameter when the value cannot be interpreted.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import Select, asc, desc, or_
from sqlalchemy.sql.elements import ColumnElement

from venue_admin.exceptions import ValidationError


# ── Parsers ───────────────────────────────────────────────────────────────

def _load(raw: str) -> Any:
    text = raw.strip()
    if text.startswith("[") or text.startswith("{"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return None
    return text


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value]


def parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(message=f'"{field}" must be a boolean', field=field)


def parse_bool_list(raw: Optional[str], field: str) -> Optional[List[bool]]:
    """`"true"`, `"[true]"` or `"[true, false]"` → list of booleans."""
    if raw is None or raw.strip() == "":
        return None
    value = _load(raw)
    if value is None or isinstance(value, dict):
        raise ValidationError(message=f'"{field}" must be a boolean or an array of booleans', field=field)
    return [parse_bool(item, field) for item in _as_list(value)]


def parse_uuid(value: Any, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError):
        raise ValidationError(message=f'"{field}" must be a valid id', field=field)


def parse_uuid_list(raw: Optional[str], field: str) -> Optional[List[uuid.UUID]]:
    """`"<uuid>"` or `'["<uuid>", ...]'` → list of UUIDs."""
    if raw is None or raw.strip() == "":
        return None
    value = _load(raw)
    if value is None or isinstance(value, dict):
        raise ValidationError(message=f'"{field}" must be an id or an array of ids', field=field)
    return [parse_uuid(item, field) for item in _as_list(value)]


def parse_datetime(raw: Optional[str], field: str) -> datetime:
    """ISO date or date-time; naive values are taken as UTC."""
    if raw is None or raw.strip() == "":
        raise ValidationError(message=f'"{field}" is required', field=field)
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(message=f'"{field}" must be a valid date', field=field)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_optional_uuid(raw: Optional[str], field: str) -> Optional[uuid.UUID]:
    if raw is None or raw.strip() == "":
        return None
    return parse_uuid(raw, field)


# ── Query Layers ──────────────────────────────────────────────────────────

def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_condition(term: Optional[str], columns: Sequence[ColumnElement]) -> Optional[ColumnElement]:
    """Case-insensitive partial match of `term` on any of `columns`."""
    if term is None or term.strip() == "":
        return None
    pattern = f"%{_escape_like(term.strip())}%"
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


def in_condition(column: ColumnElement, values: Optional[Iterable[Any]]) -> Optional[ColumnElement]:
    if values is None:
        return None
    return column.in_(list(values))


def compact(*conditions: Optional[ColumnElement]) -> List[ColumnElement]:
    """Drops the layers that were not requested."""
    return [c for c in conditions if c is not None]


def paginate(stmt: Select, offset: int = 0, limit: Optional[int] = None) -> Select:
    stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


def order(stmt: Select, column: ColumnElement, direction: str = "asc") -> Select:
    if direction == "desc":
        return stmt.order_by(desc(column))
    return stmt.order_by(asc(column))
