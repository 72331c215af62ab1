"""
Shared building blocks for the CRUD modules.

- FieldMap: explicit camelCase <-> snake_case translation table per entity
- apply_filters / apply_pagination: additive WHERE / LIMIT / OFFSET builders
- update_values: partial-update payload -> column values
- coerce_id: opaque id -> UUID
"""

import enum
import uuid
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from sqlalchemy import Column, Select, Table, or_

from app.core.errors import InvalidIdentifierError, NoFieldsToUpdateError, ValidationError

# Columns the update path never writes
READ_ONLY_COLUMNS = frozenset({"id", "created_at", "updated_at"})


class FieldMap:
    """
    Static translation table between application field names (camelCase)
    and storage column names (snake_case).

    Names missing from the table pass through unchanged, so single-word
    names such as "title" or "email" need no entry.
    """

    def __init__(self, conversions: Mapping[str, str]):
        self._to_column: Dict[str, str] = dict(conversions)
        self._to_field: Dict[str, str] = {column: field for field, column in conversions.items()}

    def to_column(self, field: str) -> str:
        return self._to_column.get(field, field)

    def to_field(self, column: str) -> str:
        return self._to_field.get(column, column)

    def to_columns(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {self.to_column(field): value for field, value in data.items()}

    def to_fields(self, row: Mapping[str, Any], columns: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Translate a result row into an application-facing dict.

        Args:
            row: Row mapping keyed by column name
            columns: Column names to keep (default: every key of the row)
        """
        keys = row.keys() if columns is None else columns
        return {self.to_field(column): _plain(row[column]) for column in keys}


def _plain(value: Any) -> Any:
    """Enum members are returned as their stored value ("Job Seeker")."""
    return value.value if isinstance(value, enum.Enum) else value


def is_absent(value: Any) -> bool:
    return value is None or value == ""


def coerce_id(value: Any) -> uuid.UUID:
    """
    Convert an opaque id to a UUID.

    Raises:
        InvalidIdentifierError: If the value is not a well-formed UUID
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifierError(value)


def apply_filters(
    stmt: Select,
    filters: Mapping[str, Any],
    exact: Mapping[str, Column] = None,
    partial: Mapping[str, Column] = None,
    ids: Iterable[str] = (),
    search: Sequence[Column] = (),
) -> Select:
    """
    AND the present filters onto a SELECT.

    Args:
        stmt: Statement to extend
        filters: Application-facing filter values keyed by field name
        exact: Field name -> column compared with "="
        partial: Field name -> column compared with case-insensitive substring match
        ids: Names in `exact` whose values are opaque ids
        search: Columns matched by the "search" keyword (any of them)

    Absent filters (missing, None or "") add nothing to the WHERE clause.
    """
    ids = set(ids)

    for field, column in (exact or {}).items():
        value = filters.get(field)
        if is_absent(value):
            continue
        if field in ids:
            value = coerce_id(value)
        stmt = stmt.where(column == value)

    for field, column in (partial or {}).items():
        value = filters.get(field)
        if is_absent(value):
            continue
        stmt = stmt.where(column.ilike(f"%{value}%"))

    keyword = filters.get("search")
    if search and not is_absent(keyword):
        stmt = stmt.where(or_(*(column.ilike(f"%{keyword}%") for column in search)))

    return stmt


def _whole_number(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a whole number")


def apply_pagination(stmt: Select, filters: Mapping[str, Any]) -> Select:
    limit = filters.get("limit")
    offset = filters.get("offset")
    if limit:
        stmt = stmt.limit(_whole_number(limit, "Limit"))
    if offset:
        stmt = stmt.offset(_whole_number(offset, "Offset"))
    return stmt


def update_values(
    table: Table,
    fields: FieldMap,
    data: Mapping[str, Any],
    id_columns: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Build the SET clause values for a partial update.

    Keys present in `data` are applied, including explicit None values; keys
    that do not name a writable column are ignored.

    Raises:
        NoFieldsToUpdateError: If nothing applicable remains
    """
    values = {
        column: value
        for column, value in fields.to_columns(data).items()
        if column in table.c and column not in READ_ONLY_COLUMNS
    }
    if not values:
        raise NoFieldsToUpdateError()

    for column in id_columns:
        if values.get(column) is not None:
            values[column] = coerce_id(values[column])
    return values
