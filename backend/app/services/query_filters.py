"""
Query-string to storage-query translation for candidate listings.

Query parameters are parsed into explicit (field, operator, value) clauses
instead of rewriting operator tokens inside a serialized blob. Keys look like
``experience[gte]=3`` or plain ``status=ongoing``; ``select``, ``sort``,
``page`` and ``limit`` are control parameters and never become clauses.

Anything malformed (unknown field or operator, uncoercible value) is rejected
with a 400 before a query is built.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy.orm import Query

from ..models.candidate import Candidate
from ..utils.error_handlers import ValidationError
from ..utils.validation import validate_datetime_field, validate_integer_field

CONTROL_KEYS = ("select", "sort", "page", "limit")
OPERATORS = ("gt", "gte", "lt", "lte", "in")

# Filterable columns and the Python type their query values are coerced to.
FILTER_FIELDS: dict[str, type] = {
    "full_name": str,
    "email": str,
    "status": str,
    "position": str,
    "experience": int,
    "notes": str,
    "resume_filename": str,
    "interview_date": datetime,
    "created_at": datetime,
    "created_by": int,
}

# Keys of a serialized candidate, in output order.
PUBLIC_FIELDS = (
    "id",
    "full_name",
    "email",
    "status",
    "position",
    "experience",
    "resume_file",
    "resume_filename",
    "notes",
    "interview_date",
    "created_at",
    "created_by",
)

SORT_FIELDS = ("id", *FILTER_FIELDS.keys())
DEFAULT_SORT = (("created_at", True),)

_KEY_RE = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>[A-Za-z]+)\])?$")


@dataclass(frozen=True)
class FilterClause:
    field: str
    op: str  # "eq" or one of OPERATORS
    value: Any


@dataclass
class ListQuery:
    """Parsed listing request: predicate clauses plus residual controls."""

    clauses: list[FilterClause] = field(default_factory=list)
    select: tuple[str, ...] | None = None
    sort: tuple[tuple[str, bool], ...] = DEFAULT_SORT  # (field, descending)
    page: str | None = None
    limit: str | None = None


def _invalid(message: str) -> ValidationError:
    return ValidationError(message, code="invalid_filter")


def _coerce(field_name: str, raw: str) -> Any:
    kind = FILTER_FIELDS[field_name]
    try:
        if kind is int:
            return validate_integer_field(raw, field_name)
        if kind is datetime:
            return validate_datetime_field(raw, field_name, required=True)
        if field_name == "email":
            # Stored lowercase.
            return raw.strip().lower()
    except ValidationError as e:
        raise _invalid(f"Invalid filter value for '{field_name}': {e.message}")
    return raw


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_filter_clause(key: str, raw: str) -> FilterClause:
    match = _KEY_RE.match(key)
    if not match:
        raise _invalid(f"Invalid filter key '{key}'")

    field_name = match.group("field")
    op = (match.group("op") or "eq").lower()

    if field_name not in FILTER_FIELDS:
        raise _invalid(
            f"Cannot filter on '{field_name}'. Filterable fields are: {', '.join(FILTER_FIELDS)}"
        )
    if op != "eq" and op not in OPERATORS:
        raise _invalid(f"Unsupported operator '{op}'. Supported operators are: {', '.join(OPERATORS)}")

    if op == "in":
        values = _split_csv(raw)
        if not values:
            raise _invalid(f"Filter '{key}' needs at least one value")
        return FilterClause(field_name, op, [_coerce(field_name, v) for v in values])

    return FilterClause(field_name, op, _coerce(field_name, raw))


def parse_select(raw: str) -> tuple[str, ...] | None:
    names = _split_csv(raw)
    if not names:
        return None
    unknown = [n for n in names if n not in PUBLIC_FIELDS]
    if unknown:
        raise _invalid(f"Cannot select unknown field(s): {', '.join(unknown)}")
    # id always comes back so records stay addressable.
    return tuple(n for n in PUBLIC_FIELDS if n == "id" or n in names)


def parse_sort(raw: str) -> tuple[tuple[str, bool], ...]:
    keys: list[tuple[str, bool]] = []
    for token in _split_csv(raw):
        descending = token.startswith("-")
        name = token.lstrip("-+")
        if name not in SORT_FIELDS:
            raise _invalid(f"Cannot sort on '{name}'. Sortable fields are: {', '.join(SORT_FIELDS)}")
        keys.append((name, descending))
    return tuple(keys) or DEFAULT_SORT


def parse_list_query(params: Iterable[tuple[str, str]]) -> ListQuery:
    """Split raw query pairs into filter clauses and control parameters."""
    parsed = ListQuery()
    for key, raw in params:
        if key == "select":
            parsed.select = parse_select(raw)
        elif key == "sort":
            parsed.sort = parse_sort(raw)
        elif key == "page":
            parsed.page = raw
        elif key == "limit":
            parsed.limit = raw
        else:
            parsed.clauses.append(parse_filter_clause(key, raw))
    return parsed


def apply_filters(query: Query, clauses: Iterable[FilterClause]) -> Query:
    for clause in clauses:
        column = getattr(Candidate, clause.field)
        if clause.op == "eq":
            query = query.filter(column == clause.value)
        elif clause.op == "gt":
            query = query.filter(column > clause.value)
        elif clause.op == "gte":
            query = query.filter(column >= clause.value)
        elif clause.op == "lt":
            query = query.filter(column < clause.value)
        elif clause.op == "lte":
            query = query.filter(column <= clause.value)
        elif clause.op == "in":
            query = query.filter(column.in_(clause.value))
    return query


def apply_sort(query: Query, sort: Iterable[tuple[str, bool]]) -> Query:
    order_by = []
    for name, descending in sort:
        column = getattr(Candidate, name)
        order_by.append(column.desc() if descending else column.asc())
    # Stable pages when the sort key ties (e.g. same created_at second).
    order_by.append(Candidate.id.desc())
    return query.order_by(*order_by)
