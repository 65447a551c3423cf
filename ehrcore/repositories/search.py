# ehrcore/repositories/search.py
"""
Search translation: filter map -> parameterized SQLAlchemy predicates.

Every repository declares an allow-list {filter key -> SearchParam}. Keys
outside the list are ignored. Values only ever reach the database as bound
parameters; a value that cannot be interpreted for its parameter type
yields a predicate that matches nothing.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Mapping

from sqlalchemy import Date, and_, false, not_, or_
from sqlalchemy.sql.elements import ColumnElement

from ehrcore.utils.datetime_utils import parse_search_date

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

DATE_PREFIXES = ("eq", "ne", "gt", "lt", "ge", "le", "sa", "eb")
NUMBER_PREFIXES = ("eq", "ne", "gt", "lt", "ge", "le")

MISSING_MODIFIER = "missing"
NOT_MODIFIER = "not"


class ParamType(str, Enum):
    TOKEN = "token"
    STRING = "string"
    CONTAINS = "contains"
    REFERENCE = "reference"
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class SearchParam:
    type: ParamType
    column: str
    system_column: str | None = None


def token(column: str, system_column: str | None = None) -> SearchParam:
    return SearchParam(ParamType.TOKEN, column, system_column)


def string(column: str) -> SearchParam:
    return SearchParam(ParamType.STRING, column)


def contains(column: str) -> SearchParam:
    return SearchParam(ParamType.CONTAINS, column)


def reference(column: str) -> SearchParam:
    return SearchParam(ParamType.REFERENCE, column)


def date_param(column: str) -> SearchParam:
    return SearchParam(ParamType.DATE, column)


def number(column: str) -> SearchParam:
    return SearchParam(ParamType.NUMBER, column)


def boolean(column: str) -> SearchParam:
    return SearchParam(ParamType.BOOLEAN, column)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input only ever matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def split_prefix(value: str, prefixes: tuple[str, ...]) -> tuple[str, str]:
    if len(value) > 2 and value[:2] in prefixes:
        return value[:2], value[2:]
    return "eq", value


def build_predicates(
    model,
    params: Mapping[str, SearchParam],
    filters: Mapping[str, str] | None,
) -> list[ColumnElement[bool]]:
    """
    Translate filters into a list of predicates to be ANDed by the caller.

    A key may carry a modifier after a colon:
    - "<key>:missing" with "true"/"false" matches an unset/set column.
    - "<key>:not" on a token parameter excludes the given code.
    """
    predicates: list[ColumnElement[bool]] = []
    if not filters:
        return predicates

    for key, value in filters.items():
        name, _, modifier = key.partition(":")
        param = params.get(name)
        if param is None or not _supports_modifier(param, modifier):
            logger.debug("Ignoring unsupported search parameter %r on %s", key, model.__name__)
            continue

        value = str(value)
        if modifier == MISSING_MODIFIER:
            predicates.append(_missing_predicate(getattr(model, param.column), value))
        elif modifier == NOT_MODIFIER:
            predicates.append(not_(_token_predicate(model, getattr(model, param.column), param, value)))
        else:
            predicates.append(_translate(model, param, value))
    return predicates


def _supports_modifier(param: SearchParam, modifier: str) -> bool:
    if not modifier or modifier == MISSING_MODIFIER:
        return True
    return modifier == NOT_MODIFIER and param.type is ParamType.TOKEN


def _missing_predicate(column, value: str) -> ColumnElement[bool]:
    normalised = value.strip().lower()
    if normalised == "true":
        return column.is_(None)
    if normalised == "false":
        return column.is_not(None)
    return false()


def _translate(model, param: SearchParam, value: str) -> ColumnElement[bool]:
    column = getattr(model, param.column)

    if param.type is ParamType.TOKEN:
        return _token_predicate(model, column, param, value)
    if param.type is ParamType.STRING:
        return column.ilike(escape_like(value) + "%", escape=LIKE_ESCAPE)
    if param.type is ParamType.CONTAINS:
        return column.ilike("%" + escape_like(value) + "%", escape=LIKE_ESCAPE)
    if param.type is ParamType.REFERENCE:
        return _reference_predicate(column, value)
    if param.type is ParamType.DATE:
        return _date_predicate(column, value)
    if param.type is ParamType.NUMBER:
        return _number_predicate(column, value)
    if param.type is ParamType.BOOLEAN:
        return _boolean_predicate(column, value)
    raise ValueError(f"Unsupported search parameter type: {param.type}")


def _token_predicate(model, column, param: SearchParam, value: str) -> ColumnElement[bool]:
    if "|" not in value:
        return column == value

    system, code = value.split("|", 1)
    clauses = []
    if code:
        clauses.append(column == code)
    if system and param.system_column:
        clauses.append(getattr(model, param.system_column) == system)
    if not clauses:
        return false()
    return and_(*clauses)


def _reference_predicate(column, value: str) -> ColumnElement[bool]:
    # "Patient/<uuid>" or a bare uuid
    raw = value.rsplit("/", 1)[-1]
    try:
        target = uuid.UUID(raw)
    except ValueError:
        return false()
    return column == target


def _date_bounds(column, value: str) -> tuple[datetime | date, datetime | date, bool] | None:
    try:
        start, end = parse_search_date(value)
    except ValueError:
        return None

    is_instant = start == end
    if isinstance(column.type, Date):
        start_day = start.date()
        end_day = start_day + timedelta(days=1) if is_instant else end.date()
        return start_day, end_day, False
    return start, end, is_instant


def _date_predicate(column, value: str) -> ColumnElement[bool]:
    prefix, raw = split_prefix(value.strip(), DATE_PREFIXES)
    bounds = _date_bounds(column, raw)
    if bounds is None:
        return false()
    start, end, is_instant = bounds

    if is_instant:
        if prefix == "eq":
            return column == start
        if prefix == "ne":
            return column != start
        if prefix in ("gt", "sa"):
            return column > start
        if prefix in ("lt", "eb"):
            return column < start
        if prefix == "ge":
            return column >= start
        return column <= start

    # Half-open range [start, end)
    if prefix == "eq":
        return and_(column >= start, column < end)
    if prefix == "ne":
        return or_(column < start, column >= end)
    if prefix in ("gt", "sa"):
        return column >= end
    if prefix in ("lt", "eb"):
        return column < start
    if prefix == "ge":
        return column >= start
    return column < end


def _number_predicate(column, value: str) -> ColumnElement[bool]:
    prefix, raw = split_prefix(value.strip(), NUMBER_PREFIXES)
    try:
        target = Decimal(raw)
    except InvalidOperation:
        return false()
    if not target.is_finite():
        return false()

    if prefix == "ne":
        return not_(column == target)
    if prefix == "gt":
        return column > target
    if prefix == "lt":
        return column < target
    if prefix == "ge":
        return column >= target
    if prefix == "le":
        return column <= target
    return column == target


def _boolean_predicate(column, value: str) -> ColumnElement[bool]:
    normalised = value.strip().lower()
    if normalised == "true":
        return column.is_(True)
    if normalised == "false":
        return column.is_(False)
    return false()
