"""
Turn raw query-string pairs into a `QuerySpec`.

    ?averageCost[lte]=10000&housing=true&select=name,averageCost&sort=-name&page=2&limit=10

- `select`, `sort`, `page`, `limit` are control keys, never filters
- `field=value` is equality; repeating the key widens it to `in`
- `field[op]=value` with op in gt, gte, lt, lte, in (`in` takes a comma list)
- values are parsed with the field's declared type
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from core.store import INT64_MAX, Condition, FieldSpec, ResourceSchema, SortKey

RESERVED_KEYS = ("select", "sort", "page", "limit")
COMPARISON_OPERATORS = ("gt", "gte", "lt", "lte", "in")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
MAX_LIMIT = 100
DEFAULT_SORT_FIELD = "createdAt"

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


class QueryTranslationError(RuntimeError):
    pass


@dataclass(frozen=True)
class QuerySpec:
    conditions: tuple[Condition, ...] = ()
    sort_keys: tuple[SortKey, ...] = ()
    # None selects every public field.
    fields: tuple[str, ...] | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT


def _pairs(params: Any) -> list[tuple[str, str]]:
    if hasattr(params, "multi_items"):
        return [(str(k), str(v)) for k, v in params.multi_items()]
    items = params.items() if isinstance(params, Mapping) else params
    pairs: list[tuple[str, str]] = []
    for key, value in items:
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), str(v)) for v in value)
        else:
            pairs.append((str(key), str(value)))
    return pairs


def _split_key(key: str) -> list[str]:
    match = _KEY_RE.match(key)
    if match is None:
        raise QueryTranslationError(f"Malformed query parameter {key!r}.")
    return [match.group(1)] + _SEGMENT_RE.findall(match.group(2))


def _group_filters(pairs: Iterable[tuple[str, str]]) -> dict[str, dict[str, list[str]]]:
    """
    field -> operator ("eq" for bare keys) -> raw values, in arrival order.
    """
    grouped: dict[str, dict[str, list[str]]] = {}
    for key, value in pairs:
        path = _split_key(key)
        if path[0] in RESERVED_KEYS:
            continue
        if len(path) > 2:
            raise QueryTranslationError(f"Query parameter {key!r} is nested too deeply.")

        op = "eq"
        if len(path) == 2:
            op = path[1]
            # Only a whole bracket segment names an operator.
            if op not in COMPARISON_OPERATORS:
                raise QueryTranslationError(f"Unknown operator {op!r} in {key!r}.")
        grouped.setdefault(path[0], {}).setdefault(op, []).append(value)
    return grouped


def _parse_value(spec: FieldSpec, raw: str) -> Any:
    if spec.type is not str and not raw.strip():
        raise QueryTranslationError(f"Empty value for {spec.name}.")
    try:
        return spec.parse(raw)
    except ValueError as exc:
        raise QueryTranslationError(f"Invalid value {raw!r} for {spec.name}.") from exc


def _public_field(schema: ResourceSchema, name: str) -> FieldSpec:
    spec = schema.public_field(name)
    if spec is None:
        raise QueryTranslationError(f"Unknown field {name!r}.")
    return spec


def _conditions(grouped: dict[str, dict[str, list[str]]], schema: ResourceSchema) -> list[Condition]:
    conditions: list[Condition] = []
    for name, by_operator in grouped.items():
        spec = _public_field(schema, name)
        for op, raw_values in by_operator.items():
            if op == "eq":
                values = [_parse_value(spec, raw) for raw in raw_values]
                if len(values) == 1:
                    conditions.append(Condition(name, "eq", values[0]))
                else:
                    conditions.append(Condition(name, "in", values))
            elif op == "in":
                parts = [part.strip() for raw in raw_values for part in raw.split(",") if part.strip()]
                if not parts:
                    raise QueryTranslationError(f"Empty list for {name}[in].")
                conditions.append(Condition(name, "in", [_parse_value(spec, part) for part in parts]))
            else:
                if len(raw_values) > 1:
                    raise QueryTranslationError(f"{name}[{op}] given more than once.")
                conditions.append(Condition(name, op, _parse_value(spec, raw_values[0])))
    return conditions


def _comma_list(raw: str | None) -> list[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def _selected_fields(raw: str | None, schema: ResourceSchema) -> tuple[str, ...] | None:
    names = _comma_list(raw)
    if not names:
        return None
    for name in names:
        _public_field(schema, name)
    return tuple(dict.fromkeys(names))


def _sort_keys(raw: str | None, schema: ResourceSchema) -> tuple[SortKey, ...]:
    tokens = _comma_list(raw)
    if not tokens:
        if schema.field(DEFAULT_SORT_FIELD) is None:
            return ()
        return (SortKey(DEFAULT_SORT_FIELD, descending=True),)

    keys = []
    for token in tokens:
        descending = token.startswith("-")
        name = token.lstrip("-+")
        _public_field(schema, name)
        keys.append(SortKey(name, descending=descending))
    return tuple(keys)


def _positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    match = _LEADING_INT_RE.match(raw)
    if match is None:
        return default
    try:
        value = int(match.group(1), 10)
    except ValueError:
        # Past the interpreter's digit limit.
        return default
    return value if value > 0 else default


def _page_window(page: int, limit: int) -> tuple[int, int]:
    limit = min(limit, MAX_LIMIT)
    # An offset past BIGINT cannot be sent to the database.
    if (page - 1) * limit > INT64_MAX:
        page = DEFAULT_PAGE
    return page, limit


def translate(params: Any, schema: ResourceSchema) -> QuerySpec:
    """
    Build a QuerySpec for `schema` from query parameters.

    `params` may be Starlette `QueryParams`, a mapping (values may be lists),
    or an iterable of (key, value) pairs. Raises QueryTranslationError for
    malformed filters and unknown fields; page/limit never raise. `limit` is
    capped at MAX_LIMIT.
    """
    pairs = _pairs(params)
    control: dict[str, str] = {}
    for key, value in pairs:
        if key in RESERVED_KEYS:
            control[key] = value

    page, limit = _page_window(
        _positive_int(control.get("page"), DEFAULT_PAGE),
        _positive_int(control.get("limit"), DEFAULT_LIMIT),
    )
    return QuerySpec(
        conditions=tuple(_conditions(_group_filters(pairs), schema)),
        sort_keys=_sort_keys(control.get("sort"), schema),
        fields=_selected_fields(control.get("select"), schema),
        page=page,
        limit=limit,
    )
