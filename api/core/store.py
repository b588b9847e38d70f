"""
Collection store interface.

Every resource collection (users, bootcamps, courses, reviews) is reached
through a `Collection` with the same small capability set:

- `find(conditions)` returns a chainable `Cursor`
  (`.select()`, `.sort()`, `.skip()`, `.limit()`, `.populate()`)
- `count(conditions)`
- single-record helpers: `get`, `find_one`, `insert`, `update`, `delete`
- `delete_many(conditions)`

Records are plain dicts keyed by API field names. Backends only ever see
field names declared in the collection's `ResourceSchema`, so query
parameters can never reach them as raw identifiers.

Backends:
- `core/pg_store.py`      PostgreSQL through asyncpg
- `core/memory_store.py`  process-local dicts
"""

from __future__ import annotations

import abc
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

OPERATORS = ("eq", "gt", "gte", "lt", "lte", "in")

# Every integer column is BIGINT.
INT64_MAX = 2**63 - 1


class StoreError(RuntimeError):
    pass


class DuplicateKeyError(StoreError):
    def __init__(self, collection: str, fields: Sequence[str] = ()) -> None:
        self.collection = collection
        self.fields = tuple(fields)
        label = ", ".join(self.fields) or "unique key"
        super().__init__(f"Duplicate value for {label} in {collection}.")


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"true", "1", "yes"}:
        return True
    if value in {"false", "0", "no"}:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _parse_int(raw: str) -> int:
    value = int(raw.strip(), 10)
    if abs(value) > INT64_MAX:
        raise ValueError(f"integer out of range: {raw!r}")
    return value


def _parse_datetime(raw: str) -> datetime:
    value = raw.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    # Naive literals are UTC, as stored timestamps are.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


_PARSERS: dict[type, Callable[[str], Any]] = {
    str: str,
    int: _parse_int,
    float: lambda raw: float(raw.strip()),
    bool: _parse_bool,
    datetime: _parse_datetime,
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: type = str
    column: str | None = None
    hidden: bool = False
    unique: bool = False

    @property
    def column_name(self) -> str:
        return self.column or _snake_case(self.name)

    def parse(self, raw: str) -> Any:
        """
        Convert a query-string literal into this field's Python type.
        Raises ValueError when the literal does not fit.
        """
        return _PARSERS[self.type](raw)


@dataclass(frozen=True)
class Relation:
    """
    Populate rule: attach records of `target` whose `foreign_field` equals
    this record's `local_field`, under the key `name`.
    """

    name: str
    target: str
    local_field: str
    foreign_field: str = "id"
    many: bool = False
    select: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResourceSchema:
    name: str
    fields: tuple[FieldSpec, ...]
    relations: tuple[Relation, ...] = ()
    unique_together: tuple[tuple[str, ...], ...] = ()

    def field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def public_field(self, name: str) -> FieldSpec | None:
        spec = self.field(name)
        if spec is None or spec.hidden:
            return None
        return spec

    @property
    def public_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if not spec.hidden)

    def relation(self, name: str) -> Relation:
        for rel in self.relations:
            if rel.name == name:
                return rel
        raise StoreError(f"{self.name} has no relation named {name!r}.")


@dataclass(frozen=True)
class Condition:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise StoreError(f"Unsupported operator {self.op!r}.")


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


class Cursor:
    """
    Lazily-built query over one collection. Nothing runs until `to_list()`.
    """

    def __init__(self, collection: "Collection", conditions: Iterable[Condition]) -> None:
        self._collection = collection
        self.conditions: tuple[Condition, ...] = tuple(conditions)
        self.fields: tuple[str, ...] | None = None
        self.sort_keys: tuple[SortKey, ...] = ()
        self.offset = 0
        self.max_rows: int | None = None
        self.relations: tuple[str, ...] = ()
        self.include_hidden = False

    def select(self, fields: Iterable[str] | None) -> "Cursor":
        self.fields = tuple(fields) if fields else None
        return self

    def sort(self, keys: Iterable[SortKey]) -> "Cursor":
        self.sort_keys = tuple(keys)
        return self

    def skip(self, n: int) -> "Cursor":
        self.offset = max(0, int(n))
        return self

    def limit(self, n: int | None) -> "Cursor":
        self.max_rows = None if n is None else max(0, int(n))
        return self

    def populate(self, *relations: str) -> "Cursor":
        for name in relations:
            self._collection.schema.relation(name)
        self.relations = self.relations + tuple(relations)
        return self

    async def to_list(self) -> list[dict[str, Any]]:
        rows = await self._collection._fetch(self)
        for name in self.relations:
            await self._populate(rows, self._collection.schema.relation(name))
        return rows

    async def _populate(self, rows: list[dict[str, Any]], relation: Relation) -> None:
        keys = {row[relation.local_field] for row in rows if row.get(relation.local_field) is not None}
        related: list[dict[str, Any]] = []
        if keys:
            target = self._collection.store.collection(relation.target)
            fields = None
            if relation.select:
                fields = tuple(dict.fromkeys(("id", relation.foreign_field) + relation.select))
            related = await (
                target.find([Condition(relation.foreign_field, "in", sorted(keys))])
                .select(fields)
                .sort([SortKey("id")])
                .to_list()
            )

        grouped: dict[Any, list[dict[str, Any]]] = {}
        for item in related:
            grouped.setdefault(item.get(relation.foreign_field), []).append(item)

        for row in rows:
            if relation.local_field not in row:
                continue
            matches = grouped.get(row.get(relation.local_field), [])
            if relation.many:
                row[relation.name] = matches
            else:
                row[relation.name] = matches[0] if matches else None


class Collection(abc.ABC):
    def __init__(self, schema: ResourceSchema, store: "Store") -> None:
        self.schema = schema
        self.store = store

    @property
    def name(self) -> str:
        return self.schema.name

    def find(self, conditions: Iterable[Condition] = ()) -> Cursor:
        return Cursor(self, conditions)

    async def find_one(
        self,
        conditions: Iterable[Condition],
        *,
        include_hidden: bool = False,
    ) -> dict[str, Any] | None:
        cursor = self.find(conditions).limit(1)
        cursor.include_hidden = include_hidden
        rows = await cursor.to_list()
        return rows[0] if rows else None

    async def get(self, record_id: int, *, include_hidden: bool = False) -> dict[str, Any] | None:
        if not 0 < record_id <= INT64_MAX:
            return None
        return await self.find_one([Condition("id", "eq", record_id)], include_hidden=include_hidden)

    def _projection(self, cursor: Cursor) -> list[FieldSpec]:
        if cursor.fields is None:
            if cursor.include_hidden:
                return list(self.schema.fields)
            return list(self.schema.public_fields)

        names = dict.fromkeys(("id",) + cursor.fields)
        specs = []
        for name in names:
            spec = self.schema.field(name)
            if spec is None:
                raise StoreError(f"{self.name} has no field named {name!r}.")
            specs.append(spec)
        return specs

    def _check_writable(self, doc: dict[str, Any]) -> None:
        for name in doc:
            spec = self.schema.field(name)
            if spec is None or name in {"id", "createdAt"}:
                raise StoreError(f"Field {name!r} cannot be written on {self.name}.")

    @abc.abstractmethod
    async def _fetch(self, cursor: Cursor) -> list[dict[str, Any]]:
        ...

    @abc.abstractmethod
    async def count(self, conditions: Iterable[Condition] = ()) -> int:
        ...

    @abc.abstractmethod
    async def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a record and return its public projection.
        """

    @abc.abstractmethod
    async def update(
        self,
        record_id: int,
        changes: dict[str, Any],
        *,
        where: Iterable[Condition] = (),
    ) -> dict[str, Any] | None:
        """
        Apply `changes` and return the updated public projection, or None when
        the record is missing or fails any of the `where` conditions. The check
        and the write happen as one step.
        """

    @abc.abstractmethod
    async def delete(self, record_id: int) -> bool:
        ...

    @abc.abstractmethod
    async def delete_many(self, conditions: Iterable[Condition]) -> int:
        ...


class Store:
    """
    Registry of collections sharing one backend.
    """

    collection_class: type[Collection]

    def __init__(self, schemas: Iterable[ResourceSchema]) -> None:
        self._collections: dict[str, Collection] = {
            schema.name: self.collection_class(schema, self) for schema in schemas
        }

    def collection(self, name: str) -> Collection:
        try:
            return self._collections[name]
        except KeyError as exc:
            raise StoreError(f"Unknown collection {name!r}.") from exc

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def ping(self) -> bool:
        return True
