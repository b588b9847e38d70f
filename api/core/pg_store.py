"""
PostgreSQL collection backend (raw SQL over the shared asyncpg pool).

Identifiers are taken from the declared `ResourceSchema` and quoted; every
value travels as a positional parameter. Table DDL lives in `db/schema.sql`.
"""

from __future__ import annotations

from typing import Any, Iterable

import asyncpg

from . import db
from .store import Collection, Condition, Cursor, DuplicateKeyError, FieldSpec, Store, StoreError

_SQL_OPERATORS = {
    "eq": "=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}


def _ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _affected_rows(status: str) -> int:
    # asyncpg returns the command tag, e.g. "DELETE 3".
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, IndexError):
        return 0


class PgCollection(Collection):
    @property
    def table(self) -> str:
        return _ident(self.schema.name)

    def _column(self, name: str) -> str:
        spec = self.schema.field(name)
        if spec is None:
            raise StoreError(f"{self.name} has no field named {name!r}.")
        return _ident(spec.column_name)

    def _select_list(self, specs: Iterable[FieldSpec]) -> str:
        return ", ".join(f"{_ident(spec.column_name)} AS {_ident(spec.name)}" for spec in specs)

    def _predicates(self, conditions: Iterable[Condition], args: list[Any]) -> list[str]:
        clauses = []
        for cond in conditions:
            column = self._column(cond.field)
            if cond.op == "in":
                args.append(list(cond.value))
                clauses.append(f"{column} = ANY(${len(args)})")
            else:
                args.append(cond.value)
                clauses.append(f"{column} {_SQL_OPERATORS[cond.op]} ${len(args)}")
        return clauses

    def _where(self, conditions: Iterable[Condition], args: list[Any]) -> str:
        clauses = self._predicates(conditions, args)
        if not clauses:
            return ""
        return " WHERE " + " AND ".join(clauses)

    def _unique_violation(self, exc: asyncpg.UniqueViolationError) -> DuplicateKeyError:
        constraint = getattr(exc, "constraint_name", None) or ""
        fields = [
            spec.name
            for spec in self.schema.fields
            if spec.name != "id" and spec.column_name in constraint
        ]
        return DuplicateKeyError(self.name, fields)

    async def _fetch(self, cursor: Cursor) -> list[dict[str, Any]]:
        args: list[Any] = []
        sql = f"SELECT {self._select_list(self._projection(cursor))} FROM {self.table}"
        sql += self._where(cursor.conditions, args)

        order = [
            f"{self._column(key.field)} {'DESC' if key.descending else 'ASC'}"
            for key in cursor.sort_keys
        ]
        order.append('"id" ASC')
        sql += " ORDER BY " + ", ".join(order)

        if cursor.max_rows is not None:
            args.append(cursor.max_rows)
            sql += f" LIMIT ${len(args)}"
        if cursor.offset:
            args.append(cursor.offset)
            sql += f" OFFSET ${len(args)}"

        return await db.fetch_all(sql, *args)

    async def count(self, conditions: Iterable[Condition] = ()) -> int:
        args: list[Any] = []
        sql = f"SELECT count(*) FROM {self.table}" + self._where(conditions, args)
        return int(await db.fetch_value(sql, *args))

    async def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        self._check_writable(doc)
        names = list(doc)
        columns = ", ".join(self._column(name) for name in names)
        placeholders = ", ".join(f"${i}" for i in range(1, len(names) + 1))
        sql = (
            f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders}) "
            f"RETURNING {self._select_list(self.schema.public_fields)}"
        )
        try:
            row = await db.fetch_one(sql, *(doc[name] for name in names))
        except asyncpg.UniqueViolationError as exc:
            raise self._unique_violation(exc) from exc
        if row is None:
            raise StoreError(f"Failed to insert into {self.name}.")
        return row

    async def update(
        self,
        record_id: int,
        changes: dict[str, Any],
        *,
        where: Iterable[Condition] = (),
    ) -> dict[str, Any] | None:
        where = tuple(where)
        if not changes:
            return await self.find_one([Condition("id", "eq", record_id), *where])
        self._check_writable(changes)
        names = list(changes)
        args: list[Any] = [record_id, *(changes[name] for name in names)]
        assignments = ", ".join(f"{self._column(name)} = ${i}" for i, name in enumerate(names, start=2))
        predicates = ['"id" = $1', *self._predicates(where, args)]
        sql = (
            f"UPDATE {self.table} SET {assignments} WHERE {' AND '.join(predicates)} "
            f"RETURNING {self._select_list(self.schema.public_fields)}"
        )
        try:
            return await db.fetch_one(sql, *args)
        except asyncpg.UniqueViolationError as exc:
            raise self._unique_violation(exc) from exc

    async def delete(self, record_id: int) -> bool:
        row = await db.fetch_one(f'DELETE FROM {self.table} WHERE "id" = $1 RETURNING "id"', record_id)
        return row is not None

    async def delete_many(self, conditions: Iterable[Condition]) -> int:
        args: list[Any] = []
        status = await db.execute(f"DELETE FROM {self.table}" + self._where(conditions, args), *args)
        return _affected_rows(status)


class PgStore(Store):
    collection_class = PgCollection

    async def open(self) -> None:
        await db.init_pool()

    async def close(self) -> None:
        await db.close_pool()

    async def ping(self) -> bool:
        return await db.ping()
