"""
In-process collection backend.

Selected with STORE_BACKEND=memory. Data lives for the lifetime of the
process, which makes it suitable for local development and the test suite.
Ordering follows PostgreSQL: NULLs sort last ascending and first descending.
"""

from __future__ import annotations

import copy
import itertools
import operator
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from .store import Collection, Condition, Cursor, DuplicateKeyError, SortKey, Store

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


def _matches(row: dict[str, Any], conditions: Iterable[Condition]) -> bool:
    for cond in conditions:
        value = row.get(cond.field)
        if cond.op == "eq":
            ok = value == cond.value
        elif cond.op == "in":
            ok = value in cond.value
        else:
            ok = value is not None and _COMPARATORS[cond.op](value, cond.value)
        if not ok:
            return False
    return True


def _sorted(rows: list[dict[str, Any]], keys: Iterable[SortKey]) -> list[dict[str, Any]]:
    rows = sorted(rows, key=lambda r: r["id"])
    # Stable sorts applied from the least significant key up.
    for key in reversed(tuple(keys)):
        rows.sort(
            key=lambda r, f=key.field: (r.get(f) is None, r.get(f)),
            reverse=key.descending,
        )
    return rows


class MemoryCollection(Collection):
    def __init__(self, schema, store) -> None:
        super().__init__(schema, store)
        self._rows: dict[int, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def _check_unique(self, candidate: dict[str, Any], *, exclude_id: int | None = None) -> None:
        groups = [(spec.name,) for spec in self.schema.fields if spec.unique]
        groups.extend(self.schema.unique_together)
        for group in groups:
            values = tuple(candidate.get(name) for name in group)
            if any(v is None for v in values):
                continue
            for row_id, row in self._rows.items():
                if row_id == exclude_id:
                    continue
                if tuple(row.get(name) for name in group) == values:
                    raise DuplicateKeyError(self.name, group)

    def _project(self, row: dict[str, Any], cursor: Cursor) -> dict[str, Any]:
        return {spec.name: copy.deepcopy(row.get(spec.name)) for spec in self._projection(cursor)}

    async def _fetch(self, cursor: Cursor) -> list[dict[str, Any]]:
        rows = [row for row in self._rows.values() if _matches(row, cursor.conditions)]
        rows = _sorted(rows, cursor.sort_keys)
        end = None if cursor.max_rows is None else cursor.offset + cursor.max_rows
        return [self._project(row, cursor) for row in rows[cursor.offset:end]]

    async def count(self, conditions: Iterable[Condition] = ()) -> int:
        conditions = tuple(conditions)
        return sum(1 for row in self._rows.values() if _matches(row, conditions))

    async def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        self._check_writable(doc)
        row = {spec.name: None for spec in self.schema.fields}
        row.update(copy.deepcopy(doc))
        if "createdAt" in row:
            row["createdAt"] = datetime.now(timezone.utc)
        self._check_unique(row)
        row["id"] = next(self._ids)
        self._rows[row["id"]] = row
        return self._project(row, self.find())

    async def update(
        self,
        record_id: int,
        changes: dict[str, Any],
        *,
        where: Iterable[Condition] = (),
    ) -> dict[str, Any] | None:
        self._check_writable(changes)
        row = self._rows.get(record_id)
        # No await between the check and the write.
        if row is None or not _matches(row, where):
            return None
        candidate = {**row, **copy.deepcopy(changes)}
        self._check_unique(candidate, exclude_id=record_id)
        row.update(candidate)
        return self._project(row, self.find())

    async def delete(self, record_id: int) -> bool:
        return self._rows.pop(record_id, None) is not None

    async def delete_many(self, conditions: Iterable[Condition]) -> int:
        conditions = tuple(conditions)
        doomed = [row_id for row_id, row in self._rows.items() if _matches(row, conditions)]
        for row_id in doomed:
            del self._rows[row_id]
        return len(doomed)


class MemoryStore(Store):
    collection_class = MemoryCollection
