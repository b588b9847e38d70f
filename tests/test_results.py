import asyncio

import pytest

from core.memory_store import MemoryStore
from core.resources import ALL_SCHEMAS, BOOTCAMPS, COURSES
from core.store import Condition, DuplicateKeyError, SortKey
from query.results import assemble
from query.translator import translate


def _seed(store: MemoryStore) -> None:
    async def run():
        bootcamps = store.collection(BOOTCAMPS)
        courses = store.collection(COURSES)
        for i, (name, cost) in enumerate(
            [("Alpha", 8000.0), ("Bravo", 9500.0), ("Charlie", 10000.0), ("Delta", 12000.0), ("Echo", None)],
            start=1,
        ):
            camp = await bootcamps.insert(
                {"user": i, "name": name, "description": "d", "address": "a", "averageCost": cost}
            )
            await courses.insert(
                {"bootcamp": camp["id"], "user": i, "title": f"{name} 101", "tuition": 100.0 * i}
            )

    asyncio.run(run())


@pytest.fixture()
def seeded() -> MemoryStore:
    store = MemoryStore(ALL_SCHEMAS)
    _seed(store)
    return store


def _assemble(store, params, *populate):
    collection = store.collection(BOOTCAMPS)
    spec = translate(params, collection.schema)
    return asyncio.run(assemble(collection, spec, populate))


def test_count_and_page_share_the_filter(seeded):
    result = _assemble(seeded, [("averageCost[lte]", "10000"), ("sort", "name"), ("limit", "2")])

    assert result["success"] is True
    assert [row["name"] for row in result["data"]] == ["Alpha", "Bravo"]
    assert result["count"] == 2
    assert result["pagination"] == {"next": {"page": 2, "limit": 2}}


def test_last_window_links_back_only(seeded):
    result = _assemble(seeded, [("averageCost[lte]", "10000"), ("sort", "name"), ("page", "2"), ("limit", "2")])

    assert [row["name"] for row in result["data"]] == ["Charlie"]
    assert result["pagination"] == {"prev": {"page": 1, "limit": 2}}


def test_page_past_the_end_is_empty_not_an_error(seeded):
    result = _assemble(seeded, [("page", "9")])

    assert result["data"] == []
    assert result["count"] == 0
    assert result["pagination"] == {"prev": {"page": 8, "limit": 25}}


def test_select_projects_fields_plus_id(seeded):
    result = _assemble(seeded, [("select", "name"), ("sort", "-name"), ("limit", "1")])

    assert result["data"] == [{"id": 5, "name": "Echo"}]


def test_null_values_sort_first_descending(seeded):
    result = _assemble(seeded, [("sort", "-averageCost"), ("select", "name")])

    assert [row["name"] for row in result["data"]] == ["Echo", "Delta", "Charlie", "Bravo", "Alpha"]


def test_populate_attaches_related_records(seeded):
    result = _assemble(seeded, [("name", "Bravo")], "courses")

    (bravo,) = result["data"]
    assert [course["title"] for course in bravo["courses"]] == ["Bravo 101"]


def test_forward_populate_uses_relation_select(seeded):
    courses = seeded.collection(COURSES)
    rows = asyncio.run(courses.find([Condition("tuition", "gte", 400.0)]).sort([SortKey("tuition")]).populate("bootcamp").to_list())

    assert [row["bootcamp"] for row in rows] == [
        {"id": 4, "name": "Delta", "description": "d"},
        {"id": 5, "name": "Echo", "description": "d"},
    ]


def test_memory_store_enforces_unique_fields(seeded):
    bootcamps = seeded.collection(BOOTCAMPS)

    with pytest.raises(DuplicateKeyError):
        asyncio.run(bootcamps.insert({"user": 9, "name": "Alpha", "description": "d", "address": "a"}))
    assert asyncio.run(bootcamps.count()) == 5


def test_delete_many_removes_matching_rows(seeded):
    courses = seeded.collection(COURSES)

    removed = asyncio.run(courses.delete_many([Condition("tuition", "lt", 300.0)]))

    assert removed == 2
    assert asyncio.run(courses.count()) == 3
