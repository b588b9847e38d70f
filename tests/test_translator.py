from datetime import datetime, timezone

import pytest

from core.resources import BOOTCAMP_SCHEMA, USER_SCHEMA
from core.store import Condition, FieldSpec, ResourceSchema, SortKey
from query.translator import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    QueryTranslationError,
    translate,
)

# Field names that contain operator words as substrings.
GADGETS = ResourceSchema(
    name="gadgets",
    fields=(
        FieldSpec("id", int),
        FieldSpec("ingest"),
        FieldSpec("interval", int),
        FieldSpec("ltv", float),
        FieldSpec("createdAt", datetime),
    ),
)


def test_defaults_when_no_params():
    spec = translate([], BOOTCAMP_SCHEMA)

    assert spec.conditions == ()
    assert spec.fields is None
    assert spec.sort_keys == (SortKey("createdAt", descending=True),)
    assert spec.page == DEFAULT_PAGE == 1
    assert spec.limit == DEFAULT_LIMIT == 25


def test_control_keys_are_not_filters():
    spec = translate(
        [("select", "name"), ("sort", "name"), ("page", "2"), ("limit", "5"), ("housing", "true")],
        BOOTCAMP_SCHEMA,
    )

    assert spec.conditions == (Condition("housing", "eq", True),)
    assert spec.fields == ("name",)
    assert spec.sort_keys == (SortKey("name"),)
    assert (spec.page, spec.limit) == (2, 5)


def test_bracket_operator_becomes_typed_condition():
    spec = translate([("averageCost[lte]", "10000")], BOOTCAMP_SCHEMA)

    assert spec.conditions == (Condition("averageCost", "lte", 10000.0),)


@pytest.mark.parametrize("op", ["gt", "gte", "lt", "lte"])
def test_each_comparison_operator(op):
    spec = translate([(f"averageRating[{op}]", "7.5")], BOOTCAMP_SCHEMA)

    assert spec.conditions == (Condition("averageRating", op, 7.5),)


def test_in_operator_splits_commas():
    spec = translate([("name[in]", "Alpha, Bravo"), ("name[in]", "Charlie")], BOOTCAMP_SCHEMA)

    assert spec.conditions == (Condition("name", "in", ["Alpha", "Bravo", "Charlie"]),)


def test_repeated_bare_key_widens_to_in():
    spec = translate([("housing", "true"), ("housing", "false")], BOOTCAMP_SCHEMA)

    assert spec.conditions == (Condition("housing", "in", [True, False]),)


def test_operator_words_inside_field_names_are_left_alone():
    spec = translate(
        [("ingest", "daily"), ("interval[gte]", "5"), ("ltv[lt]", "1.5")],
        GADGETS,
    )

    assert spec.conditions == (
        Condition("ingest", "eq", "daily"),
        Condition("interval", "gte", 5),
        Condition("ltv", "lt", 1.5),
    )


def test_operator_words_in_values_are_left_alone():
    spec = translate([("ingest", "gte")], GADGETS)

    assert spec.conditions == (Condition("ingest", "eq", "gte"),)


def test_accepts_mapping_with_list_values():
    spec = translate({"name": ["Alpha", "Bravo"], "page": "3"}, BOOTCAMP_SCHEMA)

    assert spec.conditions == (Condition("name", "in", ["Alpha", "Bravo"]),)
    assert spec.page == 3


@pytest.mark.parametrize(
    "pairs",
    [
        [("averageCost[between]", "1")],
        [("averageCost[lte][gt]", "1")],
        [("averageCost[lte", "1")],
        [("averageCost]lte[", "1")],
        [("averageCost[gt]", "cheap")],
        [("averageCost[gt]", "1"), ("averageCost[gt]", "2")],
        [("housing", "maybe")],
        [("name[in]", " , ")],
        [("nickname", "x")],
    ],
)
def test_malformed_filters_are_rejected(pairs):
    with pytest.raises(QueryTranslationError):
        translate(pairs, BOOTCAMP_SCHEMA)


def test_hidden_fields_cannot_be_filtered_selected_or_sorted():
    for pairs in (
        [("passwordHash", "x")],
        [("select", "name,passwordHash")],
        [("sort", "resetPasswordExpire")],
    ):
        with pytest.raises(QueryTranslationError):
            translate(pairs, USER_SCHEMA)


def test_select_splits_and_dedupes():
    spec = translate([("select", "name, description,,name")], BOOTCAMP_SCHEMA)

    assert spec.fields == ("name", "description")


def test_sort_keys_keep_order_and_direction():
    spec = translate([("sort", "-averageRating,name")], BOOTCAMP_SCHEMA)

    assert spec.sort_keys == (SortKey("averageRating", descending=True), SortKey("name"))


def test_unknown_select_or_sort_field_is_rejected():
    with pytest.raises(QueryTranslationError):
        translate([("select", "name,bogus")], BOOTCAMP_SCHEMA)
    with pytest.raises(QueryTranslationError):
        translate([("sort", "-bogus")], BOOTCAMP_SCHEMA)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3", 3),
        ("2abc", 2),
        (" 4", 4),
        ("abc", DEFAULT_PAGE),
        ("", DEFAULT_PAGE),
        ("0", DEFAULT_PAGE),
        ("-2", DEFAULT_PAGE),
        ("10000000000000000000", DEFAULT_PAGE),
        ("9" * 5000, DEFAULT_PAGE),
    ],
)
def test_page_parsing_falls_back_instead_of_failing(raw, expected):
    assert translate([("page", raw)], BOOTCAMP_SCHEMA).page == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10", 10),
        ("x", DEFAULT_LIMIT),
        ("0", DEFAULT_LIMIT),
        ("500", MAX_LIMIT),
        ("99999999999999999999", MAX_LIMIT),
    ],
)
def test_limit_parsing_falls_back_instead_of_failing(raw, expected):
    assert translate([("limit", raw)], BOOTCAMP_SCHEMA).limit == expected


def test_large_page_with_small_limit_is_kept():
    spec = translate([("page", "1000000"), ("limit", "2")], BOOTCAMP_SCHEMA)

    assert (spec.page, spec.limit) == (1000000, 2)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2020-01-01", datetime(2020, 1, 1, tzinfo=timezone.utc)),
        ("2020-01-01T12:30:00Z", datetime(2020, 1, 1, 12, 30, tzinfo=timezone.utc)),
        ("2020-01-01T12:30:00+00:00", datetime(2020, 1, 1, 12, 30, tzinfo=timezone.utc)),
    ],
)
def test_timestamp_filters_are_timezone_aware(raw, expected):
    spec = translate([("createdAt[gte]", raw)], BOOTCAMP_SCHEMA)

    (condition,) = spec.conditions
    assert condition.value == expected
    assert condition.value.tzinfo is not None


def test_integer_filter_outside_bigint_is_rejected():
    with pytest.raises(QueryTranslationError):
        translate([("user", "99999999999999999999")], BOOTCAMP_SCHEMA)
