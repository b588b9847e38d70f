import pytest

from query.pagination import PageRef, plan


@pytest.mark.parametrize("total", [0, 1, 4, 5, 6, 25, 26, 100])
@pytest.mark.parametrize("limit", [1, 2, 10, 25])
@pytest.mark.parametrize("page", [1, 2, 3, 7])
def test_window_invariants(page, limit, total):
    window = plan(page, limit, total)

    assert window.offset == (page - 1) * limit
    assert (window.next is not None) == (window.offset + limit < total)
    assert (window.prev is not None) == (window.offset > 0)
    if window.next is not None:
        assert window.next == PageRef(page + 1, limit)
    if window.prev is not None:
        assert window.prev == PageRef(page - 1, limit)


def test_first_page_of_many_has_only_next():
    window = plan(1, 25, 60)

    assert window.as_dict() == {"next": {"page": 2, "limit": 25}}


def test_last_page_has_only_prev():
    window = plan(3, 25, 60)

    assert window.as_dict() == {"prev": {"page": 2, "limit": 25}}


def test_page_past_the_end_links_back_without_next():
    window = plan(10, 5, 12)

    assert window.offset == 45
    assert window.next is None
    assert window.prev == PageRef(9, 5)


def test_single_page_has_no_links():
    assert plan(1, 25, 3).as_dict() == {}


@pytest.mark.parametrize("page, limit, total", [(0, 1, 1), (1, 0, 1), (1, 1, -1)])
def test_rejects_out_of_range_inputs(page, limit, total):
    with pytest.raises(ValueError):
        plan(page, limit, total)
