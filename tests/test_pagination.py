import pytest

from shopify_catalog.pagination import ELLIPSIS, build_page_items, clamp_page, page_count


@pytest.mark.parametrize("total", range(1, 8))
def test_small_totals_list_every_page(total):
    for current in range(1, total + 1):
        assert build_page_items(current, total) == list(range(1, total + 1))


def test_middle_page_has_both_ellipses():
    assert build_page_items(5, 10) == [1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10]


def test_window_slides_near_edges():
    assert build_page_items(1, 10) == [1, 2, 3, 4, 5, ELLIPSIS, 10]
    assert build_page_items(4, 10) == [1, 2, 3, 4, 5, ELLIPSIS, 10]
    assert build_page_items(10, 10) == [1, ELLIPSIS, 6, 7, 8, 9, 10]


def test_invariants_hold_for_all_pages():
    for total in range(1, 501):
        for current in range(1, total + 1):
            items = build_page_items(current, total)
            pages = [i for i in items if i != ELLIPSIS]
            assert pages[0] == 1
            assert pages[-1] == total
            assert current in pages
            if current > 1:
                assert current - 1 in pages
            if current < total:
                assert current + 1 in pages
            assert pages == sorted(set(pages))
            if total > 7:
                assert len(items) == 7
            for i, item in enumerate(items):
                if item == ELLIPSIS:
                    # an ellipsis never hides a single page
                    assert items[i + 1] - items[i - 1] >= 3


def test_out_of_range_current_is_clamped():
    assert build_page_items(0, 3) == [1, 2, 3]
    assert build_page_items(99, 10)[-1] == 10


def test_page_count_and_clamp():
    assert page_count(0, 10) == 1
    assert page_count(23, 10) == 3
    assert page_count(30, 10) == 3
    assert clamp_page(0, 3) == 1
    assert clamp_page(7, 3) == 3
    assert clamp_page(2, 0) == 1
