import pytest

from conftest import FakeResponse, product_payload
from storefront.board import ProductBoard
from storefront.catalog import SortKey
from storefront.errors import HttpError, NetworkError

LIST = "/api/artisans/7/products/"


@pytest.fixture
def board(api, http, logged_in):
    http.add("GET", LIST, FakeResponse(200, {"results": [
        product_payload(1, price="10"), product_payload(2, price="30"), product_payload(3, price="20"),
    ]}))
    b = ProductBoard(api, 7)
    assert b.refresh()
    return b


def ids(items):
    return [p.id for p in items]


def test_refresh_uses_the_bearer_token(board, http):
    assert ids(board.products) == [1, 2, 3]
    assert http.calls[0]["headers"]["Authorization"] == "Bearer tok-123"


def test_failed_load_is_surfaced(api, http, logged_in):
    http.add("GET", LIST, FakeResponse(403, {"detail": "Forbidden"}))
    b = ProductBoard(api, 7)
    assert b.refresh()
    assert b.products == []
    assert isinstance(b.fetcher.error, HttpError)


def test_delete_removes_row_after_backend_confirms(board, http):
    http.add("DELETE", "/api/products/2/", FakeResponse(204))
    assert board.delete(2)
    assert ids(board.products) == [1, 3]
    assert not board.is_pending(2)
    assert [c["method"] for c in http.calls] == ["GET", "DELETE"]


@pytest.mark.parametrize("failure", [FakeResponse(500, {"detail": "Server error"})])
def test_failed_delete_leaves_list_untouched(board, http, failure):
    http.add("DELETE", "/api/products/2/", failure)
    with pytest.raises(HttpError) as exc:
        board.delete(2)
    assert exc.value.status == 500
    assert ids(board.products) == [1, 2, 3]
    assert not board.is_pending(2)


def test_delete_network_failure_leaves_list_untouched(board, http):
    import requests
    http.add("DELETE", "/api/products/3/", requests.Timeout("slow"))
    with pytest.raises(NetworkError):
        board.delete(3)
    assert ids(board.products) == [1, 2, 3]


def test_second_delete_of_same_row_while_pending_is_ignored(board, http):
    outcomes = []

    def slow_delete(method, url, **kwargs):
        # a second click on the same row arrives mid-request
        outcomes.append(board.delete(2))
        assert board.is_pending(2)
        assert not board.is_pending(1)
        return FakeResponse(204)

    original = http.request

    def request(method, url, headers=None, timeout=None, **kwargs):
        if method == "DELETE":
            http.calls.append({"method": method})
            return slow_delete(method, url)
        return original(method, url, headers=headers, timeout=timeout, **kwargs)

    http.request = request
    assert board.delete(2)
    assert outcomes == [False]
    assert sum(1 for c in http.calls if c["method"] == "DELETE") == 1
    assert ids(board.products) == [1, 3]


def test_create_form_appends_without_refetch(board, http):
    http.add("POST", "/api/products/", FakeResponse(201, product_payload(4, price="5")))
    form = board.create_form()
    form.begin_edit()
    form.update({"name": "Tagine", "description": "Clay", "price": "5", "category_id": 1, "region_id": 2})
    form.submit()
    assert ids(board.products) == [1, 2, 3, 4]
    assert [c["method"] for c in http.calls] == ["GET", "POST"]


def test_edit_form_replaces_row(board, http):
    http.add("PATCH", "/api/products/1/", FakeResponse(200, product_payload(1, price="50")))
    form = board.edit_form(board.products[0])
    form.begin_edit()
    form.set_field("price", "50")
    form.submit()
    assert ids(board.products) == [1, 2, 3]
    assert board.products[0].price == 50.0


def test_failed_save_does_not_touch_list(board, http):
    http.add("PATCH", "/api/products/1/", FakeResponse(400, {"price": ["A valid number is required."]}))
    form = board.edit_form(board.products[0])
    form.begin_edit()
    form.set_field("price", "abc")
    assert form.submit() is None
    assert board.products[0].price == 10.0
    assert form.draft["price"] == "abc"


def test_visible_and_summary_follow_the_filters(board):
    board.view.update(sort=SortKey.PRICE_ASC, price_range=(15, 40))
    assert ids(board.visible()) == [3, 2]
    summary = board.summary()
    assert (summary.count, summary.average_price) == (2, 25)
