import json

import pytest

from storefront.api import ApiClient
from storefront.models import Product
from storefront.session import MemorySessionStore, SessionRepository

BASE = "http://backend.test"


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None, reason=""):
        self.status_code = status_code
        self.reason = reason
        self._body = body
        if raw is not None:
            self.content = raw.encode()
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode()

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.content.decode())


class FakeHttp:
    """Stands in for requests.Session: canned answers per (method, path)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, response):
        self.routes.setdefault((method, path), []).append(response)

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        path = url[len(BASE):] if url.startswith(BASE) else url
        self.calls.append({"method": method, "path": path, "headers": headers or {}, "timeout": timeout, **kwargs})
        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"unexpected request {method} {path}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response


def product_payload(
    pid,
    name="Azilal Wool Rug",
    price="10.00",
    category="Rugs & Textiles",
    region="Azilal",
    artisan="Coop Tazwit Azilal",
    **extra,
):
    data = {
        "id": pid,
        "name": name,
        "description": "Handwoven",
        "materials": "Natural wool",
        "dimensions": "120x80",
        "cultural_significance": "Diamond symbols represent protection",
        "category": {"id": abs(hash(category)) % 1000, "name": category},
        "region": {"id": abs(hash(region)) % 1000, "name": region},
        "artisan": {"id": 7, "name": artisan, "biography": "", "region": {"id": 1, "name": region}, "main_image": None}
        if artisan is not None else None,
        "main_image": None,
        "price": price,
    }
    data.update(extra)
    return data


def make_product(pid, **kwargs):
    return Product.from_dict(product_payload(pid, **kwargs), BASE)


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def session():
    return SessionRepository(MemorySessionStore())


@pytest.fixture
def logged_in(session):
    session.save_login({"access": "tok-123", "refresh": "ref-456", "artisan": {"id": 7, "email": "a@hrayfi.ma"}})
    return session


@pytest.fixture
def api(http, session):
    return ApiClient(session, base_url=BASE, http=http)
