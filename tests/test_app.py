from pathlib import Path

import pytest
import requests
from streamlit.testing.v1 import AppTest

import storefront.config
from conftest import BASE, FakeHttp, FakeResponse, product_payload

APP = str(Path(__file__).resolve().parent.parent / "storefront" / "app.py")


@pytest.fixture
def backend(monkeypatch, tmp_path):
    fake = FakeHttp()
    monkeypatch.setattr(storefront.config, "BACKEND_URL", BASE)
    monkeypatch.setattr(storefront.config, "SESSION_FILE", tmp_path / "session.json")
    monkeypatch.setattr(requests.Session, "request", lambda self, method, url, **kw: fake.request(method, url, **kw))
    return fake


def catalog(n):
    return [
        product_payload(i, name=f"{'Wool Rug' if i % 2 else 'Clay Pot'} {i}",
                        category="Rugs & Textiles" if i % 2 else "Ceramics", artisan="Coop Tazwit")
        for i in range(1, n + 1)
    ]


def test_catalog_page_renders(backend):
    backend.add("GET", "/api/products/", FakeResponse(200, catalog(3)))
    at = AppTest.from_file(APP).run(timeout=30)
    assert not at.exception
    assert at.session_state["page"] == "Catalog"
    assert [p.id for p in at.session_state["catalog"].items] == [1, 2, 3]


def test_chat_answers_from_the_sidebar(backend):
    backend.add("GET", "/api/products/", FakeResponse(200, catalog(1)))
    at = AppTest.from_file(APP).run(timeout=30)
    at.sidebar.text_input[0].input("Do you ship abroad?")
    send = next(b for b in at.sidebar.button if b.label == "Send")
    send.click().run(timeout=30)
    assert not at.exception
    messages = at.session_state["chat"].messages
    assert messages[-2].text == "Do you ship abroad?"
    assert not messages[-1].is_user


def test_search_change_goes_back_to_first_page(backend):
    backend.add("GET", "/api/products/", FakeResponse(200, catalog(40)))
    at = AppTest.from_file(APP).run(timeout=30)
    at.number_input(key="catalog_page").set_value(3).run(timeout=30)
    assert at.session_state["catalog_view"].page == 3

    at.text_input(key="catalog_search").input("rug").run(timeout=30)
    assert not at.exception
    assert at.session_state["catalog_view"].page == 1
    assert at.number_input(key="catalog_page").value == 1


def test_registration_message_shows_on_the_login_page(backend):
    backend.add("GET", "/api/products/", FakeResponse(200, catalog(1)))
    backend.add("GET", "/api/regions/", FakeResponse(200, [{"id": 3, "name": "Azilal"}]))
    backend.add("POST", "/api/auth/register/", FakeResponse(201, {"id": 9, "username": "tazwit"}))
    at = AppTest.from_file(APP)
    at.session_state["page"] = "Register"
    at.run(timeout=30)

    fields = {t.label: t for t in at.main.text_input}
    for label, value in [
        ("Full name", "Coop Tazwit"), ("Username", "tazwit"), ("Email", "coop@hrayfi.ma"),
        ("Phone", "+212 6 12 34 56 78"), ("Biography", "Weavers from Azilal"),
        ("Password", "s3cret"), ("Confirm password", "s3cret"),
    ]:
        fields[label].input(value)
    at.main.selectbox[0].select_index(1)
    create = next(b for b in at.main.button if b.label == "Create Account")
    create.click().run(timeout=30)

    assert not at.exception
    assert at.session_state["page"] == "Login"
    assert [s.value for s in at.success] == ["Registration successful! Please login."]
