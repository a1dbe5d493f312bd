import json

import pytest

from storefront.errors import AuthenticationRequired, MalformedResponseError
from storefront.session import FileSessionStore, MemorySessionStore, SessionRepository

LOGIN = {"access": "tok", "refresh": "ref", "artisan": {"id": 12, "name": "Atelier Fès"}}


def test_save_login_and_read_back():
    repo = SessionRepository(MemorySessionStore())
    assert repo.save_login(LOGIN, email="fes@hrayfi.ma") == 12
    assert repo.is_authenticated
    assert repo.access_token == "tok"
    assert repo.refresh_token == "ref"
    assert repo.artisan_id == 12
    assert repo.artisan_email == "fes@hrayfi.ma"
    assert repo.auth_headers() == {"Authorization": "Bearer tok"}
    assert repo.require_artisan_id() == 12


def test_clear_logs_out():
    repo = SessionRepository(MemorySessionStore())
    repo.save_login(LOGIN)
    repo.clear()
    assert not repo.is_authenticated
    assert repo.auth_headers() == {}
    with pytest.raises(AuthenticationRequired):
        repo.require_artisan_id()


def test_flag_without_token_is_not_authenticated():
    repo = SessionRepository(MemorySessionStore({"isAuthenticated": "true", "artisanId": "3"}))
    assert not repo.is_authenticated


def test_login_payload_without_artisan_is_malformed():
    repo = SessionRepository(MemorySessionStore())
    with pytest.raises(MalformedResponseError):
        repo.save_login({"access": "tok"})
    assert not repo.is_authenticated


def test_file_store_survives_a_new_process(tmp_path):
    path = tmp_path / "session.json"
    SessionRepository(FileSessionStore(path)).save_login(LOGIN)

    reopened = SessionRepository(FileSessionStore(path))
    assert reopened.is_authenticated
    assert reopened.artisan_id == 12
    assert json.loads(path.read_text())["access"] == "tok"

    reopened.clear()
    assert not SessionRepository(FileSessionStore(path)).is_authenticated


def test_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")
    store = FileSessionStore(path)
    assert store.get("access") is None
    store.set("access", "tok")
    assert json.loads(path.read_text()) == {"access": "tok"}


def test_store_clear_removes_the_file(tmp_path):
    path = tmp_path / "session.json"
    store = FileSessionStore(path)
    store.set("access", "tok")
    assert path.exists()
    store.clear()
    assert not path.exists()
    assert store.get("access") is None


def test_new_login_without_refresh_drops_the_old_one():
    repo = SessionRepository(MemorySessionStore())
    repo.save_login({"access": "a1", "refresh": "r1", "artisan": {"id": 1, "email": "one@hrayfi.ma"}})
    repo.save_login({"access": "a2", "artisan": {"id": 2}})
    assert repo.access_token == "a2"
    assert repo.refresh_token is None
    assert repo.artisan_id == 2
    assert repo.artisan_email is None
