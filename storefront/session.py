# storefront/session.py
"""
Session repository.

The access/refresh tokens and the logged-in artisan live in a single
key-value store. Components receive a ``SessionRepository`` instead of
reaching for a global, so tests can hand in a ``MemorySessionStore``.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import AuthenticationRequired, MalformedResponseError

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
IS_AUTHENTICATED = "isAuthenticated"
ARTISAN_ID = "artisanId"
ARTISAN_EMAIL = "artisanEmail"


class SessionStore:
    """Named string values; subclasses decide where they live."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key):
        return self._values.get(key)

    def set(self, key, value):
        self._values[key] = str(value)

    def delete(self, key):
        self._values.pop(key, None)

    def clear(self):
        self._values.clear()


class FileSessionStore(SessionStore):
    """
    JSON file store, durable across restarts of the UI process.
    Every write rewrites the whole file through a temp file + rename.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._values: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._values is None:
            self._values = {}
            if self.path.exists():
                try:
                    with open(self.path, "r", encoding="utf-8") as f:
                        saved = json.load(f)
                    if isinstance(saved, dict):
                        self._values = {str(k): str(v) for k, v in saved.items()}
                except (json.JSONDecodeError, OSError) as e:
                    logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
        return self._values

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._load(), f, indent=2)
        os.replace(tmp, self.path)

    def get(self, key):
        return self._load().get(key)

    def set(self, key, value):
        self._load()[key] = str(value)
        self._flush()

    def delete(self, key):
        if self._load().pop(key, None) is not None:
            self._flush()

    def clear(self):
        self._values = {}
        if self.path.exists():
            self.path.unlink()


class SessionRepository:
    def __init__(self, store: SessionStore):
        self.store = store

    # ----- writes (login / register / logout only) -----
    def save_login(self, payload: Dict[str, Any], email: Optional[str] = None) -> int:
        """
        Persist ``{access, refresh, artisan: {id, ...}}`` from the auth endpoints.
        Returns the authenticated artisan id.
        """
        try:
            access = payload["access"]
            artisan_id = int(payload["artisan"]["id"])
        except (KeyError, TypeError, ValueError):
            raise MalformedResponseError("login response has no access token or artisan id") from None
        # nothing from a previous login may survive into this one
        for key in (ACCESS, REFRESH, IS_AUTHENTICATED, ARTISAN_ID, ARTISAN_EMAIL):
            self.store.delete(key)
        self.store.set(ACCESS, access)
        if payload.get("refresh"):
            self.store.set(REFRESH, payload["refresh"])
        self.store.set(IS_AUTHENTICATED, "true")
        self.store.set(ARTISAN_ID, str(artisan_id))
        email = email or payload["artisan"].get("email")
        if email:
            self.store.set(ARTISAN_EMAIL, email)
        logger.info("Session opened for artisan %s", artisan_id)
        return artisan_id

    def remember_email(self, email: str) -> None:
        self.store.set(ARTISAN_EMAIL, email)

    def clear(self) -> None:
        for key in (ACCESS, REFRESH, IS_AUTHENTICATED, ARTISAN_ID, ARTISAN_EMAIL):
            self.store.delete(key)
        logger.info("Session cleared")

    # ----- reads -----
    @property
    def access_token(self) -> Optional[str]:
        return self.store.get(ACCESS) or None

    @property
    def refresh_token(self) -> Optional[str]:
        return self.store.get(REFRESH) or None

    @property
    def artisan_email(self) -> Optional[str]:
        return self.store.get(ARTISAN_EMAIL) or None

    @property
    def artisan_id(self) -> Optional[int]:
        value = self.store.get(ARTISAN_ID)
        try:
            return int(value) if value else None
        except ValueError:
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.store.get(IS_AUTHENTICATED) == "true" and bool(self.access_token)

    def require_artisan_id(self) -> int:
        """Route guard for the dashboard."""
        artisan_id = self.artisan_id
        if not self.is_authenticated or artisan_id is None:
            raise AuthenticationRequired("Please log in to manage your products.")
        return artisan_id

    def auth_headers(self) -> Dict[str, str]:
        token = self.access_token
        return {"Authorization": f"Bearer {token}"} if token else {}
