# storefront/api.py
"""
REST client for the marketplace backend.

Every call goes through ``ApiClient._request`` which turns transport
failures into ``NetworkError``, non-2xx answers into ``HttpError`` and
undecodable bodies into ``MalformedResponseError``. Mutating calls always
carry the bearer token when one is stored.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from .config import BACKEND_URL, REQUEST_TIMEOUT, UPLOAD_TIMEOUT
from .errors import HttpError, MalformedResponseError, NetworkError
from .models import Artisan, Category, Product, Region, to_abs
from .session import SessionRepository

logger = logging.getLogger(__name__)

# (filename, bytes, mime) as accepted by requests' ``files=``
Upload = Tuple[str, bytes, str]

MUTATING = {"POST", "PUT", "PATCH", "DELETE"}


def decode_collection(body: Any) -> List[Any]:
    """
    The backend answers list endpoints either with a bare array or with a
    paginated ``{"results": [...]}`` envelope. Anything else is rejected.
    """
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get("results"), list):
        return body["results"]
    raise MalformedResponseError(f"expected a list or a results envelope, got {type(body).__name__}")


def _multipart(fields: Dict[str, Any], image: Optional[Upload] = None, image_field: str = "main_image") -> Dict[str, Any]:
    # (None, value) parts force multipart/form-data even without a file
    parts = {k: (None, str(v)) for k, v in fields.items() if v is not None}
    if image is not None:
        parts[image_field] = image
    return parts


def _error_detail(resp) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason or None
    if isinstance(body, dict):
        if body.get("detail"):
            return str(body["detail"])
        # DRF field errors: {"field": ["message", ...]}
        parts = []
        for key, value in body.items():
            msg = value[0] if isinstance(value, list) and value else value
            parts.append(f"{key}: {msg}")
        return "; ".join(parts) or resp.reason
    return resp.reason or None


class ApiClient:
    def __init__(
        self,
        session: SessionRepository,
        base_url: str = BACKEND_URL,
        http=None,
        timeout: int = REQUEST_TIMEOUT,
        upload_timeout: int = UPLOAD_TIMEOUT,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.upload_timeout = upload_timeout

    # -------------------------
    # Plumbing
    # -------------------------
    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def to_abs(self, url: Optional[str]) -> Optional[str]:
        return to_abs(url, self.base_url)

    def _request(self, method: str, path: str, auth: Optional[bool] = None, timeout: Optional[int] = None, **kwargs) -> Any:
        method = method.upper()
        url = self.url_for(path)
        headers = dict(kwargs.pop("headers", None) or {})
        if auth or (auth is None and method in MUTATING):
            headers.update(self.session.auth_headers())
        try:
            resp = self.http.request(method, url, headers=headers, timeout=timeout or self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise NetworkError(f"Error contacting backend: {e}") from e

        if not resp.ok:
            detail = _error_detail(resp)
            logger.warning("%s %s -> %s %s", method, url, resp.status_code, detail)
            raise HttpError(resp.status_code, detail)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            logger.error("%s %s returned a non-JSON body", method, url)
            raise MalformedResponseError(f"{method} {path} returned a non-JSON body") from None

    def _products(self, body: Any) -> List[Product]:
        return [Product.from_dict(item, self.base_url) for item in decode_collection(body)]

    # -------------------------
    # Catalog (public)
    # -------------------------
    def list_products(self) -> List[Product]:
        return self._products(self._request("GET", "/api/products/"))

    def get_product(self, product_id: int) -> Product:
        return Product.from_dict(self._request("GET", f"/api/products/{product_id}/"), self.base_url)

    def list_categories(self) -> List[Category]:
        return [Category.from_dict(c) for c in decode_collection(self._request("GET", "/api/categories/"))]

    def list_regions(self) -> List[Region]:
        return [Region.from_dict(r) for r in decode_collection(self._request("GET", "/api/regions/"))]

    def get_artisan(self, artisan_id: int, auth: bool = False) -> Artisan:
        body = self._request("GET", f"/api/artisans/{artisan_id}/", auth=auth)
        return Artisan.from_dict(body, self.base_url)

    def list_artisan_products(self, artisan_id: int, auth: bool = False) -> List[Product]:
        return self._products(self._request("GET", f"/api/artisans/{artisan_id}/products/", auth=auth))

    # -------------------------
    # Product CRUD (artisan)
    # -------------------------
    def create_product(self, fields: Dict[str, Any], image: Optional[Upload] = None) -> Product:
        body = self._request(
            "POST", "/api/products/", files=_multipart(fields, image), timeout=self.upload_timeout,
        )
        return Product.from_dict(body, self.base_url)

    def update_product(self, product_id: int, fields: Dict[str, Any], image: Optional[Upload] = None) -> Product:
        path = f"/api/products/{product_id}/"
        if image is not None:
            body = self._request("PATCH", path, files=_multipart(fields, image), timeout=self.upload_timeout)
        else:
            body = self._request("PATCH", path, json={k: v for k, v in fields.items() if v is not None})
        return Product.from_dict(body, self.base_url)

    def delete_product(self, product_id: int) -> None:
        self._request("DELETE", f"/api/products/{product_id}/")

    # -------------------------
    # Artisan profile + credentials
    # -------------------------
    def update_artisan(self, artisan_id: int, fields: Dict[str, Any], image: Optional[Upload] = None) -> Artisan:
        path = f"/api/artisans/{artisan_id}/"
        if image is not None:
            body = self._request("PATCH", path, files=_multipart(fields, image), timeout=self.upload_timeout)
        else:
            body = self._request("PATCH", path, json=fields)
        return Artisan.from_dict(body, self.base_url)

    def change_credentials(self, artisan_id: int, fields: Dict[str, Any]) -> Any:
        return self._request("POST", f"/api/artisans/{artisan_id}/change-password/", json=fields)

    # -------------------------
    # Auth
    # -------------------------
    def login(self, username: str, password: str) -> int:
        body = self._request("POST", "/api/auth/login/", auth=False, json={"username": username, "password": password})
        return self.session.save_login(body or {})

    def register(self, fields: Dict[str, Any], image: Optional[Upload] = None) -> Any:
        body = self._request(
            "POST", "/api/auth/register/", auth=False, files=_multipart(fields, image), timeout=self.upload_timeout,
        )
        # Some deployments log the new artisan straight in.
        if isinstance(body, dict) and body.get("access"):
            self.session.save_login(body, email=fields.get("email"))
        return body

    def logout(self) -> None:
        self.session.clear()
