"""Error taxonomy shared by the API client, fetcher and forms."""
from typing import Dict, Optional


class StorefrontError(Exception):
    """Base class for every error scoped to a single storefront operation."""


class NetworkError(StorefrontError):
    """The request could not be sent or did not complete."""


class HttpError(StorefrontError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, detail: Optional[str] = None):
        self.status = status
        self.detail = detail
        super().__init__(f"HTTP {status}: {detail}" if detail else f"HTTP {status}")


class ValidationError(StorefrontError):
    """Local validation failed; no request was made.

    ``errors`` maps a field name to its message. Form-level problems
    use the ``"__all__"`` key.
    """

    FORM = "__all__"

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class MalformedResponseError(StorefrontError):
    """The response body did not have a recognised shape."""


class AuthenticationRequired(StorefrontError):
    """A guarded page or call needs a logged-in artisan."""
