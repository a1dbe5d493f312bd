# storefront/fetcher.py
"""
Remote collection fetcher.

Holds ``items / is_loading / error`` for one list on one screen. Each
load is stamped with a ticket; only the latest ticket may write state,
so a slow earlier response can never overwrite a newer one.
"""
import itertools
import logging
from typing import Callable, Generic, List, Optional, TypeVar

from .errors import StorefrontError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionFetcher(Generic[T]):
    def __init__(self, load: Optional[Callable[[], List[T]]] = None, name: str = "collection"):
        self.load = load
        self.name = name
        self.items: List[T] = []
        self.is_loading = False
        self.error: Optional[StorefrontError] = None
        self._tickets = itertools.count(1)
        self._latest = 0

    def begin(self) -> int:
        """Start a load: state goes back to empty + loading."""
        self._latest = next(self._tickets)
        self.items = []
        self.is_loading = True
        self.error = None
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return ticket == self._latest

    def resolve(self, ticket: int, items: List[T]) -> bool:
        if not self.is_current(ticket):
            logger.debug("Discarding stale %s response (ticket %s, latest %s)", self.name, ticket, self._latest)
            return False
        self.items = list(items)
        self.is_loading = False
        self.error = None
        return True

    def fail(self, ticket: int, error: StorefrontError) -> bool:
        if not self.is_current(ticket):
            logger.debug("Discarding stale %s error (ticket %s): %s", self.name, ticket, error)
            return False
        logger.warning("Could not load %s: %s", self.name, error)
        self.items = []
        self.is_loading = False
        self.error = error
        return True

    def refresh(self, load: Optional[Callable[[], List[T]]] = None) -> bool:
        """
        Run one load synchronously. ``load`` replaces the stored loader,
        e.g. when the screen's input changed. Errors end up in ``error``.
        """
        if load is not None:
            self.load = load
        if self.load is None:
            raise ValueError(f"{self.name} fetcher has no loader")
        ticket = self.begin()
        try:
            items = self.load()
        except StorefrontError as e:
            return self.fail(ticket, e)
        return self.resolve(ticket, items)

    def replace(self, items: List[T]) -> None:
        """Install a reconciled list without going back to the network."""
        self.items = list(items)

    @property
    def ready(self) -> bool:
        return not self.is_loading and self.error is None
