# storefront/board.py
"""
The artisan dashboard's product list: fetch once, then keep the list in
step with create / update / delete calls without going back to the
network.
"""
import logging
from typing import List, Optional, Set

from .api import ApiClient
from .catalog import CatalogView, Summary, derive, summarize
from .errors import StorefrontError
from .fetcher import CollectionFetcher
from .forms import FormController, product_form
from .models import Product
from .reconcile import MutationKind, reconcile

logger = logging.getLogger(__name__)


class ProductBoard:
    def __init__(self, api: ApiClient, artisan_id: int, page_size: Optional[int] = None):
        self.api = api
        self.artisan_id = artisan_id
        self.fetcher: CollectionFetcher[Product] = CollectionFetcher(
            lambda: api.list_artisan_products(artisan_id, auth=True), name=f"artisan {artisan_id} products",
        )
        self.view = CatalogView(page_size=page_size) if page_size else CatalogView()
        self._pending: Set[int] = set()

    @property
    def products(self) -> List[Product]:
        return self.fetcher.items

    def refresh(self) -> bool:
        return self.fetcher.refresh()

    def summary(self) -> Summary:
        """Stats over what the filters currently show."""
        return summarize(self.visible())

    def visible(self) -> List[Product]:
        return derive(self.products, self.view.criteria)

    # ----- mutations -----
    def apply(self, product: Product, kind: MutationKind) -> None:
        self.fetcher.replace(reconcile(self.products, product, kind))
        logger.info("Applied %s of product %s for artisan %s", kind.value, product.id, self.artisan_id)

    def create_form(self) -> FormController:
        return product_form(
            self.api, self.artisan_id, None,
            on_success=lambda p: self.apply(p, MutationKind.CREATE),
        )

    def edit_form(self, product: Product) -> FormController:
        return product_form(
            self.api, self.artisan_id, product,
            on_success=lambda p: self.apply(p, MutationKind.UPDATE),
        )

    def is_pending(self, product_id: int) -> bool:
        return product_id in self._pending

    def delete(self, product_id: int) -> bool:
        """
        Delete on the backend, then drop the row. A failure leaves the list
        as it was and re-raises so the UI can tell the user. Returns False
        when a delete for this row is already in flight.
        """
        if product_id in self._pending:
            return False
        self._pending.add(product_id)
        try:
            self.api.delete_product(product_id)
        except StorefrontError as e:
            logger.warning("Delete of product %s failed: %s", product_id, e)
            raise
        finally:
            self._pending.discard(product_id)
        self.fetcher.replace(reconcile(self.products, product_id, MutationKind.DELETE))
        logger.info("Product %s deleted for artisan %s", product_id, self.artisan_id)
        return True
