"""Hrayfi storefront: view-model and REST client for the artisan marketplace."""

__version__ = "0.1.0"
