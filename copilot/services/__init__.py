"""Clients for the catalog, basket and product image services."""
from .basket import BasketService, ShoppingBasket
from .catalog import CatalogService
from .errors import AuthenticationRequiredError, ItemNotFoundError, ServiceError
from .images import ProductImageUrlProvider

__all__ = [
    "BasketService",
    "ShoppingBasket",
    "CatalogService",
    "ProductImageUrlProvider",
    "AuthenticationRequiredError",
    "ItemNotFoundError",
    "ServiceError",
]
