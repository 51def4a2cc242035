"""Pydantic models for the copilot API."""
from .chat_models import (
    ChatMessage,
    Transcript,
    SessionState,
)
from .shop_models import (
    CatalogBrand,
    CatalogItemType,
    CatalogItem,
    CatalogPage,
    BasketQuantity,
    BasketItem,
)

__all__ = [
    "ChatMessage",
    "Transcript",
    "SessionState",
    "CatalogBrand",
    "CatalogItemType",
    "CatalogItem",
    "CatalogPage",
    "BasketQuantity",
    "BasketItem",
]
