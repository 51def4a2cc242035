"""
Basket service client and the per-user shopping basket built on it.

The basket service stores product ids and quantities per user; the
shopping basket joins those lines with catalog data.
"""
import logging
from typing import Dict, List, Optional

import httpx

from copilot.models import BasketItem, BasketQuantity, CatalogItem
from copilot.services.catalog import CatalogService
from copilot.services.errors import AuthenticationRequiredError

logger = logging.getLogger(__name__)


class BasketService:
    """Async client for the basket service.

    Every call needs the caller's bearer token. A missing token or a 401
    from the service raises AuthenticationRequiredError.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client

    def _headers(self, access_token: Optional[str]) -> Dict[str, str]:
        if not access_token:
            raise AuthenticationRequiredError("No access token supplied")
        return {"Authorization": f"Bearer {access_token}"}

    @staticmethod
    def _check(response: httpx.Response) -> None:
        if response.status_code == 401:
            raise AuthenticationRequiredError("Basket service rejected the access token")
        response.raise_for_status()

    async def get_basket(self, access_token: Optional[str]) -> List[BasketQuantity]:
        """Get the user's basket lines."""
        response = await self.client.get(
            f"{self.base_url}/api/basket",
            headers=self._headers(access_token)
        )
        self._check(response)
        items = response.json().get("items") or []
        return [BasketQuantity.model_validate(item) for item in items]

    async def update_basket(
        self,
        items: List[BasketQuantity],
        access_token: Optional[str]
    ) -> None:
        """Replace the user's basket lines."""
        response = await self.client.put(
            f"{self.base_url}/api/basket",
            headers=self._headers(access_token),
            json={"items": [item.model_dump(by_alias=True) for item in items]}
        )
        self._check(response)


class ShoppingBasket:
    """Basket operations for the current user."""

    def __init__(self, basket_service: BasketService, catalog_service: CatalogService):
        self.basket_service = basket_service
        self.catalog_service = catalog_service

    async def add(self, item: CatalogItem, access_token: Optional[str]) -> None:
        """Add one unit of ``item``, incrementing an existing line if present."""
        lines = await self.basket_service.get_basket(access_token)

        for line in lines:
            if line.product_id == item.id:
                line.quantity += 1
                break
        else:
            lines.append(BasketQuantity(product_id=item.id, quantity=1))

        await self.basket_service.update_basket(lines, access_token)
        logger.info(f"Added catalog item {item.id} to basket")

    async def get_items(self, access_token: Optional[str]) -> List[BasketItem]:
        """Get the basket lines with product names and prices."""
        lines = await self.basket_service.get_basket(access_token)
        if not lines:
            return []

        catalog_items = {
            item.id: item
            for item in await self.catalog_service.get_items([line.product_id for line in lines])
        }

        items = []
        for line in lines:
            catalog_item = catalog_items.get(line.product_id)
            if catalog_item is None:
                # Product removed from the catalog since it was added
                logger.warning(f"Basket references unknown catalog item {line.product_id}")
                continue
            items.append(BasketItem(
                id=str(catalog_item.id),
                product_id=catalog_item.id,
                product_name=catalog_item.name,
                unit_price=catalog_item.price,
                quantity=line.quantity
            ))
        return items
