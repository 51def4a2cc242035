"""
Client for the catalog service HTTP API.

Provides semantic product search and item lookups used by the
copilot tools and by the shopping basket.
"""
import logging
from typing import List
from urllib.parse import quote

import httpx

from copilot.models import CatalogItem, CatalogPage
from copilot.services.errors import ItemNotFoundError

logger = logging.getLogger(__name__)


class CatalogService:
    """Async client for the catalog service."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient
    ):
        """
        Args:
            base_url: Root URL of the catalog service
            client: HTTP client, owned and closed by the caller
        """
        self.base_url = base_url.rstrip("/")
        self.client = client

    async def search_semantic(
        self,
        page_index: int,
        page_size: int,
        text: str
    ) -> CatalogPage:
        """Search the catalog for items semantically related to ``text``.

        Raises:
            httpx.HTTPError: on transport failure or non-success status
        """
        url = f"{self.base_url}/api/catalog/items/withsemanticrelevance/{quote(text, safe='')}"
        logger.debug(f"Catalog semantic search: {text!r} page={page_index} size={page_size}")

        response = await self.client.get(
            url,
            params={"pageIndex": page_index, "pageSize": page_size}
        )
        response.raise_for_status()
        return CatalogPage.model_validate(response.json())

    async def get_item(self, item_id: int) -> CatalogItem:
        """Fetch a single catalog item.

        Raises:
            ItemNotFoundError: if the catalog has no such item
            httpx.HTTPError: on transport failure or other non-success status
        """
        response = await self.client.get(f"{self.base_url}/api/catalog/items/{item_id}")
        if response.status_code == 404:
            raise ItemNotFoundError(item_id)
        response.raise_for_status()
        return CatalogItem.model_validate(response.json())

    async def get_items(self, ids: List[int]) -> List[CatalogItem]:
        """Fetch several catalog items in one request."""
        if not ids:
            return []

        response = await self.client.get(
            f"{self.base_url}/api/catalog/items/by",
            params=[("ids", item_id) for item_id in ids]
        )
        response.raise_for_status()
        return [CatalogItem.model_validate(item) for item in response.json()]
