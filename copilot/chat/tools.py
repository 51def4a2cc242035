"""
Function calling tools for the copilot.

Tools report every failure as a plain string: the model can only read
the returned text and decide what to tell the customer.
"""
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from copilot.services import (
    AuthenticationRequiredError,
    CatalogService,
    ProductImageUrlProvider,
    ShoppingBasket,
)

logger = logging.getLogger(__name__)

# Receives a short description of what failed and the exception
ErrorHook = Callable[[str, Exception], None]

SEARCH_PAGE_SIZE = 8

CATALOG_ERROR = "Error accessing catalog."
ITEM_ADDED = "Item added to shopping cart."
ADD_TO_CART_LOGIN_REQUIRED = "Unable to add an item to the cart. You must be logged in."
ADD_TO_CART_ERROR = "Unable to add the item to the cart."
CART_CONTENTS_ERROR = "Unable to get the cart's contents."


def log_error(message: str, error: Exception) -> None:
    """Default error hook: log with traceback."""
    logger.error(message, exc_info=error)


def get_tool_definitions() -> List[Dict[str, Any]]:
    """Get OpenAI function definitions for available tools.

    Returns:
        List of tool definitions in OpenAI format
    """
    return [
        {
            "type": "function",
            "function": {
                "name": "search_catalog",
                "description": "Searches the Northern Mountains catalog for a provided product description",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "product_description": {
                            "type": "string",
                            "description": "The product description for which to search"
                        }
                    },
                    "required": ["product_description"]
                }
            }
        },
        {
            "type": "function",
            "function": {
                "name": "add_to_cart",
                "description": "Adds a product to the user's shopping cart.",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "item_id": {
                            "type": "integer",
                            "description": "The id of the product to add to the shopping cart (basket)"
                        }
                    },
                    "required": ["item_id"]
                }
            }
        },
        {
            "type": "function",
            "function": {
                "name": "get_cart_contents",
                "description": "Gets information about the contents of the user's shopping cart (basket)",
                "parameters": {
                    "type": "object",
                    "properties": {}
                }
            }
        }
    ]


class ShopTools:
    """Catalog and basket tools bound to one caller.

    Args:
        catalog: Catalog service client
        basket: Shopping basket for basket reads and writes
        images: Resolves display image URLs for catalog items
        access_token: The caller's bearer token, if logged in
        on_error: Hook told about every failure swallowed into a string
    """

    def __init__(
        self,
        catalog: CatalogService,
        basket: ShoppingBasket,
        images: ProductImageUrlProvider,
        access_token: Optional[str] = None,
        on_error: Optional[ErrorHook] = None
    ):
        self.catalog = catalog
        self.basket = basket
        self.images = images
        self.access_token = access_token
        self.on_error = on_error or log_error

    def _error(self, error: Exception, message: str) -> str:
        self.on_error(message, error)
        return message

    async def search_catalog(self, product_description: str) -> str:
        try:
            results = await self.catalog.search_semantic(0, SEARCH_PAGE_SIZE, product_description)
            for item in results.data:
                item.picture_url = self.images.get_product_image_url(item.id)

            return results.model_dump_json(by_alias=True)
        except httpx.HTTPError as e:
            return self._error(e, CATALOG_ERROR)

    async def add_to_cart(self, item_id: int) -> str:
        try:
            item = await self.catalog.get_item(int(item_id))
            await self.basket.add(item, self.access_token)
            return ITEM_ADDED
        except AuthenticationRequiredError:
            logger.info("add_to_cart called without a logged-in user")
            return ADD_TO_CART_LOGIN_REQUIRED
        except Exception as e:
            return self._error(e, ADD_TO_CART_ERROR)

    async def get_cart_contents(self) -> str:
        try:
            items = await self.basket.get_items(self.access_token)
            return json.dumps([item.model_dump(by_alias=True) for item in items])
        except Exception as e:
            return self._error(e, CART_CONTENTS_ERROR)

    async def execute(self, tool_name: str, arguments: Optional[Dict[str, Any]]) -> str:
        """Execute a tool call with the given arguments.

        Args:
            tool_name: Name of the tool to execute
            arguments: Tool arguments decoded from the model's call

        Returns:
            Tool result text, never raises
        """
        tool_handlers: Dict[str, Callable[..., Awaitable[str]]] = {
            "search_catalog": self.search_catalog,
            "add_to_cart": self.add_to_cart,
            "get_cart_contents": self.get_cart_contents,
        }

        handler = tool_handlers.get(tool_name)
        if not handler:
            return f"Unknown tool: {tool_name}"

        if not isinstance(arguments, dict):
            return f"Invalid arguments for {tool_name}."
        try:
            inspect.signature(handler).bind(**arguments)
        except TypeError:
            return f"Invalid arguments for {tool_name}."

        logger.info(f"Executing tool {tool_name}")
        try:
            return await handler(**arguments)
        except Exception as e:
            return self._error(e, f"Error executing {tool_name}.")
