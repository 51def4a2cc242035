"""
Tests for the copilot's function calling tools.

Every failure must come back as one of the fixed strings; nothing may
raise out of a tool.
"""
import json
import unittest
from unittest.mock import MagicMock

from copilot.chat.tools import (
    ADD_TO_CART_ERROR,
    ADD_TO_CART_LOGIN_REQUIRED,
    CART_CONTENTS_ERROR,
    CATALOG_ERROR,
    ITEM_ADDED,
    ShopTools,
    get_tool_definitions,
)
from copilot.services import (
    BasketService,
    CatalogService,
    ProductImageUrlProvider,
    ShoppingBasket,
)

from fakes import BASKET_URL, CATALOG_URL, VALID_TOKEN, FakeShopBackend


class ToolTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.backend = FakeShopBackend()
        self.client = self.backend.client()
        self.catalog = CatalogService(CATALOG_URL, client=self.client)
        self.basket = ShoppingBasket(BasketService(BASKET_URL, client=self.client), self.catalog)
        self.images = ProductImageUrlProvider("http://images")
        self.on_error = MagicMock()

    async def asyncTearDown(self):
        await self.client.aclose()

    def tools(self, access_token=VALID_TOKEN) -> ShopTools:
        return ShopTools(
            self.catalog,
            self.basket,
            self.images,
            access_token=access_token,
            on_error=self.on_error
        )


class TestSearchCatalog(ToolTestCase):

    async def test_results_carry_image_urls(self):
        result = json.loads(await self.tools().search_catalog("ski goggles"))

        self.assertEqual(result["pageIndex"], 0)
        self.assertEqual(result["pageSize"], 8)
        self.assertEqual(len(result["data"]), 8)
        for item in result["data"]:
            self.assertEqual(item["pictureUrl"], f"http://images/api/catalog/items/{item['id']}/pic")

    async def test_catalog_unreachable(self):
        self.backend.catalog_down = True

        result = await self.tools().search_catalog("ski goggles")

        self.assertEqual(result, "Error accessing catalog.")
        self.assertEqual(result, CATALOG_ERROR)
        self.on_error.assert_called_once()
        self.assertEqual(self.on_error.call_args.args[0], CATALOG_ERROR)


class TestAddToCart(ToolTestCase):

    async def test_not_logged_in(self):
        result = await self.tools(access_token=None).add_to_cart(3)

        self.assertEqual(result, "Unable to add an item to the cart. You must be logged in.")
        self.assertEqual(result, ADD_TO_CART_LOGIN_REQUIRED)
        self.assertEqual(self.backend.basket, [])

    async def test_rejected_token(self):
        result = await self.tools(access_token="expired").add_to_cart(3)
        self.assertEqual(result, ADD_TO_CART_LOGIN_REQUIRED)

    async def test_adds_item(self):
        result = await self.tools().add_to_cart(3)

        self.assertEqual(result, "Item added to shopping cart.")
        self.assertEqual(result, ITEM_ADDED)
        self.assertEqual(self.backend.basket, [{"productId": 3, "quantity": 1}])

    async def test_adding_twice_increments_quantity(self):
        tools = self.tools()
        await tools.add_to_cart(3)
        await tools.add_to_cart(3)
        self.assertEqual(self.backend.basket, [{"productId": 3, "quantity": 2}])

    async def test_unknown_item(self):
        result = await self.tools().add_to_cart(999)

        self.assertEqual(result, "Unable to add the item to the cart.")
        self.assertEqual(result, ADD_TO_CART_ERROR)
        self.on_error.assert_called_once()

    async def test_catalog_down(self):
        self.backend.catalog_down = True
        self.assertEqual(await self.tools().add_to_cart(3), ADD_TO_CART_ERROR)


class TestGetCartContents(ToolTestCase):

    async def test_contents(self):
        self.backend.basket = [{"productId": 5, "quantity": 1}]

        result = json.loads(await self.tools().get_cart_contents())

        self.assertEqual(result, [{
            "id": "5",
            "productId": 5,
            "productName": "Powder Pro Snowboard",
            "unitPrice": 399.0,
            "quantity": 1,
        }])

    async def test_repeated_reads_are_identical(self):
        self.backend.basket = [{"productId": 1, "quantity": 2}, {"productId": 9, "quantity": 1}]
        tools = self.tools()

        first = await tools.get_cart_contents()
        second = await tools.get_cart_contents()

        self.assertEqual(first, second)

    async def test_empty_cart(self):
        self.assertEqual(await self.tools().get_cart_contents(), "[]")

    async def test_not_logged_in(self):
        result = await self.tools(access_token=None).get_cart_contents()
        self.assertEqual(result, "Unable to get the cart's contents.")
        self.assertEqual(result, CART_CONTENTS_ERROR)


class TestExecute(ToolTestCase):

    async def test_dispatch(self):
        result = await self.tools().execute("add_to_cart", {"item_id": 2})
        self.assertEqual(result, ITEM_ADDED)

    async def test_string_item_id_is_accepted(self):
        result = await self.tools().execute("add_to_cart", {"item_id": "2"})
        self.assertEqual(result, ITEM_ADDED)

    async def test_unknown_tool(self):
        result = await self.tools().execute("checkout", {})
        self.assertEqual(result, "Unknown tool: checkout")

    async def test_missing_argument(self):
        result = await self.tools().execute("search_catalog", {})
        self.assertEqual(result, "Invalid arguments for search_catalog.")

    async def test_unexpected_argument(self):
        result = await self.tools().execute("get_cart_contents", {"user": "bob"})
        self.assertEqual(result, "Invalid arguments for get_cart_contents.")

    async def test_non_object_arguments(self):
        result = await self.tools().execute("add_to_cart", [3])
        self.assertEqual(result, "Invalid arguments for add_to_cart.")

    async def test_handler_exception_is_reported(self):
        tools = self.tools()
        tools.catalog = MagicMock()
        tools.catalog.search_semantic.side_effect = ValueError("bad payload")

        result = await tools.execute("search_catalog", {"product_description": "tent"})

        self.assertEqual(result, "Error executing search_catalog.")
        self.on_error.assert_called_once()
        self.assertIsInstance(self.on_error.call_args.args[1], ValueError)


class TestToolDefinitions(unittest.TestCase):

    def test_names_and_parameters(self):
        definitions = {d["function"]["name"]: d["function"] for d in get_tool_definitions()}

        self.assertEqual(set(definitions), {"search_catalog", "add_to_cart", "get_cart_contents"})
        self.assertEqual(
            definitions["add_to_cart"]["parameters"]["properties"]["item_id"]["type"],
            "integer"
        )
        self.assertEqual(definitions["search_catalog"]["parameters"]["required"], ["product_description"])
        for definition in definitions.values():
            self.assertTrue(definition["description"])


if __name__ == "__main__":
    unittest.main()
