"""Product image URL resolution."""


class ProductImageUrlProvider:
    """Builds display image URLs for catalog items."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def get_product_image_url(self, item_id: int) -> str:
        return f"{self.base_url}/api/catalog/items/{item_id}/pic"
