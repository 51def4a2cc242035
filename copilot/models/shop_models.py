"""
Pydantic models for records owned by the catalog and basket services.

Field names are snake_case in Python and camelCase on the wire, matching
the JSON the backend services produce.
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class _ServiceModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CatalogBrand(_ServiceModel):
    id: int
    brand: str


class CatalogItemType(_ServiceModel):
    id: int
    type: str


class CatalogItem(_ServiceModel):
    """A product in the Northern Mountains catalog."""

    id: int
    name: str
    description: Optional[str] = None
    price: float = 0.0
    picture_url: Optional[str] = Field(None, description="Display image URL")
    catalog_type_id: Optional[int] = None
    catalog_type: Optional[CatalogItemType] = None
    catalog_brand_id: Optional[int] = None
    catalog_brand: Optional[CatalogBrand] = None
    available_stock: Optional[int] = None


class CatalogPage(_ServiceModel):
    """One page of catalog search results."""

    page_index: int = 0
    page_size: int = 0
    count: int = 0
    data: List[CatalogItem] = Field(default_factory=list)


class BasketQuantity(_ServiceModel):
    """A basket line as stored by the basket service."""

    product_id: int
    quantity: int = Field(1, ge=0)


class BasketItem(_ServiceModel):
    """A basket line joined with its catalog data."""

    id: str
    product_id: int
    product_name: str
    unit_price: float
    quantity: int
