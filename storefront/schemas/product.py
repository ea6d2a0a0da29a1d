"""Product schemas (variant-based catalog model served by the storefront backend)"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, Dict, List
from enum import Enum


class CamelModel(BaseModel):
    """Backend payloads use camelCase keys; Python code uses snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductCategory(str, Enum):
    APPAREL = "apparel"
    ACCESSORIES = "accessories"
    MUSIC = "music"
    INSTRUMENTS = "instruments"
    COLLECTIBLES = "collectibles"
    OTHER = "other"


class ProductStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    OUT_OF_STOCK = "out_of_stock"


class ProductImage(CamelModel):
    url: str
    public_id: str = ""
    alt_text: Optional[str] = None
    is_primary: bool = False
    order: int = 0


class VariantAttributes(CamelModel):
    size: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    custom: Optional[Dict[str, str]] = None


class VariantPricing(CamelModel):
    base_price: float = Field(..., ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    currency: str = "MXN"
    cost_price: Optional[float] = None


class VariantInventory(CamelModel):
    stock: int = 0
    low_stock_threshold: int = 0
    track_inventory: bool = True
    allow_backorder: bool = False


class Dimensions(CamelModel):
    length: float
    width: float
    height: float
    unit: str


class Weight(CamelModel):
    value: float
    unit: str


class ProductVariant(CamelModel):
    id: Optional[str] = Field(None, alias="_id")
    sku: str
    name: str
    attributes: VariantAttributes = Field(default_factory=VariantAttributes)
    pricing: VariantPricing
    inventory: VariantInventory = Field(default_factory=VariantInventory)
    images: Optional[List[ProductImage]] = None
    weight: Optional[Weight] = None
    dimensions: Optional[Dimensions] = None
    is_active: bool = True


class ProductShipping(CamelModel):
    is_free_shipping: bool = False
    shipping_class: Optional[str] = None


class ProductRating(CamelModel):
    average: float = 0
    count: int = 0


class ProductMetrics(CamelModel):
    rating: Optional[ProductRating] = None
    views: int = 0
    sales: int = 0


class Product(CamelModel):
    """Catalog product snapshot. `_id` is the cart's merge key."""
    id: str = Field(..., alias="_id", min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = ""
    description: str = ""
    short_description: Optional[str] = None
    category: ProductCategory = ProductCategory.OTHER
    subcategory: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    variants: List[ProductVariant] = Field(default_factory=list)
    images: List[ProductImage] = Field(default_factory=list)
    brand: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)
    status: ProductStatus = ProductStatus.PUBLISHED
    is_featured: bool = False
    is_new_arrival: bool = False
    shipping: Optional[ProductShipping] = None
    metrics: Optional[ProductMetrics] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ProductList(CamelModel):
    data: List[Product]
    pagination: Pagination


class ProductsQueryParams(CamelModel):
    """Catalog listing filters; sent to the backend with camelCase keys"""
    page: Optional[int] = Field(None, ge=1)
    limit: Optional[int] = Field(None, ge=1, le=100)
    category: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    search: Optional[str] = None
    featured: Optional[bool] = None
    sort_by: Optional[str] = Field(None, pattern="^(name|price|createdAt)$")
    sort_order: Optional[str] = Field(None, pattern="^(asc|desc)$")
