"""Catalog endpoints (read-only pass-through to the storefront backend)"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
import logging
from storefront.api.deps import get_product_service
from storefront.core.exceptions import ApiError, ProductNotFoundError
from storefront.schemas.product import Product, ProductList, ProductsQueryParams
from storefront.services.product_service import ProductService

router = APIRouter()
logger = logging.getLogger(__name__)


def _catalog_unavailable(e: ApiError) -> HTTPException:
    logger.error(f"[CATALOG] Backend request failed: {e}")
    return HTTPException(status_code=502, detail="Failed to load products")


@router.get("", response_model=ProductList)
async def list_products(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    sort_by: Optional[str] = Query(None, pattern="^(name|price|createdAt)$"),
    sort_order: Optional[str] = Query(None, pattern="^(asc|desc)$"),
    products: ProductService = Depends(get_product_service),
):
    """List products with optional filtering and pagination"""
    params = ProductsQueryParams(
        page=page,
        limit=limit,
        category=category,
        min_price=min_price,
        max_price=max_price,
        search=search,
        featured=featured,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        return await products.get_all(params)
    except ApiError as e:
        raise _catalog_unavailable(e)


@router.get("/featured", response_model=List[Product])
async def featured_products(products: ProductService = Depends(get_product_service)):
    try:
        return await products.get_featured()
    except ApiError as e:
        raise _catalog_unavailable(e)


@router.get("/bestsellers", response_model=List[Product])
async def bestsellers(products: ProductService = Depends(get_product_service)):
    try:
        return await products.get_bestsellers()
    except ApiError as e:
        raise _catalog_unavailable(e)


@router.get("/slug/{slug}", response_model=Product)
async def get_product_by_slug(slug: str, products: ProductService = Depends(get_product_service)):
    try:
        return await products.get_by_slug(slug)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except ApiError as e:
        raise _catalog_unavailable(e)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, products: ProductService = Depends(get_product_service)):
    try:
        return await products.get_by_id(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except ApiError as e:
        raise _catalog_unavailable(e)
