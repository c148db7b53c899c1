"""
harvest_market.api.routers.products

Product endpoints.

Responsibilities:
- Public catalogue browsing (filters, search, sort, pagination) and detail view.
- Authenticated listing management; ownership is enforced by `ProductService`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import Field, field_validator

from harvest_market.api.deps import product_service
from harvest_market.api.responses import success
from harvest_market.api.schemas import ApiModel, naive_utc
from harvest_market.api.serializers import product_out, products_out
from harvest_market.auth.deps import get_current_user, get_current_user_optional
from harvest_market.auth.ownership import is_owner
from harvest_market.db.models import Product, ProductStatus, ProductUnit, User
from harvest_market.db.repositories.products import ProductFilters
from harvest_market.services.ids import parse_id
from harvest_market.services.pagination import Page, PageRequest
from harvest_market.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


class Coordinates(ApiModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class Location(ApiModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    coordinates: Coordinates | None = None


class ProductCreateRequest(ApiModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    category: str
    # Image count (1-10) is checked by the service so the message matches updates.
    images: list[str] = Field(default_factory=list)
    video: str | None = None
    price: float = Field(ge=0)
    unit: ProductUnit
    quantity_available: float = Field(ge=0)
    location: Location
    is_organic: bool = False
    harvest_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("harvest_date")
    @classmethod
    def normalize_harvest_date(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)


class ProductUpdateRequest(ApiModel):
    # Every field optional; anything not declared here (e.g. seller, views) is ignored.
    title: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    category: str | None = None
    images: list[str] | None = None
    video: str | None = None
    price: float | None = Field(default=None, ge=0)
    unit: ProductUnit | None = None
    quantity_available: float | None = Field(default=None, ge=0)
    location: Location | None = None
    is_organic: bool | None = None
    harvest_date: datetime | None = None
    status: ProductStatus | None = None
    tags: list[str] | None = None

    @field_validator("harvest_date")
    @classmethod
    def normalize_harvest_date(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)


def _service_fields(body: ApiModel, *, exclude_unset: bool) -> dict[str, Any]:
    data = body.model_dump(exclude_unset=exclude_unset)
    if "category" in data:
        data["category_id"] = data.pop("category")
    return data


async def _present_page(svc: ProductService, page: Page[Product]) -> dict[str, Any]:
    sellers, categories = await svc.references(page.items)
    return {
        "products": products_out(page.items, sellers, categories),
        "pagination": page.meta(total_key="totalProducts"),
    }


async def _present_one(svc: ProductService, product: Product) -> dict[str, Any]:
    sellers, categories = await svc.references([product])
    return product_out(
        product,
        seller=sellers.get(product.seller_id),
        category=categories.get(product.category_id),
    )


@router.get("")
async def list_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    category: str | None = Query(default=None),
    min_price: float | None = Query(default=None, alias="minPrice", ge=0),
    max_price: float | None = Query(default=None, alias="maxPrice", ge=0),
    is_organic: bool | None = Query(default=None, alias="isOrganic"),
    status: ProductStatus = Query(default=ProductStatus.available),
    search: str | None = Query(default=None, max_length=200),
    sort_by: Literal[
        "createdAt", "price", "title", "views", "quantityAvailable", "buys"
    ] = Query(default="createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    svc: ProductService = Depends(product_service),
) -> JSONResponse:
    filters = ProductFilters(
        status=status.value,
        category_id=parse_id(category, "category") if category else None,
        min_price=min_price,
        max_price=max_price,
        is_organic=is_organic,
        search=search or None,
    )
    result = await svc.list(
        filters=filters,
        page=PageRequest(page=page, limit=limit),
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return success(await _present_page(svc, result))


# Declared before "/{product_id}" so the literal path wins.
@router.get("/seller/my-products")
async def my_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: ProductStatus | None = Query(default=None),
    user: User = Depends(get_current_user),
    svc: ProductService = Depends(product_service),
) -> JSONResponse:
    result = await svc.list_for_seller(
        seller=user,
        status=status.value if status is not None else None,
        page=PageRequest(page=page, limit=limit),
    )
    return success(await _present_page(svc, result))


@router.post("", status_code=201)
async def create_product(
    body: ProductCreateRequest,
    user: User = Depends(get_current_user),
    svc: ProductService = Depends(product_service),
) -> JSONResponse:
    product = await svc.create(seller=user, data=_service_fields(body, exclude_unset=False))
    return success(
        {"product": await _present_one(svc, product)},
        message="Product created successfully",
        status_code=201,
    )


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    viewer: User | None = Depends(get_current_user_optional),
    svc: ProductService = Depends(product_service),
) -> JSONResponse:
    product = await svc.get(product_id)
    # Sellers looking at their own listing do not count as views.
    if viewer is None or not is_owner(viewer.id, product.seller_id):
        product = await svc.get(product_id, count_view=True)
    return success({"product": await _present_one(svc, product)})


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: ProductUpdateRequest,
    user: User = Depends(get_current_user),
    svc: ProductService = Depends(product_service),
) -> JSONResponse:
    product = await svc.update(
        actor=user,
        product_id=product_id,
        changes=_service_fields(body, exclude_unset=True),
    )
    return success(
        {"product": await _present_one(svc, product)},
        message="Product updated successfully",
    )


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    user: User = Depends(get_current_user),
    svc: ProductService = Depends(product_service),
) -> JSONResponse:
    await svc.delete(actor=user, product_id=product_id)
    return success(message="Product deleted successfully")
