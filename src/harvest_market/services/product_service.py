"""
harvest_market.services.product_service

Product listings.

Responsibilities:
- Create products owned by the authenticated seller and record them on the
  seller's listing set (single transaction).
- Catalogue queries: filters, free-text search, sorting, pagination.
- Owner-only update/delete; delete also detaches the product from the seller.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.auth.ownership import ensure_owner
from harvest_market.db.models import Category, Product, ProductStatus, ProductUnit, User
from harvest_market.db.repositories.categories import CategoryRepo
from harvest_market.db.repositories.products import ProductFilters, ProductRepo
from harvest_market.db.repositories.users import UserRepo
from harvest_market.db.session import transaction
from harvest_market.errors import NotFoundError, ValidationError
from harvest_market.observability.logging import get_logger
from harvest_market.services.ids import parse_id
from harvest_market.services.pagination import Page, PageRequest

log = get_logger(__name__)

# No `seller_id`: a product never changes owner.
PRODUCT_MUTABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "category_id",
        "images",
        "video",
        "price",
        "unit",
        "quantity_available",
        "location",
        "is_organic",
        "harvest_date",
        "status",
        "tags",
    }
)

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 2000
MAX_IMAGES = 10


def validate_product(product: Product) -> None:
    """Check a product's declared bounds; all violations are reported together."""
    errors: list[str] = []

    if not product.title or not product.title.strip():
        errors.append("Product title is required")
    elif len(product.title) > MAX_TITLE_LENGTH:
        errors.append(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")

    if not product.description:
        errors.append("Product description is required")
    elif len(product.description) > MAX_DESCRIPTION_LENGTH:
        errors.append(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")

    if product.category_id is None:
        errors.append("Category is required")

    images = product.images or []
    if not 1 <= len(images) <= MAX_IMAGES:
        errors.append(f"Product must have between 1 and {MAX_IMAGES} images")

    if product.price is None:
        errors.append("Price is required")
    elif product.price < 0:
        errors.append("Price cannot be negative")

    if product.unit not in {u.value for u in ProductUnit}:
        errors.append(f"`{product.unit}` is not a valid unit")

    if product.quantity_available is None:
        errors.append("Quantity is required")
    elif product.quantity_available < 0:
        errors.append("Quantity cannot be negative")

    location = product.location or {}
    for key in ("address", "city", "state"):
        if not location.get(key):
            errors.append(f"Location {key} is required")

    if product.status not in {s.value for s in ProductStatus}:
        errors.append(f"`{product.status}` is not a valid status")

    if product.is_organic is None:
        errors.append("isOrganic must be a boolean")

    if errors:
        raise ValidationError(", ".join(errors))


class ProductService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._products = ProductRepo(session)
        self._users = UserRepo(session)
        self._categories = CategoryRepo(session)

    async def create(self, *, seller: User, data: Mapping[str, Any]) -> Product:
        fields = {k: v for k, v in data.items() if k in PRODUCT_MUTABLE_FIELDS}
        fields["category_id"] = await self._require_category(fields.get("category_id"))
        fields.setdefault("images", [])
        fields.setdefault("tags", [])
        fields.setdefault("is_organic", False)
        fields["status"] = ProductStatus.available.value
        fields.update(views=0, buys=0, rating_average=0.0, rating_count=0)

        validate_product(Product(seller_id=seller.id, **fields))

        # The product and the seller's listing set commit together or not at all.
        async with transaction(self._session):
            product = await self._products.create(seller_id=seller.id, **fields)
            await self._users.add_listed_product(seller.id, product.id)

        log.info("product_created", product_id=str(product.id), seller_id=str(seller.id))
        return product

    async def list(
        self,
        *,
        filters: ProductFilters,
        page: PageRequest,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> Page[Product]:
        items, total = await self._products.search(
            filters,
            offset=page.offset,
            limit=page.limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return Page(items=items, page=page.page, limit=page.limit, total=total)

    async def list_for_seller(
        self, *, seller: User, status: str | None, page: PageRequest
    ) -> Page[Product]:
        return await self.list(
            filters=ProductFilters(seller_id=seller.id, status=status),
            page=page,
        )

    async def get(self, product_id: Any, *, count_view: bool = False) -> Product:
        pid = parse_id(product_id, "product")
        product = await self._products.get(pid)
        if product is None:
            raise NotFoundError("Product not found")
        if count_view:
            async with transaction(self._session):
                await self._products.increment_views(pid)
            await self._session.refresh(product)
        return product

    async def update(self, *, actor: User, product_id: Any, changes: Mapping[str, Any]) -> Product:
        product = await self.get(product_id)
        ensure_owner(actor.id, product.seller_id, action="update", resource="product")

        # Keys outside the allow-list are dropped without error.
        updates = {k: v for k, v in changes.items() if k in PRODUCT_MUTABLE_FIELDS}
        if "category_id" in updates:
            updates["category_id"] = await self._require_category(updates["category_id"])

        # A failed re-validation rolls back and expires the staged changes.
        async with transaction(self._session):
            for field, value in updates.items():
                setattr(product, field, value)
            validate_product(product)

        log.info("product_updated", product_id=str(product.id), fields=sorted(updates))
        return product

    async def delete(self, *, actor: User, product_id: Any) -> None:
        product = await self.get(product_id)
        ensure_owner(actor.id, product.seller_id, action="delete", resource="product")

        async with transaction(self._session):
            await self._users.remove_listed_product(product.seller_id, product.id)
            await self._products.delete(product)

        log.info("product_deleted", product_id=str(product.id), seller_id=str(product.seller_id))

    async def references(
        self, products: Iterable[Product]
    ) -> tuple[dict[Any, User], dict[Any, Category]]:
        """Load the sellers and categories referenced by `products` in two queries."""
        products = list(products)
        sellers = await self._users.get_many({p.seller_id for p in products})
        categories = await self._categories.get_many({p.category_id for p in products})
        return sellers, categories

    async def _require_category(self, value: Any) -> Any:
        if value in (None, ""):
            raise ValidationError("Category is required")
        category_id = parse_id(value, "category")
        if await self._categories.get(category_id) is None:
            raise NotFoundError("Category not found")
        return category_id
