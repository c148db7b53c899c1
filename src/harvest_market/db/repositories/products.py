"""
harvest_market.db.repositories.products

Repository for `Product` entities.

Responsibilities:
- Create, fetch and delete products.
- Run the filtered/sorted/paginated catalogue query and its total count.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, asc, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from harvest_market.db.models import Product

# API sort keys -> columns. Anything else falls back to createdAt.
SORTABLE_COLUMNS = {
    "createdAt": Product.created_at,
    "price": Product.price,
    "title": Product.title,
    "views": Product.views,
    "quantityAvailable": Product.quantity_available,
    "buys": Product.buys,
}


@dataclass(frozen=True, slots=True)
class ProductFilters:
    status: str | None = None
    category_id: uuid.UUID | None = None
    seller_id: uuid.UUID | None = None
    min_price: float | None = None
    max_price: float | None = None
    is_organic: bool | None = None
    search: str | None = None


def like_pattern(text: str) -> str:
    # `%text%`, with LIKE metacharacters in `text` escaped by a backslash.
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _tag_matches(pattern: str, dialect: str) -> ColumnElement[bool]:
    # Tags are compared one array element at a time, never on the serialized JSON text.
    if dialect == "postgresql":
        elements = func.json_array_elements_text(Product.tags)
    else:
        elements = func.json_each(Product.tags)
    tag = elements.table_valued("value").alias("tag")
    return select(tag.c.value).where(tag.c.value.ilike(pattern, escape="\\")).exists()


def _apply_filters(stmt: Select[Any], f: ProductFilters, dialect: str) -> Select[Any]:
    if f.status is not None:
        stmt = stmt.where(Product.status == f.status)
    if f.category_id is not None:
        stmt = stmt.where(Product.category_id == f.category_id)
    if f.seller_id is not None:
        stmt = stmt.where(Product.seller_id == f.seller_id)
    if f.min_price is not None:
        stmt = stmt.where(Product.price >= f.min_price)
    if f.max_price is not None:
        stmt = stmt.where(Product.price <= f.max_price)
    if f.is_organic is not None:
        stmt = stmt.where(Product.is_organic.is_(f.is_organic))
    if f.search:
        pattern = like_pattern(f.search.strip())
        stmt = stmt.where(
            or_(
                Product.title.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
                _tag_matches(pattern, dialect),
            )
        )
    return stmt


class ProductRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._dialect = session.bind.dialect.name if session.bind is not None else "sqlite"

    async def create(self, **fields: Any) -> Product:
        product = Product(**fields)
        self._session.add(product)
        await self._session.flush()
        return product

    async def get(self, product_id: uuid.UUID, *, for_update: bool = False) -> Product | None:
        return await self._session.get(Product, product_id, with_for_update=for_update)

    async def get_many(self, product_ids: set[uuid.UUID]) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids)).with_for_update()
        return {p.id: p for p in (await self._session.execute(stmt)).scalars().all()}

    async def search(
        self,
        filters: ProductFilters,
        *,
        offset: int,
        limit: int,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> tuple[list[Product], int]:
        column = SORTABLE_COLUMNS.get(sort_by, Product.created_at)
        direction = asc if sort_order == "asc" else desc
        stmt = (
            _apply_filters(select(Product), filters, self._dialect)
            # id breaks ties so pages never overlap.
            .order_by(direction(column), direction(Product.id))
            .offset(offset)
            .limit(limit)
        )
        items = list((await self._session.execute(stmt)).scalars().all())
        return items, await self.count(filters)

    async def count(self, filters: ProductFilters) -> int:
        stmt = _apply_filters(
            select(func.count()).select_from(Product), filters, self._dialect
        )
        return int((await self._session.execute(stmt)).scalar_one())

    async def increment_views(self, product_id: uuid.UUID) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(views=Product.views + 1)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def delete(self, product: Product) -> None:
        await self._session.delete(product)
        await self._session.flush()


# --- Module Notes -----------------------------------------------------------
# Free-text search is a case-insensitive substring match over title, description
# and each tag; the search text never acts as a LIKE wildcard.
