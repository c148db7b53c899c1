"""
harvest_market.services.category_service

Category CRUD and the default-category seed.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.db.models import Category
from harvest_market.db.repositories.categories import CategoryRepo
from harvest_market.db.session import transaction
from harvest_market.errors import DuplicateError, NotFoundError, ValidationError
from harvest_market.observability.logging import get_logger
from harvest_market.services.ids import parse_id

log = get_logger(__name__)

CATEGORY_MUTABLE_FIELDS = frozenset(
    {"name", "description", "image", "parent_category_id", "is_active"}
)

DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Vegetables", "Fresh vegetables from local farms"),
    ("Fruits", "Seasonal fruits and berries"),
    ("Grains", "Rice, wheat, and other grains"),
    ("Dairy", "Milk, cheese, and dairy products"),
    ("Meat", "Fresh meat and poultry"),
    ("Eggs", "Farm-fresh eggs"),
    ("Honey", "Natural honey and bee products"),
    ("Herbs", "Fresh and dried herbs"),
    ("Nuts", "Various nuts and seeds"),
    ("Organic", "Certified organic products"),
)


class CategoryService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._categories = CategoryRepo(session)

    async def create(
        self,
        *,
        name: str,
        description: str | None = None,
        image: str | None = None,
        parent_category_id: Any = None,
    ) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if await self._categories.get_by_name(name) is not None:
            raise DuplicateError("Category")

        parent_id = await self._resolve_parent(parent_category_id)
        async with transaction(self._session):
            category = await self._categories.create(
                name=name,
                description=description,
                image=image,
                parent_category_id=parent_id,
            )
        log.info("category_created", category_id=str(category.id), name=name)
        return category

    async def list(self, *, active: bool | None = None) -> list[Category]:
        return await self._categories.list(active=active)

    async def get(self, category_id: Any) -> Category:
        category = await self._categories.get(parse_id(category_id, "category"))
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def update(self, category_id: Any, changes: Mapping[str, Any]) -> Category:
        category = await self.get(category_id)
        updates = {k: v for k, v in changes.items() if k in CATEGORY_MUTABLE_FIELDS}

        if "name" in updates:
            name = (updates["name"] or "").strip()
            if not name:
                raise ValidationError("Category name is required")
            existing = await self._categories.get_by_name(name)
            if existing is not None and existing.id != category.id:
                raise DuplicateError("Category")
            updates["name"] = name
        if "parent_category_id" in updates:
            parent_id = await self._resolve_parent(updates["parent_category_id"])
            if parent_id == category.id:
                raise ValidationError("A category cannot be its own parent")
            updates["parent_category_id"] = parent_id
        if "is_active" in updates and updates["is_active"] is None:
            raise ValidationError("isActive must be a boolean")

        async with transaction(self._session):
            for field, value in updates.items():
                setattr(category, field, value)
        return category

    async def delete(self, category_id: Any) -> None:
        category = await self.get(category_id)
        async with transaction(self._session):
            await self._categories.delete(category)
        log.info("category_deleted", category_id=str(category.id))

    async def seed(self) -> list[Category]:
        created: list[Category] = []
        async with transaction(self._session):
            for name, description in DEFAULT_CATEGORIES:
                if await self._categories.get_by_name(name) is None:
                    created.append(
                        await self._categories.create(name=name, description=description)
                    )
        log.info("categories_seeded", created=len(created))
        return created

    async def _resolve_parent(self, value: Any) -> uuid.UUID | None:
        if value in (None, ""):
            return None
        parent_id = parse_id(value, "parent category")
        if await self._categories.get(parent_id) is None:
            raise NotFoundError("Parent category not found")
        return parent_id

    async def parents(self, categories: list[Category]) -> dict[uuid.UUID, Category]:
        ids = {c.parent_category_id for c in categories if c.parent_category_id is not None}
        return await self._categories.get_many(ids)
