"""
harvest_market.api.routers.categories

Category endpoints.

Reads are public. Writes require an authenticated user; there is no admin
role, so any signed-in user may manage categories.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import Field

from harvest_market.api.deps import category_service
from harvest_market.api.responses import success
from harvest_market.api.schemas import ApiModel
from harvest_market.api.serializers import category_out
from harvest_market.auth.deps import get_current_user
from harvest_market.db.models import Category
from harvest_market.services.category_service import CategoryService

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryCreateRequest(ApiModel):
    name: str = Field(min_length=1, max_length=64)
    description: str | None = Field(default=None, max_length=500)
    image: str | None = Field(default=None, max_length=512)
    parent_category: str | None = None


class CategoryUpdateRequest(ApiModel):
    name: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=500)
    image: str | None = Field(default=None, max_length=512)
    parent_category: str | None = None
    is_active: bool | None = None


async def _present(svc: CategoryService, categories: list[Category]) -> list[dict]:
    parents = await svc.parents(categories)
    return [category_out(c, parents.get(c.parent_category_id)) for c in categories]


@router.get("")
async def list_categories(
    active: bool | None = Query(default=None),
    svc: CategoryService = Depends(category_service),
) -> JSONResponse:
    categories = await svc.list(active=active)
    return success({"categories": await _present(svc, categories)})


@router.post("/seed", status_code=201)
async def seed_categories(svc: CategoryService = Depends(category_service)) -> JSONResponse:
    created = await svc.seed()
    return success(
        {"categories": await _present(svc, created)},
        message=f"{len(created)} categories seeded successfully",
        status_code=201,
    )


@router.post("", status_code=201, dependencies=[Depends(get_current_user)])
async def create_category(
    body: CategoryCreateRequest,
    svc: CategoryService = Depends(category_service),
) -> JSONResponse:
    category = await svc.create(
        name=body.name,
        description=body.description,
        image=body.image,
        parent_category_id=body.parent_category,
    )
    (out,) = await _present(svc, [category])
    return success({"category": out}, message="Category created successfully", status_code=201)


@router.get("/{category_id}")
async def get_category(
    category_id: str,
    svc: CategoryService = Depends(category_service),
) -> JSONResponse:
    (out,) = await _present(svc, [await svc.get(category_id)])
    return success({"category": out})


@router.put("/{category_id}", dependencies=[Depends(get_current_user)])
async def update_category(
    category_id: str,
    body: CategoryUpdateRequest,
    svc: CategoryService = Depends(category_service),
) -> JSONResponse:
    changes = body.model_dump(exclude_unset=True)
    if "parent_category" in changes:
        changes["parent_category_id"] = changes.pop("parent_category")
    category = await svc.update(category_id, changes)
    (out,) = await _present(svc, [category])
    return success({"category": out}, message="Category updated successfully")


@router.delete("/{category_id}", dependencies=[Depends(get_current_user)])
async def delete_category(
    category_id: str,
    svc: CategoryService = Depends(category_service),
) -> JSONResponse:
    await svc.delete(category_id)
    return success(message="Category deleted successfully")
