"""
harvest_market.api.routers.reviews

Review endpoints: public reads, authenticated writes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import Field

from harvest_market.api.deps import review_service
from harvest_market.api.responses import success
from harvest_market.api.schemas import ApiModel
from harvest_market.api.serializers import review_out
from harvest_market.auth.deps import get_current_user
from harvest_market.db.models import User
from harvest_market.services.pagination import PageRequest
from harvest_market.services.review_service import ReviewService

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


class ReviewCreateRequest(ApiModel):
    order: str
    product: str
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)
    images: list[str] = Field(default_factory=list, max_length=5)


class ReviewUpdateRequest(ApiModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)
    images: list[str] | None = Field(default=None, max_length=5)


class ReviewResponseRequest(ApiModel):
    text: str = Field(min_length=1, max_length=1000)


@router.post("", status_code=201)
async def create_review(
    body: ReviewCreateRequest,
    user: User = Depends(get_current_user),
    svc: ReviewService = Depends(review_service),
) -> JSONResponse:
    review = await svc.create(
        reviewer=user,
        order_id=body.order,
        product_id=body.product,
        rating=body.rating,
        comment=body.comment,
        images=body.images,
    )
    return success({"review": review_out(review)}, message="Review created successfully", status_code=201)


@router.get("/product/{product_id}")
async def list_product_reviews(
    product_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    svc: ReviewService = Depends(review_service),
) -> JSONResponse:
    result = await svc.list_for_product(
        product_id=product_id, page=PageRequest(page=page, limit=limit)
    )
    return success(
        {
            "reviews": [review_out(r) for r in result.items],
            "pagination": result.meta(total_key="totalReviews"),
        }
    )


@router.get("/{review_id}")
async def get_review(
    review_id: str,
    svc: ReviewService = Depends(review_service),
) -> JSONResponse:
    return success({"review": review_out(await svc.get(review_id))})


@router.put("/{review_id}")
async def update_review(
    review_id: str,
    body: ReviewUpdateRequest,
    user: User = Depends(get_current_user),
    svc: ReviewService = Depends(review_service),
) -> JSONResponse:
    review = await svc.update(
        actor=user, review_id=review_id, changes=body.model_dump(exclude_unset=True)
    )
    return success({"review": review_out(review)}, message="Review updated successfully")


@router.post("/{review_id}/response")
async def respond_to_review(
    review_id: str,
    body: ReviewResponseRequest,
    user: User = Depends(get_current_user),
    svc: ReviewService = Depends(review_service),
) -> JSONResponse:
    review = await svc.respond(actor=user, review_id=review_id, text=body.text)
    return success({"review": review_out(review)}, message="Response added successfully")


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    user: User = Depends(get_current_user),
    svc: ReviewService = Depends(review_service),
) -> JSONResponse:
    await svc.delete(actor=user, review_id=review_id)
    return success(message="Review deleted successfully")
