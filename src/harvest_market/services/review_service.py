"""
harvest_market.services.review_service

Product reviews from verified buyers.

Responsibilities:
- Accept reviews only from the buyer of a delivered order containing the product.
- Keep product and seller rating aggregates in step with every review write.
- Reviewer-only edit/delete; reviewee-only public response.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from harvest_market.auth.ownership import ensure_owner
from harvest_market.db.base import utcnow
from harvest_market.db.models import OrderStatus, Review, User
from harvest_market.db.repositories.orders import OrderRepo
from harvest_market.db.repositories.products import ProductRepo
from harvest_market.db.repositories.reviews import ReviewRepo
from harvest_market.db.repositories.users import UserRepo
from harvest_market.db.session import transaction
from harvest_market.errors import DuplicateError, NotFoundError, ValidationError
from harvest_market.observability.logging import get_logger
from harvest_market.services.ids import parse_id
from harvest_market.services.pagination import Page, PageRequest

log = get_logger(__name__)

REVIEW_MUTABLE_FIELDS = frozenset({"rating", "comment", "images"})
MAX_COMMENT_LENGTH = 1000
MAX_REVIEW_IMAGES = 5


def validate_review(review: Review) -> None:
    errors: list[str] = []
    if review.rating is None:
        errors.append("Rating is required")
    elif not 1 <= review.rating <= 5:
        errors.append("Rating must be between 1 and 5")
    if review.comment is not None and len(review.comment) > MAX_COMMENT_LENGTH:
        errors.append(f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters")
    if review.images is not None and len(review.images) > MAX_REVIEW_IMAGES:
        errors.append(f"Cannot upload more than {MAX_REVIEW_IMAGES} images")
    if errors:
        raise ValidationError(", ".join(errors))


class ReviewService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._reviews = ReviewRepo(session)
        self._orders = OrderRepo(session)
        self._products = ProductRepo(session)
        self._users = UserRepo(session)

    async def create(
        self,
        *,
        reviewer: User,
        order_id: Any,
        product_id: Any,
        rating: int,
        comment: str | None = None,
        images: list[str] | None = None,
    ) -> Review:
        oid = parse_id(order_id, "order")
        pid = parse_id(product_id, "product")

        order = await self._orders.get(oid)
        if order is None:
            raise NotFoundError("Order not found")
        ensure_owner(reviewer.id, order.buyer_id, action="review", resource="order")
        if order.status != OrderStatus.delivered.value:
            raise ValidationError("You can only review delivered orders")
        if str(pid) not in {item["product"] for item in order.items}:
            raise ValidationError("Product is not part of this order")
        if await self._products.get(pid) is None:
            raise NotFoundError("Product not found")
        if await self._reviews.get_for_order_product(oid, pid) is not None:
            raise DuplicateError("Review")

        fields: dict[str, Any] = dict(
            order_id=oid,
            product_id=pid,
            reviewer_id=reviewer.id,
            reviewee_id=order.seller_id,
            rating=rating,
            comment=comment,
            images=list(images or []),
            is_verified_purchase=True,
        )
        validate_review(Review(**fields))

        async with transaction(self._session):
            review = await self._reviews.create(**fields)
            await self._refresh_ratings(review.product_id, review.reviewee_id)

        log.info("review_created", review_id=str(review.id), product_id=str(pid))
        return review

    async def list_for_product(self, *, product_id: Any, page: PageRequest) -> Page[Review]:
        items, total = await self._reviews.list_for_product(
            parse_id(product_id, "product"), offset=page.offset, limit=page.limit
        )
        return Page(items=items, page=page.page, limit=page.limit, total=total)

    async def get(self, review_id: Any) -> Review:
        review = await self._reviews.get(parse_id(review_id, "review"))
        if review is None:
            raise NotFoundError("Review not found")
        return review

    async def update(self, *, actor: User, review_id: Any, changes: Mapping[str, Any]) -> Review:
        review = await self.get(review_id)
        ensure_owner(actor.id, review.reviewer_id, action="update", resource="review")

        updates = {k: v for k, v in changes.items() if k in REVIEW_MUTABLE_FIELDS}
        if "images" in updates:
            updates["images"] = list(updates["images"] or [])

        async with transaction(self._session):
            for field, value in updates.items():
                setattr(review, field, value)
            validate_review(review)
            await self._session.flush()
            await self._refresh_ratings(review.product_id, review.reviewee_id)
        return review

    async def respond(self, *, actor: User, review_id: Any, text: str) -> Review:
        review = await self.get(review_id)
        ensure_owner(actor.id, review.reviewee_id, action="respond to", resource="review")
        text = (text or "").strip()
        if not text:
            raise ValidationError("Response text is required")

        async with transaction(self._session):
            review.response_text = text
            review.response_date = utcnow()
        return review

    async def delete(self, *, actor: User, review_id: Any) -> None:
        review = await self.get(review_id)
        ensure_owner(actor.id, review.reviewer_id, action="delete", resource="review")

        async with transaction(self._session):
            await self._reviews.delete(review)
            await self._refresh_ratings(review.product_id, review.reviewee_id)
        log.info("review_deleted", review_id=str(review.id))

    async def _refresh_ratings(self, product_id: uuid.UUID, reviewee_id: uuid.UUID) -> None:
        product = await self._products.get(product_id, for_update=True)
        if product is not None:
            product.rating_average, product.rating_count = (
                await self._reviews.rating_for_product(product_id)
            )
        average, count = await self._reviews.rating_for_reviewee(reviewee_id)
        await self._users.set_rating(reviewee_id, average=average, count=count)
