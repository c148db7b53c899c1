"""
harvest_market.api.serializers

ORM -> JSON-ready dict conversion (camelCase keys, string ids).

Referenced records (seller, category) are embedded as small summaries when
the caller has loaded them, otherwise only their id is emitted.
"""

from __future__ import annotations

from typing import Any

from harvest_market.db.models import Category, Order, Product, Review, User


def _id(value: Any) -> str | None:
    return str(value) if value is not None else None


def _ts(record: Any) -> dict[str, Any]:
    return {"createdAt": record.created_at, "updatedAt": record.updated_at}


def rating_out(average: float, count: int) -> dict[str, Any]:
    return {"average": average, "count": count}


def user_brief(user: User) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
    }


def user_out(user: User) -> dict[str, Any]:
    # Never includes the password hash.
    return {
        **user_brief(user),
        "phoneNumber": user.phone_number,
        "productsListed": list(user.products_listed or []),
        "rating": rating_out(user.rating_average, user.rating_count),
        **_ts(user),
    }


def seller_summary(user_id: Any, user: User | None) -> dict[str, Any]:
    if user is None:
        return {"id": _id(user_id)}
    return {
        "id": str(user.id),
        "firstName": user.first_name,
        "lastName": user.last_name,
        "rating": rating_out(user.rating_average, user.rating_count),
    }


def category_summary(category_id: Any, category: Category | None) -> dict[str, Any]:
    if category is None:
        return {"id": _id(category_id)}
    return {"id": str(category.id), "name": category.name}


def category_out(category: Category, parent: Category | None = None) -> dict[str, Any]:
    return {
        "id": str(category.id),
        "name": category.name,
        "description": category.description,
        "image": category.image,
        "parentCategory": (
            category_summary(category.parent_category_id, parent)
            if category.parent_category_id is not None
            else None
        ),
        "isActive": category.is_active,
        **_ts(category),
    }


def product_out(
    product: Product,
    *,
    seller: User | None = None,
    category: Category | None = None,
) -> dict[str, Any]:
    return {
        "id": str(product.id),
        "seller": seller_summary(product.seller_id, seller),
        "title": product.title,
        "description": product.description,
        "category": category_summary(product.category_id, category),
        "images": list(product.images or []),
        "video": product.video,
        "price": product.price,
        "unit": product.unit,
        "quantityAvailable": product.quantity_available,
        "location": product.location,
        "isOrganic": product.is_organic,
        "harvestDate": product.harvest_date,
        "status": product.status,
        "tags": list(product.tags or []),
        "views": product.views,
        "buys": product.buys,
        "rating": rating_out(product.rating_average, product.rating_count),
        **_ts(product),
    }


def products_out(
    products: list[Product],
    sellers: dict[Any, User],
    categories: dict[Any, Category],
) -> list[dict[str, Any]]:
    return [
        product_out(p, seller=sellers.get(p.seller_id), category=categories.get(p.category_id))
        for p in products
    ]


def order_out(order: Order) -> dict[str, Any]:
    return {
        "id": str(order.id),
        "orderNumber": order.order_number,
        "buyer": str(order.buyer_id),
        "seller": str(order.seller_id),
        "items": list(order.items or []),
        "totalAmount": order.total_amount,
        "status": order.status,
        "paymentStatus": order.payment_status,
        "paymentMethod": order.payment_method,
        "paymentId": order.payment_id,
        "deliveryAddress": order.delivery_address,
        "deliveryType": order.delivery_type,
        "deliveryDate": order.delivery_date,
        "notes": order.notes,
        "cancelReason": order.cancel_reason,
        **_ts(order),
    }


def review_out(review: Review) -> dict[str, Any]:
    response = None
    if review.response_text is not None:
        response = {"text": review.response_text, "date": review.response_date}
    return {
        "id": str(review.id),
        "order": str(review.order_id),
        "product": str(review.product_id),
        "reviewer": str(review.reviewer_id),
        "reviewee": str(review.reviewee_id),
        "rating": review.rating,
        "comment": review.comment,
        "images": list(review.images or []),
        "response": response,
        "isVerifiedPurchase": review.is_verified_purchase,
        **_ts(review),
    }
