"""
harvest_market.api.routers.orders

Order endpoints. Every route requires authentication; access to a given
order is limited to its buyer and seller (see `OrderService`).
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import Field, field_validator

from harvest_market.api.deps import order_service
from harvest_market.api.responses import success
from harvest_market.api.schemas import ApiModel, naive_utc
from harvest_market.api.serializers import order_out
from harvest_market.auth.deps import get_current_user
from harvest_market.db.models import DeliveryType, OrderStatus, PaymentStatus, User
from harvest_market.services.order_service import OrderService
from harvest_market.services.pagination import PageRequest

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderItemRequest(ApiModel):
    product: str
    quantity: float = Field(ge=1)


class DeliveryAddress(ApiModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = Field(min_length=1)


class OrderCreateRequest(ApiModel):
    items: list[OrderItemRequest] = Field(min_length=1)
    delivery_address: DeliveryAddress
    delivery_type: DeliveryType
    payment_method: str | None = Field(default=None, max_length=64)
    delivery_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=500)

    @field_validator("delivery_date")
    @classmethod
    def normalize_delivery_date(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)


class OrderUpdateRequest(ApiModel):
    notes: str | None = Field(default=None, max_length=500)
    delivery_date: datetime | None = None
    payment_method: str | None = Field(default=None, max_length=64)
    payment_id: str | None = Field(default=None, max_length=128)
    payment_status: PaymentStatus | None = None

    @field_validator("delivery_date")
    @classmethod
    def normalize_delivery_date(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)


class OrderStatusRequest(ApiModel):
    status: OrderStatus
    cancel_reason: str | None = Field(default=None, max_length=500)


@router.post("", status_code=201)
async def create_order(
    body: OrderCreateRequest,
    user: User = Depends(get_current_user),
    svc: OrderService = Depends(order_service),
) -> JSONResponse:
    order = await svc.create(
        buyer=user,
        items=[(item.product, item.quantity) for item in body.items],
        # Stored with wire (camelCase) keys: {street, city, state, zipCode, country}.
        delivery_address=body.delivery_address.model_dump(by_alias=True),
        delivery_type=body.delivery_type,
        payment_method=body.payment_method,
        delivery_date=body.delivery_date,
        notes=body.notes,
    )
    return success({"order": order_out(order)}, message="Order placed successfully", status_code=201)


@router.get("")
async def list_orders(
    role: Literal["buyer", "seller"] = Query(default="buyer"),
    status: OrderStatus | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: User = Depends(get_current_user),
    svc: OrderService = Depends(order_service),
) -> JSONResponse:
    result = await svc.list_for_user(
        user=user,
        role=role,
        status=status.value if status is not None else None,
        page=PageRequest(page=page, limit=limit),
    )
    return success(
        {
            "orders": [order_out(o) for o in result.items],
            "pagination": result.meta(total_key="totalOrders"),
        }
    )


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    user: User = Depends(get_current_user),
    svc: OrderService = Depends(order_service),
) -> JSONResponse:
    order = await svc.get(actor=user, order_id=order_id)
    return success({"order": order_out(order)})


@router.put("/{order_id}")
async def update_order(
    order_id: str,
    body: OrderUpdateRequest,
    user: User = Depends(get_current_user),
    svc: OrderService = Depends(order_service),
) -> JSONResponse:
    order = await svc.update(
        actor=user, order_id=order_id, changes=body.model_dump(exclude_unset=True)
    )
    return success({"order": order_out(order)}, message="Order updated successfully")


@router.patch("/{order_id}/status")
async def change_order_status(
    order_id: str,
    body: OrderStatusRequest,
    user: User = Depends(get_current_user),
    svc: OrderService = Depends(order_service),
) -> JSONResponse:
    order = await svc.transition(
        actor=user,
        order_id=order_id,
        status=body.status,
        cancel_reason=body.cancel_reason,
    )
    return success({"order": order_out(order)}, message=f"Order status updated to {order.status}")


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    user: User = Depends(get_current_user),
    svc: OrderService = Depends(order_service),
) -> JSONResponse:
    await svc.delete(actor=user, order_id=order_id)
    return success(message="Order deleted successfully")
