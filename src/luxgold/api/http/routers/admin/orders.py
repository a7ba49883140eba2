"""Admin order management."""

from fastapi import APIRouter, Depends, Query, Request

from src.luxgold.api.http.deps import rate_limit, require_admin, require_csrf
from src.luxgold.api.http.errors import ApiError
from src.luxgold.api.http.routers.admin.common import run_admin_read, run_admin_write
from src.luxgold.entities.sales.order import (
    Order,
    OrderCreate,
    OrderRepository,
    OrderStatusUpdate,
)
from src.luxgold.entities.sales.order.entity import OrderStatus

router = APIRouter(
    prefix="/admin/orders",
    tags=["admin"],
    dependencies=[Depends(rate_limit()), Depends(require_csrf), Depends(require_admin)],
)


@router.get("")
async def list_orders(
    request: Request, status: OrderStatus | None = Query(default=None)
) -> dict[str, list[Order]]:
    items = await run_admin_read(
        request, lambda session: OrderRepository(session).list_recent(status=status)
    )
    return {"items": items}


@router.post("", response_model=Order, status_code=201)
async def create_order(payload: OrderCreate, request: Request) -> Order:
    return await run_admin_write(
        request,
        lambda session: OrderRepository(session).create(payload),
        f"Order number {payload.number!r} already exists",
    )


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, request: Request) -> Order:
    order = await run_admin_read(request, lambda session: OrderRepository(session).get(order_id))
    if order is None:
        raise ApiError.not_found("Order", order_id)
    return order


@router.patch("/{order_id}", response_model=Order)
async def update_order_status(
    order_id: str, payload: OrderStatusUpdate, request: Request
) -> Order:
    order = await run_admin_write(
        request,
        lambda session: OrderRepository(session).set_status(order_id, payload.status),
        "Order update conflicts with existing data",
    )
    if order is None:
        raise ApiError.not_found("Order", order_id)
    return order
