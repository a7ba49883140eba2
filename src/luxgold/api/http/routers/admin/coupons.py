"""Admin coupon management."""

from fastapi import APIRouter, Depends, Request

from src.luxgold.api.http.deps import rate_limit, require_admin, require_csrf
from src.luxgold.api.http.errors import ApiError
from src.luxgold.api.http.routers.admin.common import run_admin_read, run_admin_write
from src.luxgold.entities.sales.coupon import (
    Coupon,
    CouponCreate,
    CouponRepository,
    CouponUpdate,
)

router = APIRouter(
    prefix="/admin/coupons",
    tags=["admin"],
    dependencies=[Depends(rate_limit()), Depends(require_csrf), Depends(require_admin)],
)


@router.get("")
async def list_coupons(request: Request) -> dict[str, list[Coupon]]:
    items = await run_admin_read(request, lambda session: CouponRepository(session).list_recent())
    return {"items": items}


@router.post("", response_model=Coupon, status_code=201)
async def create_coupon(payload: CouponCreate, request: Request) -> Coupon:
    return await run_admin_write(
        request,
        lambda session: CouponRepository(session).create(payload),
        f"Coupon code {payload.code!r} already exists",
    )


@router.get("/{coupon_id}", response_model=Coupon)
async def get_coupon(coupon_id: str, request: Request) -> Coupon:
    coupon = await run_admin_read(request, lambda session: CouponRepository(session).get(coupon_id))
    if coupon is None:
        raise ApiError.not_found("Coupon", coupon_id)
    return coupon


@router.patch("/{coupon_id}", response_model=Coupon)
async def update_coupon(coupon_id: str, payload: CouponUpdate, request: Request) -> Coupon:
    coupon = await run_admin_write(
        request,
        lambda session: CouponRepository(session).update(coupon_id, payload),
        f"Coupon code {payload.code!r} already exists",
    )
    if coupon is None:
        raise ApiError.not_found("Coupon", coupon_id)
    return coupon


@router.delete("/{coupon_id}", status_code=204)
async def delete_coupon(coupon_id: str, request: Request) -> None:
    deleted = await run_admin_write(
        request,
        lambda session: CouponRepository(session).delete(coupon_id),
        "Coupon is still referenced",
    )
    if not deleted:
        raise ApiError.not_found("Coupon", coupon_id)
