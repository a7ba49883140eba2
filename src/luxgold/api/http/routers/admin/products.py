"""Admin product management."""

from fastapi import APIRouter, Depends, Query, Request

from src.luxgold.api.http.deps import rate_limit, require_admin, require_csrf
from src.luxgold.api.http.errors import ApiError
from src.luxgold.api.http.routers.admin.common import run_admin_read, run_admin_write
from src.luxgold.entities.catalog.product import (
    Product,
    ProductCreate,
    ProductPage,
    ProductRepository,
    ProductUpdate,
)

MAX_PER_PAGE = 100

router = APIRouter(
    prefix="/admin/products",
    tags=["admin"],
    dependencies=[Depends(rate_limit()), Depends(require_csrf), Depends(require_admin)],
)


@router.get("", response_model=ProductPage)
async def list_products(
    request: Request,
    q: str | None = Query(default=None, description="Matches name, slug or SKU"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1),
) -> ProductPage:
    per_page = min(per_page, MAX_PER_PAGE)

    def _load(session) -> ProductPage:
        repo = ProductRepository(session)
        return ProductPage(
            items=repo.list_all(q, limit=per_page, offset=(page - 1) * per_page),
            page=page,
            per_page=per_page,
            total=repo.count_all(q),
        )

    return await run_admin_read(request, _load)


@router.post("", response_model=Product, status_code=201)
async def create_product(payload: ProductCreate, request: Request) -> Product:
    return await run_admin_write(
        request,
        lambda session: ProductRepository(session).create(payload),
        f"Product slug {payload.slug!r} already exists",
    )


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, request: Request) -> Product:
    product = await run_admin_read(request, lambda session: ProductRepository(session).get(product_id))
    if product is None:
        raise ApiError.not_found("Product", product_id)
    return product


@router.patch("/{product_id}", response_model=Product)
async def update_product(product_id: str, payload: ProductUpdate, request: Request) -> Product:
    product = await run_admin_write(
        request,
        lambda session: ProductRepository(session).update(product_id, payload),
        f"Product slug {payload.slug!r} already exists",
    )
    if product is None:
        raise ApiError.not_found("Product", product_id)
    return product


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: str, request: Request) -> None:
    deleted = await run_admin_write(
        request,
        lambda session: ProductRepository(session).delete(product_id),
        "Product is still referenced",
    )
    if not deleted:
        raise ApiError.not_found("Product", product_id)
