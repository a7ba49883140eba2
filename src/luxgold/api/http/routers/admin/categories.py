"""Admin category management."""

from fastapi import APIRouter, Depends, Request

from src.luxgold.api.http.deps import rate_limit, require_admin, require_csrf
from src.luxgold.api.http.errors import ApiError
from src.luxgold.api.http.routers.admin.common import run_admin_read, run_admin_write
from src.luxgold.entities.catalog.category import (
    Category,
    CategoryCreate,
    CategoryRepository,
    CategoryUpdate,
)

router = APIRouter(
    prefix="/admin/categories",
    tags=["admin"],
    dependencies=[Depends(rate_limit()), Depends(require_csrf), Depends(require_admin)],
)


@router.get("")
async def list_categories(request: Request) -> dict[str, list[Category]]:
    items = await run_admin_read(
        request, lambda session: CategoryRepository(session).list_with_counts()
    )
    return {"items": items}


@router.post("", response_model=Category, status_code=201)
async def create_category(payload: CategoryCreate, request: Request) -> Category:
    return await run_admin_write(
        request,
        lambda session: CategoryRepository(session).create(payload),
        f"Category slug {payload.slug!r} already exists",
    )


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str, request: Request) -> Category:
    category = await run_admin_read(
        request, lambda session: CategoryRepository(session).get(category_id)
    )
    if category is None:
        raise ApiError.not_found("Category", category_id)
    return category


@router.patch("/{category_id}", response_model=Category)
async def update_category(
    category_id: str, payload: CategoryUpdate, request: Request
) -> Category:
    category = await run_admin_write(
        request,
        lambda session: CategoryRepository(session).update(category_id, payload),
        f"Category slug {payload.slug!r} already exists",
    )
    if category is None:
        raise ApiError.not_found("Category", category_id)
    return category


@router.delete("/{category_id}", status_code=204)
async def delete_category(category_id: str, request: Request) -> None:
    deleted = await run_admin_write(
        request,
        lambda session: CategoryRepository(session).delete(category_id),
        "Category is still referenced",
    )
    if not deleted:
        raise ApiError.not_found("Category", category_id)
