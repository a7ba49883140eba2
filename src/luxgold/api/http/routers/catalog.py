"""Public storefront endpoints: listed products, categories and search."""

from fastapi import APIRouter, Depends, Query, Request
from sqlmodel import Session

from src.luxgold.api.http.deps import get_database_service, rate_limit
from src.luxgold.api.http.errors import ApiError
from src.luxgold.core.services.database.db_retry import with_database_retry
from src.luxgold.entities.catalog.category import Category, CategoryRepository
from src.luxgold.entities.catalog.product import Product, ProductPage, ProductRepository

MAX_PER_PAGE = 100
SEARCH_LIMIT = 20

router = APIRouter(tags=["catalog"])


@router.get("/catalog/products", response_model=ProductPage)
async def list_products(
    request: Request,
    category: str | None = Query(default=None, description="Category slug"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1),
) -> ProductPage:
    """Published, public products, newest first."""
    per_page = min(per_page, MAX_PER_PAGE)

    def _load(session: Session) -> ProductPage:
        repo = ProductRepository(session)
        return ProductPage(
            items=repo.list_listed(category, limit=per_page, offset=(page - 1) * per_page),
            page=page,
            per_page=per_page,
            total=repo.count_listed(category),
        )

    return await with_database_retry(get_database_service(request), _load)


@router.get("/catalog/products/{slug}", response_model=Product)
async def get_product(slug: str, request: Request) -> Product:
    product = await with_database_retry(
        get_database_service(request),
        lambda session: ProductRepository(session).get_by_slug(slug, listed_only=True),
    )
    if product is None:
        raise ApiError.not_found("Product", slug)
    return product


@router.get("/catalog/categories")
async def list_categories(request: Request) -> dict[str, list[Category]]:
    items = await with_database_retry(
        get_database_service(request),
        lambda session: CategoryRepository(session).list_with_counts(),
    )
    return {"items": items}


@router.get("/search", dependencies=[Depends(rate_limit())])
async def search(request: Request, q: str = "") -> dict[str, list[dict[str, str]]]:
    """Quick search by product name, slug or category name."""
    q = q.strip()
    if not q:
        return {"items": []}

    products = await with_database_retry(
        get_database_service(request),
        lambda session: ProductRepository(session).search_listed(q, limit=SEARCH_LIMIT),
    )
    return {"items": [{"slug": p.slug, "name": p.name} for p in products]}
