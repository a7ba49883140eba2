"""Admin management of product attributes and product variations."""

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from src.luxgold.api.http.deps import rate_limit, require_admin, require_csrf
from src.luxgold.api.http.errors import ApiError
from src.luxgold.api.http.routers.admin.common import run_admin_read, run_admin_write
from src.luxgold.entities.catalog.attribute import (
    AttributeRepository,
    ProductAttribute,
    ProductAttributeAttach,
)
from src.luxgold.entities.catalog.product import ProductRepository
from src.luxgold.entities.catalog.variation import (
    Variation,
    VariationCreate,
    VariationRepository,
    VariationUpdate,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(rate_limit()), Depends(require_csrf), Depends(require_admin)],
)


_MISSING = object()


async def _for_product(request: Request, product_id: str, operation, conflict_message: str):
    """Run ``operation`` in the same transaction that checks the product exists."""

    def _run(session: Session):
        if ProductRepository(session).get(product_id) is None:
            return _MISSING
        return operation(session)

    result = await run_admin_write(request, _run, conflict_message)
    if result is _MISSING:
        raise ApiError.not_found("Product", product_id)
    return result


@router.get("/products/{product_id}/attributes")
async def list_product_attributes(
    product_id: str, request: Request
) -> dict[str, list[ProductAttribute]]:
    items = await _for_product(
        request,
        product_id,
        lambda session: AttributeRepository(session).list_for_product(product_id),
        "Conflict",
    )
    return {"items": items}


@router.post(
    "/products/{product_id}/attributes", response_model=ProductAttribute, status_code=201
)
async def attach_product_attribute(
    product_id: str, payload: ProductAttributeAttach, request: Request
) -> ProductAttribute:
    return await _for_product(
        request,
        product_id,
        lambda session: AttributeRepository(session).attach(
            product_id, payload.attribute_id, payload.use_for_variations
        ),
        "Attribute is already attached",
    )


@router.delete("/products/{product_id}/attributes/{attribute_id}", status_code=204)
async def detach_product_attribute(product_id: str, attribute_id: str, request: Request) -> None:
    detached = await run_admin_write(
        request,
        lambda session: AttributeRepository(session).detach(product_id, attribute_id),
        "Attribute is still referenced",
    )
    if not detached:
        raise ApiError.not_found("Product attribute", attribute_id)


@router.get("/products/{product_id}/variations")
async def list_variations(product_id: str, request: Request) -> dict[str, list[Variation]]:
    items = await _for_product(
        request,
        product_id,
        lambda session: VariationRepository(session).list_for_product(product_id),
        "Conflict",
    )
    return {"items": items}


@router.post("/products/{product_id}/variations", response_model=Variation, status_code=201)
async def create_variation(
    product_id: str, payload: VariationCreate, request: Request
) -> Variation:
    return await _for_product(
        request,
        product_id,
        lambda session: VariationRepository(session).create(product_id, payload),
        "Variation conflicts with an existing one",
    )


@router.get("/variations/{variation_id}", response_model=Variation)
async def get_variation(variation_id: str, request: Request) -> Variation:
    variation = await run_admin_read(
        request, lambda session: VariationRepository(session).get(variation_id)
    )
    if variation is None:
        raise ApiError.not_found("Variation", variation_id)
    return variation


@router.patch("/variations/{variation_id}", response_model=Variation)
async def update_variation(
    variation_id: str, payload: VariationUpdate, request: Request
) -> Variation:
    variation = await run_admin_write(
        request,
        lambda session: VariationRepository(session).update(variation_id, payload),
        "Variation conflicts with an existing one",
    )
    if variation is None:
        raise ApiError.not_found("Variation", variation_id)
    return variation


@router.delete("/variations/{variation_id}", status_code=204)
async def delete_variation(variation_id: str, request: Request) -> None:
    deleted = await run_admin_write(
        request,
        lambda session: VariationRepository(session).delete(variation_id),
        "Variation is still referenced",
    )
    if not deleted:
        raise ApiError.not_found("Variation", variation_id)
