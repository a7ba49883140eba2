"""Admin attribute management (metal, size, stone...) and attribute values."""

from fastapi import APIRouter, Depends, Request

from src.luxgold.api.http.deps import rate_limit, require_admin, require_csrf
from src.luxgold.api.http.errors import ApiError
from src.luxgold.api.http.routers.admin.common import run_admin_read, run_admin_write
from src.luxgold.entities.catalog.attribute import (
    Attribute,
    AttributeCreate,
    AttributeRepository,
    AttributeUpdate,
    AttributeValue,
    AttributeValueCreate,
)

router = APIRouter(
    prefix="/admin/attributes",
    tags=["admin"],
    dependencies=[Depends(rate_limit()), Depends(require_csrf), Depends(require_admin)],
)


@router.get("")
async def list_attributes(request: Request) -> dict[str, list[Attribute]]:
    items = await run_admin_read(request, lambda session: AttributeRepository(session).list_all())
    return {"items": items}


@router.post("", response_model=Attribute, status_code=201)
async def create_attribute(payload: AttributeCreate, request: Request) -> Attribute:
    return await run_admin_write(
        request,
        lambda session: AttributeRepository(session).create(payload),
        f"Attribute slug {payload.slug!r} already exists",
    )


@router.get("/{attribute_id}", response_model=Attribute)
async def get_attribute(attribute_id: str, request: Request) -> Attribute:
    attribute = await run_admin_read(
        request, lambda session: AttributeRepository(session).get(attribute_id)
    )
    if attribute is None:
        raise ApiError.not_found("Attribute", attribute_id)
    return attribute


@router.patch("/{attribute_id}", response_model=Attribute)
async def update_attribute(
    attribute_id: str, payload: AttributeUpdate, request: Request
) -> Attribute:
    attribute = await run_admin_write(
        request,
        lambda session: AttributeRepository(session).update(attribute_id, payload),
        f"Attribute slug {payload.slug!r} already exists",
    )
    if attribute is None:
        raise ApiError.not_found("Attribute", attribute_id)
    return attribute


@router.delete("/{attribute_id}", status_code=204)
async def delete_attribute(attribute_id: str, request: Request) -> None:
    deleted = await run_admin_write(
        request,
        lambda session: AttributeRepository(session).delete(attribute_id),
        "Attribute is still referenced",
    )
    if not deleted:
        raise ApiError.not_found("Attribute", attribute_id)


@router.post("/{attribute_id}/values", response_model=AttributeValue, status_code=201)
async def add_attribute_value(
    attribute_id: str, payload: AttributeValueCreate, request: Request
) -> AttributeValue:
    value = await run_admin_write(
        request,
        lambda session: AttributeRepository(session).add_value(attribute_id, payload),
        f"Value slug {payload.slug!r} already exists for this attribute",
    )
    if value is None:
        raise ApiError.not_found("Attribute", attribute_id)
    return value


@router.delete("/{attribute_id}/values/{value_id}", status_code=204)
async def delete_attribute_value(attribute_id: str, value_id: str, request: Request) -> None:
    deleted = await run_admin_write(
        request,
        lambda session: AttributeRepository(session).delete_value(attribute_id, value_id),
        "Attribute value is still referenced",
    )
    if not deleted:
        raise ApiError.not_found("Attribute value", value_id)
