"""Attribute API endpoints.

- GET /products/attributes - list attributes
- POST /products/attributes - create an attribute
- GET /products/attributes/slug-check - check slug availability
- GET /products/attributes/{id} - attribute details
- PUT /products/attributes/{id} - update an attribute
- DELETE /products/attributes/{id} - delete an attribute and its terms
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_engine.api.converters import attribute_to_response
from catalog_engine.api.deps import OrganizationId, get_registry
from catalog_engine.api.schemas import (
    AttributeRequest,
    AttributeResponse,
    ErrorResponse,
    SlugCheckResponse,
    SuccessResponse,
)
from catalog_engine.catalog.terms import TermRegistry

router = APIRouter(
    prefix="/products/attributes",
    tags=["Attributes"],
    responses={401: {"model": ErrorResponse}},
)

Registry = Annotated[TermRegistry, Depends(get_registry)]


@router.get("", response_model=list[AttributeResponse], summary="List attributes")
async def list_attributes(
    organization_id: OrganizationId, registry: Registry
) -> list[AttributeResponse]:
    attributes = await registry.list_attributes(organization_id)
    return [attribute_to_response(a) for a in attributes]


@router.post(
    "",
    response_model=AttributeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create attribute",
)
async def create_attribute(
    body: AttributeRequest, organization_id: OrganizationId, registry: Registry
) -> AttributeResponse:
    attribute = await registry.create_attribute(organization_id, name=body.name, slug=body.slug)
    return attribute_to_response(attribute)


@router.get("/slug-check", response_model=SlugCheckResponse, summary="Check attribute slug")
async def check_attribute_slug(
    organization_id: OrganizationId,
    registry: Registry,
    slug: str = Query(..., min_length=1),
    exclude_id: str | None = Query(default=None, alias="excludeId"),
) -> SlugCheckResponse:
    exists = await registry.attribute_slug_exists(organization_id, slug, exclude_id=exclude_id)
    return SlugCheckResponse(exists=exists)


@router.get(
    "/{attribute_id}",
    response_model=AttributeResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get attribute",
)
async def get_attribute(
    attribute_id: str, organization_id: OrganizationId, registry: Registry
) -> AttributeResponse:
    return attribute_to_response(await registry.get_attribute(organization_id, attribute_id))


@router.put(
    "/{attribute_id}",
    response_model=AttributeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update attribute",
)
async def update_attribute(
    attribute_id: str,
    body: AttributeRequest,
    organization_id: OrganizationId,
    registry: Registry,
) -> AttributeResponse:
    attribute = await registry.update_attribute(
        organization_id, attribute_id, name=body.name, slug=body.slug
    )
    return attribute_to_response(attribute)


@router.delete(
    "/{attribute_id}",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete attribute",
    description="Delete an attribute and its terms. Refused while products use it.",
)
async def delete_attribute(
    attribute_id: str, organization_id: OrganizationId, registry: Registry
) -> SuccessResponse:
    await registry.delete_attribute(organization_id, attribute_id)
    return SuccessResponse()
