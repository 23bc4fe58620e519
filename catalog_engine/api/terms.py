"""Attribute term API endpoints.

- GET /products/attribute-terms?attributeId= - list terms of an attribute
- POST /products/attribute-terms - create a term
- POST /products/attribute-terms/bulk-delete - delete several terms
- GET /products/attribute-terms/slug-check - check slug availability
- PUT /products/attribute-terms/{id} - update a term
- DELETE /products/attribute-terms/{id} - delete a term
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_engine.api.converters import term_to_response
from catalog_engine.api.deps import OrganizationId, get_registry
from catalog_engine.api.schemas import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    ErrorResponse,
    SlugCheckResponse,
    SuccessResponse,
    TermCreateRequest,
    TermResponse,
    TermUpdateRequest,
)
from catalog_engine.catalog.terms import TermRegistry

router = APIRouter(
    prefix="/products/attribute-terms",
    tags=["Attribute Terms"],
    responses={401: {"model": ErrorResponse}},
)

Registry = Annotated[TermRegistry, Depends(get_registry)]


@router.get(
    "",
    response_model=list[TermResponse],
    responses={404: {"model": ErrorResponse}},
    summary="List terms of an attribute",
)
async def list_terms(
    organization_id: OrganizationId,
    registry: Registry,
    attribute_id: str = Query(..., alias="attributeId"),
) -> list[TermResponse]:
    terms = await registry.list_terms(organization_id, attribute_id)
    return [term_to_response(t) for t in terms]


@router.post(
    "",
    response_model=TermResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create term",
)
async def create_term(
    body: TermCreateRequest, organization_id: OrganizationId, registry: Registry
) -> TermResponse:
    term = await registry.create_term(
        organization_id, body.attribute_id, name=body.name, slug=body.slug
    )
    return term_to_response(term)


@router.post(
    "/bulk-delete",
    response_model=BulkDeleteResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Delete several terms",
)
async def bulk_delete_terms(
    body: BulkDeleteRequest, organization_id: OrganizationId, registry: Registry
) -> BulkDeleteResponse:
    deleted = await registry.bulk_delete_terms(organization_id, body.ids)
    return BulkDeleteResponse(deleted=deleted)


@router.get("/slug-check", response_model=SlugCheckResponse, summary="Check term slug")
async def check_term_slug(
    organization_id: OrganizationId,
    registry: Registry,
    attribute_id: str = Query(..., alias="attributeId"),
    slug: str = Query(..., min_length=1),
    exclude_id: str | None = Query(default=None, alias="excludeId"),
) -> SlugCheckResponse:
    exists = await registry.term_slug_exists(
        organization_id, attribute_id, slug, exclude_id=exclude_id
    )
    return SlugCheckResponse(exists=exists)


@router.put(
    "/{term_id}",
    response_model=TermResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update term",
)
async def update_term(
    term_id: str,
    body: TermUpdateRequest,
    organization_id: OrganizationId,
    registry: Registry,
) -> TermResponse:
    term = await registry.update_term(organization_id, term_id, name=body.name, slug=body.slug)
    return term_to_response(term)


@router.delete(
    "/{term_id}",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete term",
)
async def delete_term(
    term_id: str, organization_id: OrganizationId, registry: Registry
) -> SuccessResponse:
    await registry.delete_term(organization_id, term_id)
    return SuccessResponse()
