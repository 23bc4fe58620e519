"""Category API endpoints.

- GET /products/categories - list categories ordered by name
- POST /products/categories - create a category
- GET /products/categories/tree - nested category tree
- GET /products/categories/flat - flattened tree with levels
- GET /products/categories/slug-check - check slug availability
- GET /products/categories/{id} - category details
- PUT /products/categories/{id} - replace a category
- DELETE /products/categories/{id} - delete a leaf category
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_engine.api.converters import (
    category_to_response,
    flat_to_response,
    node_to_response,
)
from catalog_engine.api.deps import OrganizationId, get_categories
from catalog_engine.api.schemas import (
    CategoryRequest,
    CategoryResponse,
    CategoryTreeNodeResponse,
    ErrorResponse,
    FlatCategoryResponse,
    SlugCheckResponse,
    SuccessResponse,
)
from catalog_engine.catalog.categories import CategoryTreeStore

router = APIRouter(
    prefix="/products/categories",
    tags=["Categories"],
    responses={401: {"model": ErrorResponse}},
)

Categories = Annotated[CategoryTreeStore, Depends(get_categories)]


@router.get("", response_model=list[CategoryResponse], summary="List categories")
async def list_categories(
    organization_id: OrganizationId, categories: Categories
) -> list[CategoryResponse]:
    return [category_to_response(c) for c in await categories.list_categories(organization_id)]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create category",
)
async def create_category(
    body: CategoryRequest, organization_id: OrganizationId, categories: Categories
) -> CategoryResponse:
    category = await categories.create_category(
        organization_id,
        name=body.name,
        slug=body.slug,
        image=body.image,
        parent_id=body.parent_id,
    )
    return category_to_response(category)


@router.get("/tree", response_model=list[CategoryTreeNodeResponse], summary="Category tree")
async def get_category_tree(
    organization_id: OrganizationId, categories: Categories
) -> list[CategoryTreeNodeResponse]:
    return [node_to_response(n) for n in await categories.get_tree(organization_id)]


@router.get(
    "/flat",
    response_model=list[FlatCategoryResponse],
    summary="Flattened category tree",
    description="Depth-first, siblings by name, with each node's depth as level.",
)
async def get_flat_categories(
    organization_id: OrganizationId, categories: Categories
) -> list[FlatCategoryResponse]:
    return [flat_to_response(f) for f in await categories.get_flat_tree(organization_id)]


@router.get("/slug-check", response_model=SlugCheckResponse, summary="Check category slug")
async def check_category_slug(
    organization_id: OrganizationId,
    categories: Categories,
    slug: str = Query(..., min_length=1),
    exclude_id: str | None = Query(default=None, alias="excludeId"),
) -> SlugCheckResponse:
    exists = await categories.category_slug_exists(organization_id, slug, exclude_id=exclude_id)
    return SlugCheckResponse(exists=exists)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category",
)
async def get_category(
    category_id: str, organization_id: OrganizationId, categories: Categories
) -> CategoryResponse:
    return category_to_response(await categories.get_category(organization_id, category_id))


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Replace category",
)
async def update_category(
    category_id: str,
    body: CategoryRequest,
    organization_id: OrganizationId,
    categories: Categories,
) -> CategoryResponse:
    category = await categories.update_category(
        organization_id,
        category_id,
        name=body.name,
        slug=body.slug,
        image=body.image,
        parent_id=body.parent_id,
    )
    return category_to_response(category)


@router.delete(
    "/{category_id}",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete category",
    description="Refused while the category has subcategories.",
)
async def delete_category(
    category_id: str, organization_id: OrganizationId, categories: Categories
) -> SuccessResponse:
    await categories.delete_category(organization_id, category_id)
    return SuccessResponse()
