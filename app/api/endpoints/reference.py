# app/api/endpoints/reference.py
from fastapi import APIRouter

from app.schemas.reference import (
    CategoryListResponseSchema,
    CategoryResponseSchema,
    DietaryTagListResponseSchema,
    DietaryTagResponseSchema
)
from app.services.reference_service import ReferenceService

router = APIRouter(tags=["reference"])


@router.get("/categories", response_model=CategoryListResponseSchema)
async def get_categories() -> CategoryListResponseSchema:
    """List active menu categories in display order."""
    categories = await ReferenceService.get_categories()
    return CategoryListResponseSchema(
        data=[CategoryResponseSchema.model_validate(category) for category in categories]
    )


@router.get("/dietarytags", response_model=DietaryTagListResponseSchema)
async def get_dietary_tags() -> DietaryTagListResponseSchema:
    """List active dietary tags alphabetically."""
    tags = await ReferenceService.get_dietary_tags()
    return DietaryTagListResponseSchema(
        data=[DietaryTagResponseSchema.model_validate(tag) for tag in tags]
    )
