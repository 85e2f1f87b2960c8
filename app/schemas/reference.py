# app/schemas/reference.py
from typing import List, Optional

from app.schemas.menu_item import CamelModel


class CategoryResponseSchema(CamelModel):
    """Schema for category responses."""

    id: int
    name: str
    display_order: int

    model_config = {"from_attributes": True}


class DietaryTagResponseSchema(CamelModel):
    """Schema for dietary tag responses."""

    id: int
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class CategoryListResponseSchema(CamelModel):
    data: List[CategoryResponseSchema]


class DietaryTagListResponseSchema(CamelModel):
    data: List[DietaryTagResponseSchema]
