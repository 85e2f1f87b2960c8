# app/services/reference_service.py
from typing import List

from app.models.reference import Category, DietaryTag


class ReferenceService:
    """Read-only access to the category and dietary tag lookup tables."""

    @staticmethod
    async def get_categories() -> List[Category]:
        return await Category.filter(active=True).order_by("display_order", "name")

    @staticmethod
    async def get_dietary_tags() -> List[DietaryTag]:
        return await DietaryTag.filter(active=True).order_by("name")
