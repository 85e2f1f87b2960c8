# app/schemas/menu_item.py
import json
import re
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models.menu_item import MenuItem, VALID_CATEGORIES, VALID_DIETARY_TAGS, MAX_DIETARY_TAGS

NAME_PATTERN = re.compile(r"^[A-Za-z0-9 '-]+$")
MAX_PRICE = Decimal("999.99")

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_name(value: str) -> str:
    if not value.strip():
        raise ValueError("Name is required")
    if not NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters, numbers, spaces, hyphens, and apostrophes")
    return value


def _validate_description(value: str) -> str:
    if not value.strip():
        raise ValueError("Description is required")
    return value


def _validate_price(value: Decimal) -> Decimal:
    if value <= 0:
        raise ValueError("Price must be greater than 0")
    if value > MAX_PRICE:
        raise ValueError("Price cannot exceed $999.99")
    if (value * 100) % 1 != 0:
        raise ValueError("Price can have at most 2 decimal places")
    return value


def _validate_category(value: str) -> str:
    if value not in VALID_CATEGORIES:
        raise ValueError(f"Category must be one of: {', '.join(sorted(VALID_CATEGORIES))}")
    return value


def _validate_dietary_tags(value: List[str]) -> List[str]:
    problems = []
    if any(tag not in VALID_DIETARY_TAGS for tag in value):
        problems.append(f"All dietary tags must be from: {', '.join(sorted(VALID_DIETARY_TAGS))}")
    if len(value) > MAX_DIETARY_TAGS:
        problems.append(f"Cannot have more than {MAX_DIETARY_TAGS} dietary tags")
    if len(set(value)) != len(value):
        problems.append("Dietary tags must be unique")
    if problems:
        raise ValueError("; ".join(problems))
    return value


class MenuItemCreateSchema(CamelModel):
    """Schema for creating a new menu item."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    price: Decimal
    category: str
    dietary_tags: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _validate_name(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        return _validate_description(value)

    @field_validator("price")
    @classmethod
    def validate_price(cls, value: Decimal) -> Decimal:
        return _validate_price(value)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: str) -> str:
        return _validate_category(value)

    @field_validator("dietary_tags")
    @classmethod
    def validate_dietary_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        return _validate_dietary_tags(value)


class MenuItemUpdateSchema(CamelModel):
    """
    Schema for updating a menu item.

    Every field is optional; a field left out (or sent as null) is not touched.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    price: Optional[Decimal] = None
    category: Optional[str] = None
    dietary_tags: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_name(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_description(value)

    @field_validator("price")
    @classmethod
    def validate_price(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        if value is None:
            return value
        return _validate_price(value)

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_category(value)

    @field_validator("dietary_tags")
    @classmethod
    def validate_dietary_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        return _validate_dietary_tags(value)

    @model_validator(mode="after")
    def validate_not_empty(self) -> "MenuItemUpdateSchema":
        if not self.supplied_fields():
            raise ValueError("At least one field must be provided for update")
        return self

    def supplied_fields(self) -> dict:
        """Return the fields the caller actually provided, by attribute name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


def deserialize_dietary_tags(raw: Optional[str]) -> List[str]:
    """
    Decode the stored dietary tags column.

    Anything that is not a JSON array of strings is treated as no tags.
    """
    if not raw:
        return []
    try:
        tags = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(tags, list):
        return []
    return [tag for tag in tags if isinstance(tag, str)]


def serialize_dietary_tags(tags: Optional[List[str]]) -> Optional[str]:
    """Encode dietary tags for storage; an empty or missing list is stored as NULL."""
    if not tags:
        return None
    return json.dumps(tags)


class MenuItemResponseSchema(CamelModel):
    """Schema for menu item responses."""

    id: int
    name: str
    description: str
    price: Decimal
    category: str
    dietary_tags: List[str]
    created_at: datetime
    updated_at: datetime

    @field_serializer("price")
    def serialize_price(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_orm_menu_item(cls, menu_item: MenuItem) -> "MenuItemResponseSchema":
        """
        Create response schema from ORM model.

        Args:
            menu_item: MenuItem ORM model

        Returns:
            MenuItemResponseSchema instance
        """
        return cls(
            id=menu_item.id,
            name=menu_item.name,
            description=menu_item.description,
            price=menu_item.price,
            category=menu_item.category,
            dietary_tags=deserialize_dietary_tags(menu_item.dietary_tags),
            created_at=menu_item.created_at,
            updated_at=menu_item.updated_at
        )


class PaginationSchema(CamelModel):
    """Pagination metadata for list responses."""

    page: int
    limit: int
    total: int
    total_pages: int


class MenuItemListResponseSchema(CamelModel):
    """Schema for a page of menu items."""

    data: List[MenuItemResponseSchema]
    pagination: PaginationSchema


class ApiResponseSchema(CamelModel, Generic[T]):
    """Standard wrapper for single-object responses."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class DeletedMenuItemSchema(CamelModel):
    id: int


class ErrorDetailsSchema(CamelModel):
    code: str
    message: str
    details: Optional[str] = None
    timestamp: datetime


class ErrorResponseSchema(CamelModel):
    """Error envelope, used for OpenAPI documentation."""

    error: ErrorDetailsSchema
