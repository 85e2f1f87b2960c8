# app/models/menu_item.py
from enum import Enum
from tortoise import Model, fields


class MenuCategory(str, Enum):
    """Enum for menu categories."""

    APPETIZERS = "Appetizers"
    SALADS = "Salads"
    SOUPS = "Soups"
    MAIN_COURSE = "Main Course"
    DESSERTS = "Desserts"
    BEVERAGES = "Beverages"


class DietaryTagName(str, Enum):
    """Enum for dietary tags accepted on menu items."""

    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    DAIRY_FREE = "Dairy-Free"
    NUT_FREE = "Nut-Free"
    SPICY = "Spicy"
    LOW_CARB = "Low-Carb"
    HALAL = "Halal"
    KOSHER = "Kosher"
    JHATKA = "Jhatka"
    NON_VEGETARIAN = "Non-Vegetarian"


VALID_CATEGORIES = frozenset(category.value for category in MenuCategory)
VALID_DIETARY_TAGS = frozenset(tag.value for tag in DietaryTagName)

MAX_DIETARY_TAGS = 10


class MenuItem(Model):
    """
    MenuItem database model representing a dish on the restaurant menu.

    Dietary tags are kept as JSON array text; NULL means no tags.
    A row with deleted_at set is soft-deleted and invisible to the catalog.
    """

    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=100)
    description = fields.CharField(max_length=500)
    price = fields.DecimalField(max_digits=10, decimal_places=2)
    category = fields.CharField(max_length=50, index=True)
    dietary_tags = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True, index=True)
    updated_at = fields.DatetimeField(auto_now=True)
    deleted_at = fields.DatetimeField(null=True, index=True)

    class Meta:
        table = "menu_items"
        ordering = ["category", "name"]

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    def __str__(self) -> str:
        return f"{self.name} ({self.category}) - {self.price}"
