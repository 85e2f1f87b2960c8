# app/core/database.py
import logging
from typing import Optional

from tortoise import Tortoise, connections

from app.core.config import settings
from app.models.menu_item import MenuCategory, DietaryTagName

logger = logging.getLogger(__name__)

# Physical guard for (name, category) uniqueness among active rows.
ACTIVE_NAME_CATEGORY_INDEX = """
CREATE UNIQUE INDEX IF NOT EXISTS uix_menu_items_active_name_category
ON menu_items (name, category)
WHERE deleted_at IS NULL
"""

DIETARY_TAG_DESCRIPTIONS = {
    DietaryTagName.VEGETARIAN: "Contains no meat or fish",
    DietaryTagName.VEGAN: "Contains no animal products",
    DietaryTagName.GLUTEN_FREE: "Does not contain gluten",
    DietaryTagName.DAIRY_FREE: "Contains no dairy products",
    DietaryTagName.NUT_FREE: "Does not contain nuts",
    DietaryTagName.SPICY: "Contains spicy ingredients",
    DietaryTagName.LOW_CARB: "Low in carbohydrates",
    DietaryTagName.HALAL: "Prepared according to halal rules",
    DietaryTagName.KOSHER: "Prepared according to kosher rules",
    DietaryTagName.JHATKA: "Meat prepared by the jhatka method",
    DietaryTagName.NON_VEGETARIAN: "Contains meat, fish or eggs",
}


def get_db_url(db_url: Optional[str] = None) -> str:
    """
    Convert DATABASE_URL to Tortoise-ORM compatible format.
    Tortoise-ORM uses 'postgres://' instead of 'postgresql://'
    """
    db_url = db_url or settings.DATABASE_URL
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgres://", 1)
    return db_url


def get_tortoise_config(db_url: Optional[str] = None) -> dict:
    return {
        "connections": {
            "default": get_db_url(db_url)
        },
        "apps": {
            "models": {
                "models": [
                    "app.models.menu_item",
                    "app.models.reference",
                ],
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }


TORTOISE_ORM = get_tortoise_config()


async def seed_reference_data() -> None:
    """
    Insert the category and dietary tag reference rows if they are missing.
    """
    from app.models.reference import Category, DietaryTag

    for display_order, category in enumerate(MenuCategory, start=1):
        await Category.get_or_create(
            name=category.value,
            defaults={"display_order": display_order}
        )

    for tag, description in DIETARY_TAG_DESCRIPTIONS.items():
        await DietaryTag.get_or_create(
            name=tag.value,
            defaults={"description": description}
        )


async def init_db(db_url: Optional[str] = None) -> None:
    """
    Initialize database connection.

    Args:
        db_url: Optional override of settings.DATABASE_URL
    """
    await Tortoise.init(config=get_tortoise_config(db_url))

    if settings.GENERATE_SCHEMAS:
        await Tortoise.generate_schemas(safe=True)
        await connections.get("default").execute_script(ACTIVE_NAME_CATEGORY_INDEX)

    if settings.SEED_REFERENCE_DATA:
        await seed_reference_data()

    logger.info("Database initialized")


async def close_db() -> None:
    """
    Close database connection.
    """
    await Tortoise.close_connections()
