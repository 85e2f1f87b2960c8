# app/services/menu_item_service.py
import json
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from tortoise import timezone
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q
from tortoise.queryset import QuerySet

from app.core.config import settings
from app.models.menu_item import MenuItem
from app.schemas.menu_item import (
    MenuItemCreateSchema,
    MenuItemUpdateSchema,
    serialize_dietary_tags
)
from app.exceptions.menu_item_exceptions import (
    DuplicateMenuItemError,
    MenuItemNotFoundError
)

logger = logging.getLogger(__name__)


@dataclass
class MenuItemPage:
    """One page of menu items plus the numbers needed to paginate."""

    items: List[MenuItem]
    page: int
    limit: int
    total: int
    total_pages: int


def active_menu_items() -> QuerySet[MenuItem]:
    """Every catalog read starts here so soft-deleted rows never leak out."""
    return MenuItem.filter(deleted_at__isnull=True)


def parse_dietary_tags_filter(dietary_tags: Optional[str]) -> List[str]:
    """Split a comma separated tag filter, trimming blanks away."""
    if not dietary_tags:
        return []
    return [tag.strip() for tag in dietary_tags.split(",") if tag.strip()]


def normalize_pagination(page: int, limit: int) -> tuple[int, int]:
    page = max(1, page)
    limit = min(max(1, limit), settings.MAX_PAGE_SIZE)
    return page, limit


class MenuItemService:
    """Service for managing menu items business logic."""

    @staticmethod
    def _apply_filters(
            query: QuerySet[MenuItem],
            category: Optional[str] = None,
            dietary_tags: Optional[str] = None,
            search: Optional[str] = None
    ) -> QuerySet[MenuItem]:
        if category:
            query = query.filter(category=category)

        if search:
            query = query.filter(Q(name__contains=search) | Q(description__contains=search))

        # Tags are stored as a JSON array, so a quoted tag only matches a whole element
        for tag in parse_dietary_tags_filter(dietary_tags):
            query = query.filter(dietary_tags__contains=json.dumps(tag))

        return query

    @staticmethod
    async def get_menu_items(
            page: int = 1,
            limit: Optional[int] = None,
            category: Optional[str] = None,
            dietary_tags: Optional[str] = None,
            search: Optional[str] = None
    ) -> MenuItemPage:
        """
        Retrieve a page of active menu items.

        Args:
            page: 1-based page number, values below 1 are treated as 1
            limit: Page size, clamped to 1..MAX_PAGE_SIZE
            category: Optional exact category filter
            dietary_tags: Optional comma separated tags, every tag must be present
            search: Optional substring matched against name or description

        Returns:
            MenuItemPage ordered by category, then name
        """
        if limit is None:
            limit = settings.DEFAULT_PAGE_SIZE
        page, limit = normalize_pagination(page, limit)

        try:
            query = MenuItemService._apply_filters(
                active_menu_items(), category, dietary_tags, search
            )
            total = await query.count()
            items = await (
                query.order_by("category", "name")
                .offset((page - 1) * limit)
                .limit(limit)
            )
        except Exception:
            logger.exception(
                "Error retrieving menu items with filters: category=%s, dietary_tags=%s, search=%s",
                category, dietary_tags, search
            )
            raise

        return MenuItemPage(
            items=list(items),
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit)
        )

    @staticmethod
    async def get_menu_item_by_id(menu_item_id: int) -> MenuItem:
        """
        Retrieve a single active menu item by ID.

        Args:
            menu_item_id: ID of the menu item

        Returns:
            MenuItem instance

        Raises:
            MenuItemNotFoundError: If the item doesn't exist or was deleted
        """
        menu_item = await active_menu_items().get_or_none(id=menu_item_id)
        if not menu_item:
            raise MenuItemNotFoundError(menu_item_id)
        return menu_item

    @staticmethod
    async def menu_item_exists(
            name: str,
            category: str,
            exclude_id: Optional[int] = None
    ) -> bool:
        """
        Check whether an active menu item already uses name and category.

        Args:
            name: Exact item name
            category: Exact category
            exclude_id: Optional ID to ignore, used when updating an item

        Returns:
            True if a clashing active item exists
        """
        query = active_menu_items().filter(name=name, category=category)
        if exclude_id is not None:
            query = query.exclude(id=exclude_id)
        return await query.exists()

    @staticmethod
    async def create_menu_item(menu_item_data: MenuItemCreateSchema) -> MenuItem:
        """
        Create a new menu item.

        Args:
            menu_item_data: Validated menu item creation data

        Returns:
            Created menu item instance

        Raises:
            DuplicateMenuItemError: If an active item has the same name and category
        """
        if await MenuItemService.menu_item_exists(menu_item_data.name, menu_item_data.category):
            raise DuplicateMenuItemError(menu_item_data.name, menu_item_data.category)

        try:
            menu_item = await MenuItem.create(
                name=menu_item_data.name,
                description=menu_item_data.description,
                price=menu_item_data.price,
                category=menu_item_data.category,
                dietary_tags=serialize_dietary_tags(menu_item_data.dietary_tags)
            )
        except IntegrityError as e:
            logger.warning(
                "Unique index rejected menu item %s in category %s",
                menu_item_data.name, menu_item_data.category
            )
            raise DuplicateMenuItemError(menu_item_data.name, menu_item_data.category) from e
        except Exception:
            logger.exception(
                "Error creating menu item %s in category %s",
                menu_item_data.name, menu_item_data.category
            )
            raise

        logger.info(
            "Created menu item %s in category %s with ID %s",
            menu_item.name, menu_item.category, menu_item.id
        )
        return menu_item

    @staticmethod
    async def update_menu_item(menu_item_id: int, menu_item_data: MenuItemUpdateSchema) -> MenuItem:
        """
        Update an existing menu item with the fields that were supplied.

        Args:
            menu_item_id: ID of the menu item to update
            menu_item_data: Validated partial update data

        Returns:
            Updated menu item instance

        Raises:
            MenuItemNotFoundError: If the item doesn't exist or was deleted
            DuplicateMenuItemError: If the new name and category clash with another item
        """
        menu_item = await MenuItemService.get_menu_item_by_id(menu_item_id)
        supplied = menu_item_data.supplied_fields()
        new_name = supplied.get("name", menu_item.name)
        new_category = supplied.get("category", menu_item.category)

        if "name" in supplied or "category" in supplied:
            if await MenuItemService.menu_item_exists(new_name, new_category, exclude_id=menu_item.id):
                raise DuplicateMenuItemError(new_name, new_category)

        update_fields = {}

        for field in ("name", "description", "price", "category"):
            if field in supplied:
                update_fields[field] = supplied[field]

        if "dietary_tags" in supplied:
            update_fields["dietary_tags"] = serialize_dietary_tags(supplied["dietary_tags"])

        update_fields["updated_at"] = timezone.now()

        # Only touch the supplied columns, and only while the row is still active
        try:
            updated = await active_menu_items().filter(id=menu_item_id).update(**update_fields)
        except IntegrityError as e:
            logger.warning("Unique index rejected update of menu item %s", menu_item_id)
            raise DuplicateMenuItemError(new_name, new_category) from e
        except Exception:
            logger.exception("Error updating menu item with ID %s", menu_item_id)
            raise

        if not updated:
            raise MenuItemNotFoundError(menu_item_id)

        menu_item.update_from_dict(update_fields)
        logger.info("Updated menu item with ID %s", menu_item_id)
        return menu_item

    @staticmethod
    async def delete_menu_item(menu_item_id: int) -> bool:
        """
        Soft delete a menu item.

        Args:
            menu_item_id: ID of the menu item to delete

        Returns:
            True if an active item was deleted, False if there was nothing to delete
        """
        now = timezone.now()

        try:
            deleted = await active_menu_items().filter(id=menu_item_id).update(
                deleted_at=now,
                updated_at=now
            )
        except Exception:
            logger.exception("Error deleting menu item with ID %s", menu_item_id)
            raise

        if not deleted:
            return False

        logger.info("Soft deleted menu item with ID %s", menu_item_id)
        return True
