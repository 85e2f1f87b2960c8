# app/api/endpoints/menu_items.py
from fastapi import APIRouter, status, Query
from typing import Optional

from app.core.errors import APIError, NOT_FOUND, DUPLICATE_ITEM
from app.schemas.menu_item import (
    ApiResponseSchema,
    DeletedMenuItemSchema,
    ErrorResponseSchema,
    MenuItemCreateSchema,
    MenuItemListResponseSchema,
    MenuItemResponseSchema,
    MenuItemUpdateSchema,
    PaginationSchema
)
from app.services.menu_item_service import MenuItemService
from app.exceptions.menu_item_exceptions import (
    BusinessRuleError,
    DuplicateMenuItemError,
    MenuItemNotFoundError
)

router = APIRouter(prefix="/menuitems", tags=["menu items"])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponseSchema},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponseSchema},
    status.HTTP_409_CONFLICT: {"model": ErrorResponseSchema},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponseSchema},
}


def _not_found(e: MenuItemNotFoundError) -> APIError:
    return APIError(status.HTTP_404_NOT_FOUND, NOT_FOUND, str(e))


def _duplicate(e: DuplicateMenuItemError) -> APIError:
    return APIError(status.HTTP_409_CONFLICT, DUPLICATE_ITEM, str(e))


def _business_rule(e: BusinessRuleError) -> APIError:
    return APIError(status.HTTP_400_BAD_REQUEST, e.code, str(e))


@router.get("", response_model=MenuItemListResponseSchema, responses=ERROR_RESPONSES)
async def get_menu_items(
        page: int = Query(1, description="Page number, values below 1 are treated as 1"),
        limit: Optional[int] = Query(None, description="Items per page, default 20, clamped to 1..100"),
        category: Optional[str] = Query(None, description="Filter by category"),
        dietary_tags: Optional[str] = Query(
            None,
            alias="dietaryTags",
            description="Comma separated dietary tags, all must match"
        ),
        search: Optional[str] = Query(None, description="Search in name or description")
) -> MenuItemListResponseSchema:
    """
    Retrieve active menu items with filtering and pagination.

    Returns:
        Page of menu items with pagination metadata
    """
    result = await MenuItemService.get_menu_items(
        page=page,
        limit=limit,
        category=category,
        dietary_tags=dietary_tags,
        search=search
    )

    return MenuItemListResponseSchema(
        data=[MenuItemResponseSchema.from_orm_menu_item(item) for item in result.items],
        pagination=PaginationSchema(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages
        )
    )


@router.get(
    "/{menu_item_id}",
    response_model=ApiResponseSchema[MenuItemResponseSchema],
    responses=ERROR_RESPONSES
)
async def get_menu_item(menu_item_id: int) -> ApiResponseSchema[MenuItemResponseSchema]:
    """
    Retrieve a single menu item by ID.

    Args:
        menu_item_id: ID of the menu item

    Returns:
        Menu item data

    Raises:
        APIError: 404 if menu item not found
    """
    try:
        menu_item = await MenuItemService.get_menu_item_by_id(menu_item_id)
    except MenuItemNotFoundError as e:
        raise _not_found(e)

    return ApiResponseSchema[MenuItemResponseSchema](
        message="Menu item retrieved successfully",
        data=MenuItemResponseSchema.from_orm_menu_item(menu_item)
    )


@router.post(
    "",
    response_model=ApiResponseSchema[MenuItemResponseSchema],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES
)
async def create_menu_item(
        menu_item_data: MenuItemCreateSchema
) -> ApiResponseSchema[MenuItemResponseSchema]:
    """
    Create a new menu item.

    Args:
        menu_item_data: Menu item creation data

    Returns:
        Created menu item data

    Raises:
        APIError: 409 if an active item already has this name and category
    """
    try:
        menu_item = await MenuItemService.create_menu_item(menu_item_data)
    except DuplicateMenuItemError as e:
        raise _duplicate(e)
    except BusinessRuleError as e:
        raise _business_rule(e)

    return ApiResponseSchema[MenuItemResponseSchema](
        message="Menu item created successfully",
        data=MenuItemResponseSchema.from_orm_menu_item(menu_item)
    )


@router.put(
    "/{menu_item_id}",
    response_model=ApiResponseSchema[MenuItemResponseSchema],
    responses=ERROR_RESPONSES
)
async def update_menu_item(
        menu_item_id: int,
        menu_item_data: MenuItemUpdateSchema
) -> ApiResponseSchema[MenuItemResponseSchema]:
    """
    Update an existing menu item. Only supplied fields change.

    Args:
        menu_item_id: ID of the menu item to update
        menu_item_data: Partial update data

    Returns:
        Updated menu item data

    Raises:
        APIError: 404 if menu item not found, 409 if the new name clashes
    """
    try:
        menu_item = await MenuItemService.update_menu_item(menu_item_id, menu_item_data)
    except MenuItemNotFoundError as e:
        raise _not_found(e)
    except DuplicateMenuItemError as e:
        raise _duplicate(e)
    except BusinessRuleError as e:
        raise _business_rule(e)

    return ApiResponseSchema[MenuItemResponseSchema](
        message="Menu item updated successfully",
        data=MenuItemResponseSchema.from_orm_menu_item(menu_item)
    )


@router.delete(
    "/{menu_item_id}",
    response_model=ApiResponseSchema[DeletedMenuItemSchema],
    responses=ERROR_RESPONSES
)
async def delete_menu_item(menu_item_id: int) -> ApiResponseSchema[DeletedMenuItemSchema]:
    """
    Soft delete a menu item.

    Args:
        menu_item_id: ID of the menu item to delete

    Raises:
        APIError: 404 if menu item not found or already deleted
    """
    deleted = await MenuItemService.delete_menu_item(menu_item_id)
    if not deleted:
        raise _not_found(MenuItemNotFoundError(menu_item_id))

    return ApiResponseSchema[DeletedMenuItemSchema](
        message="Menu item deleted successfully",
        data=DeletedMenuItemSchema(id=menu_item_id)
    )
