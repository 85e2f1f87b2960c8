from datetime import timedelta
from decimal import Decimal

import pytest
from tortoise import timezone
from tortoise.exceptions import IntegrityError

from app.models.menu_item import MenuItem
from app.schemas.menu_item import (
    MenuItemCreateSchema,
    MenuItemResponseSchema,
    MenuItemUpdateSchema
)
from app.services.menu_item_service import MenuItemService
from app.exceptions.menu_item_exceptions import (
    DuplicateMenuItemError,
    MenuItemNotFoundError
)

pytestmark = [pytest.mark.anyio, pytest.mark.usefixtures("db")]


def _item(name="Caesar Salad", category="Salads", price="8.50", tags=None,
          description="Romaine, parmesan, croutons"):
    return MenuItemCreateSchema(
        name=name,
        description=description,
        price=Decimal(price),
        category=category,
        dietary_tags=tags
    )


async def test_create_persists_item_and_tags():
    item = await MenuItemService.create_menu_item(
        _item(tags=["Vegetarian", "Gluten-Free"])
    )

    stored = await MenuItem.get(id=item.id)
    assert stored.name == "Caesar Salad"
    assert stored.price == Decimal("8.50")
    assert stored.deleted_at is None
    assert MenuItemResponseSchema.from_orm_menu_item(stored).dietary_tags == [
        "Vegetarian", "Gluten-Free"
    ]


async def test_empty_tags_are_stored_as_null():
    item = await MenuItemService.create_menu_item(_item(tags=[]))
    stored = await MenuItem.get(id=item.id)
    assert stored.dietary_tags is None
    assert MenuItemResponseSchema.from_orm_menu_item(stored).dietary_tags == []


async def test_duplicate_name_in_same_category_is_rejected():
    await MenuItemService.create_menu_item(_item())
    with pytest.raises(DuplicateMenuItemError):
        await MenuItemService.create_menu_item(_item(price="9.00"))


async def test_same_name_in_another_category_is_allowed():
    await MenuItemService.create_menu_item(_item(name="House Special", category="Soups"))
    other = await MenuItemService.create_menu_item(
        _item(name="House Special", category="Desserts")
    )
    assert other.category == "Desserts"


async def test_name_can_be_reused_after_soft_delete():
    first = await MenuItemService.create_menu_item(_item())
    assert await MenuItemService.delete_menu_item(first.id) is True

    second = await MenuItemService.create_menu_item(_item())
    assert second.id != first.id


async def test_unique_index_rejects_duplicates_at_store_level():
    await MenuItem.create(
        name="Tomato Soup", description="Hot", price=Decimal("5.00"), category="Soups"
    )
    with pytest.raises(IntegrityError):
        await MenuItem.create(
            name="Tomato Soup", description="Cold", price=Decimal("6.00"), category="Soups"
        )


async def test_store_level_conflict_is_reported_as_duplicate(monkeypatch):
    await MenuItemService.create_menu_item(_item())

    async def never_exists(*args, **kwargs):
        return False

    monkeypatch.setattr(MenuItemService, "menu_item_exists", never_exists)

    with pytest.raises(DuplicateMenuItemError):
        await MenuItemService.create_menu_item(_item())


async def test_menu_item_exists_ignores_excluded_id():
    item = await MenuItemService.create_menu_item(_item())
    assert await MenuItemService.menu_item_exists("Caesar Salad", "Salads") is True
    assert await MenuItemService.menu_item_exists(
        "Caesar Salad", "Salads", exclude_id=item.id
    ) is False
    assert await MenuItemService.menu_item_exists("Caesar Salad", "Soups") is False


async def test_get_missing_item_raises_not_found():
    with pytest.raises(MenuItemNotFoundError):
        await MenuItemService.get_menu_item_by_id(9999)


async def test_deleted_item_is_not_found():
    item = await MenuItemService.create_menu_item(_item())
    await MenuItemService.delete_menu_item(item.id)

    with pytest.raises(MenuItemNotFoundError):
        await MenuItemService.get_menu_item_by_id(item.id)

    stored = await MenuItem.get(id=item.id)
    assert stored.deleted_at is not None
    assert stored.is_active is False
    assert stored.updated_at >= stored.created_at


async def test_second_delete_returns_false():
    item = await MenuItemService.create_menu_item(_item())
    assert await MenuItemService.delete_menu_item(item.id) is True
    assert await MenuItemService.delete_menu_item(item.id) is False
    assert await MenuItemService.delete_menu_item(9999) is False


async def test_list_excludes_deleted_items():
    keep = await MenuItemService.create_menu_item(_item(name="Keep"))
    gone = await MenuItemService.create_menu_item(_item(name="Gone"))
    await MenuItemService.delete_menu_item(gone.id)

    result = await MenuItemService.get_menu_items()
    assert [item.id for item in result.items] == [keep.id]
    assert result.total == 1


async def test_list_is_ordered_by_category_then_name():
    await MenuItemService.create_menu_item(_item(name="Zucchini Soup", category="Soups"))
    await MenuItemService.create_menu_item(_item(name="Apple Pie", category="Desserts"))
    await MenuItemService.create_menu_item(_item(name="Brownie", category="Desserts"))

    result = await MenuItemService.get_menu_items()
    assert [(item.category, item.name) for item in result.items] == [
        ("Desserts", "Apple Pie"),
        ("Desserts", "Brownie"),
        ("Soups", "Zucchini Soup"),
    ]


async def test_pagination_pages_through_items():
    for name in ("Item A", "Item B", "Item C", "Item D", "Item E"):
        await MenuItemService.create_menu_item(_item(name=name))

    first = await MenuItemService.get_menu_items(page=1, limit=2)
    last = await MenuItemService.get_menu_items(page=3, limit=2)
    beyond = await MenuItemService.get_menu_items(page=4, limit=2)

    assert [item.name for item in first.items] == ["Item A", "Item B"]
    assert [item.name for item in last.items] == ["Item E"]
    assert first.total == 5
    assert first.total_pages == 3
    assert beyond.items == []
    assert beyond.total == 5


async def test_pages_concatenate_to_the_full_listing():
    for name, category in (
            ("Tiramisu", "Desserts"), ("Iced Tea", "Beverages"), ("Nachos", "Appetizers"),
            ("Gelato", "Desserts"), ("Cola", "Beverages"), ("Wings", "Appetizers"),
            ("Miso Soup", "Soups")
    ):
        await MenuItemService.create_menu_item(_item(name=name, category=category))

    everything = await MenuItemService.get_menu_items(limit=100)
    paged = []
    for page in range(1, 4):
        result = await MenuItemService.get_menu_items(page=page, limit=3)
        paged.extend(item.id for item in result.items)

    assert paged == [item.id for item in everything.items]
    assert len(set(paged)) == 7


async def test_empty_catalog_has_zero_pages():
    result = await MenuItemService.get_menu_items()
    assert result.items == []
    assert result.total == 0
    assert result.total_pages == 0
    assert result.page == 1
    assert result.limit == 20


async def test_pagination_values_are_clamped():
    result = await MenuItemService.get_menu_items(page=-3, limit=500)
    assert result.page == 1
    assert result.limit == 100


async def test_category_filter():
    await MenuItemService.create_menu_item(_item(name="Lemonade", category="Beverages"))
    await MenuItemService.create_menu_item(_item(name="Nachos", category="Appetizers"))

    result = await MenuItemService.get_menu_items(category="Beverages")
    assert [item.name for item in result.items] == ["Lemonade"]


async def test_tag_filter_matches_whole_tags_only():
    await MenuItemService.create_menu_item(
        _item(name="Chicken Curry", category="Main Course", tags=["Non-Vegetarian", "Spicy"])
    )
    await MenuItemService.create_menu_item(
        _item(name="Paneer Tikka", category="Main Course", tags=["Vegetarian", "Gluten-Free"])
    )

    result = await MenuItemService.get_menu_items(dietary_tags="Vegetarian")
    assert [item.name for item in result.items] == ["Paneer Tikka"]


async def test_tag_filter_requires_every_tag():
    await MenuItemService.create_menu_item(
        _item(name="Green Salad", tags=["Vegan", "Gluten-Free"])
    )
    await MenuItemService.create_menu_item(
        _item(name="Pasta Salad", tags=["Vegan"])
    )

    both = await MenuItemService.get_menu_items(dietary_tags="Vegan,Gluten-Free")
    assert [item.name for item in both.items] == ["Green Salad"]

    none = await MenuItemService.get_menu_items(dietary_tags="Vegan,Spicy")
    assert none.items == []
    assert none.total == 0


async def test_search_matches_name_or_description():
    await MenuItemService.create_menu_item(
        _item(name="Garlic Bread", category="Appetizers", description="Toasted baguette")
    )
    await MenuItemService.create_menu_item(
        _item(name="Bruschetta", category="Appetizers", description="Tomato and garlic")
    )
    await MenuItemService.create_menu_item(
        _item(name="Fries", category="Appetizers", description="Salted potatoes")
    )

    by_name = await MenuItemService.get_menu_items(search="Bread")
    assert [item.name for item in by_name.items] == ["Garlic Bread"]

    by_description = await MenuItemService.get_menu_items(search="baguette")
    assert [item.name for item in by_description.items] == ["Garlic Bread"]

    by_either = await MenuItemService.get_menu_items(search="arlic")
    assert {item.name for item in by_either.items} == {"Garlic Bread", "Bruschetta"}


async def test_update_changes_only_supplied_fields():
    item = await MenuItemService.create_menu_item(_item(tags=["Vegetarian"]))

    updated = await MenuItemService.update_menu_item(
        item.id, MenuItemUpdateSchema(price=Decimal("9.25"))
    )

    stored = await MenuItem.get(id=item.id)
    assert updated.price == Decimal("9.25")
    assert stored.price == Decimal("9.25")
    assert stored.name == "Caesar Salad"
    assert stored.description == "Romaine, parmesan, croutons"
    assert stored.category == "Salads"
    assert MenuItemResponseSchema.from_orm_menu_item(stored).dietary_tags == ["Vegetarian"]
    assert stored.updated_at >= stored.created_at


async def test_update_refreshes_updated_at():
    item = await MenuItemService.create_menu_item(_item())
    earlier = timezone.now() - timedelta(days=1)
    await MenuItem.filter(id=item.id).update(updated_at=earlier)

    await MenuItemService.update_menu_item(item.id, MenuItemUpdateSchema(description="Fresh"))

    stored = await MenuItem.get(id=item.id)
    assert stored.updated_at > earlier


async def test_update_does_not_revive_an_item_deleted_meanwhile(monkeypatch):
    item = await MenuItemService.create_menu_item(_item())
    fetch = MenuItemService.get_menu_item_by_id

    async def fetch_then_delete(menu_item_id):
        found = await fetch(menu_item_id)
        assert await MenuItemService.delete_menu_item(menu_item_id) is True
        return found

    monkeypatch.setattr(MenuItemService, "get_menu_item_by_id", fetch_then_delete)

    with pytest.raises(MenuItemNotFoundError):
        await MenuItemService.update_menu_item(item.id, MenuItemUpdateSchema(price=Decimal("9.99")))

    stored = await MenuItem.get(id=item.id)
    assert stored.deleted_at is not None
    assert stored.price == Decimal("8.50")


async def test_update_with_empty_tags_clears_them():
    item = await MenuItemService.create_menu_item(_item(tags=["Vegan"]))
    await MenuItemService.update_menu_item(item.id, MenuItemUpdateSchema(dietary_tags=[]))

    stored = await MenuItem.get(id=item.id)
    assert stored.dietary_tags is None


async def test_update_to_clashing_name_is_rejected():
    await MenuItemService.create_menu_item(_item(name="Greek Salad"))
    item = await MenuItemService.create_menu_item(_item(name="Cobb Salad"))

    with pytest.raises(DuplicateMenuItemError):
        await MenuItemService.update_menu_item(
            item.id, MenuItemUpdateSchema(name="Greek Salad")
        )


async def test_store_level_conflict_on_update_is_reported_as_duplicate(monkeypatch):
    await MenuItemService.create_menu_item(_item(name="Greek Salad"))
    item = await MenuItemService.create_menu_item(_item(name="Cobb Salad"))

    async def never_exists(*args, **kwargs):
        return False

    monkeypatch.setattr(MenuItemService, "menu_item_exists", never_exists)

    with pytest.raises(DuplicateMenuItemError):
        await MenuItemService.update_menu_item(
            item.id, MenuItemUpdateSchema(name="Greek Salad")
        )

    stored = await MenuItem.get(id=item.id)
    assert stored.name == "Cobb Salad"


async def test_update_to_own_name_is_allowed():
    item = await MenuItemService.create_menu_item(_item())
    updated = await MenuItemService.update_menu_item(
        item.id, MenuItemUpdateSchema(name="Caesar Salad", description="Classic")
    )
    assert updated.description == "Classic"


async def test_update_category_into_clash_is_rejected():
    await MenuItemService.create_menu_item(_item(name="Chili", category="Soups"))
    item = await MenuItemService.create_menu_item(_item(name="Chili", category="Main Course"))

    with pytest.raises(DuplicateMenuItemError):
        await MenuItemService.update_menu_item(item.id, MenuItemUpdateSchema(category="Soups"))


async def test_update_missing_item_raises_not_found():
    with pytest.raises(MenuItemNotFoundError):
        await MenuItemService.update_menu_item(9999, MenuItemUpdateSchema(price=Decimal("1.00")))


async def test_unreadable_tags_are_returned_as_empty():
    item = await MenuItemService.create_menu_item(_item(tags=["Vegan"]))
    await MenuItem.filter(id=item.id).update(dietary_tags="not json")

    stored = await MenuItemService.get_menu_item_by_id(item.id)
    assert MenuItemResponseSchema.from_orm_menu_item(stored).dietary_tags == []
