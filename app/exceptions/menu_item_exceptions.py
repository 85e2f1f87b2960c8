# app/exceptions/menu_item_exceptions.py
class MenuItemException(Exception):
    """Base exception for menu item errors."""
    pass


class MenuItemNotFoundError(MenuItemException):
    """Raised when menu item is missing or soft-deleted."""

    def __init__(self, menu_item_id: int):
        self.menu_item_id = menu_item_id
        super().__init__(f"Menu item with ID {menu_item_id} not found")


class DuplicateMenuItemError(MenuItemException):
    """Raised when an active menu item already uses the same name and category."""

    def __init__(self, name: str, category: str):
        self.name = name
        self.category = category
        super().__init__(f"Menu item '{name}' already exists in category '{category}'")


class BusinessRuleError(MenuItemException):
    """Raised when a request is well-formed but breaks a named business rule."""

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)
