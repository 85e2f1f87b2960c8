# app/models/reference.py
from tortoise import Model, fields


class Category(Model):
    """
    Reference row for a menu category, used for display ordering.
    """

    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=50, unique=True)
    display_order = fields.IntField(default=0)
    active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "categories"
        ordering = ["display_order"]

    def __str__(self) -> str:
        return self.name


class DietaryTag(Model):
    """
    Reference row describing a dietary tag.
    """

    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=50, unique=True)
    description = fields.CharField(max_length=200, null=True)
    active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "dietary_tags"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name
