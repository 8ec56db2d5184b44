from typing import ClassVar

from catalog.models.base import Entity


class Category(Entity):
    collection: ClassVar[str] = "categories"

    name: str


DEFAULT_CATEGORIES = [
    Category(id="cat_1", name="Action"),
    Category(id="cat_2", name="Sci-Fi"),
    Category(id="cat_3", name="Drama"),
    Category(id="cat_4", name="Comedy"),
    Category(id="cat_5", name="Horror"),
]
