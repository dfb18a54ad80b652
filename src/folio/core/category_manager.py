"""Category manager for creating, editing, deleting and ordering categories."""

from __future__ import annotations

from folio.core.ordering import CategoryOrderingEngine
from folio.core.store import BackingStore, require_user
from folio.errors import NotFoundError, ValidationError, require
from folio.models.category import CATEGORY_COLORS, DEFAULT_COLOR, Category, next_display_order
from folio.utils.logging import get_logger
from folio.utils.text_utils import slugify

logger = get_logger(__name__)

TABLE = "categories"


class CategoryManager:
    """Manages categories kept in the backing store."""

    def __init__(self, store: BackingStore):
        self.store = store
        self.ordering = CategoryOrderingEngine(store, table=TABLE)

    @property
    def categories(self) -> list[Category]:
        """Categories as of the last reload."""
        return self.ordering.categories

    async def list_categories(self) -> list[Category]:
        return await self.ordering.refresh()

    async def get_category_names(self) -> list[str]:
        return [c.name for c in await self.list_categories()]

    async def get_category(self, category_id: str) -> Category:
        for category in await self.list_categories():
            if category.id == category_id:
                return category
        raise NotFoundError(f"Category '{category_id}' not found", operation="get category")

    async def create_category(self, name: str, *, slug: str = "", color: str = DEFAULT_COLOR) -> Category:
        name = require(name, "Category name", operation="create category")
        _check_color(color)
        await require_user(self.store, "create category")

        existing = await self.list_categories()
        row = await self.store.insert_row(TABLE, {
            "name": name,
            "slug": slug.strip() or slugify(name),
            "color": color,
            "display_order": next_display_order(existing),
        })
        created = Category.model_validate(row)
        logger.info(f"Created category '{created.name}' at position {created.display_order}")
        await self.list_categories()
        return created

    async def update_category(
        self,
        category_id: str,
        *,
        name: str,
        slug: str = "",
        color: str | None = None,
    ) -> Category:
        name = require(name, "Category name", operation="update category")
        await require_user(self.store, "update category")
        changes = {"name": name, "slug": slug.strip() or slugify(name)}
        if color is not None:
            _check_color(color)
            changes["color"] = color

        row = await self.store.update_row(TABLE, category_id, changes)
        updated = Category.model_validate(row)
        logger.info(f"Updated category '{updated.name}'")
        await self.list_categories()
        return updated

    async def delete_category(self, category_id: str) -> bool:
        """Delete a category. Posts keep their category name; nothing cascades."""
        await require_user(self.store, "delete category")
        removed = await self.store.delete_rows(TABLE, filters={"id": category_id})
        if removed:
            logger.info(f"Deleted category {category_id}")
        await self.list_categories()
        return removed > 0

    async def move_up(self, index: int) -> bool:
        await require_user(self.store, "reorder categories")
        return await self.ordering.move_up(index)

    async def move_down(self, index: int) -> bool:
        await require_user(self.store, "reorder categories")
        return await self.ordering.move_down(index)


def _check_color(color: str) -> None:
    if color not in CATEGORY_COLORS:
        raise ValidationError(
            f"Unknown color '{color}'. Choose one of: {', '.join(CATEGORY_COLORS)}",
            operation="category color",
        )
