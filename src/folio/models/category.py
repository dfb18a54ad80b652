"""Category model for organizing blog posts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from folio.utils.text_utils import slugify

CATEGORY_COLORS = ("blue", "emerald", "purple", "amber", "rose", "cyan", "pink", "indigo")
DEFAULT_COLOR = "blue"

_FALLBACK_CLASSES = {
    "bg": "bg-gray-50",
    "text": "text-gray-700",
    "border": "border-gray-200",
    "hover": "hover:border-gray-500 hover:bg-gray-100",
}


class Category(BaseModel):
    """Represents a blog category row."""

    id: str = Field(default="", description="Opaque row identifier")
    name: str = Field(..., description="Display name, unique in the collection")
    slug: str = Field(default="", description="URL-safe identifier")
    color: str = Field(default=DEFAULT_COLOR, description="Palette color name")
    display_order: int = Field(default=0, description="Ascending sort key; null counts as 0")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")

    @field_validator("display_order", mode="before")
    @classmethod
    def _null_order(cls, value):
        return 0 if value is None else value

    @model_validator(mode="after")
    def _default_slug(self) -> "Category":
        if not self.slug.strip():
            self.slug = slugify(self.name)
        return self

    @property
    def color_classes(self) -> dict[str, str]:
        """Style tokens for this category's color."""
        return color_classes(self.color)


def color_classes(color: str | None) -> dict[str, str]:
    """Map a palette color name to its style tokens; unknown names fall back to gray."""
    if color not in CATEGORY_COLORS:
        return dict(_FALLBACK_CLASSES)
    return {
        "bg": f"bg-{color}-50",
        "text": f"text-{color}-700",
        "border": f"border-{color}-200",
        "hover": f"hover:border-{color}-500 hover:bg-{color}-100",
    }


def next_display_order(categories: list[Category]) -> int:
    """Order value for a new category: current maximum + 1, or 1 when empty."""
    if not categories:
        return 1
    return max(c.display_order for c in categories) + 1


def sort_by_display_order(categories: list[Category]) -> list[Category]:
    """Stable ascending sort; ties keep the order the store returned them in."""
    return sorted(categories, key=lambda c: c.display_order)
