"""Pydantic data models."""

from folio.models.category import Category, CATEGORY_COLORS, color_classes
from folio.models.post import Post, PostDraft, Comment
from folio.models.media import ImageFile, ClipboardItem

__all__ = [
    "Category",
    "CATEGORY_COLORS",
    "color_classes",
    "Post",
    "PostDraft",
    "Comment",
    "ImageFile",
    "ClipboardItem",
]
