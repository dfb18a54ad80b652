"""Blog post and comment models."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, computed_field

WORDS_PER_MINUTE = 200


def estimate_reading_minutes(content: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimate reading time as ceil(words / wpm), counting whitespace-separated words."""
    word_count = len(content.split())
    return math.ceil(word_count / words_per_minute)


class Post(BaseModel):
    """Represents a blog post row."""

    id: int
    title: str
    excerpt: str = ""
    content: str = ""
    category: str = Field(default="", description="Category name (denormalized)")
    cover_image: str | None = None
    spotify_track_id: str | None = None
    published: bool = False
    author_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field
    @property
    def reading_time(self) -> str:
        """Human-readable reading time estimate."""
        return f"{estimate_reading_minutes(self.content)} min read"

    def to_frontmatter(self) -> dict[str, Any]:
        """Frontmatter fields for markdown export."""
        data: dict[str, Any] = {
            "title": self.title,
            "excerpt": self.excerpt,
            "category": self.category,
            "published": self.published,
            "reading_time": self.reading_time,
        }
        if self.created_at:
            data["date"] = self.created_at.strftime("%Y-%m-%d")
        if self.cover_image:
            data["cover_image"] = self.cover_image
        if self.spotify_track_id:
            data["spotify_track_id"] = self.spotify_track_id
        return data


class PostDraft(BaseModel):
    """Editable fields of a post, as submitted from the editor form."""

    title: str = ""
    excerpt: str = ""
    content: str = ""
    category: str = ""
    cover_image: str | None = None
    spotify_track_id: str | None = None
    published: bool = False

    def to_row(self) -> dict[str, Any]:
        """Row payload for the posts table. Empty optional fields become null."""
        return {
            "title": self.title.strip(),
            "excerpt": self.excerpt.strip(),
            "content": self.content,
            "category": self.category,
            "cover_image": self.cover_image or None,
            "spotify_track_id": self.spotify_track_id or None,
            "published": self.published,
        }


class Comment(BaseModel):
    """Represents a reader comment on a post."""

    id: str
    post_id: int
    author_name: str
    content: str
    created_at: datetime | None = None

    def matches(self, search: str) -> bool:
        """Case-insensitive match on author name or content."""
        needle = search.lower()
        return needle in self.author_name.lower() or needle in self.content.lower()
