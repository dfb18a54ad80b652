"""Post management for the admin area and post queries for the public site."""

from __future__ import annotations

from typing import Any

from folio.core.store import BackingStore, require_user
from folio.errors import NotFoundError, require
from folio.models.post import Post, PostDraft
from folio.utils.logging import get_logger
from folio.utils.text_utils import summarize

logger = get_logger(__name__)

TABLE = "posts"
ALL_CATEGORIES = "All"


def _validate(draft: PostDraft, operation: str) -> PostDraft:
    require(draft.title, "Title", operation=operation)
    require(draft.content, "Content", operation=operation)
    if not draft.excerpt.strip():
        draft = draft.model_copy(update={"excerpt": summarize(draft.content)})
    return draft


def filter_by_category(posts: list[Post], category: str | None) -> list[Post]:
    """Posts in the named category; None or "All" keeps every post."""
    if not category or category == ALL_CATEGORIES:
        return list(posts)
    return [post for post in posts if post.category == category]


class PostService:
    """Create, edit, publish and delete posts."""

    def __init__(self, store: BackingStore):
        self.store = store

    async def list_posts(self) -> list[Post]:
        """All posts, newest first."""
        rows = await self.store.select_rows(TABLE, order_by="created_at", ascending=False)
        return [Post.model_validate(row) for row in rows]

    async def get_post(self, post_id: int) -> Post:
        rows = await self.store.select_rows(TABLE, filters={"id": post_id})
        if not rows:
            raise NotFoundError(f"Post {post_id} not found", operation="get post", status_code=404)
        return Post.model_validate(rows[0])

    async def create_post(self, draft: PostDraft) -> Post:
        draft = _validate(draft, "create post")
        author_id = await require_user(self.store, "create post")
        row = await self.store.insert_row(TABLE, {**draft.to_row(), "author_id": author_id})
        post = Post.model_validate(row)
        logger.info(f"Created post {post.id} '{post.title}' ({'published' if post.published else 'draft'})")
        return post

    async def update_post(self, post_id: int, draft: PostDraft, *, publish: bool | None = None) -> Post:
        """Save edited fields. The published flag only changes when publish is given."""
        draft = _validate(draft, "update post")
        await require_user(self.store, "update post")
        changes: dict[str, Any] = draft.to_row()
        changes.pop("published")
        if publish is not None:
            changes["published"] = publish
        row = await self.store.update_row(TABLE, post_id, changes)
        logger.info(f"Updated post {post_id}")
        return Post.model_validate(row)

    async def set_published(self, post_id: int, published: bool) -> Post:
        await require_user(self.store, "publish post")
        row = await self.store.update_row(TABLE, post_id, {"published": published})
        logger.info(f"{'Published' if published else 'Unpublished'} post {post_id}")
        return Post.model_validate(row)

    async def delete_post(self, post_id: int) -> bool:
        await require_user(self.store, "delete post")
        removed = await self.store.delete_rows(TABLE, filters={"id": post_id})
        if removed:
            logger.info(f"Deleted post {post_id}")
        return removed > 0

    # --- Public site ---

    async def published_posts(self, category: str | None = None) -> list[Post]:
        """Published posts, newest first, optionally limited to one category."""
        rows = await self.store.select_rows(
            TABLE,
            filters={"published": True},
            order_by="created_at",
            ascending=False,
        )
        return filter_by_category([Post.model_validate(row) for row in rows], category)

    async def latest_posts(self, count: int = 3) -> list[Post]:
        return (await self.published_posts())[:count]
