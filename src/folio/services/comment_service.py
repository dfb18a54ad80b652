"""Reader comments and their moderation."""

from __future__ import annotations

from typing import Any

from folio.core.store import BackingStore, require_user
from folio.models.post import Comment
from folio.errors import require
from folio.utils.logging import get_logger

logger = get_logger(__name__)

TABLE = "comments"


class CommentService:
    """Submit, list and delete comments."""

    def __init__(self, store: BackingStore):
        self.store = store

    async def list_comments(self, post_id: int | None = None, search: str = "") -> list[Comment]:
        """Comments newest first, optionally for one post and matching a search term."""
        filters: dict[str, Any] = {"post_id": post_id} if post_id is not None else {}
        rows = await self.store.select_rows(TABLE, filters=filters, order_by="created_at", ascending=False)
        comments = [Comment.model_validate(row) for row in rows]
        search = search.strip()
        if search:
            comments = [c for c in comments if c.matches(search)]
        return comments

    async def add_comment(self, post_id: int, author_name: str, content: str) -> Comment:
        """Public submission; no sign-in needed."""
        author_name = require(author_name, "Display name", operation="add comment")
        content = require(content, "Comment", operation="add comment")
        row = await self.store.insert_row(TABLE, {
            "post_id": post_id,
            "author_name": author_name,
            "content": content,
        })
        return Comment.model_validate(row)

    async def delete_comment(self, comment_id: str) -> bool:
        await require_user(self.store, "delete comment")
        removed = await self.store.delete_rows(TABLE, filters={"id": comment_id})
        if removed:
            logger.info(f"Deleted comment {comment_id}")
        return removed > 0

    async def delete_post_comments(self, post_id: int) -> int:
        """Delete every comment on one post; returns how many were removed."""
        await require_user(self.store, "delete comments")
        removed = await self.store.delete_rows(TABLE, filters={"post_id": post_id})
        logger.info(f"Deleted {removed} comments on post {post_id}")
        return removed

    async def comment_counts(self) -> dict[int, int]:
        """Number of comments per post id."""
        counts: dict[int, int] = {}
        for comment in await self.list_comments():
            counts[comment.post_id] = counts.get(comment.post_id, 0) + 1
        return counts
