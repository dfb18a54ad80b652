"""Backing store contract shared by the Supabase and local JSON implementations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from folio.errors import UnauthorizedError

Row = dict[str, Any]


class BackingStore(Protocol):
    """Row-level access to the categories, posts and comments tables."""

    async def select_rows(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[Row]:
        """Rows matching all equality filters, ordered by one column."""
        ...

    async def insert_row(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert one row and return it as stored."""
        ...

    async def update_row(self, table: str, row_id: Any, changes: Mapping[str, Any]) -> Row:
        """Update the row with the given id and return it. NotFoundError when missing."""
        ...

    async def delete_rows(self, table: str, *, filters: Mapping[str, Any]) -> int:
        """Delete rows matching all equality filters; return how many were removed."""
        ...

    async def swap_display_order(self, table: str, first_id: Any, second_id: Any) -> None:
        """Exchange display_order of two rows in one atomic operation."""
        ...

    async def current_user_id(self) -> str | None:
        """Id of the signed-in identity, or None when nobody is signed in."""
        ...


class ObjectStorage(Protocol):
    """Named binary uploads resolvable to public URLs."""

    async def upload_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        cache_control: str = "3600",
        upsert: bool = False,
    ) -> str:
        """Upload bytes under path and return the stored object path."""
        ...

    def public_url(self, bucket: str, path: str) -> str:
        """Publicly resolvable URL of a stored object."""
        ...


async def require_user(store: BackingStore, operation: str) -> str:
    """Id of the signed-in user, or UnauthorizedError before anything is written."""
    user_id = await store.current_user_id()
    if not user_id:
        raise UnauthorizedError(
            f"Sign-in required for {operation}",
            operation=operation,
            status_code=401,
        )
    return user_id
