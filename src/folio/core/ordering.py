"""Swap-based ordering of categories."""

from __future__ import annotations

import asyncio

from folio.core.store import BackingStore
from folio.errors import FolioError
from folio.models.category import Category, sort_by_display_order
from folio.utils.logging import get_logger

logger = get_logger(__name__)


class CategoryOrderingEngine:
    """Moves categories up or down by exchanging display_order with a neighbor.

    The engine holds the list as last fetched from the store, sorted ascending
    by display_order. Every move is a single atomic swap in the store followed
    by a full reload; the in-memory list is never patched locally.

    Moves are serialized. A move names its target by the index the caller saw,
    but the category at that index is captured when the move is requested and
    looked up again in the latest list once the move gets its turn, so rapid
    repeated moves apply to the item the user clicked.

    Categories sharing a display_order (only possible through outside edits)
    keep whatever relative order the store returned them in.
    """

    def __init__(self, store: BackingStore, table: str = "categories"):
        self.store = store
        self.table = table
        self.categories: list[Category] = []
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """True while a move is in flight."""
        return self._lock.locked()

    async def refresh(self) -> list[Category]:
        """Re-fetch the whole collection and replace the in-memory view."""
        rows = await self.store.select_rows(self.table, order_by="display_order", ascending=True)
        self.categories = sort_by_display_order([Category.model_validate(row) for row in rows])
        return self.categories

    async def move_up(self, index: int) -> bool:
        """Swap the category at index with the one above it. False when nothing moved."""
        return await self._move(index, -1)

    async def move_down(self, index: int) -> bool:
        """Swap the category at index with the one below it. False when nothing moved."""
        return await self._move(index, 1)

    async def _move(self, index: int, step: int) -> bool:
        if not 0 <= index < len(self.categories):
            return False
        target_id = self.categories[index].id

        async with self._lock:
            position = self._position_of(target_id)
            if position is None:
                return False
            neighbor = position + step
            if not 0 <= neighbor < len(self.categories):
                return False

            current = self.categories[position]
            other = self.categories[neighbor]
            try:
                await self.store.swap_display_order(self.table, current.id, other.id)
            except FolioError:
                await self._reload_after_failure()
                raise

            logger.info(
                f"Swapped order of '{current.name}' ({current.display_order}) "
                f"and '{other.name}' ({other.display_order})"
            )
            await self.refresh()
            return True

    def _position_of(self, category_id: str) -> int | None:
        for position, category in enumerate(self.categories):
            if category.id == category_id:
                return position
        return None

    async def _reload_after_failure(self) -> None:
        try:
            await self.refresh()
        except FolioError as exc:
            logger.warning(f"Could not reload categories after failed move: {exc}")
