"""Backing store persisted to a local JSON file."""

from __future__ import annotations

import asyncio
import json
import os
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from folio.core.store import Row
from folio.errors import (
    BackendError,
    BucketNotFoundError,
    ConflictError,
    NotFoundError,
)
from folio.utils.logging import get_logger

logger = get_logger(__name__)

TABLES = ("categories", "posts", "comments")
# posts use integer ids, everything else uuid strings
SERIAL_TABLES = ("posts",)
UNIQUE_COLUMNS: dict[str, tuple[str, ...]] = {"categories": ("name",)}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sort_key(value: Any) -> tuple[int, Any]:
    # nulls sort last, like Postgres ascending order
    return (1, "") if value is None else (0, value)


class LocalStore:
    """Categories, posts and comments kept in one JSON file, images in a folder."""

    def __init__(
        self,
        data_file: Path,
        *,
        storage_dir: Path | None = None,
        buckets: tuple[str, ...] = ("blog-images",),
        user_id: str | None = "local-admin",
    ):
        self.data_file = data_file
        self.storage_dir = storage_dir or data_file.parent / "storage"
        self.buckets = buckets
        self.user_id = user_id
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "LocalStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def _load(self) -> dict[str, Any]:
        if not self.data_file.exists():
            return {table: [] for table in TABLES}
        async with aiofiles.open(self.data_file, "r", encoding="utf-8") as f:
            raw = (await f.read()).strip()
        try:
            data = json.loads(raw) if raw else {}
        except json.JSONDecodeError as exc:
            raise BackendError(
                f"Store file {self.data_file} is not valid JSON: {exc}",
                operation="load store",
            ) from exc
        for table in TABLES:
            data.setdefault(table, [])
        return data

    async def _save(self, data: dict[str, Any]) -> None:
        """Write a sibling temp file, then swap it in; readers never see a partial file."""
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.data_file.with_name(f".{self.data_file.name}.{os.getpid()}.tmp")
        async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2, ensure_ascii=False) + "\n")
        await aiofiles.os.replace(temp_file, self.data_file)

    @staticmethod
    def _table(data: dict[str, Any], table: str) -> list[Row]:
        if table not in TABLES:
            raise ValueError(f"Unknown table '{table}'")
        return data[table]

    @staticmethod
    def _matches(row: Row, filters: Mapping[str, Any] | None) -> bool:
        return all(row.get(column) == value for column, value in (filters or {}).items())

    def _check_unique(self, table: str, rows: list[Row], candidate: Row, operation: str) -> None:
        for column in UNIQUE_COLUMNS.get(table, ()):
            for row in rows:
                if row["id"] != candidate["id"] and row.get(column) == candidate.get(column):
                    raise ConflictError(
                        f"Duplicate {column} '{candidate.get(column)}' in {table}",
                        operation=operation,
                        status_code=409,
                    )

    @staticmethod
    def _find(rows: list[Row], row_id: Any, table: str, operation: str) -> Row:
        for row in rows:
            if row["id"] == row_id:
                return row
        raise NotFoundError(f"No {table} row with id {row_id}", operation=operation, status_code=404)

    async def select_rows(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[Row]:
        async with self._lock:
            data = await self._load()
        rows = [dict(row) for row in self._table(data, table) if self._matches(row, filters)]
        if order_by:
            rows.sort(key=lambda row: _sort_key(row.get(order_by)), reverse=not ascending)
        return rows

    async def insert_row(self, table: str, row: Mapping[str, Any]) -> Row:
        operation = f"insert {table}"
        async with self._lock:
            data = await self._load()
            rows = self._table(data, table)
            new_row = {**row, "created_at": _now()}
            if table in SERIAL_TABLES:
                sequences = data.setdefault("_sequences", {})
                sequences[table] = sequences.get(table, 0) + 1
                new_row["id"] = sequences[table]
            else:
                new_row["id"] = str(uuid.uuid4())
            self._check_unique(table, rows, new_row, operation)
            rows.append(new_row)
            await self._save(data)
        logger.debug(f"Inserted {table} row {new_row['id']}")
        return dict(new_row)

    async def update_row(self, table: str, row_id: Any, changes: Mapping[str, Any]) -> Row:
        operation = f"update {table}"
        async with self._lock:
            data = await self._load()
            rows = self._table(data, table)
            current = self._find(rows, row_id, table, operation)
            updated = {**current, **changes, "id": current["id"]}
            if table in SERIAL_TABLES:
                updated["updated_at"] = _now()
            self._check_unique(table, rows, updated, operation)
            current.clear()
            current.update(updated)
            await self._save(data)
        return dict(updated)

    async def delete_rows(self, table: str, *, filters: Mapping[str, Any]) -> int:
        operation = f"delete {table}"
        if not filters:
            raise ValueError("delete_rows requires at least one filter")
        async with self._lock:
            data = await self._load()
            rows = self._table(data, table)
            kept = [row for row in rows if not self._matches(row, filters)]
            removed = len(rows) - len(kept)
            data[table] = kept
            await self._save(data)
        return removed

    async def swap_display_order(self, table: str, first_id: Any, second_id: Any) -> None:
        """Exchange display_order of two rows within one file rewrite."""
        operation = f"swap {table} order"
        async with self._lock:
            data = await self._load()
            rows = self._table(data, table)
            first = self._find(rows, first_id, table, operation)
            second = self._find(rows, second_id, table, operation)
            # a missing order counts as 0
            first["display_order"], second["display_order"] = (
                second.get("display_order") or 0,
                first.get("display_order") or 0,
            )
            await self._save(data)

    async def current_user_id(self) -> str | None:
        return self.user_id

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
        operation = f"upload {path}"
        if bucket not in self.buckets:
            raise BucketNotFoundError(bucket, operation=operation, status_code=404)
        target = self.storage_dir / bucket / path
        if target.exists() and not upsert:
            raise ConflictError(f"Object {bucket}/{path} already exists", operation=operation)
        target.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        logger.debug(f"Stored {len(data)} bytes ({content_type}) at {target}")
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return (self.storage_dir / bucket / path).resolve().as_uri()
