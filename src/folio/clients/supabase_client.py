"""Supabase client: PostgREST rows, Storage objects and the auth user endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from folio.clients.base import BaseAsyncClient
from folio.core.store import Row
from folio.errors import (
    BackendError,
    BucketNotFoundError,
    ConflictError,
    FolioError,
    NotFoundError,
    UnauthorizedError,
)
from folio.utils.logging import get_logger

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"
INSUFFICIENT_PRIVILEGE = "42501"
SWAP_FUNCTION = "swap_display_order"


def _filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return "eq.true" if value else "eq.false"
    return f"eq.{value}"


def build_query(
    filters: Mapping[str, Any] | None = None,
    order_by: str | None = None,
    ascending: bool = True,
) -> dict[str, str]:
    """PostgREST query parameters for equality filters and one ordering column."""
    params: dict[str, str] = {}
    for column, value in (filters or {}).items():
        params[column] = _filter_value(value)
    if order_by:
        params["order"] = f"{order_by}.{'asc' if ascending else 'desc'}"
    return params


class SupabaseClient(BaseAsyncClient):
    """Backing store and object storage on a Supabase project."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        access_token: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self.anon_key = anon_key
        self.access_token = access_token

    def _get_headers(self) -> dict[str, str]:
        token = self.access_token or self.anon_key
        return {
            "Content-Type": "application/json",
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token}",
        }

    def _map_http_error(self, operation: str, exc: httpx.HTTPStatusError) -> FolioError:
        response = exc.response
        http_status = response.status_code
        details: dict[str, Any] = {}
        try:
            payload = response.json()
            if isinstance(payload, dict):
                details = payload
        except ValueError:
            text = response.text
            details["message"] = text[:1000] if text else response.reason_phrase

        code = str(details.get("code", ""))
        message = str(details.get("message") or details.get("error") or response.reason_phrase)

        logger.error(f"Supabase error during {operation}: {http_status} {message}")

        kwargs = {"operation": operation, "status_code": http_status, "detail": details}
        if http_status == 409 or code == UNIQUE_VIOLATION:
            return ConflictError(f"Duplicate value rejected during {operation}: {message}", **kwargs)
        if http_status in (401, 403) or code == INSUFFICIENT_PRIVILEGE:
            return UnauthorizedError(f"Not authorized for {operation}: {message}", **kwargs)
        if http_status == 404:
            return NotFoundError(f"Not found during {operation}: {message}", **kwargs)
        return BackendError(f"Supabase error during {operation}: {http_status} {message}", **kwargs)

    async def _call(self, operation: str, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Send a request and translate failures into folio errors."""
        logger.debug(f"{operation}: {method} {endpoint}")
        try:
            return await self._request(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as exc:
            raise self._map_http_error(operation, exc) from exc
        except httpx.TransportError as exc:
            raise BackendError(
                f"Network error during {operation}: {exc}",
                operation=operation,
            ) from exc

    # --- Rows ---

    async def select_rows(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[Row]:
        params = {"select": "*", **build_query(filters, order_by, ascending)}
        response = await self._call(f"select {table}", "GET", f"/rest/v1/{table}", params=params)
        return response.json()

    async def insert_row(self, table: str, row: Mapping[str, Any]) -> Row:
        operation = f"insert {table}"
        response = await self._call(
            operation,
            "POST",
            f"/rest/v1/{table}",
            json=[dict(row)],
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        return rows[0]

    async def update_row(self, table: str, row_id: Any, changes: Mapping[str, Any]) -> Row:
        operation = f"update {table}"
        response = await self._call(
            operation,
            "PATCH",
            f"/rest/v1/{table}",
            params=build_query({"id": row_id}),
            json=dict(changes),
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise NotFoundError(f"No {table} row with id {row_id}", operation=operation)
        return rows[0]

    async def delete_rows(self, table: str, *, filters: Mapping[str, Any]) -> int:
        operation = f"delete {table}"
        if not filters:
            raise ValueError("delete_rows requires at least one filter")
        response = await self._call(
            operation,
            "DELETE",
            f"/rest/v1/{table}",
            params=build_query(filters),
            headers={"Prefer": "return=representation"},
        )
        return len(response.json())

    async def swap_display_order(self, table: str, first_id: Any, second_id: Any) -> None:
        """Call the swap_display_order SQL function; both rows change in one transaction."""
        operation = f"swap {table} order"
        await self._call(
            operation,
            "POST",
            f"/rest/v1/rpc/{SWAP_FUNCTION}",
            json={"target_table": table, "first_id": first_id, "second_id": second_id},
        )

    async def current_user_id(self) -> str | None:
        if not self.access_token:
            return None
        try:
            response = await self._call("get user", "GET", "/auth/v1/user")
        except UnauthorizedError:
            return None
        return response.json().get("id")

    # --- Storage ---

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
        try:
            response = await self._call(
                operation,
                "POST",
                f"/storage/v1/object/{bucket}/{quote(path)}",
                content=data,
                headers={
                    "Content-Type": content_type,
                    "cache-control": f"max-age={cache_control}",
                    "x-upsert": "true" if upsert else "false",
                },
            )
        except BackendError as exc:
            detail = exc.detail if isinstance(exc.detail, dict) else {}
            text = f"{detail.get('error', '')} {detail.get('message', '')}"
            if "Bucket not found" in text:
                raise BucketNotFoundError(bucket, operation=operation, status_code=exc.status_code) from exc
            raise
        key = response.json().get("Key", f"{bucket}/{path}")
        # Key is "<bucket>/<path>"
        return key.split("/", 1)[1] if key.startswith(f"{bucket}/") else path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{quote(path)}"


def create_supabase_client(
    base_url: str,
    anon_key: str,
    access_token: str = "",
    timeout: float = 30.0,
) -> SupabaseClient:
    """Factory function to create a SupabaseClient."""
    return SupabaseClient(
        base_url=base_url,
        anon_key=anon_key,
        access_token=access_token,
        timeout=timeout,
    )
