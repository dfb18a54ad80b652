"""Tests for the JSON file backing store."""

import asyncio
import json

import pytest

from folio.core.local_store import LocalStore
from folio.errors import BackendError, BucketNotFoundError, ConflictError, NotFoundError


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "data" / "folio.json")


class TestRows:
    @pytest.mark.asyncio
    async def test_missing_file_reads_as_empty(self, store):
        assert await store.select_rows("posts") == []

    @pytest.mark.asyncio
    async def test_posts_get_serial_ids(self, store):
        first = await store.insert_row("posts", {"title": "One"})
        second = await store.insert_row("posts", {"title": "Two"})
        await store.delete_rows("posts", filters={"id": second["id"]})
        third = await store.insert_row("posts", {"title": "Three"})

        assert (first["id"], second["id"], third["id"]) == (1, 2, 3)
        assert first["created_at"]

    @pytest.mark.asyncio
    async def test_categories_get_uuid_ids(self, store):
        row = await store.insert_row("categories", {"name": "Travel"})
        assert isinstance(row["id"], str) and len(row["id"]) == 36

    @pytest.mark.asyncio
    async def test_filters_and_ordering(self, store):
        await store.insert_row("posts", {"title": "b", "published": True, "rank": 2})
        await store.insert_row("posts", {"title": "a", "published": False, "rank": 1})
        await store.insert_row("posts", {"title": "c", "published": True, "rank": None})

        published = await store.select_rows("posts", filters={"published": True}, order_by="rank")
        assert [row["title"] for row in published] == ["b", "c"]

        by_rank = await store.select_rows("posts", order_by="rank", ascending=True)
        assert [row["title"] for row in by_rank] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_update_sets_updated_at_on_posts(self, store):
        row = await store.insert_row("posts", {"title": "Draft"})
        updated = await store.update_row("posts", row["id"], {"title": "Final"})

        assert updated["title"] == "Final"
        assert updated["updated_at"]
        assert updated["created_at"] == row["created_at"]

    @pytest.mark.asyncio
    async def test_update_missing_row(self, store):
        with pytest.raises(NotFoundError):
            await store.update_row("posts", 99, {"title": "x"})

    @pytest.mark.asyncio
    async def test_unique_category_names(self, store):
        await store.insert_row("categories", {"name": "Travel"})
        music = await store.insert_row("categories", {"name": "Music"})

        with pytest.raises(ConflictError):
            await store.insert_row("categories", {"name": "Travel"})
        with pytest.raises(ConflictError):
            await store.update_row("categories", music["id"], {"name": "Travel"})

    @pytest.mark.asyncio
    async def test_delete_requires_filters(self, store):
        with pytest.raises(ValueError):
            await store.delete_rows("comments", filters={})

    @pytest.mark.asyncio
    async def test_unknown_table(self, store):
        with pytest.raises(ValueError, match="Unknown table"):
            await store.select_rows("users")

    @pytest.mark.asyncio
    async def test_swap_is_one_rewrite(self, store):
        a = await store.insert_row("categories", {"name": "A", "display_order": 1})
        b = await store.insert_row("categories", {"name": "B", "display_order": 5})

        await store.swap_display_order("categories", a["id"], b["id"])

        saved = json.loads(store.data_file.read_text(encoding="utf-8"))
        orders = {row["name"]: row["display_order"] for row in saved["categories"]}
        assert orders == {"A": 5, "B": 1}

    @pytest.mark.asyncio
    async def test_swap_with_missing_row_changes_nothing(self, store):
        a = await store.insert_row("categories", {"name": "A", "display_order": 1})

        with pytest.raises(NotFoundError):
            await store.swap_display_order("categories", a["id"], "missing")
        rows = await store.select_rows("categories")
        assert rows[0]["display_order"] == 1


class TestConcurrentAccess:
    @pytest.mark.asyncio
    async def test_reads_during_a_swap_see_a_whole_store(self, store):
        rows = [await store.insert_row("categories", {"name": name, "display_order": order})
                for order, name in enumerate("ABC", 1)]

        for ticks in range(1, 40):
            swap = asyncio.create_task(store.swap_display_order("categories", rows[0]["id"], rows[1]["id"]))
            for _ in range(ticks):
                await asyncio.sleep(0)
            seen = await store.select_rows("categories", order_by="display_order")
            await swap
            assert len(seen) == 3
            assert sorted(row["display_order"] for row in seen) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_save_leaves_no_temp_file(self, store):
        await store.insert_row("categories", {"name": "A"})
        assert [p.name for p in store.data_file.parent.iterdir()] == ["folio.json"]

    @pytest.mark.asyncio
    async def test_corrupt_file_is_a_backend_error(self, store):
        store.data_file.parent.mkdir(parents=True)
        store.data_file.write_text("{\"categories\": [", encoding="utf-8")

        with pytest.raises(BackendError, match="not valid JSON"):
            await store.select_rows("categories")


class TestObjects:
    @pytest.mark.asyncio
    async def test_upload_and_public_url(self, store):
        path = await store.upload_object("blog-images", "images/a.png", b"\x89PNG", content_type="image/png")

        assert path == "images/a.png"
        assert (store.storage_dir / "blog-images" / "images" / "a.png").read_bytes() == b"\x89PNG"
        assert store.public_url("blog-images", path).startswith("file://")

    @pytest.mark.asyncio
    async def test_unknown_bucket(self, store):
        with pytest.raises(BucketNotFoundError) as exc_info:
            await store.upload_object("avatars", "a.png", b"x", content_type="image/png")
        assert exc_info.value.bucket == "avatars"

    @pytest.mark.asyncio
    async def test_no_overwrite_without_upsert(self, store):
        await store.upload_object("blog-images", "a.png", b"x", content_type="image/png")

        with pytest.raises(ConflictError):
            await store.upload_object("blog-images", "a.png", b"y", content_type="image/png")
        await store.upload_object("blog-images", "a.png", b"y", content_type="image/png", upsert=True)
