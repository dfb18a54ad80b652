"""Tests for the markdown editor session."""

import asyncio
from datetime import datetime, timezone

import pytest

from folio.editor.buffer import MarkdownSyntax, image_fragment
from folio.editor.editor import MarkdownEditor, pasted_image_name
from folio.editor.scroll_sync import ScrollSurface, SyncState
from folio.errors import BackendError
from folio.models.media import ClipboardItem, ImageFile


class GatedUploader:
    """Uploader whose uploads finish only when released."""

    def __init__(self):
        self.files: list[ImageFile] = []
        self.release = asyncio.Event()
        self.error: Exception | None = None

    async def upload(self, file):
        self.files.append(file)
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return f"https://cdn.example/images/{len(self.files)}.png"


class InstantUploader(GatedUploader):
    def __init__(self):
        super().__init__()
        self.release.set()


PNG = ImageFile(name="photo.png", content_type="image/png", data=b"\x89PNG")


def test_pasted_image_name():
    now = datetime(2026, 1, 20, 10, 15, 30, 123000, tzinfo=timezone.utc)
    assert pasted_image_name(now) == "pasted-image-2026-01-20T10-15-30-123Z.png"


class TestImageInsertion:
    @pytest.mark.asyncio
    async def test_typing_during_upload_is_kept(self):
        uploader = GatedUploader()
        editor = MarkdownEditor(uploader, content="0123456789")
        editor.select(5, 5)

        task = asyncio.create_task(editor.insert_image(PNG))
        await asyncio.sleep(0)
        editor.type_text("x" * 20)
        assert len(editor.content) == 30
        uploader.release.set()
        url = await task

        fragment = image_fragment(url)
        assert editor.content.index(fragment) == 5
        assert editor.content == "01234" + fragment + "x" * 20 + "56789"
        editor.close()

    @pytest.mark.asyncio
    async def test_selection_replaced_by_image(self):
        editor = MarkdownEditor(InstantUploader(), content="before [old] after")
        editor.select(7, 12)

        url = await editor.insert_image(PNG)
        assert editor.content == "before " + image_fragment(url) + " after"
        assert url in editor.preview.image_sources
        editor.close()

    @pytest.mark.asyncio
    async def test_failed_upload_leaves_content(self):
        uploader = InstantUploader()
        uploader.error = BackendError("boom")
        editor = MarkdownEditor(uploader, content="text")

        with pytest.raises(BackendError):
            await editor.insert_image(PNG)
        assert editor.content == "text"
        editor.close()

    @pytest.mark.asyncio
    async def test_upload_finishing_after_close_is_dropped(self):
        uploader = GatedUploader()
        editor = MarkdownEditor(uploader, content="text")

        task = asyncio.create_task(editor.insert_image(PNG))
        await asyncio.sleep(0)
        editor.close()
        uploader.release.set()

        assert await task is None
        assert editor.content == "text"

    def test_image_button_asks_host_for_a_file(self):
        picks = []
        editor = MarkdownEditor(InstantUploader(), content="abc", on_pick_image=lambda: picks.append(1))

        assert editor.insert_syntax(MarkdownSyntax.image) is False
        assert picks == [1]
        assert editor.content == "abc"

    def test_toolbar_syntax_updates_preview(self):
        editor = MarkdownEditor(InstantUploader(), content="")
        assert editor.insert_syntax(MarkdownSyntax.bold) is True
        assert editor.content == "**bold text**"
        assert "<strong>bold text</strong>" in editor.preview.html


class TestPaste:
    @pytest.mark.asyncio
    async def test_only_first_image_uploaded(self):
        uploader = InstantUploader()
        editor = MarkdownEditor(uploader, content="")
        items = [
            ClipboardItem("text/plain", b"hello"),
            ClipboardItem("image/png", b"one"),
            ClipboardItem("image/jpeg", b"two"),
        ]

        assert await editor.handle_paste(items) is True
        assert len(uploader.files) == 1
        pasted = uploader.files[0]
        assert pasted.data == b"one"
        assert pasted.content_type == "image/png"
        assert pasted.name.startswith("pasted-image-") and pasted.name.endswith(".png")
        assert editor.content.count("![Image](") == 1
        editor.close()

    @pytest.mark.asyncio
    async def test_text_paste_is_left_alone(self):
        uploader = InstantUploader()
        editor = MarkdownEditor(uploader, content="abc")

        assert await editor.handle_paste([ClipboardItem("text/plain", b"hi")]) is False
        assert uploader.files == []
        assert editor.content == "abc"


class TestResyncAfterImages:
    @pytest.mark.asyncio
    async def test_resync_once_all_images_settle(self):
        editor_surface = ScrollSurface(200, 1000, 200)
        preview_surface = ScrollSurface(0, 3000, 200)
        editor = MarkdownEditor(
            InstantUploader(),
            content="![a](https://cdn/a.png)\n\n![b](https://cdn/b.png)",
            editor_surface=editor_surface,
            preview_surface=preview_surface,
            debounce=0.01,
        )
        assert editor.pending_images == 2

        editor.image_loaded("https://cdn/a.png")
        assert preview_surface.scroll_top == 0

        editor.image_failed("https://cdn/b.png")
        assert editor.pending_images == 0
        assert preview_surface.scroll_top == pytest.approx(700)
        assert editor.sync_state is SyncState.syncing_from_editor
        editor.close()

    @pytest.mark.asyncio
    async def test_known_images_do_not_block_rerender(self):
        editor_surface = ScrollSurface(200, 1000, 200)
        preview_surface = ScrollSurface(0, 3000, 200)
        editor = MarkdownEditor(
            InstantUploader(),
            content="![a](https://cdn/a.png)",
            editor_surface=editor_surface,
            preview_surface=preview_surface,
            debounce=0.01,
        )
        editor.image_loaded("https://cdn/a.png")
        preview_surface.scroll_top = 0
        await asyncio.sleep(0.05)

        editor.type_text("\n\nmore text")
        assert editor.pending_images == 0
        assert preview_surface.scroll_top == pytest.approx(700)
        editor.close()

    def test_no_images_means_no_wait(self):
        editor = MarkdownEditor(InstantUploader(), content="plain text")
        assert editor.pending_images == 0
        editor.close()


class TestSynchronousHost:
    def test_toolbar_edits_need_no_loop(self):
        editor = MarkdownEditor(InstantUploader(), content="![a](https://cdn/a.png) hello")
        editor.select(24, 29)
        editor.insert_syntax(MarkdownSyntax.italic)
        editor.close()
        assert editor.content == "![a](https://cdn/a.png) *hello*"

    def test_scroll_and_resync_on_given_loop(self):
        loop = asyncio.new_event_loop()
        try:
            preview_surface = ScrollSurface(0, 3000, 200)
            editor = MarkdownEditor(
                InstantUploader(),
                content="![a](https://cdn/a.png)",
                editor_surface=ScrollSurface(200, 1000, 200),
                preview_surface=preview_surface,
                debounce=0.01,
                loop=loop,
            )
            editor.image_loaded("https://cdn/a.png")
            assert preview_surface.scroll_top == pytest.approx(700)
            loop.run_until_complete(asyncio.sleep(0.05))
            assert editor.sync_state is SyncState.idle
            editor.close()
        finally:
            loop.close()
