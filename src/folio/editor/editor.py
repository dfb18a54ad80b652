"""Split-pane markdown editor: source buffer, live preview and scroll sync."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Protocol

from folio.editor.buffer import EditorBuffer, MarkdownSyntax, Selection, image_fragment
from folio.editor.preview import ImageLoadBarrier, RenderedPreview, render_preview
from folio.editor.scroll_sync import ScrollSurface, ScrollSyncCoordinator, SyncState
from folio.models.media import ClipboardItem, ImageFile
from folio.utils.logging import get_logger

logger = get_logger(__name__)


class Uploader(Protocol):
    async def upload(self, file: ImageFile) -> str: ...


def pasted_image_name(now: datetime | None = None) -> str:
    """Synthetic file name for clipboard images, e.g. pasted-image-2026-01-20T10-15-30-123Z.png."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"pasted-image-{stamp.replace(':', '-').replace('.', '-')}.png"


class MarkdownEditor:
    """One editing session of a post body.

    The host UI forwards its events here (typing, selection changes, scroll
    events, image load completions) and reads back ``content``,
    ``preview.html`` and the two surfaces' scroll offsets.

    Editing and toolbar actions are synchronous. Scroll events and image
    resyncs arm a debounce timer on ``loop``, or on the running loop when
    none is given.
    """

    preview: RenderedPreview

    def __init__(
        self,
        uploader: Uploader,
        *,
        content: str = "",
        editor_surface: ScrollSurface | None = None,
        preview_surface: ScrollSurface | None = None,
        debounce: float = 0.05,
        on_pick_image: Callable[[], None] | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.uploader = uploader
        self.buffer = EditorBuffer(content)
        self.editor_surface = editor_surface or ScrollSurface()
        self.preview_surface = preview_surface or ScrollSurface()
        self.scroll = ScrollSyncCoordinator(self.editor_surface, self.preview_surface, debounce, loop)
        self.on_pick_image = on_pick_image
        self._loaded_images: set[str] = set()
        self._image_wait: ImageLoadBarrier | None = None
        self._closed = False
        self._rerender()

    @property
    def content(self) -> str:
        return self.buffer.content

    @property
    def selection(self) -> Selection:
        return self.buffer.selection

    @property
    def sync_state(self) -> SyncState:
        return self.scroll.state

    @property
    def pending_images(self) -> int:
        return self._image_wait.pending if self._image_wait else 0

    # --- Content ---

    def set_content(self, content: str) -> None:
        """Replace the whole buffer, as when the text surface reports a new value."""
        self.buffer.content = content
        self.buffer.selection = self.buffer.selection.clamp(len(content))
        self._rerender()

    def select(self, start: int, end: int | None = None) -> Selection:
        return self.buffer.select(start, end)

    def type_text(self, text: str) -> None:
        self.buffer.type_text(text)
        self._rerender()

    def insert_syntax(self, kind: MarkdownSyntax) -> bool:
        """Apply a toolbar action. The image kind only asks the host for a file."""
        if kind is MarkdownSyntax.image:
            if self.on_pick_image is not None:
                self.on_pick_image()
            return False
        self.buffer.insert_syntax(kind)
        self._rerender()
        return True

    # --- Images ---

    async def insert_image(self, file: ImageFile) -> str | None:
        """Upload an image and insert its markdown at the selection captured now.

        Text typed while the upload runs is kept; the captured offsets are
        clamped to the content as it is when the upload finishes. Returns the
        URL, or None when the editor was closed before the upload finished.
        Upload errors propagate and leave the content unchanged.
        """
        captured = self.buffer.selection
        url = await self.uploader.upload(file)
        if self._closed:
            logger.debug(f"Editor closed before upload of {file.name} finished; not inserting")
            return None
        self.buffer.replace(captured, image_fragment(url))
        self._rerender()
        return url

    async def handle_paste(self, items: Iterable[ClipboardItem]) -> bool:
        """Upload the first pasted image, if any. False lets the default paste proceed."""
        for item in items:
            if not item.is_image:
                continue
            file = ImageFile(name=pasted_image_name(), content_type=item.mime_type, data=item.data)
            await self.insert_image(file)
            return True
        return False

    def image_loaded(self, src: str) -> None:
        """The preview finished loading an image."""
        self._loaded_images.add(src)
        if self._image_wait is not None:
            self._image_wait.settle(src)

    def image_failed(self, src: str) -> None:
        """The preview gave up on an image; it still counts as settled."""
        if self._image_wait is not None:
            self._image_wait.settle(src)

    # --- Scrolling ---

    def on_editor_scroll(self) -> bool:
        return self.scroll.on_editor_scroll()

    def on_preview_scroll(self) -> bool:
        return self.scroll.on_preview_scroll()

    def close(self) -> None:
        """Stop timers and pending image waits; later upload completions are dropped."""
        self._closed = True
        self.scroll.close()
        if self._image_wait is not None:
            self._image_wait.cancel()
            self._image_wait = None

    def _rerender(self) -> None:
        self.preview = render_preview(self.buffer.content)
        if self._image_wait is not None:
            self._image_wait.cancel()
            self._image_wait = None
        if not self.preview.has_images:
            return
        self._image_wait = ImageLoadBarrier(
            self.preview.image_sources,
            self._images_settled,
            already_loaded=self._loaded_images,
        )

    def _images_settled(self) -> None:
        if self._closed:
            return
        self.scroll.resync()
