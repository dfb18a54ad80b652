"""Markdown preview rendering and image-load tracking."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from markdown_it import MarkdownIt
from markdown_it.token import Token

_markdown = MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])


@dataclass(frozen=True)
class RenderedPreview:
    """HTML for the preview pane and the image sources it references, in order."""

    html: str
    image_sources: tuple[str, ...]

    @property
    def has_images(self) -> bool:
        return bool(self.image_sources)


def _image_sources(tokens: Iterable[Token]) -> list[str]:
    sources: list[str] = []
    for token in tokens:
        if token.type == "image":
            src = token.attrGet("src")
            if src:
                sources.append(str(src))
        if token.children:
            sources.extend(_image_sources(token.children))
    return sources


def render_preview(content: str) -> RenderedPreview:
    """Render markdown (with tables and strikethrough) to HTML."""
    tokens = _markdown.parse(content)
    html = _markdown.renderer.render(tokens, _markdown.options, {})
    return RenderedPreview(html=html, image_sources=tuple(_image_sources(tokens)))


class ImageLoadBarrier:
    """Calls on_settled once every image of one render has loaded or failed.

    Sources listed in already_loaded count as settled from the start. If that
    covers every image the callback runs immediately.
    """

    def __init__(
        self,
        sources: Iterable[str],
        on_settled: Callable[[], None],
        *,
        already_loaded: Iterable[str] = (),
    ):
        loaded = set(already_loaded)
        self._pending = Counter(src for src in sources if src not in loaded)
        self._on_settled = on_settled
        self._done = False
        self._check()

    @property
    def pending(self) -> int:
        return sum(self._pending.values())

    @property
    def done(self) -> bool:
        return self._done

    def settle(self, src: str) -> bool:
        """Record that one image with this source finished (load or error)."""
        if self._done or self._pending[src] <= 0:
            return False
        self._pending[src] -= 1
        self._check()
        return True

    def cancel(self) -> None:
        self._done = True

    def _check(self) -> None:
        if not self._done and self.pending == 0:
            self._done = True
            self._on_settled()
