"""Proportional scroll synchronization between the source and preview panes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum


class Pane(Enum):
    editor = "editor"
    preview = "preview"


class SyncState(Enum):
    """Which pane, if any, is currently driving the other."""
    idle = "idle"
    syncing_from_editor = "syncing_from_editor"
    syncing_from_preview = "syncing_from_preview"


_DRIVING = {
    Pane.editor: SyncState.syncing_from_editor,
    Pane.preview: SyncState.syncing_from_preview,
}


def transition(state: SyncState, source: Pane) -> SyncState | None:
    """Next state for a scroll event from source, or None when the event is ignored.

    Events from the pane being driven are echoes of our own scroll_to calls
    and must not propagate back.
    """
    driving = _DRIVING[source]
    if state is SyncState.idle or state is driving:
        return driving
    return None


@dataclass
class ScrollSurface:
    """Scroll geometry of one pane."""

    scroll_top: float = 0.0
    scroll_height: float = 0.0
    client_height: float = 0.0

    @property
    def max_scroll(self) -> float:
        return self.scroll_height - self.client_height

    @property
    def fraction(self) -> float:
        """Scroll offset as a share of the maximum offset, 0.0 without overflow."""
        if self.max_scroll <= 0:
            return 0.0
        return self.scroll_top / self.max_scroll

    def scroll_to(self, top: float) -> None:
        """Jump to an offset (no animation), clamped to the scrollable range."""
        self.scroll_top = min(max(top, 0.0), max(self.max_scroll, 0.0))


def proportional_offset(source: ScrollSurface, target: ScrollSurface) -> float | None:
    """Target offset at the same scroll fraction as source; None when source cannot scroll."""
    if source.max_scroll <= 0:
        return None
    return source.fraction * max(target.max_scroll, 0.0)


class ScrollSyncCoordinator:
    """Owns the sync state of one editor and applies scroll events to the opposite pane.

    Each accepted event (re)arms a debounce timer; when it fires the state
    returns to idle. The timer runs on the given loop, or on the running loop
    at the time of the event. A host with no running loop must pass one.
    """

    def __init__(
        self,
        editor: ScrollSurface,
        preview: ScrollSurface,
        debounce: float = 0.05,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.editor = editor
        self.preview = preview
        self.debounce = debounce
        self.loop = loop
        self.state = SyncState.idle
        self._timer: asyncio.TimerHandle | None = None

    def on_editor_scroll(self) -> bool:
        """Handle a scroll event from the source pane. True when the preview moved."""
        return self._handle(Pane.editor)

    def on_preview_scroll(self) -> bool:
        """Handle a scroll event from the preview pane. True when the source moved."""
        return self._handle(Pane.preview)

    def resync(self) -> bool:
        """Re-apply the source pane's position, e.g. after preview images changed its height."""
        return self._handle(Pane.editor)

    def _handle(self, source: Pane) -> bool:
        next_state = transition(self.state, source)
        if next_state is None:
            return False
        self.state = next_state
        self._arm_timer()

        if source is Pane.editor:
            origin, target = self.editor, self.preview
        else:
            origin, target = self.preview, self.editor
        offset = proportional_offset(origin, target)
        if offset is None:
            return False
        target.scroll_to(offset)
        return True

    def _arm_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        loop = self.loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce, self._settle)

    def _settle(self) -> None:
        self._timer = None
        self.state = SyncState.idle

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.state = SyncState.idle
