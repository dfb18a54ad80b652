"""Markdown source buffer with selection-aware structured insertion."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MarkdownSyntax(str, Enum):
    """Toolbar insertion kinds."""
    bold = "bold"
    italic = "italic"
    heading_2 = "heading_2"
    heading_3 = "heading_3"
    link = "link"
    list_item = "list_item"
    inline_code = "inline_code"
    code_block = "code_block"
    image = "image"


# kind -> (template, placeholder used when the selection is empty)
TEMPLATES: dict[MarkdownSyntax, tuple[str, str]] = {
    MarkdownSyntax.bold: ("**{text}**", "bold text"),
    MarkdownSyntax.italic: ("*{text}*", "italic text"),
    MarkdownSyntax.heading_2: ("\n## {text}\n", "Heading"),
    MarkdownSyntax.heading_3: ("\n### {text}\n", "Subheading"),
    MarkdownSyntax.link: ("[{text}](url)", "link text"),
    MarkdownSyntax.list_item: ("\n- {text}\n", "list item"),
    MarkdownSyntax.inline_code: ("`{text}`", "code"),
    MarkdownSyntax.code_block: ("\n```\n{text}\n```\n", "code block"),
}


def image_fragment(url: str) -> str:
    """Markdown inserted for an uploaded image."""
    return f"\n![Image]({url})\n"


@dataclass(frozen=True)
class Selection:
    """Offsets into the buffer; start == end is a plain cursor."""

    start: int
    end: int

    def clamp(self, length: int) -> "Selection":
        start = min(max(self.start, 0), length)
        end = min(max(self.end, start), length)
        return Selection(start, end)

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


def render_template(kind: MarkdownSyntax, selected: str) -> str:
    """Apply the kind's template to the selected text, or to its placeholder when empty."""
    if kind is MarkdownSyntax.image:
        raise ValueError("image insertion goes through an upload, not a template")
    template, placeholder = TEMPLATES[kind]
    return template.format(text=selected or placeholder)


class EditorBuffer:
    """The full markdown source plus the text surface's current selection."""

    def __init__(self, content: str = ""):
        self.content = content
        self.selection = Selection(len(content), len(content))

    def select(self, start: int, end: int | None = None) -> Selection:
        end = start if end is None else end
        self.selection = Selection(min(start, end), max(start, end)).clamp(len(self.content))
        return self.selection

    @property
    def selected_text(self) -> str:
        return self.content[self.selection.start:self.selection.end]

    def replace(self, selection: Selection, fragment: str) -> None:
        """Replace content[start:end] with fragment; the cursor lands after the fragment."""
        selection = selection.clamp(len(self.content))
        self.content = self.content[:selection.start] + fragment + self.content[selection.end:]
        cursor = selection.start + len(fragment)
        self.selection = Selection(cursor, cursor)

    def type_text(self, text: str) -> None:
        """Replace the current selection with typed text."""
        self.replace(self.selection, text)

    def insert_syntax(self, kind: MarkdownSyntax) -> str:
        """Wrap the current selection with the kind's template; returns the inserted text."""
        fragment = render_template(kind, self.selected_text)
        self.replace(self.selection, fragment)
        return fragment
