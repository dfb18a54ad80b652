"""Tests for the markdown source buffer."""

import pytest

from folio.editor.buffer import EditorBuffer, MarkdownSyntax, Selection, image_fragment, render_template


class TestTemplates:
    @pytest.mark.parametrize(
        "kind, expected",
        [
            (MarkdownSyntax.bold, "**bold text**"),
            (MarkdownSyntax.italic, "*italic text*"),
            (MarkdownSyntax.heading_2, "\n## Heading\n"),
            (MarkdownSyntax.heading_3, "\n### Subheading\n"),
            (MarkdownSyntax.link, "[link text](url)"),
            (MarkdownSyntax.list_item, "\n- list item\n"),
            (MarkdownSyntax.inline_code, "`code`"),
            (MarkdownSyntax.code_block, "\n```\ncode block\n```\n"),
        ],
    )
    def test_placeholder_when_nothing_selected(self, kind, expected):
        assert render_template(kind, "") == expected

    def test_selected_text_is_wrapped(self):
        assert render_template(MarkdownSyntax.link, "docs") == "[docs](url)"

    def test_image_has_no_template(self):
        with pytest.raises(ValueError):
            render_template(MarkdownSyntax.image, "")

    def test_image_fragment(self):
        assert image_fragment("https://cdn/x.png") == "\n![Image](https://cdn/x.png)\n"


class TestEditorBuffer:
    def test_cursor_starts_at_end(self):
        buffer = EditorBuffer("hello")
        assert buffer.selection == Selection(5, 5)

    def test_wrap_selection(self):
        buffer = EditorBuffer("make this bold")
        buffer.select(10, 14)

        fragment = buffer.insert_syntax(MarkdownSyntax.bold)
        assert fragment == "**bold**"
        assert buffer.content == "make this **bold**"
        assert buffer.selection == Selection(18, 18)

    def test_insert_at_cursor(self):
        buffer = EditorBuffer("ab")
        buffer.select(1)
        buffer.insert_syntax(MarkdownSyntax.inline_code)
        assert buffer.content == "a`code`b"

    def test_select_normalizes_and_clamps(self):
        buffer = EditorBuffer("abc")
        assert buffer.select(3, 1) == Selection(1, 3)
        assert buffer.select(-4, 50) == Selection(0, 3)
        assert buffer.selected_text == "abc"

    def test_replace_clamps_stale_selection(self):
        buffer = EditorBuffer("short")
        buffer.replace(Selection(40, 45), "!")
        assert buffer.content == "short!"

    def test_type_text_replaces_selection(self):
        buffer = EditorBuffer("hello world")
        buffer.select(6, 11)
        buffer.type_text("there")
        assert buffer.content == "hello there"
