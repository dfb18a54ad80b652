"""Text utilities for slugs, excerpts and markdown cleanup."""

import re

# ASCII word characters, hyphen, and CJK unified ideographs
_SLUG_DISALLOWED = re.compile(r"[^\w\-\u4e00-\u9fa5]", re.ASCII)


def slugify(text: str) -> str:
    """
    Derive a URL slug from a display name.

    Lowercases, turns each whitespace run into a hyphen, then drops every
    character that is not an ASCII word character, a hyphen or a CJK
    ideograph.

    Args:
        text: Name to convert

    Returns:
        URL-friendly slug
    """
    text = text.strip().lower()
    text = re.sub(r"\s+", "-", text)
    return _SLUG_DISALLOWED.sub("", text)


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to max length, preserving words.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    truncate_at = max_length - len(suffix)

    # Find last space before truncate point
    last_space = text.rfind(' ', 0, truncate_at)
    if last_space > 0:
        return text[:last_space] + suffix

    return text[:truncate_at] + suffix


def extract_first_paragraph(markdown: str) -> str:
    """Extract first non-heading paragraph from markdown."""
    lines = markdown.split('\n')

    paragraph_lines = []
    in_paragraph = False

    for line in lines:
        stripped = line.strip()

        # Skip headings and empty lines before paragraph
        if not stripped or stripped.startswith('#'):
            if in_paragraph:
                break
            continue

        in_paragraph = True
        paragraph_lines.append(stripped)

    return ' '.join(paragraph_lines)


def clean_markdown(markdown: str) -> str:
    """Remove markdown formatting, leaving plain text."""
    # Remove code blocks
    text = re.sub(r'```[\s\S]*?```', '', markdown)
    text = re.sub(r'`[^`]+`', '', text)

    # Remove images
    text = re.sub(r'!\[.*?\]\(.*?\)', '', text)

    # Convert links to just text
    text = re.sub(r'\[([^\]]+)\]\([^)]+\)', r'\1', text)

    # Remove headers (keep text)
    text = re.sub(r'^#{1,6}\s+', '', text, flags=re.MULTILINE)

    # Remove bold/italic/strikethrough
    text = re.sub(r'\*\*([^*]+)\*\*', r'\1', text)
    text = re.sub(r'\*([^*]+)\*', r'\1', text)
    text = re.sub(r'~~([^~]+)~~', r'\1', text)

    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()


def summarize(markdown: str, max_length: int = 160) -> str:
    """Plain-text excerpt from the first paragraph of a markdown body."""
    paragraph = extract_first_paragraph(markdown)
    return truncate_text(clean_markdown(paragraph), max_length)
