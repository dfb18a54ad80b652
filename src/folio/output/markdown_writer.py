"""Markdown export of posts with YAML frontmatter."""

from pathlib import Path

import aiofiles
import yaml

from folio.models.post import Post
from folio.utils.text_utils import slugify


class MarkdownWriter:
    """Writer for Markdown files with YAML frontmatter."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    async def write_post(self, post: Post) -> Path:
        """Write a post to <id>-<slug>.md and return the path."""
        file_path = self.output_dir / self.file_name(post)

        async with aiofiles.open(file_path, "w", encoding="utf-8") as f:
            await f.write(self.build_markdown(post))

        return file_path

    @staticmethod
    def file_name(post: Post) -> str:
        slug = slugify(post.title) or "post"
        return f"{post.id}-{slug}.md"

    def build_markdown(self, post: Post) -> str:
        """Build full Markdown content with frontmatter."""
        frontmatter = yaml.dump(
            post.to_frontmatter(),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
        return f"---\n{frontmatter}---\n\n{post.content.strip()}\n"
