"""CLI commands for folio using Typer."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from folio.config import get_settings
from folio.core.backend import create_store
from folio.core.category_manager import CategoryManager
from folio.editor.buffer import MarkdownSyntax
from folio.editor.editor import MarkdownEditor
from folio.editor.preview import render_preview
from folio.errors import (
    BucketNotFoundError,
    ConflictError,
    FolioError,
    UnauthorizedError,
    ValidationError,
)
from folio.models.category import CATEGORY_COLORS, DEFAULT_COLOR
from folio.models.media import ImageFile
from folio.models.post import Post, PostDraft
from folio.output.markdown_writer import MarkdownWriter
from folio.services.comment_service import CommentService
from folio.services.image_uploader import ImageUploader
from folio.services.post_service import PostService
from folio.utils.logging import setup_logging


app = typer.Typer(
    name="folio",
    help="Portfolio blog admin: categories, posts, comments and images",
    no_args_is_help=True,
)
categories_app = typer.Typer(help="Manage and reorder categories", no_args_is_help=True)
posts_app = typer.Typer(help="Create, edit and publish posts", no_args_is_help=True)
comments_app = typer.Typer(help="Moderate comments", no_args_is_help=True)
editor_app = typer.Typer(help="Apply editor actions to a markdown file", no_args_is_help=True)
app.add_typer(categories_app, name="categories")
app.add_typer(posts_app, name="posts")
app.add_typer(comments_app, name="comments")
app.add_typer(editor_app, name="editor")

console = Console()

T = TypeVar("T")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """Configure logging for every command."""
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.log_level.upper()
    setup_logging(level=level, log_file=log_file)


def _run(action: Callable[[Any], Awaitable[T]]) -> T:
    """Open the configured store, run an action with it, and report failures."""
    settings = get_settings()
    try:
        store = create_store(settings)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    async def run():
        async with store:
            return await action(store)

    try:
        return asyncio.run(run())
    except ValidationError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
    except ConflictError as exc:
        console.print("[red]That name is already taken.[/red]")
        console.print(f"[dim]{escape(str(exc))}[/dim]")
    except UnauthorizedError as exc:
        console.print("[red]Please sign in first.[/red]")
        console.print("[yellow]Hint: set SUPABASE_ACCESS_TOKEN to the admin user's session token.[/yellow]")
        console.print(f"[dim]{escape(str(exc))}[/dim]")
    except BucketNotFoundError as exc:
        console.print("[red]Storage bucket is not set up.[/red]")
        console.print(f"[yellow]{escape(str(exc))}[/yellow]")
    except FolioError as exc:
        console.print(f"[red]Operation failed: {escape(str(exc))}[/red]")
    raise typer.Exit(1)


def _confirm(prompt: str, yes: bool) -> None:
    if not yes and not typer.confirm(prompt):
        raise typer.Exit(0)


# --- Categories ---


def _display_categories(categories) -> None:
    if not categories:
        console.print("[dim]No categories yet[/dim]")
        return
    table = Table(title="Categories")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Slug")
    table.add_column("Color")
    table.add_column("Order", justify="right")
    table.add_column("ID", style="dim")
    for position, category in enumerate(categories, 1):
        table.add_row(
            str(position),
            category.name,
            category.slug,
            f"[{_rich_color(category.color)}]{category.color}[/]",
            str(category.display_order),
            category.id,
        )
    console.print(table)


def _rich_color(color: str) -> str:
    return {
        "emerald": "green",
        "purple": "magenta",
        "amber": "yellow",
        "rose": "red",
        "indigo": "blue",
        "pink": "bright_magenta",
    }.get(color, color if color in CATEGORY_COLORS else "white")


@categories_app.command("list")
def categories_list():
    """List categories in display order."""
    async def action(store):
        return await CategoryManager(store).list_categories()

    _display_categories(_run(action))


@categories_app.command("add")
def categories_add(
    name: str = typer.Argument(..., help="Category name"),
    slug: str = typer.Option("", "--slug", help="URL slug (derived from the name when empty)"),
    color: str = typer.Option(DEFAULT_COLOR, "--color", "-c", help=f"One of: {', '.join(CATEGORY_COLORS)}"),
):
    """Add a category at the end of the order."""
    async def action(store):
        manager = CategoryManager(store)
        await manager.create_category(name, slug=slug, color=color)
        return manager.categories

    categories = _run(action)
    console.print("[green]Category added[/green]")
    _display_categories(categories)


@categories_app.command("edit")
def categories_edit(
    category_id: str = typer.Argument(..., help="Category ID"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    slug: str = typer.Option("", "--slug", help="New slug (derived from the name when empty)"),
    color: Optional[str] = typer.Option(None, "--color", "-c", help="New color"),
):
    """Rename a category or change its slug or color."""
    async def action(store):
        manager = CategoryManager(store)
        current = await manager.get_category(category_id)
        await manager.update_category(
            category_id,
            name=current.name if name is None else name,
            slug=slug,
            color=color,
        )
        return manager.categories

    categories = _run(action)
    console.print("[green]Category updated[/green]")
    _display_categories(categories)


@categories_app.command("delete")
def categories_delete(
    category_id: str = typer.Argument(..., help="Category ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a category. Posts keep their category label."""
    _confirm(f"Delete category {category_id}?", yes)

    async def action(store):
        manager = CategoryManager(store)
        removed = await manager.delete_category(category_id)
        return removed, manager.categories

    removed, categories = _run(action)
    if removed:
        console.print("[green]Category deleted[/green]")
    else:
        console.print("[yellow]No such category[/yellow]")
    _display_categories(categories)


def _move(position: int, up: bool) -> None:
    async def action(store):
        manager = CategoryManager(store)
        await manager.list_categories()
        index = position - 1
        moved = await (manager.move_up(index) if up else manager.move_down(index))
        return moved, manager.categories

    moved, categories = _run(action)
    if moved:
        console.print("[green]Order updated[/green]")
    else:
        console.print("[yellow]Already at the edge; nothing moved[/yellow]")
    _display_categories(categories)


@categories_app.command("up")
def categories_up(position: int = typer.Argument(..., min=1, help="Position shown by 'list'")):
    """Move a category one place up."""
    _move(position, up=True)


@categories_app.command("down")
def categories_down(position: int = typer.Argument(..., min=1, help="Position shown by 'list'")):
    """Move a category one place down."""
    _move(position, up=False)


# --- Posts ---


def _display_posts(posts: list[Post]) -> None:
    if not posts:
        console.print("[dim]No posts[/dim]")
        return
    table = Table(title="Posts")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Title", style="green")
    table.add_column("Category")
    table.add_column("Status")
    table.add_column("Reading time")
    table.add_column("Created")
    for post in posts:
        table.add_row(
            str(post.id),
            post.title[:50],
            post.category,
            "[green]published[/green]" if post.published else "[yellow]draft[/yellow]",
            post.reading_time,
            post.created_at.strftime("%Y-%m-%d") if post.created_at else "",
        )
    console.print(table)


def _read_content(content_file: Optional[Path]) -> Optional[str]:
    if content_file is None:
        return None
    return content_file.read_text(encoding="utf-8")


@posts_app.command("list")
def posts_list(
    published: bool = typer.Option(False, "--published", help="Only published posts"),
    category: Optional[str] = typer.Option(None, "--category", help="Only this category"),
    latest: Optional[int] = typer.Option(None, "--latest", help="Only the newest N published posts"),
):
    """List posts, newest first."""
    async def action(store):
        service = PostService(store)
        if latest is not None:
            return await service.latest_posts(latest)
        if published or category:
            return await service.published_posts(category)
        return await service.list_posts()

    _display_posts(_run(action))


@posts_app.command("show")
def posts_show(
    post_id: int = typer.Argument(..., help="Post ID"),
    html: bool = typer.Option(False, "--html", help="Print the rendered HTML instead of markdown"),
):
    """Show one post."""
    async def action(store):
        return await PostService(store).get_post(post_id)

    post = _run(action)
    console.print(f"[bold]{escape(post.title)}[/bold]")
    console.print(f"[dim]{post.category} | {post.reading_time} | "
                  f"{'published' if post.published else 'draft'}[/dim]")
    if post.excerpt:
        console.print(f"[italic]{escape(post.excerpt)}[/italic]")
    console.print()
    if html:
        console.print(render_preview(post.content).html, markup=False)
    else:
        console.print(post.content, markup=False)


@posts_app.command("new")
def posts_new(
    title: str = typer.Option(..., "--title", "-t", help="Post title"),
    content_file: Path = typer.Option(..., "--content-file", "-f", exists=True, help="Markdown body"),
    excerpt: str = typer.Option("", "--excerpt", help="Short summary (first paragraph when empty)"),
    category: str = typer.Option("", "--category", help="Category name"),
    cover_image: str = typer.Option("", "--cover-image", help="Cover image URL"),
    spotify_track_id: str = typer.Option("", "--spotify-track-id", help="Spotify track ID"),
    publish: bool = typer.Option(False, "--publish", help="Publish immediately"),
):
    """Create a post from a markdown file."""
    draft = PostDraft(
        title=title,
        excerpt=excerpt,
        content=_read_content(content_file) or "",
        category=category,
        cover_image=cover_image or None,
        spotify_track_id=spotify_track_id or None,
        published=publish,
    )

    async def action(store):
        return await PostService(store).create_post(draft)

    post = _run(action)
    console.print(f"[green]Created post {post.id}[/green] ({'published' if post.published else 'draft'})")


@posts_app.command("edit")
def posts_edit(
    post_id: int = typer.Argument(..., help="Post ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content_file: Optional[Path] = typer.Option(None, "--content-file", "-f", exists=True),
    excerpt: Optional[str] = typer.Option(None, "--excerpt"),
    category: Optional[str] = typer.Option(None, "--category"),
    cover_image: Optional[str] = typer.Option(None, "--cover-image"),
    spotify_track_id: Optional[str] = typer.Option(None, "--spotify-track-id"),
    publish: Optional[bool] = typer.Option(None, "--publish/--unpublish", help="Change published state"),
):
    """Edit fields of a post; omitted options keep their current value."""
    new_content = _read_content(content_file)

    async def action(store):
        service = PostService(store)
        current = await service.get_post(post_id)
        draft = PostDraft(
            title=current.title if title is None else title,
            excerpt=current.excerpt if excerpt is None else excerpt,
            content=current.content if new_content is None else new_content,
            category=current.category if category is None else category,
            cover_image=current.cover_image if cover_image is None else cover_image,
            spotify_track_id=current.spotify_track_id if spotify_track_id is None else spotify_track_id,
        )
        return await service.update_post(post_id, draft, publish=publish)

    post = _run(action)
    console.print(f"[green]Updated post {post.id}[/green]")


def _set_published(post_id: int, published: bool) -> None:
    async def action(store):
        return await PostService(store).set_published(post_id, published)

    post = _run(action)
    console.print(f"[green]Post {post.id} is now {'published' if post.published else 'a draft'}[/green]")


@posts_app.command("publish")
def posts_publish(post_id: int = typer.Argument(..., help="Post ID")):
    """Publish a post."""
    _set_published(post_id, True)


@posts_app.command("unpublish")
def posts_unpublish(post_id: int = typer.Argument(..., help="Post ID")):
    """Turn a post back into a draft."""
    _set_published(post_id, False)


@posts_app.command("delete")
def posts_delete(
    post_id: int = typer.Argument(..., help="Post ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a post."""
    _confirm(f"Delete post {post_id}?", yes)

    async def action(store):
        return await PostService(store).delete_post(post_id)

    if _run(action):
        console.print("[green]Post deleted[/green]")
    else:
        console.print("[yellow]No such post[/yellow]")


@posts_app.command("export")
def posts_export(
    post_id: int = typer.Argument(..., help="Post ID"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Target directory"),
):
    """Write a post to a markdown file with YAML frontmatter."""
    settings = get_settings()
    writer = MarkdownWriter(output_dir or settings.exports_dir)

    async def action(store):
        post = await PostService(store).get_post(post_id)
        return await writer.write_post(post)

    path = _run(action)
    console.print(f"[green]Exported to {path}[/green]")


# --- Comments ---


@comments_app.command("list")
def comments_list(
    post_id: Optional[int] = typer.Option(None, "--post", help="Only comments on this post"),
    search: str = typer.Option("", "--search", "-s", help="Match author or content"),
):
    """List comments, newest first."""
    async def action(store):
        comments = await CommentService(store).list_comments(post_id, search)
        titles = {post.id: post.title for post in await PostService(store).list_posts()}
        return comments, titles

    comments, titles = _run(action)
    if not comments:
        console.print("[dim]No comments[/dim]")
        return
    table = Table(title=f"Comments ({len(comments)})")
    table.add_column("ID", style="dim")
    table.add_column("Post")
    table.add_column("Author", style="cyan")
    table.add_column("Comment", width=50)
    table.add_column("Date")
    for comment in comments:
        table.add_row(
            comment.id,
            titles.get(comment.post_id, f"#{comment.post_id}"),
            comment.author_name,
            comment.content,
            comment.created_at.strftime("%Y-%m-%d %H:%M") if comment.created_at else "",
        )
    console.print(table)


@comments_app.command("delete")
def comments_delete(
    comment_id: str = typer.Argument(..., help="Comment ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete one comment."""
    _confirm(f"Delete comment {comment_id}?", yes)

    async def action(store):
        return await CommentService(store).delete_comment(comment_id)

    if _run(action):
        console.print("[green]Comment deleted[/green]")
    else:
        console.print("[yellow]No such comment[/yellow]")


@comments_app.command("purge")
def comments_purge(
    post_id: int = typer.Argument(..., help="Post ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete every comment on a post. Cannot be undone."""
    _confirm(f"Delete ALL comments on post {post_id}? This cannot be undone", yes)

    async def action(store):
        return await CommentService(store).delete_post_comments(post_id)

    removed = _run(action)
    console.print(f"[green]Deleted {removed} comments[/green]")


# --- Images and markdown ---


@app.command()
def upload(image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file")):
    """Upload an image and print its public URL."""
    settings = get_settings()
    file = ImageFile.from_path(image)

    async def action(store):
        return await ImageUploader(store, bucket=settings.storage_bucket).upload(file)

    url = _run(action)
    console.print(url, markup=False)


@app.command()
def render(markdown_file: Path = typer.Argument(..., exists=True, dir_okay=False)):
    """Render a markdown file to HTML as the preview pane shows it."""
    preview = render_preview(markdown_file.read_text(encoding="utf-8"))
    console.print(preview.html, markup=False)
    if preview.image_sources:
        console.print(f"[dim]{len(preview.image_sources)} image(s)[/dim]")


@editor_app.command("image")
def editor_image(
    markdown_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    image: Path = typer.Argument(..., exists=True, dir_okay=False),
    at: Optional[int] = typer.Option(None, "--at", help="Character offset (end of file when omitted)"),
):
    """Upload an image and insert its markdown into a file at an offset."""
    settings = get_settings()
    content = markdown_file.read_text(encoding="utf-8")
    file = ImageFile.from_path(image)

    async def action(store):
        uploader = ImageUploader(store, bucket=settings.storage_bucket)
        editor = MarkdownEditor(uploader, content=content, debounce=settings.scroll_sync_debounce)
        editor.select(len(content) if at is None else at)
        try:
            await editor.insert_image(file)
        finally:
            editor.close()
        return editor.content

    markdown_file.write_text(_run(action), encoding="utf-8")
    console.print(f"[green]Inserted image into {markdown_file}[/green]")


@editor_app.command("wrap")
def editor_wrap(
    markdown_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    kind: MarkdownSyntax = typer.Argument(..., help="Syntax to insert"),
    start: int = typer.Option(0, "--start", help="Selection start offset"),
    end: Optional[int] = typer.Option(None, "--end", help="Selection end offset (defaults to start)"),
):
    """Wrap a selection of a markdown file with toolbar syntax."""
    if kind is MarkdownSyntax.image:
        console.print("[red]Use 'folio editor image' to insert images[/red]")
        raise typer.Exit(1)

    editor = MarkdownEditor(uploader=None, content=markdown_file.read_text(encoding="utf-8"))
    editor.select(start, end)
    editor.insert_syntax(kind)
    editor.close()
    markdown_file.write_text(editor.content, encoding="utf-8")
    console.print(f"[green]Applied {kind.value} to {markdown_file}[/green]")


# --- Entry Point ---


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
