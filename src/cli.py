"""CLI interface for taman."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from taman.app import Garden, build_garden
from taman.assist import AssistTask, assist
from taman.config import load_config, merge_cli_overrides
from taman.content.export import markdown_filename, to_markdown
from taman.content.models import Post, PostFilter

app = typer.Typer(
    name="taman",
    help="Taman Digital: manage posts, trash and writing stats from the terminal.",
    no_args_is_help=True,
)
posts_app = typer.Typer(help="List, search and manage posts.", no_args_is_help=True)
trash_app = typer.Typer(help="Inspect and sweep the trash.", no_args_is_help=True)
assist_app = typer.Typer(help="LLM writing assistance.", no_args_is_help=True)
app.add_typer(posts_app, name="posts")
app.add_typer(trash_app, name="trash")
app.add_typer(assist_app, name="assist")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from taman import __version__

        console.print(f"taman {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .taman.toml file."),
    ] = None,
    storage_dir: Annotated[
        Optional[Path],
        typer.Option("--storage-dir", help="Directory holding the durable store."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Taman Digital - a personal writing garden."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = merge_cli_overrides(load_config(config_path), storage_dir=storage_dir)
    ctx.obj = build_garden(config)


def _garden(ctx: typer.Context) -> Garden:
    return ctx.obj


def _posts_table(posts: list[Post], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Last edited")
    for post in posts:
        status = "trash" if post.is_deleted else post.status.value
        table.add_row(
            post.id,
            post.title,
            post.author_username,
            status,
            str(post.engagement),
            post.last_touched.strftime("%Y-%m-%d %H:%M"),
        )
    return table


def _get_or_exit(garden: Garden, post_id: str) -> Post:
    post = garden.posts.get(post_id)
    if post is None:
        console.print(f"[red]Error:[/red] No post with id {post_id}")
        raise typer.Exit(1)
    return post


# ── posts ────────────────────────────────────────────────────────


@posts_app.command("list")
def posts_list(
    ctx: typer.Context,
    author: Annotated[
        Optional[str],
        typer.Option("--author", "-a", help="Only this author's posts (dashboard view)."),
    ] = None,
    status: Annotated[
        PostFilter,
        typer.Option("--status", "-s", help="all, draft, published or trash."),
    ] = PostFilter.ALL,
    query: Annotated[
        str,
        typer.Option("--query", "-q", help="Match title or content."),
    ] = "",
) -> None:
    """List posts.  With --author, shows that author's dashboard listing."""
    garden = _garden(ctx)
    if author:
        posts = garden.posts.list_for_admin(author, status, query)
    else:
        posts = garden.posts.list()
        if status == PostFilter.TRASH:
            posts = [p for p in posts if p.is_deleted]
        elif status != PostFilter.ALL:
            posts = [p for p in posts if p.status == status.value and not p.is_deleted]
        if query:
            needle = query.lower()
            posts = [p for p in posts if needle in p.title.lower() or needle in p.content.lower()]
    console.print(_posts_table(posts, f"Posts ({len(posts)})"))


@posts_app.command("search")
def posts_search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Text to look for in titles, content and tags.")],
) -> None:
    """Search published posts."""
    posts = _garden(ctx).posts.search(query)
    if not posts:
        console.print("[yellow]No matching posts.[/yellow]")
        return
    console.print(_posts_table(posts, f"Results for '{query}'"))


@posts_app.command("trending")
def posts_trending(ctx: typer.Context) -> None:
    """Show the most engaging published posts."""
    console.print(_posts_table(_garden(ctx).posts.trending(), "Trending"))


@posts_app.command("delete")
def posts_delete(
    ctx: typer.Context,
    post_id: Annotated[str, typer.Argument(help="Post id.")],
) -> None:
    """Move a post to the trash."""
    garden = _garden(ctx)
    _get_or_exit(garden, post_id)
    garden.posts.soft_delete(post_id)
    console.print(f"[green]Moved to trash:[/green] {post_id}")


@posts_app.command("restore")
def posts_restore(
    ctx: typer.Context,
    post_id: Annotated[str, typer.Argument(help="Post id.")],
) -> None:
    """Restore a post from the trash."""
    garden = _garden(ctx)
    _get_or_exit(garden, post_id)
    garden.posts.restore(post_id)
    console.print(f"[green]Restored:[/green] {post_id}")


@posts_app.command("purge")
def posts_purge(
    ctx: typer.Context,
    post_id: Annotated[str, typer.Argument(help="Post id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation.")] = False,
) -> None:
    """Delete a post permanently.  This cannot be undone."""
    garden = _garden(ctx)
    _get_or_exit(garden, post_id)
    if not yes and not typer.confirm("Hapus selamanya? Data tidak bisa dikembalikan."):
        raise typer.Exit(1)
    garden.posts.purge(post_id)
    console.print(f"[green]Purged:[/green] {post_id}")


# ── trash ────────────────────────────────────────────────────────


@trash_app.command("list")
def trash_list(
    ctx: typer.Context,
    author: Annotated[Optional[str], typer.Option("--author", "-a")] = None,
) -> None:
    """Show trashed posts."""
    console.print(_posts_table(_garden(ctx).posts.trash(author), "Trash"))


@trash_app.command("sweep")
def trash_sweep(ctx: typer.Context) -> None:
    """Purge trashed posts older than the retention window."""
    garden = _garden(ctx)
    purged = garden.posts.sweep_trash()
    days = garden.config.retention.trash_days
    console.print(f"Purged {len(purged)} post(s) trashed more than {days} days ago.")
    for post_id in purged:
        console.print(f"  - {post_id}")


# ── stats & export ───────────────────────────────────────────────


@app.command("stats")
def stats_cmd(
    ctx: typer.Context,
    username: Annotated[str, typer.Argument(help="Author username.")],
) -> None:
    """Show writing statistics for an author."""
    garden = _garden(ctx)
    stats = garden.posts.stats_for(username)
    table = Table(title=f"Stats for {username}", show_header=False)
    table.add_row("Published posts", str(stats.total_posts))
    table.add_row("Total words", str(stats.total_words))
    last_active = stats.last_active.strftime("%Y-%m-%d %H:%M") if stats.last_active else "-"
    table.add_row("Last active", last_active)
    table.add_row("Productive day", stats.productive_day)
    table.add_row("Time of day", stats.time_of_day)
    console.print(table)
    console.print(garden.posts.insight_for(username))


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    post_id: Annotated[str, typer.Argument(help="Post id.")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file. Defaults to a name derived from the title."),
    ] = None,
) -> None:
    """Export a post as markdown."""
    post = _get_or_exit(_garden(ctx), post_id)
    target = output or Path(markdown_filename(post))
    target.write_text(to_markdown(post), encoding="utf-8")
    console.print(f"[green]Exported to[/green] {target}")


# ── assist ───────────────────────────────────────────────────────


def _run_assist(ctx: typer.Context, task: AssistTask, file: Path, write: bool) -> None:
    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)
    settings = _garden(ctx).config.assist
    text = file.read_text(encoding="utf-8")
    result = assist(task, text, model=settings.model, timeout=settings.timeout)
    if not result.ok:
        console.print(f"[red]{result.message}[/red]")
        raise typer.Exit(1)
    if write:
        file.write_text(result.text, encoding="utf-8")
        console.print(f"[green]{result.message}[/green] ({file})")
    else:
        console.print(result.text)


@assist_app.command("polish")
def assist_polish(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Markdown or text file to polish.")],
    write: Annotated[bool, typer.Option("--write", "-w", help="Overwrite the file.")] = False,
) -> None:
    """Polish prose while keeping the writer's voice."""
    _run_assist(ctx, AssistTask.POLISH, file, write)


@assist_app.command("summarize")
def assist_summarize(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Markdown or text file to summarize.")],
) -> None:
    """Draft a one or two sentence excerpt."""
    _run_assist(ctx, AssistTask.SUMMARIZE, file, write=False)


if __name__ == "__main__":
    app()
