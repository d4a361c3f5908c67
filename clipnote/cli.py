"""CLI entry points: manage notebooks, capture from the clipboard, chat, serve."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from clipnote.capture.backends import CommandClipboard
from clipnote.capture.clipboard import ClipboardData, ClipboardMonitor, ClipboardService
from clipnote.capture.draft import draft_from_clipboard, draft_from_text, parse_tags
from clipnote.chat.completion import AnthropicCompletion
from clipnote.chat.session import ChatSession
from clipnote.config import data_dir, ensure_dirs, load_config
from clipnote.core import Result
from clipnote.library import Library
from clipnote.notebook.models import ChatRole, ContentType, Notebook
from clipnote.storage.store import get_store
from clipnote.text import format_timestamp, truncate_text

app = typer.Typer(name="clipnote", help="Capture clipboard snippets into notebooks and chat with them.")
console = Console()


def _library() -> Library:
    ensure_dirs()
    return Library(get_store(data_dir()))


def _fail(result: Result[object]) -> None:
    for d in result.diagnostics:
        color = "red" if d.severity == "error" else "yellow"
        console.print(f"[{color}]{d.severity.value.title()}:[/{color}] {d.message}")
        if d.hint:
            console.print(f"  Hint: {d.hint}")
    if result.has_errors:
        raise typer.Exit(1)


def _require_notebook(library: Library, notebook_id: str) -> Notebook:
    notebook = library.notebooks.get(notebook_id)
    if notebook is None:
        console.print(f"[red]Notebook {notebook_id} not found.[/red]")
        raise typer.Exit(1)
    return notebook


@app.command()
def notebooks(search: str = typer.Option("", "--search", "-s", help="Filter by name")) -> None:
    """List notebooks."""
    library = _library()
    found = library.notebooks.search(search) if search else library.notebooks.list_all()
    if not found:
        console.print("[dim]No notebooks yet. Create one with [bold]clipnote create[/bold].[/dim]")
        return

    t = Table(show_lines=False)
    t.add_column("ID", style="cyan")
    t.add_column("Notebook")
    t.add_column("Items", justify="right")
    t.add_column("Updated", style="dim")
    for nb in found:
        t.add_row(nb.id, f"{nb.icon} {nb.name}", str(nb.item_count), format_timestamp(nb.updated_at))
    console.print(t)


@app.command()
def create(
    name: str = typer.Argument(help="Notebook name"),
    icon: str | None = typer.Option(None, "--icon", "-i", help="Display glyph"),
    color: str | None = typer.Option(None, "--color", "-c", help="Color tag"),
) -> None:
    """Create a notebook."""
    if not name.strip():
        console.print("[red]Name is required.[/red]")
        raise typer.Exit(1)
    settings = load_config().settings
    nb = _library().notebooks.create(
        name.strip(), icon=icon or settings.default_icon, color=color or settings.default_color
    )
    console.print(f"[green]Created {nb.icon} [bold]{nb.name}[/bold][/green] ({nb.id})")


@app.command()
def delete(notebook_id: str = typer.Argument(help="Notebook ID")) -> None:
    """Delete a notebook with its content and chat history."""
    if not _library().delete_notebook(notebook_id):
        console.print(f"[red]Notebook {notebook_id} not found.[/red]")
        raise typer.Exit(1)
    console.print("[green]Notebook deleted.[/green]")


@app.command()
def show(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    search: str = typer.Option("", "--search", "-s", help="Filter by title or content"),
    content_type: ContentType | None = typer.Option(None, "--type", "-t", help="Only this content type"),
) -> None:
    """Show the content of a notebook, newest first."""
    library = _library()
    nb = _require_notebook(library, notebook_id)
    items = library.search_content(notebook_id, search, content_type)
    counts = library.type_counts(notebook_id)

    summary = ", ".join(f"{kind}: {n}" for kind, n in sorted(counts.items()))
    console.print(f"{nb.icon} [bold]{nb.name}[/bold] | {nb.item_count} items | {summary or 'empty'}")

    t = Table(show_lines=True)
    t.add_column("Type", style="green")
    t.add_column("Title", style="bold")
    t.add_column("Content")
    t.add_column("Tags", style="cyan")
    t.add_column("Added", style="dim")
    for item in items:
        body = "<image>" if item.type == ContentType.IMAGE else truncate_text(item.content, 150)
        tags = ", ".join(item.metadata.tags or []) if item.metadata else ""
        t.add_row(item.type.value, item.title, body, tags, format_timestamp(item.created_at))
    console.print(t)


@app.command()
def add(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    text: str = typer.Argument(help="Content to add"),
    title: str | None = typer.Option(None, "--title", help="Title (defaults to the first line)"),
    content_type: ContentType | None = typer.Option(None, "--type", "-t", help="Override detected type"),
    tags: str = typer.Option("", "--tags", help="Comma-separated tags"),
) -> None:
    """Add typed content to a notebook."""
    draft = draft_from_text(text)
    if title:
        draft.title = title
    if content_type:
        draft.type = content_type
    draft.tags = parse_tags(tags)
    result = _library().capture(notebook_id, draft)
    _fail(result)
    if result.data:
        console.print(f"[green]Added {result.data.type.value}:[/green] {result.data.title}")


@app.command()
def paste(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    title: str | None = typer.Option(None, "--title", help="Override the suggested title"),
    tags: str = typer.Option("", "--tags", help="Comma-separated tags"),
) -> None:
    """Capture the current clipboard into a notebook."""
    library = _library()
    _require_notebook(library, notebook_id)

    read = ClipboardService(CommandClipboard()).read()
    _fail(read)
    draft = draft_from_clipboard(read.data) if read.data else None
    if draft is None:
        console.print("[red]No content found in clipboard.[/red]")
        raise typer.Exit(1)
    if title:
        draft.title = title
    draft.tags = parse_tags(tags)

    result = library.capture(notebook_id, draft)
    _fail(result)
    if result.data:
        console.print(f"[green]Captured {result.data.type.value}:[/green] {result.data.title}")


@app.command()
def ask(
    notebook_id: str = typer.Argument(help="Notebook ID"),
    question: str = typer.Argument(help="Question about the notebook content"),
) -> None:
    """Ask the assistant a question grounded in a notebook."""
    library = _library()
    nb = _require_notebook(library, notebook_id)
    session = ChatSession(library, notebook_id, AnthropicCompletion(load_config().llm))

    with console.status(f"Thinking about {nb.name}..."):
        result = asyncio.run(session.submit(question))
    _fail(result)
    if result.data:
        console.print(result.data.content)


@app.command()
def history(notebook_id: str = typer.Argument(help="Notebook ID")) -> None:
    """Print the chat history of a notebook."""
    messages = _library().chat.list_by_notebook(notebook_id)
    if not messages:
        console.print("[dim]No messages yet.[/dim]")
        return
    for m in messages:
        label = "[bold cyan]You[/bold cyan]" if m.role == ChatRole.USER else "[bold green]Assistant[/bold green]"
        console.print(f"{label} [dim]{format_timestamp(m.timestamp)}[/dim]")
        console.print(m.content)
        console.print()


@app.command("clear-chat")
def clear_chat(notebook_id: str = typer.Argument(help="Notebook ID")) -> None:
    """Delete the chat history of a notebook."""
    _library().chat.clear_by_notebook(notebook_id)
    console.print("[green]Chat history cleared.[/green]")


@app.command()
def watch(
    notebook_id: str | None = typer.Option(None, "--into", help="Capture each change into this notebook"),
) -> None:
    """Watch the clipboard and report (or capture) every change."""
    library = _library()
    if notebook_id:
        _require_notebook(library, notebook_id)
    interval = load_config().settings.poll_interval_seconds
    console.print("[bold]Watching clipboard... Ctrl+C to stop.[/bold]")
    try:
        asyncio.run(_watch(library, notebook_id, interval))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")


async def _watch(library: Library, notebook_id: str | None, interval: float) -> None:
    monitor = ClipboardMonitor(ClipboardService(CommandClipboard()), interval=interval)

    def _on_change(data: ClipboardData) -> None:
        draft = draft_from_clipboard(data)
        if draft is None:
            return
        if notebook_id is None:
            console.print(f"[cyan]{draft.type.value}[/cyan] {truncate_text(draft.title, 80)}")
            return
        result = library.capture(notebook_id, draft, source="clipboard_watch")
        if result.data:
            console.print(f"[green]Captured {result.data.type.value}:[/green] {truncate_text(result.data.title, 80)}")

    monitor.subscribe(_on_change)
    async with monitor:
        monitor.notify_interaction()
        await asyncio.Event().wait()


@app.command()
def start(
    port: int = typer.Option(8000, "--port", "-p", help="Port to serve on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
) -> None:
    """Start the clipnote API server."""
    import logging

    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    ensure_dirs()
    console.print(f"[bold]Starting clipnote on port {port}...[/bold]")
    uvicorn.run("clipnote.server:app", host=host, port=port, reload=False)


def main() -> None:
    app()
