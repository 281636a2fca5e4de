"""Catalog CLI commands: import, show and tag folders."""

from datetime import datetime
from pathlib import Path

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from imgshelf.core.models import FolderTag
from imgshelf.storage.importers import FolderImporter


@click.command(name="import")
@click.argument(
    "directory", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.pass_context
def import_command(ctx: click.Context, directory: Path) -> None:
    """Catalog every image folder under DIRECTORY.

    Folders already in the catalog are skipped.
    """
    console = ctx.obj.console

    with console.status(f"Scanning {directory}..."):
        report = FolderImporter(ctx.obj.backend).import_directory(directory)

    console.print(f"[green]✓[/green] Imported {len(report.imported)} folders")
    console.print(report.get_summary())


@click.command()
@click.argument("fid", type=int)
@click.pass_context
def show(ctx: click.Context, fid: int) -> None:
    """Show one folder with its tags and linked gallery."""
    console = ctx.obj.console
    folder = ctx.obj.folders.find(fid)
    if folder is None:
        console.print(f"[red]No folder with id {fid}[/red]")
        ctx.exit(1)

    recorded = datetime.fromtimestamp(folder.record_time).strftime("%Y-%m-%d %H:%M:%S")
    lines = [
        f"[bold]Title:[/bold] {escape(folder.title)}",
        f"[bold]Path:[/bold] {escape(folder.folder_path)}",
        f"[bold]Recorded:[/bold] {recorded}",
    ]
    if cover := ctx.obj.folders.find_cover(fid):
        lines.append(f"[bold]Cover:[/bold] {escape(cover.cover_fname)}")
    console.print(Panel("\n".join(lines), title=f"Folder {fid}", expand=False))

    if tags := ctx.obj.folders.tags(fid):
        console.print("[bold]Tags:[/bold] " + escape(", ".join(t.keyword for t in tags)))

    if not folder.has_gallery:
        return

    metadata = ctx.obj.galleries.find(folder.eh_gid)
    if metadata is None:
        console.print(f"[yellow]Linked to gallery {folder.eh_gid} (not fetched)[/yellow]")
        return

    table = Table(title=f"Gallery {metadata.gid}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Title", escape(metadata.title))
    table.add_row("Japanese title", escape(metadata.title_jpn) or "-")
    table.add_row("Category", metadata.category.value)
    table.add_row("Uploader", escape(metadata.uploader))
    table.add_row("Rating", f"{metadata.rating:.2f}")
    table.add_row("Files", str(metadata.filecount))
    table.add_row("Tags", escape(", ".join(ctx.obj.galleries.tags(metadata.gid))) or "-")
    console.print(table)


@click.command()
@click.argument("fid", type=int)
@click.argument("keyword")
@click.option("--remove", is_flag=True, help="Remove the tag instead of adding it")
@click.pass_context
def tag(ctx: click.Context, fid: int, keyword: str, remove: bool) -> None:
    """Add a NAMESPACE:STEM tag to a folder."""
    console = ctx.obj.console
    folders = ctx.obj.folders

    if folders.find(fid) is None:
        console.print(f"[red]No folder with id {fid}[/red]")
        ctx.exit(1)

    try:
        folder_tag = FolderTag.parse(fid, keyword)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="KEYWORD") from e

    if remove:
        if folders.remove_tag(folder_tag):
            console.print(f"[green]✓[/green] Removed {folder_tag.keyword} from folder {fid}")
        else:
            console.print(f"[yellow]Folder {fid} has no tag {folder_tag.keyword}[/yellow]")
        return

    if folder_tag in folders.tags(fid):
        console.print(f"[yellow]Folder {fid} already has tag {folder_tag.keyword}[/yellow]")
        return
    folders.add_tag(folder_tag)
    console.print(f"[green]✓[/green] Tagged folder {fid} with {folder_tag.keyword}")
