"""Main CLI entry point and application setup."""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape

from imgshelf import __version__
from imgshelf.cli.commands import catalog, gallery, search
from imgshelf.cli.config import get_similarity_config, load_config
from imgshelf.search import SearchService
from imgshelf.storage import FolderRepository, GalleryRepository, SQLiteBackend


@dataclass
class Context:
    """CLI context that holds shared resources."""

    backend: SQLiteBackend
    db_path: Path
    folders: FolderRepository
    galleries: GalleryRepository
    search_service: SearchService
    console: Console
    config: dict[str, Any] = field(default_factory=dict)
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def get_db_path(db: Path | None = None, config: dict[str, Any] | None = None) -> Path:
    """Get the catalog database path.

    Precedence: ``--db``, then the environment or config file ``db_path``,
    then the XDG data home.
    """
    if db:
        return db

    if env_path := os.environ.get("IMGSHELF_DB_PATH"):
        return Path(env_path)

    if config and (configured := config.get("db_path")):
        return Path(configured).expanduser()

    # Default to XDG data home
    xdg_data_home = Path(
        os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
    )
    return xdg_data_home / "imgshelf" / "imgshelf.db"


class ImgShelfGroup(click.Group):
    """Custom group that handles KeyboardInterrupt and reports errors."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=ImgShelfGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--db",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Override catalog database location",
)
@click.version_option(
    version=__version__, prog_name="imgshelf", message="imgshelf version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    db: Path | None,
) -> None:
    """Image folder catalog.

    Catalogs local image folders and finds them again by keyword
    patterns or by similar titles.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        config_data = load_config(config)
        similarity_config = get_similarity_config(config_data)
    except ValueError as e:
        if debug:
            raise
        console.print(f"[red]Error loading config file:[/red] {escape(str(e))}")
        ctx.exit(1)

    try:
        db_path = get_db_path(db, config_data)
        backend = SQLiteBackend(db_path)
        ctx.call_on_close(backend.close)

        ctx.obj = Context(
            backend=backend,
            db_path=db_path,
            folders=FolderRepository(backend),
            galleries=GalleryRepository(backend),
            search_service=SearchService(backend, similarity_config),
            console=console,
            config=config_data,
            debug=debug,
        )
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Error initializing application:[/red] {escape(str(e))}")
        ctx.exit(1)


# Command: init
@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the catalog database if it does not exist."""
    console = ctx.obj.console
    console.print(f"[green]✓[/green] Catalog ready at {ctx.obj.db_path}")


# Command: status
@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show catalog location and statistics."""
    console = ctx.obj.console
    backend = ctx.obj.backend

    console.print("\n[bold]Catalog Status[/bold]\n")
    console.print(f"Database: {ctx.obj.db_path}")
    console.print(f"Folders: {ctx.obj.folders.count()}")
    linked = backend.query_scalar("SELECT COUNT(*) FROM img_folders WHERE eh_gid != ''")
    console.print(f"Linked to galleries: {linked}")
    console.print(
        f"Gallery records: {backend.query_scalar('SELECT COUNT(*) FROM ehentai_metadata')}"
    )
    console.print(f"Local tags: {backend.query_scalar('SELECT COUNT(*) FROM folder_tags')}")


cli.add_command(catalog.import_command)
cli.add_command(catalog.show)
cli.add_command(catalog.tag)
cli.add_command(search.search)
cli.add_command(search.similar)
cli.add_command(gallery.link)
cli.add_command(gallery.refresh)


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        if "--debug" in sys.argv:
            raise
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
