"""Gallery CLI commands: link a folder and refresh its metadata."""

import click
from rich.markup import escape

from imgshelf.gallery import GalleryClient, MetadataRefresher


def get_client(ctx) -> GalleryClient:
    """Create a gallery API client from the ``gallery`` config section."""
    section = ctx.obj.config.get("gallery") or {}
    kwargs = {}
    if api_url := section.get("api_url"):
        kwargs["api_url"] = api_url
    if timeout := section.get("timeout"):
        kwargs["timeout"] = float(timeout)
    return GalleryClient(**kwargs)


def _refresh(ctx: click.Context, fid: int, token: str | None) -> None:
    console = ctx.obj.console
    with get_client(ctx) as client:
        with console.status("Fetching gallery metadata..."):
            info = MetadataRefresher(ctx.obj.backend, client).refresh(fid, token)
    console.print(
        f"[green]✓[/green] Stored metadata for gallery {info.metadata.gid}: "
        f"{escape(info.metadata.title)} ({len(info.tags)} tags)"
    )


@click.command()
@click.argument("fid", type=int)
@click.argument("gid")
@click.argument("token")
@click.option("--no-fetch", is_flag=True, help="Only link, do not fetch metadata")
@click.pass_context
def link(ctx: click.Context, fid: int, gid: str, token: str, no_fetch: bool) -> None:
    """Link folder FID to gallery GID and fetch its metadata with TOKEN."""
    console = ctx.obj.console

    if not ctx.obj.folders.link_gallery(fid, gid):
        console.print(f"[red]No folder with id {fid}[/red]")
        ctx.exit(1)
    console.print(f"[green]✓[/green] Linked folder {fid} to gallery {gid}")

    if not no_fetch:
        _refresh(ctx, fid, token)


@click.command()
@click.argument("fid", type=int)
@click.option("--token", help="Gallery token, defaults to the stored one")
@click.pass_context
def refresh(ctx: click.Context, fid: int, token: str | None) -> None:
    """Re-fetch the gallery metadata linked to folder FID."""
    _refresh(ctx, fid, token)
