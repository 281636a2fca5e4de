"""Search CLI commands."""

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from imgshelf.search import SearchOutcome, parse_query


def get_search_service(ctx):
    """Get the search service from context."""
    return ctx.obj.search_service


@click.command()
@click.argument("query", required=False, default="")
@click.option(
    "--include", "-i", multiple=True, help="Pattern every result must match (repeatable)"
)
@click.option(
    "--exclude", "-x", multiple=True, help="Pattern no result may match (repeatable)"
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    as_json: bool,
) -> None:
    """Search folders by keyword patterns.

    Keywords are a folder's tags (as namespace:stem), its title, and the
    title, alternate title and tags of its linked gallery. Patterns are
    case-insensitive regular expressions matched against each keyword.

    QUERY is a space-separated list of patterns as typed in a search bar;
    a term starting with "-" excludes. It is combined with -i and -x.

    \b
    Examples:
      imgshelf search 'artist:foo -language:english'
      imgshelf search -i 'artist:foo' -x 'language:english'
      imgshelf search -i '^female:' -i 'full color'
    """
    query_include, query_exclude = parse_query(query)
    outcome = get_search_service(ctx).search(
        [*query_include, *include], [*query_exclude, *exclude]
    )
    _report(ctx, outcome, as_json)


@click.command()
@click.argument("title")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def similar(ctx: click.Context, title: str, as_json: bool) -> None:
    """Find folders whose title resembles TITLE.

    Bracketed prefixes such as circle or artist names count as a match on
    their own; otherwise titles are compared by their longest common
    substring.
    """
    outcome = get_search_service(ctx).search_similar(title)
    _report(ctx, outcome, as_json)


def _report(ctx: click.Context, outcome: SearchOutcome, as_json: bool) -> None:
    console = ctx.obj.console

    if not outcome.success:
        console.print(f"[red]Search failed:[/red] {escape(outcome.message)}")
        ctx.exit(1)

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))
        return

    for warning in outcome.warnings or []:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    if not outcome.previews:
        console.print("[yellow]No folders found[/yellow]")
        return

    _display_results(console, outcome)


def _display_results(console: Console, outcome: SearchOutcome) -> None:
    table = Table(title=outcome.message, show_lines=False)
    table.add_column("FID", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Gallery", style="green")
    table.add_column("Path", style="dim", overflow="fold")

    for preview in outcome.previews:
        table.add_row(
            str(preview.fid),
            escape(preview.title),
            preview.eh_gid or "-",
            escape(preview.folder_path),
        )

    console.print(table)
