"""
Commandes CLI de consultation et de synchronisation des metadonnees.

- fetch : resout une fiche film ou serie (cache local ou TMDB) et l'affiche
- sync-genres : synchronise les genres officiels TMDB dans la base
"""

from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from cinifob.adapters.cli.helpers import async_command, console, with_container
from cinifob.core.entities.media import MediaRecord, MediaType, Movie, TVShow
from cinifob.core.exceptions import CiniFobError
from cinifob.services.resolver import Resolution


def _origin_label(resolution: Resolution) -> str:
    if not resolution.cached:
        return "[green]TMDB[/green]"
    if resolution.error:
        return "[red]cache perime (TMDB en erreur)[/red]"
    if resolution.stale:
        return "[yellow]cache perime[/yellow]"
    return "[cyan]cache local[/cyan]"


def _render_record(record: MediaRecord, resolution: Resolution) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()

    table.add_row("TMDB", str(record.tmdb_id))
    if isinstance(record, Movie):
        table.add_row("Sortie", str(record.release_date or "-"))
        table.add_row("Duree", f"{record.runtime} min" if record.runtime else "-")
        table.add_row("Budget", f"{record.budget:,} $" if record.budget else "-")
        table.add_row("IMDb", record.imdb_id or "-")
    elif isinstance(record, TVShow):
        table.add_row("Premiere diffusion", str(record.first_air_date or "-"))
        table.add_row(
            "Saisons / episodes",
            f"{record.number_of_seasons or 0} / {record.number_of_episodes or 0}",
        )
        if record.created_by:
            table.add_row("Createurs", ", ".join(p.name for p in record.created_by))
    if record.vote_average is not None:
        table.add_row("Note", f"{record.vote_average:.1f}/10 ({record.vote_count or 0} votes)")
    table.add_row("Genres", ", ".join(g.name for g in record.genres) or "-")

    directors = [c.person.name for c in record.crew if c.job == "Director"]
    if directors:
        table.add_row("Realisation", ", ".join(directors))
    if record.cast:
        table.add_row("Distribution", ", ".join(c.person.name for c in record.cast[:5]))
    table.add_row("Source", _origin_label(resolution))

    return Panel(table, title=f"[bold]{record.display_title}[/bold]", expand=False)


@async_command
@with_container()
async def fetch(
    container,
    media_type: Annotated[MediaType, typer.Argument(help="Type de contenu (movie ou tv)")],
    tmdb_id: Annotated[int, typer.Argument(help="ID TMDB du contenu")],
) -> None:
    """Affiche la fiche d'un film ou d'une serie (cache local ou TMDB)."""
    resolver = (
        container.movie_resolver() if media_type is MediaType.MOVIE else container.tv_resolver()
    )
    try:
        resolution = await resolver.resolve(tmdb_id)
    except CiniFobError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(_render_record(resolution.record, resolution))
    if not resolution.cached:
        console.print("[dim]Enregistrement en base en cours...[/dim]")


@async_command
@with_container()
async def sync_genres(container) -> None:
    """Synchronise les genres films et series depuis TMDB."""
    try:
        genres = await container.genre_sync_service().sync()
    except CiniFobError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1) from e

    table = Table(title=f"{len(genres)} genres synchronises")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Nom")
    for genre in genres:
        table.add_row(str(genre.id), genre.name)
    console.print(table)
