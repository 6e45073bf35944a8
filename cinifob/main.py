"""
Point d'entree CLI de CiniFob.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import fetch, sync_genres
from .config import Settings
from .container import Container
from .logging_config import configure_logging

app = typer.Typer(
    name="cinifob",
    help="Fiches films et series TMDB avec cache local",
)
container = Container()

# Monter les commandes depuis adapters/cli/commands
app.command()(fetch)
app.command(name="sync-genres")(sync_genres)


def get_config() -> Settings:
    """Recupere les parametres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration CiniFob")
    typer.echo(f"Base de donnees : {config.database_url}")
    typer.echo(f"API TMDB : {'activee' if config.tmdb_enabled else 'desactivee'}")
    typer.echo(f"URL TMDB : {config.tmdb_base_url}")
    typer.echo(f"Fraicheur du cache : {config.cache_ttl_hours:g} h")
    typer.echo(f"Cache API : {config.api_cache_dir}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"CiniFob v{__version__}")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Adresse d'ecoute")] = "0.0.0.0",
    port: Annotated[int, typer.Option(help="Port d'ecoute")] = 8000,
    reload: Annotated[bool, typer.Option(help="Rechargement automatique")] = False,
) -> None:
    """Lance le serveur API CiniFob."""
    import uvicorn

    typer.echo(f"Demarrage du serveur sur {host}:{port}")
    uvicorn.run("cinifob.web.app:app", host=host, port=port, reload=reload)


def main() -> None:
    """Point d'entree de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(settings)

    logger.info(f"Demarrage de CiniFob v{__version__}")

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
