"""
Application FastAPI de CiniFob.

Initialise l'application web avec le Container DI et monte les routes
de l'API JSON.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from loguru import logger

from ..container import Container
from ..logging_config import configure_logging
from .routes.browse import router as browse_router
from .routes.content import router as content_router
from .routes.genres import router as genres_router
from .routes.health import router as health_router
from .routes.movies import router as movies_router
from .routes.tv import router as tv_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise la base au demarrage, libere les ressources a l'arret."""
    container: Container = app.state.container
    settings = container.config()
    if app.state.configure_logs:
        configure_logging(settings)
    container.database.init()
    logger.info(f"API CiniFob demarree (TMDB {'active' if settings.tmdb_enabled else 'inactif'})")

    yield

    # Les persistances lancees en arriere-plan sont terminees avant fermeture
    await container.persister().shutdown()
    await container.tmdb_client().close()
    container.api_cache().close()
    container.engine().dispose()
    logger.info("API CiniFob arretee")


def create_app(
    container: Optional[Container] = None, configure_logs: bool = True
) -> FastAPI:
    """
    Construit l'application.

    Args:
        container: Container DI (un nouveau est cree si absent)
        configure_logs: Installer les handlers loguru au demarrage
    """
    app = FastAPI(title="CiniFob", lifespan=lifespan)
    app.state.container = container or Container()
    app.state.configure_logs = configure_logs

    app.include_router(health_router)
    app.include_router(movies_router)
    app.include_router(tv_router)
    app.include_router(content_router)
    app.include_router(genres_router)
    app.include_router(browse_router)
    return app


app = create_app()
