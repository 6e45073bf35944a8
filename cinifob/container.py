"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour les interfaces CLI et Web :
engine et store SQLModel, client TMDB avec son cache court, persister
d'arriere-plan et services de resolution.
"""

from datetime import timedelta

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.api.tmdb_client import TMDBClient
from .config import Settings
from .core.entities.media import MediaType
from .infrastructure.persistence.database import create_db_engine, init_db
from .infrastructure.persistence.store import SQLModelRecordStore
from .services.catalog import CatalogService
from .services.genre_sync import GenreSyncService
from .services.persister import BackgroundPersister
from .services.related_content import RelatedContentService
from .services.resolver import DetailResolver
from .services.season_detail import SeasonService


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Cree les tables une fois
        resolution = await container.movie_resolver().resolve(27205)

    Dans les tests, la configuration est remplacee par :
        container.config.override(providers.Object(Settings(...)))
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - engine partage, Resource pour la creation des tables
    engine = providers.Singleton(
        create_db_engine,
        database_url=config.provided.database_url,
    )
    database = providers.Resource(init_db, engine=engine)

    # Store - Singleton : une session est ouverte par operation
    record_store = providers.Singleton(SQLModelRecordStore, engine=engine)

    # Cache API court (saisons, contenus lies)
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.api_cache_dir,
    )

    # Client TMDB - Singleton avec api_key depuis config
    # Si api_key est None, le client est cree mais leve ConfigurationError
    # au premier appel (503 cote HTTP)
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        base_url=config.provided.tmdb_base_url,
        language=config.provided.tmdb_language,
        timeout=config.provided.fetch_timeout_seconds,
        max_attempts=config.provided.fetch_max_attempts,
        backoff_base=config.provided.backoff_base_seconds,
        backoff_max=config.provided.backoff_max_seconds,
    )

    # Persister - Singleton : il garde les references des taches en cours
    persister = providers.Singleton(
        BackgroundPersister,
        store=record_store,
        cast_limit=config.provided.cast_limit,
        crew_limit=config.provided.crew_limit,
    )

    cache_ttl = providers.Callable(timedelta, hours=config.provided.cache_ttl_hours)

    # Resolveurs - un par type de contenu
    movie_resolver = providers.Singleton(
        DetailResolver,
        media_type=MediaType.MOVIE,
        store=record_store,
        client=tmdb_client,
        persister=persister,
        ttl=cache_ttl,
        cast_limit=config.provided.cast_limit,
        crew_limit=config.provided.crew_limit,
    )
    tv_resolver = providers.Singleton(
        DetailResolver,
        media_type=MediaType.TV,
        store=record_store,
        client=tmdb_client,
        persister=persister,
        ttl=cache_ttl,
        cast_limit=config.provided.cast_limit,
        crew_limit=config.provided.crew_limit,
    )

    # Services complementaires (stateless - Singletons)
    season_service = providers.Singleton(SeasonService, client=tmdb_client)
    related_content_service = providers.Singleton(RelatedContentService, client=tmdb_client)
    genre_sync_service = providers.Singleton(
        GenreSyncService,
        client=tmdb_client,
        store=record_store,
    )
    catalog_service = providers.Singleton(
        CatalogService,
        client=tmdb_client,
        persister=persister,
    )
