"""
Dependances partagees de l'application web.

Les services sont fournis par le Container DI attache a app.state
au demarrage (voir app.lifespan) et injectes via Depends().
"""

from fastapi import Request

from ..container import Container
from ..services.catalog import CatalogService
from ..services.genre_sync import GenreSyncService
from ..services.related_content import RelatedContentService
from ..services.resolver import DetailResolver
from ..services.season_detail import SeasonService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_movie_resolver(request: Request) -> DetailResolver:
    return get_container(request).movie_resolver()


def get_tv_resolver(request: Request) -> DetailResolver:
    return get_container(request).tv_resolver()


def get_season_service(request: Request) -> SeasonService:
    return get_container(request).season_service()


def get_related_content_service(request: Request) -> RelatedContentService:
    return get_container(request).related_content_service()


def get_genre_sync_service(request: Request) -> GenreSyncService:
    return get_container(request).genre_sync_service()


def get_catalog_service(request: Request) -> CatalogService:
    return get_container(request).catalog_service()
