"""
Service de navigation dans le catalogue TMDB.

Deux points d'entree :
- search_movies() : recherche de films ou listes officielles (populaires,
  tendances, a venir, a l'affiche). Les premiers resultats sont
  enregistres en fiches minimales via le persister, sans attente.
- browse() : recherche ou listes pour les films, les series ou les deux.
  En mode "all" les deux pages sont fusionnees et triees par popularite.

Les pages TMDB passent par le client (cache court 1h).
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import pydantic
from loguru import logger

from cinifob.adapters.api.tmdb_payloads import parse_content_page
from cinifob.core.entities.media import ContentSummary, MediaType
from cinifob.core.exceptions import FetchError, ValidationError
from cinifob.core.ports.api_clients import IMetadataClient
from cinifob.services.persister import BackgroundPersister
from cinifob.services.related_content import parse_page
from cinifob.utils.constants import (
    BROWSE_ALL,
    BROWSE_TYPES,
    CATALOG_DEFAULT_LIST,
    CATALOG_PATHS,
    MAX_RELATED_PAGES,
    MIXED_CATALOG_LISTS,
    MOVIE_SEARCH,
    MOVIE_SEARCH_LISTS,
    SEARCH_RESULTS_TO_STORE,
)


@dataclass
class CatalogPage:
    """Page de resultats du catalogue."""

    results: list[ContentSummary] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_results: int = 0


def parse_genre_id(raw_genre: Any) -> Optional[int]:
    """Filtre de genre optionnel : None, ou un ID TMDB positif."""
    if raw_genre is None or str(raw_genre).strip() == "":
        return None
    text = str(raw_genre).strip()
    if not (text.isascii() and text.isdigit()) or int(text) <= 0:
        raise ValidationError("Invalid genre ID")
    return int(text)


class CatalogService:
    """Recherche et listes du catalogue TMDB."""

    def __init__(
        self,
        client: IMetadataClient,
        persister: BackgroundPersister,
        results_to_store: int = SEARCH_RESULTS_TO_STORE,
    ) -> None:
        self._client = client
        self._persister = persister
        self._results_to_store = results_to_store

    async def search_movies(
        self,
        query: Optional[str] = None,
        page: Any = 1,
        list_type: str = MOVIE_SEARCH,
    ) -> CatalogPage:
        """
        Recherche de films ou liste officielle.

        Sans texte de recherche, type=search retombe sur les films populaires.
        Un type inconnu est traite comme une recherche.

        Raises:
            ValidationError: Page invalide
            FetchError: Echec upstream (ou sous-classe)
        """
        page = parse_page(page)
        text = (query or "").strip()
        if list_type not in MOVIE_SEARCH_LISTS:
            list_type = MOVIE_SEARCH

        if list_type == MOVIE_SEARCH and text:
            payload = await self._client.search(MediaType.MOVIE, text, page)
        else:
            list_name = CATALOG_DEFAULT_LIST if list_type == MOVIE_SEARCH else list_type
            payload = await self._client.fetch_catalog(MediaType.MOVIE, list_name, page)

        items, total_pages, total_results = self._parse(MediaType.MOVIE, payload)
        if items and self._results_to_store:
            self._persister.dispatch_summaries(items[: self._results_to_store])

        logger.debug(f"Recherche films '{text}' ({list_type}, page {page}): {len(items)} resultats")
        return CatalogPage(
            results=items,
            page=page,
            total_pages=total_pages,
            total_results=total_results,
        )

    async def browse(
        self,
        content_type: str = BROWSE_ALL,
        query: Optional[str] = None,
        sort: str = CATALOG_DEFAULT_LIST,
        genre: Any = None,
        page: Any = 1,
    ) -> CatalogPage:
        """
        Recherche ou liste pour un type de contenu.

        Args:
            content_type: "all", "movie" ou "tv"
            query: Texte de recherche (mode liste si vide)
            sort: Liste a parcourir en mode liste ("popular" si inconnue)
            genre: ID de genre TMDB pour filtrer la page obtenue
            page: Numero de page TMDB (1 a 500)

        Raises:
            ValidationError: Type, genre ou page invalide
            FetchError: Echec upstream (ou sous-classe)
        """
        if content_type not in BROWSE_TYPES:
            raise ValidationError("Invalid content type")
        genre_id = parse_genre_id(genre)
        page = parse_page(page)
        text = (query or "").strip()

        media_types = (
            [MediaType.MOVIE, MediaType.TV]
            if content_type == BROWSE_ALL
            else [MediaType(content_type)]
        )
        if text:
            requests = [self._client.search(mt, text, page) for mt in media_types]
        else:
            requests = [
                self._client.fetch_catalog(mt, self._list_name(mt, sort, content_type), page)
                for mt in media_types
            ]

        payloads = await asyncio.gather(*requests, return_exceptions=True)
        for payload in payloads:
            if isinstance(payload, BaseException):
                raise payload

        results: list[ContentSummary] = []
        total_pages = 0
        total_results = 0
        for media_type, payload in zip(media_types, payloads):
            items, pages, count = self._parse(media_type, payload)
            results.extend(items)
            total_pages = max(total_pages, pages)
            total_results += count

        if content_type == BROWSE_ALL:
            results.sort(key=lambda item: item.popularity or 0, reverse=True)
        if genre_id is not None:
            results = [item for item in results if genre_id in item.genre_ids]

        logger.debug(
            f"Catalogue {content_type} (query='{text}', sort={sort}, genre={genre_id}, "
            f"page={page}): {len(results)} resultats"
        )
        return CatalogPage(
            results=results,
            page=page,
            total_pages=min(total_pages, MAX_RELATED_PAGES),
            total_results=total_results,
        )

    @staticmethod
    def _list_name(media_type: MediaType, sort: str, content_type: str) -> str:
        if content_type == BROWSE_ALL:
            return sort if sort in MIXED_CATALOG_LISTS else CATALOG_DEFAULT_LIST
        return sort if sort in CATALOG_PATHS[media_type.value] else CATALOG_DEFAULT_LIST

    @staticmethod
    def _parse(media_type: MediaType, payload: dict[str, Any]) -> tuple[list[ContentSummary], int, int]:
        try:
            return parse_content_page(media_type, payload)
        except pydantic.ValidationError as e:
            raise FetchError(f"Invalid TMDb {media_type.value} list payload", cause=e) from e
