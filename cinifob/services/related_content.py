"""
Service des contenus lies (similaires et recommandations).

Les pages TMDB /similar et /recommendations sont recuperees via le client
(cache court 1h), etiquetees avec leur relation puis fusionnees :
dedoublonnage par ID quand les deux relations sont demandees (la premiere
occurrence, issue de /similar, est conservee) et tri par popularite
decroissante.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pydantic
from loguru import logger

from cinifob.adapters.api.tmdb_payloads import parse_related_page
from cinifob.core.entities.media import ContentSummary, MediaType
from cinifob.core.exceptions import FetchError, ValidationError
from cinifob.core.ports.api_clients import IMetadataClient
from cinifob.utils.constants import (
    MAX_RELATED_PAGES,
    RELATION_BOTH,
    RELATION_RECOMMENDATIONS,
    RELATION_SIMILAR,
    RELATION_TYPES,
)

# Etiquette posee sur chaque element selon l'endpoint d'origine
_RELATION_LABELS = {
    RELATION_SIMILAR: "similar",
    RELATION_RECOMMENDATIONS: "recommendation",
}


@dataclass
class RelatedPage:
    """Page fusionnee de contenus lies."""

    results: list[ContentSummary] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_results: int = 0


def parse_media_type(raw_type: str) -> MediaType:
    """Convertit le segment d'URL en MediaType (movie ou tv)."""
    try:
        return MediaType(raw_type)
    except ValueError:
        raise ValidationError("Invalid content type") from None


def parse_page(raw_page: Any, max_page: int = MAX_RELATED_PAGES) -> int:
    """Valide un numero de page TMDB (1 a max_page), entier ou chaine de chiffres."""
    if isinstance(raw_page, bool):
        raise ValidationError("Invalid page number")
    text = str(raw_page).strip()
    if not (text.isascii() and text.isdigit()) or not 1 <= int(text) <= max_page:
        raise ValidationError("Invalid page number")
    return int(text)


def parse_content_id(raw_id: Any) -> int:
    text = str(raw_id).strip()
    if not (text.isascii() and text.isdigit()) or int(text) <= 0:
        raise ValidationError("Invalid content ID")
    return int(text)


class RelatedContentService:
    """Recupere et fusionne les contenus similaires et recommandes."""

    def __init__(self, client: IMetadataClient) -> None:
        self._client = client

    async def get_related(
        self,
        raw_type: str,
        raw_id: Any,
        page: Any = 1,
        relation_type: str = RELATION_BOTH,
    ) -> RelatedPage:
        """
        Retourne une page de contenus lies.

        Args:
            raw_type: "movie" ou "tv"
            raw_id: ID TMDB du contenu de reference
            page: Numero de page TMDB (1 a 500), entier ou chaine
            relation_type: "similar", "recommendations" ou "both"

        Raises:
            ValidationError: Type, ID, page ou relation invalide
            FetchError: Echec upstream (ou sous-classe)
        """
        media_type = parse_media_type(raw_type)
        tmdb_id = parse_content_id(raw_id)
        if relation_type not in RELATION_TYPES:
            raise ValidationError("Invalid relation type")
        page = parse_page(page)

        relations = (
            [RELATION_SIMILAR, RELATION_RECOMMENDATIONS]
            if relation_type == RELATION_BOTH
            else [relation_type]
        )
        payloads = await asyncio.gather(
            *(self._client.fetch_related(media_type, tmdb_id, rel, page) for rel in relations),
            return_exceptions=True,
        )
        # Toutes les requetes sont terminees : la premiere erreur est propagee
        for payload in payloads:
            if isinstance(payload, BaseException):
                raise payload

        results: list[ContentSummary] = []
        total_pages = 1
        total_results = 0
        for relation, payload in zip(relations, payloads):
            try:
                items, pages, count = parse_related_page(
                    media_type, payload, _RELATION_LABELS[relation]
                )
            except pydantic.ValidationError as e:
                raise FetchError(f"Invalid TMDb {relation} payload for {raw_type} {tmdb_id}", cause=e) from e
            results.extend(items)
            total_pages = max(total_pages, pages)
            total_results += count

        if relation_type == RELATION_BOTH:
            unique: dict[int, ContentSummary] = {}
            for item in results:
                unique.setdefault(item.tmdb_id, item)
            results = list(unique.values())

        results.sort(key=lambda item: item.popularity or 0, reverse=True)
        logger.debug(
            f"{len(results)} contenus lies pour {media_type.value} {tmdb_id} "
            f"(relation={relation_type}, page={page})"
        )
        return RelatedPage(
            results=results,
            page=page,
            total_pages=min(total_pages, MAX_RELATED_PAGES),
            total_results=total_results,
        )
