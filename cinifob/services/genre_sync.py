"""
Synchronisation des genres officiels TMDB dans le store.
"""

import pydantic
from loguru import logger

from cinifob.adapters.api.tmdb_payloads import parse_genres
from cinifob.core.entities.media import Genre, MediaType
from cinifob.core.exceptions import FetchError
from cinifob.core.ports.api_clients import IMetadataClient
from cinifob.core.ports.repositories import IRecordStore


class GenreSyncService:
    """
    Recupere les listes de genres films et series puis les upsert.

    Un genre present dans les deux listes (meme ID TMDB) n'est ecrit
    qu'une fois.
    """

    def __init__(self, client: IMetadataClient, store: IRecordStore) -> None:
        self._client = client
        self._store = store

    async def sync(self) -> list[Genre]:
        """
        Synchronise les genres et retourne la liste resultante triee par nom.

        Raises:
            ConfigurationError: Cle API absente
            FetchError: Echec upstream (ou sous-classe)
        """
        merged: dict[int, Genre] = {}
        for media_type in (MediaType.MOVIE, MediaType.TV):
            raw = await self._client.fetch_genres(media_type)
            try:
                genres = parse_genres(raw)
            except pydantic.ValidationError as e:
                raise FetchError(f"Invalid TMDb genre list ({media_type.value})", cause=e) from e
            for genre in genres:
                merged.setdefault(genre.id, genre)

        await self._store.upsert_genres(list(merged.values()))
        logger.info(f"{len(merged)} genres synchronises")
        return sorted(merged.values(), key=lambda g: g.name)
