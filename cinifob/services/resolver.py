"""
Resolution d'une fiche film ou serie : cache local, TMDB, ou cache perime.

Deroulement de resolve() :
1. lecture du store (toujours avant tout appel reseau)
2. fiche presente et fraiche (< TTL) -> servie telle quelle
3. sinon un seul appel TMDB :
   - succes : reponse construite depuis le payload, persistance lancee
     en arriere-plan sans attente
   - 404 : fiche perimee servie si elle existe, NotFoundError sinon
   - autre echec : fiche perimee servie avec error=True si elle existe,
     erreur categorisee propagee sinon

Aucun nouvel essai a ce niveau : le client gere deja ses tentatives.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import pydantic
from loguru import logger

from cinifob.adapters.api.tmdb_payloads import parse_detail
from cinifob.core.entities.media import MediaRecord, MediaType
from cinifob.core.exceptions import (
    ConfigurationError,
    FetchError,
    NotFoundError,
    ValidationError,
)
from cinifob.core.ports.api_clients import IMetadataClient
from cinifob.core.ports.repositories import IRecordStore
from cinifob.services.persister import BackgroundPersister, Clock, utc_now

DEFAULT_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class Resolution:
    """
    Resultat d'une resolution.

    Attributes:
        record: Fiche servie
        cached: True si la fiche provient du store local
        stale: True si la fiche est perimee (TMDB injoignable ou 404)
        error: True si un echec upstream a force le repli sur le cache
    """

    record: MediaRecord
    cached: bool
    stale: bool = False
    error: bool = False


def parse_id(raw_id: Any, media_type: MediaType) -> int:
    """
    Valide un identifiant TMDB (entier strictement positif).

    Accepte un int ou une chaine de chiffres.

    Raises:
        ValidationError: Identifiant non numerique, nul ou negatif
    """
    message = f"Invalid {media_type.label} ID"
    if isinstance(raw_id, bool):
        raise ValidationError(message)
    if isinstance(raw_id, int):
        value = raw_id
    elif isinstance(raw_id, str) and raw_id.strip().isascii() and raw_id.strip().isdigit():
        value = int(raw_id.strip())
    else:
        raise ValidationError(message)
    if value <= 0:
        raise ValidationError(message)
    return value


class DetailResolver:
    """
    Resout une fiche pour un type de contenu donne.

    Une instance par type (films, series). Les collaborateurs sont
    injectes par le container.
    """

    def __init__(
        self,
        media_type: MediaType,
        store: IRecordStore,
        client: IMetadataClient,
        persister: BackgroundPersister,
        ttl: timedelta = DEFAULT_TTL,
        cast_limit: int = 20,
        crew_limit: int = 20,
        clock: Clock = utc_now,
    ) -> None:
        self._media_type = media_type
        self._store = store
        self._client = client
        self._persister = persister
        self._ttl = ttl
        self._cast_limit = cast_limit
        self._crew_limit = crew_limit
        self._clock = clock

    @property
    def media_type(self) -> MediaType:
        return self._media_type

    async def resolve(self, raw_id: Any) -> Resolution:
        """
        Resout la fiche demandee.

        Args:
            raw_id: Identifiant TMDB (int ou chaine de chiffres)

        Returns:
            Resolution avec la fiche et ses indicateurs de provenance

        Raises:
            ValidationError: Identifiant invalide
            NotFoundError: Absente de TMDB et du cache
            ConfigurationError: Cle API absente et aucun cache
            FetchError: Echec upstream (ou sous-classe) et aucun cache
        """
        tmdb_id = parse_id(raw_id, self._media_type)
        kind = self._media_type.value

        cached = await self._store.get(self._media_type, tmdb_id)
        now = self._clock()
        if cached is not None and cached.is_fresh(now, self._ttl):
            logger.debug(f"Cache frais pour {kind} {tmdb_id}")
            return Resolution(record=cached, cached=True)

        try:
            payload = await self._client.fetch_detail(self._media_type, tmdb_id)
            record = self._build(payload, tmdb_id)
        except NotFoundError:
            if cached is not None:
                logger.info(f"{kind} {tmdb_id} introuvable sur TMDB, cache perime servi")
                return Resolution(record=cached, cached=True, stale=True)
            raise
        except (FetchError, ConfigurationError) as e:
            if cached is not None:
                logger.warning(
                    f"Echec TMDB pour {kind} {tmdb_id} ({type(e).__name__}: {e}), cache perime servi"
                )
                return Resolution(record=cached, cached=True, stale=True, error=True)
            raise

        # Reponse immediate, l'ecriture se fait en arriere-plan
        self._persister.dispatch(payload, tmdb_id, self._media_type)
        return Resolution(record=record, cached=False)

    def _build(self, payload: dict[str, Any], tmdb_id: int) -> MediaRecord:
        try:
            record = parse_detail(
                self._media_type,
                payload,
                cast_limit=self._cast_limit,
                crew_limit=self._crew_limit,
            )
        except pydantic.ValidationError as e:
            raise FetchError(f"Invalid TMDb payload for {self._media_type.value} {tmdb_id}", cause=e) from e
        record.tmdb_id = tmdb_id
        return record
