"""
Detail d'une saison de serie avec ses episodes.

Les saisons ne sont pas persistees : elles sont servies depuis le cache
court du client (1h) ou directement depuis TMDB.
"""

from dataclasses import dataclass
from typing import Any

import pydantic

from cinifob.adapters.api.tmdb_payloads import parse_season
from cinifob.core.entities.media import Season
from cinifob.core.exceptions import FetchError, ValidationError
from cinifob.core.ports.api_clients import IMetadataClient


@dataclass(frozen=True)
class SeasonResult:
    season: Season
    cached: bool


def _parse_number(raw: Any, minimum: int) -> int:
    text = str(raw).strip()
    if not (text.isascii() and text.isdigit()) or int(text) < minimum:
        raise ValidationError("Invalid TV show or season ID")
    return int(text)


class SeasonService:
    """Recupere le detail d'une saison (saison 0 = episodes speciaux)."""

    def __init__(self, client: IMetadataClient) -> None:
        self._client = client

    async def get_season(self, raw_tv_id: Any, raw_season: Any) -> SeasonResult:
        """
        Raises:
            ValidationError: ID de serie ou numero de saison invalide
            NotFoundError: Saison inconnue de TMDB
            FetchError: Echec upstream (ou sous-classe)
        """
        tv_id = _parse_number(raw_tv_id, 1)
        season_number = _parse_number(raw_season, 0)

        payload = await self._client.fetch_season(tv_id, season_number)
        try:
            season = parse_season(payload)
        except pydantic.ValidationError as e:
            raise FetchError(f"Invalid TMDb season payload for tv {tv_id}", cause=e) from e
        # Les saisons ne sont jamais lues depuis le store : cached vaut False
        return SeasonResult(season=season, cached=False)
