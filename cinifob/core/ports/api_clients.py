"""
Interfaces ports pour les clients API.

Interface abstraite (port) definissant le contrat du fournisseur de
metadonnees externe. L'implementation concrete est TMDBClient
(adapters/api/tmdb_client.py).

Les methodes retournent les payloads JSON bruts : la validation et la
conversion en entites se font en une seule etape dans
adapters/api/tmdb_payloads.py.
"""

from abc import ABC, abstractmethod
from typing import Any

from cinifob.core.entities.media import MediaType


class IMetadataClient(ABC):
    """
    Interface de base pour le fournisseur de metadonnees.

    Contrat d'erreurs commun a toutes les methodes :
    - ConfigurationError : cle API absente (aucune requete emise)
    - NotFoundError : 404 authoritatif, jamais relance
    - ClientRequestError : autre 4xx permanent
    - UpstreamTimeoutError / UpstreamUnavailableError / FetchError :
      echec apres epuisement des tentatives
    """

    @abstractmethod
    async def fetch_detail(self, media_type: MediaType, tmdb_id: int) -> dict[str, Any]:
        """
        Recupere la fiche complete d'un film ou d'une serie.

        Les sous-ressources (credits, videos) sont regroupees dans la
        meme requete.
        """
        ...

    @abstractmethod
    async def fetch_season(self, tv_id: int, season_number: int) -> dict[str, Any]:
        """Recupere le detail d'une saison avec ses episodes."""
        ...

    @abstractmethod
    async def fetch_related(
        self,
        media_type: MediaType,
        tmdb_id: int,
        relation: str,
        page: int = 1,
    ) -> dict[str, Any]:
        """
        Recupere une page de contenus lies.

        Args :
            relation : "similar" ou "recommendations"
        """
        ...

    @abstractmethod
    async def fetch_catalog(
        self, media_type: MediaType, list_name: str, page: int = 1
    ) -> dict[str, Any]:
        """
        Recupere une page d'une liste du catalogue.

        Args :
            list_name : "popular", "trending", "top_rated", ... (voir CATALOG_PATHS)
        """
        ...

    @abstractmethod
    async def search(self, media_type: MediaType, query: str, page: int = 1) -> dict[str, Any]:
        """Recherche par titre dans les films ou les series."""
        ...

    @abstractmethod
    async def fetch_genres(self, media_type: MediaType) -> list[dict[str, Any]]:
        """Recupere la liste officielle des genres pour un type de contenu."""
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Retourne l'identifiant de la source API (ex: 'tmdb')."""
        ...

    async def close(self) -> None:
        """Libere les ressources reseau (aucune par defaut)."""
        return None
