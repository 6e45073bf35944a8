"""
Client TMDB pour la recuperation des metadonnees films et series.

Implemente l'interface IMetadataClient pour TMDB (The Movie Database).
Chaque appel passe par request_with_retry (3 tentatives, timeout
independant par tentative) puis les echecs sont categorises en erreurs
du domaine :

- 404 (ou payload ``success: false``) -> NotFoundError, sans retry
- autre 4xx hors 429 -> ClientRequestError, sans retry
- timeouts repetes -> UpstreamTimeoutError
- erreurs reseau repetees -> UpstreamUnavailableError
- 429/5xx repetes -> FetchError
- autre erreur httpx (decodage, redirections) -> FetchError, sans retry

Usage:
    client = TMDBClient(api_key="your_key", cache=APICache())
    payload = await client.fetch_detail(MediaType.MOVIE, 27205)
    await client.close()
"""

from typing import Any, Optional

import httpx
from loguru import logger

from cinifob.adapters.api.cache import APICache
from cinifob.adapters.api.retry import RetryableStatusError, SleepFn, request_with_retry
from cinifob.core.entities.media import MediaType
from cinifob.core.exceptions import (
    ClientRequestError,
    ConfigurationError,
    FetchError,
    NotFoundError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from cinifob.core.ports.api_clients import IMetadataClient
from cinifob.utils.constants import CATALOG_PATHS, DETAIL_APPEND_TO_RESPONSE


class TMDBClient(IMetadataClient):
    """
    Client API TMDB.

    Implemente IMetadataClient avec:
    - Fiches completes films/series (credits et videos dans la meme requete)
    - Details de saison, contenus lies, recherche et catalogue
      (cache court 1h via APICache)
    - Listes officielles des genres
    - Retry automatique sur 429/5xx/erreur reseau/timeout

    Attributes:
        TMDB_BASE_URL: URL de base par defaut de l'API TMDB v3

    Example:
        client = TMDBClient(api_key="xxx", cache=APICache())
        payload = await client.fetch_detail(MediaType.TV, 1396)
        print(payload["name"])
        await client.close()
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"

    def __init__(
        self,
        api_key: Optional[str],
        cache: Optional[APICache] = None,
        base_url: str = TMDB_BASE_URL,
        language: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
        backoff_max: float = 5.0,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB (v3 ou Read Access Token v4), None si non configuree
            cache: Instance APICache pour les saisons et contenus lies (optionnel)
            base_url: URL de base de l'API
            language: Langue des metadonnees (ex: "fr-FR"), defaut TMDB sinon
            timeout: Timeout de chaque tentative en secondes
            max_attempts: Nombre total de tentatives par requete
            backoff_base: Delai avant la 2e tentative en secondes
            backoff_max: Plafond du delai entre tentatives en secondes
            sleep: Fonction de pause async injectable (tests)
        """
        self._api_key = api_key
        self._cache = cache
        self._base_url = base_url.rstrip("/")
        self._language = language
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer

        Returns:
            httpx.AsyncClient configure pour l'API TMDB
        """
        if self._client is None or self._client.is_closed:
            # Detecter le type de cle : v3 (32 hex) vs v4 (long JWT)
            is_v4_token = len(self._api_key) > 40

            headers = {"Accept": "application/json"}
            params = {}

            if is_v4_token:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                params=params,
                timeout=self._timeout,
            )
        return self._client

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source API."""
        return "tmdb"

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        Execute un GET avec retry et categorise les echecs.

        Raises:
            ConfigurationError: Cle API absente (aucune requete emise)
            NotFoundError: 404 ou payload success=false
            ClientRequestError: Autre 4xx permanent
            UpstreamTimeoutError: Toutes les tentatives ont expire
            UpstreamUnavailableError: Erreur reseau sur toutes les tentatives
            FetchError: 429/5xx sur toutes les tentatives, JSON invalide,
                autre erreur de requete httpx
        """
        if not self._api_key:
            raise ConfigurationError("TMDb API key not configured")

        query: dict[str, Any] = dict(params or {})
        if self._language:
            query.setdefault("language", self._language)

        client = self._get_client()
        logger.debug(f"Appel TMDB {path} {query}")
        try:
            response = await request_with_retry(
                client,
                "GET",
                path,
                max_attempts=self._max_attempts,
                base_delay=self._backoff_base,
                max_delay=self._backoff_max,
                sleep=self._sleep,
                params=query,
                timeout=self._timeout,
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFoundError(f"TMDb resource not found: {path}") from e
            raise ClientRequestError(status, cause=e) from e
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(
                f"TMDb request timeout after {self._max_attempts} attempts: {path}",
                cause=e,
            ) from e
        except httpx.TransportError as e:
            raise UpstreamUnavailableError(
                f"TMDb network error after {self._max_attempts} attempts: {path}",
                cause=e,
            ) from e
        except httpx.RequestError as e:
            # Decodage, redirections en boucle : pas de nouvel essai
            raise FetchError(f"TMDb request failed: {path} ({type(e).__name__})", cause=e) from e
        except RetryableStatusError as e:
            raise FetchError(
                f"TMDb returned {e.status_code} after {self._max_attempts} attempts: {path}",
                cause=e,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"TMDb returned invalid JSON: {path}", cause=e) from e

        # Certaines erreurs TMDB arrivent en 200 avec success=false
        if isinstance(data, dict) and data.get("success") is False:
            raise NotFoundError(f"TMDb resource not found: {path}")
        return data

    async def _get_cached(
        self, cache_key: str, path: str, params: Optional[dict[str, Any]] = None
    ) -> Any:
        """GET cache-first : la reponse est gardee 1h (APICache.LIST_TTL)."""
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return cached

        data = await self._get(path, params)

        if self._cache is not None:
            await self._cache.set_list(cache_key, data)
        return data

    async def fetch_detail(self, media_type: MediaType, tmdb_id: int) -> dict[str, Any]:
        """
        Recupere la fiche complete d'un film ou d'une serie.

        Pas de cache ici : la fraicheur des fiches est geree par le store
        relationnel (DetailResolver).

        Args:
            media_type: MediaType.MOVIE ou MediaType.TV
            tmdb_id: ID TMDB du contenu

        Returns:
            Payload JSON brut (credits et videos inclus)
        """
        return await self._get(
            f"/{media_type.value}/{tmdb_id}",
            {"append_to_response": DETAIL_APPEND_TO_RESPONSE},
        )

    async def fetch_season(self, tv_id: int, season_number: int) -> dict[str, Any]:
        """
        Recupere le detail d'une saison avec ses episodes.

        Utilise le pattern cache-first: verifie le cache AVANT de faire
        un appel API. Les saisons sont cachees pour 1 heure.
        """
        return await self._get_cached(
            f"tmdb:season:{tv_id}:{season_number}",
            f"/tv/{tv_id}/season/{season_number}",
        )

    async def fetch_related(
        self,
        media_type: MediaType,
        tmdb_id: int,
        relation: str,
        page: int = 1,
    ) -> dict[str, Any]:
        """
        Recupere une page de contenus similaires ou recommandes.

        Cache-first, TTL 1 heure.

        Args:
            media_type: Type du contenu de reference
            tmdb_id: ID TMDB du contenu de reference
            relation: "similar" ou "recommendations"
            page: Numero de page TMDB (1-indexe)
        """
        return await self._get_cached(
            f"tmdb:related:{media_type.value}:{tmdb_id}:{relation}:{page}",
            f"/{media_type.value}/{tmdb_id}/{relation}",
            {"page": page},
        )

    async def fetch_catalog(
        self, media_type: MediaType, list_name: str, page: int = 1
    ) -> dict[str, Any]:
        """
        Recupere une page d'une liste du catalogue (populaires, tendances...).

        Cache-first, TTL 1 heure.

        Raises:
            KeyError: Liste inconnue pour ce type (validee en amont par le service)
        """
        path = CATALOG_PATHS[media_type.value][list_name]
        return await self._get_cached(
            f"tmdb:catalog:{media_type.value}:{list_name}:{page}",
            path,
            {"page": page},
        )

    async def search(self, media_type: MediaType, query: str, page: int = 1) -> dict[str, Any]:
        """
        Recherche par titre via /search/movie ou /search/tv.

        Cache-first, TTL 1 heure. La cle de cache ignore la casse.
        """
        return await self._get_cached(
            f"tmdb:search:{media_type.value}:{query.strip().lower()}:{page}",
            f"/search/{media_type.value}",
            {"query": query.strip(), "page": page},
        )

    async def fetch_genres(self, media_type: MediaType) -> list[dict[str, Any]]:
        """Recupere la liste officielle des genres (films ou series)."""
        data = await self._get(f"/genre/{media_type.value}/list")
        return data.get("genres") or []

    async def close(self) -> None:
        """
        Ferme le client HTTP.

        Doit etre appele a la fin de l'utilisation pour liberer
        les ressources reseau.
        """
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
