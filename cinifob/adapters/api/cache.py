"""
Cache persistant court pour les reponses TMDB non normalisees.

Les fiches films/series sont cachees dans la base relationnelle (voir
infrastructure/persistence/store.py). Ce cache couvre les reponses qui ne
sont pas persistees : details de saison et contenus lies.

Le cache utilise diskcache pour la persistence sur disque, ce qui permet
de conserver les donnees entre les redemarrages de l'application.

TTL par defaut:
- Listes (LIST_TTL): 1 heure - saisons et suggestions evoluent peu dans la journee
"""

import asyncio
from functools import partial
from typing import Any, Optional

from diskcache import Cache


class APICache:
    """
    Cache asynchrone avec TTL pour les appels API.

    Utilise diskcache pour la persistence et run_in_executor pour
    les operations asynchrones non-bloquantes.

    Attributes:
        LIST_TTL: Duree de vie des saisons et contenus lies (1h)

    Example:
        cache = APICache(cache_dir=".cache/api")
        await cache.set_list("tmdb:season:1396:1", season)
        data = await cache.get("tmdb:season:1396:1")
    """

    LIST_TTL = 60 * 60  # 1 heure en secondes (3600)

    def __init__(self, cache_dir: str = ".cache/api") -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(str(cache_dir))

    async def get(self, key: str) -> Optional[Any]:
        """
        Recupere une valeur du cache.

        Args:
            key: Cle unique identifiant la donnee

        Returns:
            La valeur stockee ou None si absente ou expiree
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Stocke une valeur dans le cache avec un TTL.

        Args:
            key: Cle unique identifiant la donnee
            value: Valeur a stocker (doit etre serializable)
            ttl: Duree de vie en secondes
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def set_list(self, key: str, value: Any) -> None:
        """
        Stocke une saison ou une page de contenus lies (TTL de 1h).

        Args:
            key: Cle unique (ex: "tmdb:related:movie:27205:similar:1")
            value: Payload a stocker
        """
        await self.set(key, value, self.LIST_TTL)

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
