"""
Persistance en arriere-plan des fiches fraichement recuperees.

Le resolveur ne fait jamais attendre l'appelant sur l'ecriture : il
confie le payload brut a BackgroundPersister.dispatch() qui lance une
tache asyncio et retourne immediatement.

Protocole d'un rafraichissement (remplacement complet, jamais de fusion) :
1. upsert de la ligne parente (cle tmdb_id, cached_at = maintenant)
2. suppression de toutes les relations de la fiche
3. reinsertion concurrente des groupes de relations (genres, cast, crew,
   videos, production, createurs)

Aucune transaction ne couvre l'ensemble : une interruption entre 2 et 3
laisse des relations partielles jusqu'au prochain rafraichissement.
Toute erreur est journalisee et jamais propagee, sans nouvel essai.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from loguru import logger

from cinifob.adapters.api.tmdb_payloads import parse_detail
from cinifob.core.entities.media import ContentSummary, MediaType, TVShow
from cinifob.core.ports.repositories import IRecordStore

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BackgroundPersister:
    """
    Normalise un payload TMDB et l'ecrit dans le store sans bloquer.

    Les taches en cours sont referencees dans ``_pending`` pour ne pas
    etre collectees par le garbage collector avant la fin, et peuvent
    etre attendues a l'arret via shutdown().
    """

    def __init__(
        self,
        store: IRecordStore,
        cast_limit: int = 20,
        crew_limit: int = 20,
        clock: Clock = utc_now,
    ) -> None:
        """
        Initialise le persister.

        Args:
            store: Store des fiches
            cast_limit: Nombre maximum de roles conserves (par ordre)
            crew_limit: Nombre maximum de postes conserves (apres filtrage)
            clock: Source de l'horodatage cached_at
        """
        self._store = store
        self._cast_limit = cast_limit
        self._crew_limit = crew_limit
        self._clock = clock
        self._pending: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        """Nombre de persistances encore en cours."""
        return len(self._pending)

    def dispatch(
        self, raw_payload: dict[str, Any], tmdb_id: int, media_type: MediaType
    ) -> asyncio.Task:
        """
        Lance persist() en tache de fond et retourne sans attendre.

        Doit etre appele depuis une boucle d'evenements active.
        """
        task = asyncio.create_task(
            self.persist(raw_payload, tmdb_id, media_type),
            name=f"persist-{media_type.value}-{tmdb_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def persist(
        self, raw_payload: dict[str, Any], tmdb_id: int, media_type: MediaType
    ) -> Optional[int]:
        """
        Normalise et ecrit une fiche complete.

        Idempotent : relancer avec le meme payload produit le meme etat final.

        Returns:
            L'ID interne de la fiche, ou None si la persistance a echoue
        """
        try:
            return await self._persist(raw_payload, tmdb_id, media_type)
        except Exception:
            logger.exception(f"Echec de persistance {media_type.value} {tmdb_id}")
            return None

    async def _persist(
        self, raw_payload: dict[str, Any], tmdb_id: int, media_type: MediaType
    ) -> int:
        record = parse_detail(
            media_type, raw_payload, cast_limit=self._cast_limit, crew_limit=self._crew_limit
        )
        record.tmdb_id = tmdb_id
        record.cached_at = self._clock()

        record_id = await self._store.upsert_record(record)
        await self._store.clear_relations(media_type, record_id)

        groups = {
            "genres": self._store.link_genres(media_type, record_id, record.genres),
            "cast": self._store.add_cast(media_type, record_id, record.cast),
            "crew": self._store.add_crew(media_type, record_id, record.crew),
            "videos": self._store.add_videos(media_type, record_id, record.videos),
            "production": self._store.add_production(
                media_type,
                record_id,
                record.production_companies,
                record.production_countries,
                record.spoken_languages,
            ),
        }
        if isinstance(record, TVShow):
            groups["creators"] = self._store.add_creators(record_id, record.created_by)

        results = await asyncio.gather(*groups.values(), return_exceptions=True)

        counts = {}
        for name, result in zip(groups, results):
            if isinstance(result, BaseException):
                logger.opt(exception=result).error(
                    f"Relations '{name}' non ecrites pour {media_type.value} {tmdb_id}"
                )
            else:
                counts[name] = result

        logger.info(f"Fiche {media_type.value} {tmdb_id} persistee {counts}")
        return record_id

    def dispatch_summaries(self, items: list[ContentSummary]) -> asyncio.Task:
        """Lance persist_summaries() en tache de fond (resultats de recherche)."""
        task = asyncio.create_task(
            self.persist_summaries(items), name=f"persist-summaries-{len(items)}"
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def persist_summaries(self, items: list[ContentSummary]) -> int:
        """
        Enregistre des fiches minimales pour les films encore inconnus.

        Returns:
            Nombre de fiches creees (0 en cas d'echec, journalise)
        """
        try:
            inserted = await self._store.insert_movie_summaries(items)
        except Exception:
            logger.exception(f"Echec d'enregistrement de {len(items)} resultat(s) de recherche")
            return 0
        if inserted:
            logger.info(f"{inserted} film(s) ajoute(s) depuis une recherche")
        return inserted

    async def shutdown(self) -> None:
        """Attend la fin des persistances en cours (arret de l'application)."""
        if not self._pending:
            return
        logger.info(f"Attente de {len(self._pending)} persistance(s) en cours")
        await asyncio.gather(*list(self._pending), return_exceptions=True)
