"""
Interfaces ports pour le stockage local des fiches.

Le store est la seule ressource mutable partagee. Toutes ses operations
sont asynchrones : l'implementation SQLModel les execute dans l'executor
par defaut pour ne jamais bloquer la boucle d'evenements.

Aucun verrou applicatif : chaque operation s'appuie sur l'atomicite
ligne a ligne de la base. Aucune transaction ne couvre un rafraichissement
complet.
"""

from abc import ABC, abstractmethod
from typing import Optional

from cinifob.core.entities.media import (
    CastCredit,
    ContentSummary,
    CrewCredit,
    Genre,
    MediaRecord,
    MediaType,
    Person,
    ProductionCompany,
    ProductionCountry,
    SpokenLanguage,
    Video,
)


class IRecordStore(ABC):
    """
    Interface de stockage des fiches films et series.

    Les relations d'une fiche sont identifiees par (media_type, record_id),
    record_id etant l'ID interne retourne par upsert_record().
    """

    @abstractmethod
    async def get(self, media_type: MediaType, tmdb_id: int) -> Optional[MediaRecord]:
        """Recupere une fiche et toutes ses relations, ou None si absente."""
        ...

    @abstractmethod
    async def upsert_record(self, record: MediaRecord) -> int:
        """
        Insere ou met a jour la ligne parente (cle : tmdb_id).

        Retourne :
            L'ID interne de la fiche
        """
        ...

    @abstractmethod
    async def clear_relations(self, media_type: MediaType, record_id: int) -> None:
        """Supprime toutes les lignes de relation d'une fiche."""
        ...

    @abstractmethod
    async def link_genres(
        self, media_type: MediaType, record_id: int, genres: tuple[Genre, ...]
    ) -> int:
        """
        Upsert des genres partages puis insertion des lignes de jointure.

        Un doublon sur la jointure est considere comme deja lie.

        Retourne :
            Nombre de liens effectivement crees
        """
        ...

    @abstractmethod
    async def add_cast(
        self, media_type: MediaType, record_id: int, cast: tuple[CastCredit, ...]
    ) -> int:
        """Upsert des personnes puis insertion des roles ; les echecs individuels sont ignores."""
        ...

    @abstractmethod
    async def add_crew(
        self, media_type: MediaType, record_id: int, crew: tuple[CrewCredit, ...]
    ) -> int:
        """Upsert des personnes puis insertion des postes ; les echecs individuels sont ignores."""
        ...

    @abstractmethod
    async def add_creators(self, record_id: int, creators: tuple[Person, ...]) -> int:
        """Upsert des createurs d'une serie puis insertion des liens."""
        ...

    @abstractmethod
    async def add_videos(
        self, media_type: MediaType, record_id: int, videos: tuple[Video, ...]
    ) -> int:
        """Insere les videos d'une fiche."""
        ...

    @abstractmethod
    async def add_production(
        self,
        media_type: MediaType,
        record_id: int,
        companies: tuple[ProductionCompany, ...],
        countries: tuple[ProductionCountry, ...],
        languages: tuple[SpokenLanguage, ...],
    ) -> int:
        """Insere les societes, pays de production et langues parlees."""
        ...

    @abstractmethod
    async def upsert_genres(self, genres: list[Genre]) -> None:
        """Upsert d'une liste de genres partages (synchronisation)."""
        ...

    @abstractmethod
    async def list_genres(self) -> list[Genre]:
        """Liste tous les genres connus, tries par nom."""
        ...

    @abstractmethod
    async def insert_movie_summaries(self, items: list[ContentSummary]) -> int:
        """
        Cree une fiche minimale pour chaque film absent du store.

        Les fiches existantes ne sont jamais modifiees. Les fiches creees
        sont perimees d'emblee : le premier acces les rafraichit.

        Returns:
            Nombre de fiches creees
        """
        ...
