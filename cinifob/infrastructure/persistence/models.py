"""
Modeles SQLModel pour la base de donnees CiniFob.

Ces modeles representent les tables de la base de donnees SQLite.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables parentes (une ligne par contenu, cle unique tmdb_id):
- movies: Films avec metadonnees TMDB
- tv_shows: Series TV avec metadonnees TMDB

Tables partagees (jamais supprimees par le rafraichissement d'une fiche):
- genres: Genres TMDB (cle primaire = id TMDB du genre)
- people: Personnes referencees par cast, crew et createurs

Tables de relation, identifiees par (media_type, record_id) et remplacees
integralement a chaque rafraichissement:
- media_genres, media_cast, media_crew, media_videos
- media_companies, media_countries, media_languages
- tv_creators (series uniquement)

Les champs JSON (*_json) stockent des listes qui ne sont jamais
interrogees individuellement (reseaux, saisons, durees d'episodes).
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import BigInteger, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MovieModel(SQLModel, table=True):
    """
    Modele representant un film dans la base de donnees.

    budget et revenue sont en BIGINT : certains films depassent 2**31 USD.
    """

    __tablename__ = "movies"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(unique=True, index=True)
    imdb_id: str | None = Field(default=None, index=True)
    title: str = Field(index=True)
    original_title: str | None = None
    overview: str | None = None
    tagline: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: date | None = None
    runtime: int | None = None  # minutes
    budget: int | None = Field(default=None, sa_type=BigInteger)
    revenue: int | None = Field(default=None, sa_type=BigInteger)
    popularity: float | None = None
    vote_average: float | None = None  # Note moyenne TMDB (0-10)
    vote_count: int | None = None
    status: str | None = None
    original_language: str | None = None
    homepage: str | None = None
    cached_at: datetime = Field(default_factory=_utcnow, index=True)
    created_at: datetime | None = Field(default_factory=_utcnow)
    updated_at: datetime | None = Field(default_factory=_utcnow)


class TVShowModel(SQLModel, table=True):
    """Modele representant une serie TV dans la base de donnees."""

    __tablename__ = "tv_shows"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(unique=True, index=True)
    name: str = Field(index=True)
    original_name: str | None = None
    overview: str | None = None
    tagline: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    first_air_date: date | None = None
    last_air_date: date | None = None
    number_of_seasons: int | None = None
    number_of_episodes: int | None = None
    in_production: bool | None = None
    show_type: str | None = None  # "Scripted", "Miniseries"...
    popularity: float | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    status: str | None = None
    original_language: str | None = None
    homepage: str | None = None
    episode_run_time_json: str | None = None  # JSON: [45, 50]
    networks_json: str | None = None  # JSON: [{"tmdb_id": 174, "name": "AMC", ...}]
    seasons_json: str | None = None  # JSON: [{"season_number": 1, ...}]
    cached_at: datetime = Field(default_factory=_utcnow, index=True)
    created_at: datetime | None = Field(default_factory=_utcnow)
    updated_at: datetime | None = Field(default_factory=_utcnow)

    @property
    def episode_run_time(self) -> list[int]:
        """Retourne les durees d'episodes deserialisees."""
        if self.episode_run_time_json:
            return json.loads(self.episode_run_time_json)
        return []

    @episode_run_time.setter
    def episode_run_time(self, value: list[int]) -> None:
        """Serialise les durees d'episodes en JSON."""
        self.episode_run_time_json = json.dumps(value)

    @property
    def networks(self) -> list[dict[str, Any]]:
        """Retourne les chaines de diffusion deserialisees."""
        if self.networks_json:
            return json.loads(self.networks_json)
        return []

    @networks.setter
    def networks(self, value: list[dict[str, Any]]) -> None:
        self.networks_json = json.dumps(value)

    @property
    def seasons(self) -> list[dict[str, Any]]:
        """Retourne les resumes de saison deserialises."""
        if self.seasons_json:
            return json.loads(self.seasons_json)
        return []

    @seasons.setter
    def seasons(self, value: list[dict[str, Any]]) -> None:
        self.seasons_json = json.dumps(value)


class GenreModel(SQLModel, table=True):
    """Genre TMDB partage entre films et series."""

    __tablename__ = "genres"

    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    name: str = Field(index=True)


class PersonModel(SQLModel, table=True):
    """Personne partagee (acteur, technicien, createur)."""

    __tablename__ = "people"

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(unique=True, index=True)
    name: str
    profile_path: str | None = None
    known_for_department: str | None = None


class MediaGenreModel(SQLModel, table=True):
    """Jointure fiche <-> genre. La cle composite interdit les doublons."""

    __tablename__ = "media_genres"

    media_type: str = Field(primary_key=True)
    record_id: int = Field(primary_key=True)
    genre_id: int = Field(primary_key=True, foreign_key="genres.id")


class MediaCastModel(SQLModel, table=True):
    """Role d'une personne dans la distribution d'une fiche."""

    __tablename__ = "media_cast"
    __table_args__ = (
        UniqueConstraint("media_type", "record_id", "person_id", name="uq_media_cast"),
    )

    id: int | None = Field(default=None, primary_key=True)
    media_type: str = Field(index=True)
    record_id: int = Field(index=True)
    person_id: int = Field(foreign_key="people.id")
    character: str | None = None
    cast_order: int = 0


class MediaCrewModel(SQLModel, table=True):
    """Poste d'une personne dans l'equipe technique d'une fiche."""

    __tablename__ = "media_crew"
    __table_args__ = (
        UniqueConstraint("media_type", "record_id", "person_id", "job", name="uq_media_crew"),
    )

    id: int | None = Field(default=None, primary_key=True)
    media_type: str = Field(index=True)
    record_id: int = Field(index=True)
    person_id: int = Field(foreign_key="people.id")
    job: str
    department: str | None = None


class TVCreatorModel(SQLModel, table=True):
    """Createur d'une serie."""

    __tablename__ = "tv_creators"

    tv_show_id: int = Field(primary_key=True)
    person_id: int = Field(primary_key=True, foreign_key="people.id")


class MediaVideoModel(SQLModel, table=True):
    """Video associee a une fiche (bande-annonce, teaser...)."""

    __tablename__ = "media_videos"
    __table_args__ = (
        UniqueConstraint("media_type", "record_id", "key", name="uq_media_video"),
    )

    id: int | None = Field(default=None, primary_key=True)
    media_type: str = Field(index=True)
    record_id: int = Field(index=True)
    key: str
    name: str = ""
    site: str = ""
    video_type: str = ""
    official: bool = False
    published_at: str | None = None


class MediaCompanyModel(SQLModel, table=True):
    """Societe de production d'une fiche."""

    __tablename__ = "media_companies"
    __table_args__ = (
        UniqueConstraint(
            "media_type", "record_id", "company_tmdb_id", name="uq_media_company"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    media_type: str = Field(index=True)
    record_id: int = Field(index=True)
    company_tmdb_id: int
    name: str
    logo_path: str | None = None
    origin_country: str | None = None


class MediaCountryModel(SQLModel, table=True):
    """Pays de production d'une fiche."""

    __tablename__ = "media_countries"
    __table_args__ = (
        UniqueConstraint("media_type", "record_id", "iso_3166_1", name="uq_media_country"),
    )

    id: int | None = Field(default=None, primary_key=True)
    media_type: str = Field(index=True)
    record_id: int = Field(index=True)
    iso_3166_1: str
    name: str


class MediaLanguageModel(SQLModel, table=True):
    """Langue parlee dans une fiche."""

    __tablename__ = "media_languages"
    __table_args__ = (
        UniqueConstraint("media_type", "record_id", "iso_639_1", name="uq_media_language"),
    )

    id: int | None = Field(default=None, primary_key=True)
    media_type: str = Field(index=True)
    record_id: int = Field(index=True)
    iso_639_1: str
    name: str = ""
    english_name: str = ""
