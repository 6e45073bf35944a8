"""
Media metadata entities.

Entities representing movies and TV shows cached from TMDB, with the
relations that are refreshed together (genres, credits, videos,
production metadata).
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import ClassVar, Optional


class MediaType(str, Enum):
    """Type de contenu, valeur identique au segment d'URL TMDB."""

    MOVIE = "movie"
    TV = "tv"

    @property
    def label(self) -> str:
        """Libelle lisible utilise dans les messages d'erreur HTTP."""
        return "movie" if self is MediaType.MOVIE else "TV show"


@dataclass(frozen=True)
class Genre:
    """Genre TMDB (id stable cote TMDB)."""

    id: int
    name: str


@dataclass(frozen=True)
class Person:
    """
    Shared person identity referenced by cast, crew and creator relations.

    Attributes:
        tmdb_id: TMDB person ID (upsert key)
        name: Display name
        profile_path: Path to profile image on TMDB CDN
        known_for_department: Main department (Acting, Directing...)
    """

    tmdb_id: int
    name: str
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None


@dataclass(frozen=True)
class CastCredit:
    """Role d'une personne dans la distribution."""

    person: Person
    character: Optional[str] = None
    order: int = 0


@dataclass(frozen=True)
class CrewCredit:
    """Poste d'une personne dans l'equipe technique."""

    person: Person
    job: str
    department: Optional[str] = None


@dataclass(frozen=True)
class Video:
    """Video associee (bande-annonce, teaser...)."""

    key: str
    name: str = ""
    site: str = ""
    type: str = ""
    official: bool = False
    published_at: Optional[str] = None


@dataclass(frozen=True)
class ProductionCompany:
    tmdb_id: int
    name: str
    logo_path: Optional[str] = None
    origin_country: Optional[str] = None


@dataclass(frozen=True)
class ProductionCountry:
    iso_3166_1: str
    name: str


@dataclass(frozen=True)
class SpokenLanguage:
    iso_639_1: str
    name: str = ""
    english_name: str = ""


@dataclass(frozen=True)
class Network:
    tmdb_id: int
    name: str
    logo_path: Optional[str] = None
    origin_country: Optional[str] = None


@dataclass(frozen=True)
class SeasonSummary:
    """Resume de saison tel que present dans la fiche d'une serie."""

    tmdb_id: int
    season_number: int
    name: str = ""
    overview: Optional[str] = None
    air_date: Optional[date] = None
    episode_count: Optional[int] = None
    poster_path: Optional[str] = None


@dataclass
class MediaRecord:
    """
    Cached metadata shared by movies and TV shows.

    A record is fresh while ``now - cached_at`` is below the cache TTL.
    Relations are always replaced together on refresh, never merged.

    Attributes:
        id: Internal database ID (None until persisted)
        tmdb_id: The Movie Database ID (unique per media type)
        cached_at: Timestamp of the last successful refresh (UTC)
    """

    media_type: ClassVar[MediaType]

    id: Optional[int] = None
    tmdb_id: int = 0
    overview: Optional[str] = None
    tagline: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    popularity: Optional[float] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    status: Optional[str] = None
    original_language: Optional[str] = None
    homepage: Optional[str] = None
    cached_at: Optional[datetime] = None
    genres: tuple[Genre, ...] = ()
    cast: tuple[CastCredit, ...] = ()
    crew: tuple[CrewCredit, ...] = ()
    videos: tuple[Video, ...] = ()
    production_companies: tuple[ProductionCompany, ...] = ()
    production_countries: tuple[ProductionCountry, ...] = ()
    spoken_languages: tuple[SpokenLanguage, ...] = ()

    @property
    def display_title(self) -> str:
        raise NotImplementedError

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        """Indique si la fiche a ete rafraichie il y a moins de ``ttl``."""
        if self.cached_at is None:
            return False
        cached_at = self.cached_at
        if cached_at.tzinfo is None:
            cached_at = cached_at.replace(tzinfo=timezone.utc)
        return now - cached_at < ttl


@dataclass
class Movie(MediaRecord):
    """
    Movie metadata from TMDB.

    Attributes:
        title: Localized title
        original_title: Original language title
        release_date: Theatrical release date
        runtime: Runtime in minutes
        budget: Production budget in USD (may exceed 2**31)
        revenue: Box office revenue in USD (may exceed 2**31)
        imdb_id: IMDb identifier (ttXXXXXXX)
    """

    media_type: ClassVar[MediaType] = MediaType.MOVIE

    title: str = ""
    original_title: Optional[str] = None
    release_date: Optional[date] = None
    runtime: Optional[int] = None
    budget: Optional[int] = None
    revenue: Optional[int] = None
    imdb_id: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or self.original_title or ""


@dataclass
class TVShow(MediaRecord):
    """
    TV show metadata from TMDB.

    Attributes:
        name: Localized name
        original_name: Original language name
        first_air_date: Date of the first episode
        last_air_date: Date of the latest aired episode
        episode_run_time: Typical episode runtimes in minutes
        created_by: Show creators
        seasons: Season summaries (episodes are fetched per season)
    """

    media_type: ClassVar[MediaType] = MediaType.TV

    name: str = ""
    original_name: Optional[str] = None
    first_air_date: Optional[date] = None
    last_air_date: Optional[date] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    episode_run_time: tuple[int, ...] = ()
    in_production: Optional[bool] = None
    type: Optional[str] = None
    networks: tuple[Network, ...] = ()
    seasons: tuple[SeasonSummary, ...] = ()
    created_by: tuple[Person, ...] = ()

    @property
    def display_title(self) -> str:
        return self.name or self.original_name or ""


@dataclass(frozen=True)
class Episode:
    """Episode d'une saison (non persiste, servi depuis le cache API court)."""

    tmdb_id: int
    episode_number: int
    season_number: int
    name: str = ""
    overview: Optional[str] = None
    air_date: Optional[date] = None
    runtime: Optional[int] = None
    still_path: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    crew: tuple[CrewCredit, ...] = ()
    guest_stars: tuple[CastCredit, ...] = ()


@dataclass(frozen=True)
class Season:
    """Detail d'une saison avec ses episodes."""

    tmdb_id: int
    season_number: int
    name: str = ""
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    air_date: Optional[date] = None
    episodes: tuple[Episode, ...] = ()


@dataclass(frozen=True)
class ContentSummary:
    """
    Element d'une liste TMDB : contenu lie, resultat de recherche ou de catalogue.

    Attributes:
        relation_type: "similar" ou "recommendation" pour les contenus lies, None sinon
        date: Date de sortie / premiere diffusion telle que fournie par TMDB
    """

    tmdb_id: int
    media_type: MediaType
    title: str
    relation_type: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    date: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    genre_ids: tuple[int, ...] = ()
