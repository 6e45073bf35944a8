"""
Validation des payloads TMDB et conversion en entites du domaine.

Les reponses TMDB sont du JSON faiblement type (champs absents, null,
dates vides ""). Ce module est la seule frontiere ou elles sont
validees : les modeles pydantic ci-dessous narrowent le payload puis
les fonctions parse_* produisent les dataclasses de core/entities.

La normalisation des credits est faite ici pour que la reponse servie
depuis TMDB et celle relue depuis le store aient la meme forme :
- cast : trie par ``order``, tronque a cast_limit
- crew : filtre sur CREW_JOB_ALLOWLIST, tronque a crew_limit
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from cinifob.core.entities.media import (
    CastCredit,
    ContentSummary,
    CrewCredit,
    Episode,
    Genre,
    MediaRecord,
    MediaType,
    Movie,
    Network,
    Person,
    ProductionCompany,
    ProductionCountry,
    Season,
    SeasonSummary,
    SpokenLanguage,
    TVShow,
    Video,
)
from cinifob.utils.constants import CREW_JOB_ALLOWLIST


class _Payload(BaseModel):
    """Base commune : champs inconnus ignores, null liste -> liste vide."""

    model_config = ConfigDict(extra="ignore")


def _empty_to_none(value: Any) -> Any:
    # TMDB renvoie "" pour les dates inconnues
    if value == "":
        return None
    return value


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


class GenrePayload(_Payload):
    id: int
    name: str = ""


class PersonCreditPayload(_Payload):
    """Entree de credits (cast ou crew) ou createur de serie."""

    id: int
    name: str = ""
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None
    character: Optional[str] = None
    order: Optional[int] = None
    job: Optional[str] = None
    department: Optional[str] = None


class CreditsPayload(_Payload):
    cast: list[PersonCreditPayload] = []
    crew: list[PersonCreditPayload] = []

    null_lists = field_validator("cast", "crew", mode="before")(_none_to_list)


class VideoPayload(_Payload):
    key: str
    name: str = ""
    site: str = ""
    type: str = ""
    official: bool = False
    published_at: Optional[str] = None


class VideosPayload(_Payload):
    results: list[VideoPayload] = []

    null_lists = field_validator("results", mode="before")(_none_to_list)


class CompanyPayload(_Payload):
    id: int
    name: str = ""
    logo_path: Optional[str] = None
    origin_country: Optional[str] = None


class CountryPayload(_Payload):
    iso_3166_1: str
    name: str = ""


class LanguagePayload(_Payload):
    iso_639_1: str
    name: str = ""
    english_name: str = ""


class SeasonSummaryPayload(_Payload):
    id: int
    season_number: int
    name: str = ""
    overview: Optional[str] = None
    air_date: Optional[date] = None
    episode_count: Optional[int] = None
    poster_path: Optional[str] = None

    empty_dates = field_validator("air_date", mode="before")(_empty_to_none)


class _DetailPayload(_Payload):
    """Champs communs des fiches /movie/{id} et /tv/{id}."""

    id: int
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
    genres: list[GenrePayload] = []
    credits: Optional[CreditsPayload] = None
    videos: Optional[VideosPayload] = None
    production_companies: list[CompanyPayload] = []
    production_countries: list[CountryPayload] = []
    spoken_languages: list[LanguagePayload] = []

    null_lists = field_validator(
        "genres",
        "production_companies",
        "production_countries",
        "spoken_languages",
        mode="before",
    )(_none_to_list)


class MoviePayload(_DetailPayload):
    title: str = ""
    original_title: Optional[str] = None
    release_date: Optional[date] = None
    runtime: Optional[int] = None
    budget: Optional[int] = None
    revenue: Optional[int] = None
    imdb_id: Optional[str] = None

    empty_dates = field_validator("release_date", mode="before")(_empty_to_none)


class TVShowPayload(_DetailPayload):
    name: str = ""
    original_name: Optional[str] = None
    first_air_date: Optional[date] = None
    last_air_date: Optional[date] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    episode_run_time: list[int] = []
    in_production: Optional[bool] = None
    type: Optional[str] = None
    networks: list[CompanyPayload] = []
    seasons: list[SeasonSummaryPayload] = []
    created_by: list[PersonCreditPayload] = []

    empty_dates = field_validator("first_air_date", "last_air_date", mode="before")(_empty_to_none)
    null_tv_lists = field_validator(
        "episode_run_time", "networks", "seasons", "created_by", mode="before"
    )(_none_to_list)


class EpisodePayload(_Payload):
    id: int
    episode_number: int
    season_number: int
    name: str = ""
    overview: Optional[str] = None
    air_date: Optional[date] = None
    runtime: Optional[int] = None
    still_path: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    crew: list[PersonCreditPayload] = []
    guest_stars: list[PersonCreditPayload] = []

    empty_dates = field_validator("air_date", mode="before")(_empty_to_none)
    null_lists = field_validator("crew", "guest_stars", mode="before")(_none_to_list)


class SeasonPayload(_Payload):
    id: int
    season_number: int
    name: str = ""
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    air_date: Optional[date] = None
    episodes: list[EpisodePayload] = []

    empty_dates = field_validator("air_date", mode="before")(_empty_to_none)
    null_lists = field_validator("episodes", mode="before")(_none_to_list)


class ContentSummaryPayload(_Payload):
    id: int
    title: Optional[str] = None
    name: Optional[str] = None
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    genre_ids: list[int] = []

    null_lists = field_validator("genre_ids", mode="before")(_none_to_list)


class ContentPagePayload(_Payload):
    page: int = 1
    results: list[ContentSummaryPayload] = []
    total_pages: int = 0
    total_results: int = 0

    null_lists = field_validator("results", mode="before")(_none_to_list)


# ---------------------------------------------------------------------------
# Conversion payload -> entites
# ---------------------------------------------------------------------------


def _person(item: PersonCreditPayload) -> Person:
    return Person(
        tmdb_id=item.id,
        name=item.name,
        profile_path=item.profile_path,
        known_for_department=item.known_for_department,
    )


def _cast(items: list[PersonCreditPayload], limit: Optional[int]) -> tuple[CastCredit, ...]:
    ordered = sorted(
        enumerate(items),
        key=lambda pair: (pair[1].order if pair[1].order is not None else pair[0]),
    )
    credits = tuple(
        CastCredit(
            person=_person(item),
            character=item.character,
            order=item.order if item.order is not None else index,
        )
        for index, item in ordered
    )
    return credits if limit is None else credits[:limit]


def _crew(items: list[PersonCreditPayload], limit: Optional[int]) -> tuple[CrewCredit, ...]:
    credits = tuple(
        CrewCredit(person=_person(item), job=item.job, department=item.department)
        for item in items
        if item.job in CREW_JOB_ALLOWLIST
    )
    return credits if limit is None else credits[:limit]


def _common_fields(
    payload: _DetailPayload, cast_limit: Optional[int], crew_limit: Optional[int]
) -> dict[str, Any]:
    credits = payload.credits or CreditsPayload()
    videos = payload.videos or VideosPayload()
    return {
        "tmdb_id": payload.id,
        "overview": payload.overview,
        "tagline": payload.tagline,
        "poster_path": payload.poster_path,
        "backdrop_path": payload.backdrop_path,
        "popularity": payload.popularity,
        "vote_average": payload.vote_average,
        "vote_count": payload.vote_count,
        "status": payload.status,
        "original_language": payload.original_language,
        "homepage": payload.homepage,
        "genres": tuple(Genre(id=g.id, name=g.name) for g in payload.genres),
        "cast": _cast(credits.cast, cast_limit),
        "crew": _crew(credits.crew, crew_limit),
        "videos": tuple(
            Video(
                key=v.key,
                name=v.name,
                site=v.site,
                type=v.type,
                official=v.official,
                published_at=v.published_at,
            )
            for v in videos.results
        ),
        "production_companies": tuple(
            ProductionCompany(
                tmdb_id=c.id,
                name=c.name,
                logo_path=c.logo_path,
                origin_country=c.origin_country,
            )
            for c in payload.production_companies
        ),
        "production_countries": tuple(
            ProductionCountry(iso_3166_1=c.iso_3166_1, name=c.name)
            for c in payload.production_countries
        ),
        "spoken_languages": tuple(
            SpokenLanguage(iso_639_1=lang.iso_639_1, name=lang.name, english_name=lang.english_name)
            for lang in payload.spoken_languages
        ),
    }


def parse_movie(
    data: dict[str, Any],
    cast_limit: Optional[int] = 20,
    crew_limit: Optional[int] = 20,
) -> Movie:
    """
    Valide un payload /movie/{id} et le convertit en Movie.

    Raises:
        pydantic.ValidationError: Payload inexploitable (id manquant, types invalides)
    """
    payload = MoviePayload.model_validate(data)
    return Movie(
        **_common_fields(payload, cast_limit, crew_limit),
        title=payload.title or payload.original_title or "",
        original_title=payload.original_title,
        release_date=payload.release_date,
        runtime=payload.runtime,
        budget=payload.budget,
        revenue=payload.revenue,
        imdb_id=payload.imdb_id,
    )


def parse_tv_show(
    data: dict[str, Any],
    cast_limit: Optional[int] = 20,
    crew_limit: Optional[int] = 20,
) -> TVShow:
    """Valide un payload /tv/{id} et le convertit en TVShow."""
    payload = TVShowPayload.model_validate(data)
    return TVShow(
        **_common_fields(payload, cast_limit, crew_limit),
        name=payload.name or payload.original_name or "",
        original_name=payload.original_name,
        first_air_date=payload.first_air_date,
        last_air_date=payload.last_air_date,
        number_of_seasons=payload.number_of_seasons,
        number_of_episodes=payload.number_of_episodes,
        episode_run_time=tuple(payload.episode_run_time),
        in_production=payload.in_production,
        type=payload.type,
        networks=tuple(
            Network(
                tmdb_id=n.id,
                name=n.name,
                logo_path=n.logo_path,
                origin_country=n.origin_country,
            )
            for n in payload.networks
        ),
        seasons=tuple(
            SeasonSummary(
                tmdb_id=s.id,
                season_number=s.season_number,
                name=s.name,
                overview=s.overview,
                air_date=s.air_date,
                episode_count=s.episode_count,
                poster_path=s.poster_path,
            )
            for s in payload.seasons
        ),
        created_by=tuple(_person(c) for c in payload.created_by),
    )


def parse_detail(
    media_type: MediaType,
    data: dict[str, Any],
    cast_limit: Optional[int] = 20,
    crew_limit: Optional[int] = 20,
) -> MediaRecord:
    """Aiguille vers parse_movie ou parse_tv_show selon le type."""
    if media_type is MediaType.MOVIE:
        return parse_movie(data, cast_limit, crew_limit)
    return parse_tv_show(data, cast_limit, crew_limit)


def parse_season(data: dict[str, Any]) -> Season:
    """Valide un payload /tv/{id}/season/{n} et le convertit en Season."""
    payload = SeasonPayload.model_validate(data)
    return Season(
        tmdb_id=payload.id,
        season_number=payload.season_number,
        name=payload.name,
        overview=payload.overview,
        poster_path=payload.poster_path,
        air_date=payload.air_date,
        episodes=tuple(
            Episode(
                tmdb_id=ep.id,
                episode_number=ep.episode_number,
                season_number=ep.season_number,
                name=ep.name,
                overview=ep.overview,
                air_date=ep.air_date,
                runtime=ep.runtime,
                still_path=ep.still_path,
                vote_average=ep.vote_average,
                vote_count=ep.vote_count,
                crew=tuple(
                    CrewCredit(person=_person(c), job=c.job or "", department=c.department)
                    for c in ep.crew
                ),
                guest_stars=_cast(ep.guest_stars, None),
            )
            for ep in payload.episodes
        ),
    )


def parse_content_page(
    media_type: MediaType,
    data: dict[str, Any],
    relation_type: Optional[str] = None,
) -> tuple[list[ContentSummary], int, int]:
    """
    Valide une page de liste TMDB (recherche, catalogue, contenus lies).

    Args:
        relation_type: Etiquette posee sur chaque element ("similar" ou "recommendation")

    Returns:
        (elements, total_pages, total_results)
    """
    payload = ContentPagePayload.model_validate(data)
    items = [
        ContentSummary(
            tmdb_id=item.id,
            media_type=media_type,
            title=(item.name if media_type is MediaType.TV else item.title) or "",
            relation_type=relation_type,
            overview=item.overview,
            poster_path=item.poster_path,
            backdrop_path=item.backdrop_path,
            date=item.first_air_date if media_type is MediaType.TV else item.release_date,
            vote_average=item.vote_average,
            vote_count=item.vote_count,
            popularity=item.popularity,
            genre_ids=tuple(item.genre_ids),
        )
        for item in payload.results
    ]
    return items, payload.total_pages, payload.total_results


def parse_related_page(
    media_type: MediaType,
    data: dict[str, Any],
    relation_type: str,
) -> tuple[list[ContentSummary], int, int]:
    """Valide une page /similar ou /recommendations."""
    return parse_content_page(media_type, data, relation_type)


def parse_genres(items: list[dict[str, Any]]) -> list[Genre]:
    """Valide une liste /genre/{type}/list."""
    return [
        Genre(id=g.id, name=g.name)
        for g in (GenrePayload.model_validate(item) for item in items)
    ]
