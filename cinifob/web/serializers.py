"""
Conversion des entites en JSON pour l'API (cles camelCase).

budget et revenue sont serialises en chaines decimales : ces montants
peuvent depasser la precision des entiers JSON cote client.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional

from cinifob.core.entities.media import (
    CastCredit,
    ContentSummary,
    CrewCredit,
    Episode,
    MediaRecord,
    Movie,
    Person,
    Season,
    TVShow,
)


def _iso(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return value.isoformat()


def _bigint(value: Optional[int]) -> Optional[str]:
    return None if value is None else str(value)


def _person(person: Person) -> dict[str, Any]:
    return {
        "id": person.tmdb_id,
        "name": person.name,
        "profilePath": person.profile_path,
        "knownForDepartment": person.known_for_department,
    }


def _cast(credit: CastCredit) -> dict[str, Any]:
    return {**_person(credit.person), "character": credit.character, "order": credit.order}


def _crew(credit: CrewCredit) -> dict[str, Any]:
    return {**_person(credit.person), "job": credit.job, "department": credit.department}


def _common(record: MediaRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "tmdbId": record.tmdb_id,
        "overview": record.overview,
        "tagline": record.tagline,
        "posterPath": record.poster_path,
        "backdropPath": record.backdrop_path,
        "popularity": record.popularity,
        "voteAverage": record.vote_average,
        "voteCount": record.vote_count,
        "status": record.status,
        "originalLanguage": record.original_language,
        "homepage": record.homepage,
        "cachedAt": _iso(record.cached_at),
        "genres": [{"id": g.id, "name": g.name} for g in record.genres],
        "credits": {
            "cast": [_cast(c) for c in record.cast],
            "crew": [_crew(c) for c in record.crew],
        },
        "videos": [
            {
                "key": v.key,
                "name": v.name,
                "site": v.site,
                "type": v.type,
                "official": v.official,
                "publishedAt": v.published_at,
            }
            for v in record.videos
        ],
        "productionCompanies": [
            {
                "id": c.tmdb_id,
                "name": c.name,
                "logoPath": c.logo_path,
                "originCountry": c.origin_country,
            }
            for c in record.production_companies
        ],
        "productionCountries": [
            {"iso31661": c.iso_3166_1, "name": c.name} for c in record.production_countries
        ],
        "spokenLanguages": [
            {"iso6391": lang.iso_639_1, "name": lang.name, "englishName": lang.english_name}
            for lang in record.spoken_languages
        ],
    }


def movie_to_dict(movie: Movie) -> dict[str, Any]:
    data = _common(movie)
    data.update(
        title=movie.title,
        originalTitle=movie.original_title,
        releaseDate=_iso(movie.release_date),
        runtime=movie.runtime,
        budget=_bigint(movie.budget),
        revenue=_bigint(movie.revenue),
        imdbId=movie.imdb_id,
    )
    return data


def tv_show_to_dict(show: TVShow) -> dict[str, Any]:
    data = _common(show)
    data.update(
        name=show.name,
        originalName=show.original_name,
        firstAirDate=_iso(show.first_air_date),
        lastAirDate=_iso(show.last_air_date),
        numberOfSeasons=show.number_of_seasons,
        numberOfEpisodes=show.number_of_episodes,
        episodeRunTime=list(show.episode_run_time),
        inProduction=show.in_production,
        type=show.type,
        networks=[
            {
                "id": n.tmdb_id,
                "name": n.name,
                "logoPath": n.logo_path,
                "originCountry": n.origin_country,
            }
            for n in show.networks
        ],
        seasons=[
            {
                "id": s.tmdb_id,
                "seasonNumber": s.season_number,
                "name": s.name,
                "overview": s.overview,
                "airDate": _iso(s.air_date),
                "episodeCount": s.episode_count,
                "posterPath": s.poster_path,
            }
            for s in show.seasons
        ],
        createdBy=[_person(p) for p in show.created_by],
    )
    return data


def record_to_dict(record: MediaRecord) -> dict[str, Any]:
    if isinstance(record, Movie):
        return movie_to_dict(record)
    return tv_show_to_dict(record)


def _episode(episode: Episode) -> dict[str, Any]:
    return {
        "id": episode.tmdb_id,
        "episodeNumber": episode.episode_number,
        "seasonNumber": episode.season_number,
        "name": episode.name,
        "overview": episode.overview,
        "airDate": _iso(episode.air_date),
        "runtime": episode.runtime,
        "stillPath": episode.still_path,
        "voteAverage": episode.vote_average,
        "voteCount": episode.vote_count,
        "crew": [_crew(c) for c in episode.crew],
        "guestStars": [_cast(c) for c in episode.guest_stars],
    }


def season_to_dict(season: Season) -> dict[str, Any]:
    """Saison sans ses episodes (servis a part dans la reponse)."""
    return {
        "id": season.tmdb_id,
        "seasonNumber": season.season_number,
        "name": season.name,
        "overview": season.overview,
        "posterPath": season.poster_path,
        "airDate": _iso(season.air_date),
        "episodeCount": len(season.episodes),
    }


def episodes_to_list(season: Season) -> list[dict[str, Any]]:
    return [_episode(e) for e in season.episodes]


def content_summary_to_dict(item: ContentSummary) -> dict[str, Any]:
    body = {
        "id": item.tmdb_id,
        "tmdbId": item.tmdb_id,
        "mediaType": item.media_type.value,
        "title": item.title,
        "overview": item.overview,
        "posterPath": item.poster_path,
        "backdropPath": item.backdrop_path,
        "date": item.date,
        "voteAverage": item.vote_average,
        "voteCount": item.vote_count,
        "popularity": item.popularity,
        "genreIds": list(item.genre_ids),
    }
    if item.relation_type is not None:
        body["relationType"] = item.relation_type
    return body


def movie_summary_to_dict(item: ContentSummary) -> dict[str, Any]:
    """Element de /api/movies/search (genres = IDs TMDB)."""
    return {
        "tmdbId": item.tmdb_id,
        "title": item.title,
        "overview": item.overview,
        "posterPath": item.poster_path,
        "backdropPath": item.backdrop_path,
        "releaseDate": item.date,
        "genres": list(item.genre_ids),
        "voteAverage": item.vote_average,
        "voteCount": item.vote_count,
    }
