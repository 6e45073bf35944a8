"""
Implementation SQLModel du store de fiches.

Implemente IRecordStore pour la persistance des films et series dans la
base de donnees SQLite via SQLModel. Chaque operation ouvre sa propre
session et s'execute dans l'executor par defaut (run_in_executor), comme
APICache le fait pour diskcache.

Les insertions de relations sont validees ligne par ligne : un doublon
(IntegrityError) annule la ligne fautive et le lot continue.
"""

import asyncio
import json
from datetime import date, datetime, timezone
from functools import partial
from typing import Any, Callable, Optional, TypeVar

from loguru import logger
from sqlalchemy import Engine, delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from cinifob.core.entities.media import (
    CastCredit,
    ContentSummary,
    CrewCredit,
    Genre,
    MediaRecord,
    MediaType,
    Movie,
    Network,
    Person,
    ProductionCompany,
    ProductionCountry,
    SeasonSummary,
    SpokenLanguage,
    TVShow,
    Video,
)
from cinifob.core.ports.repositories import IRecordStore
from cinifob.infrastructure.persistence.models import (
    GenreModel,
    MediaCastModel,
    MediaCompanyModel,
    MediaCountryModel,
    MediaCrewModel,
    MediaGenreModel,
    MediaLanguageModel,
    MediaVideoModel,
    MovieModel,
    PersonModel,
    TVCreatorModel,
    TVShowModel,
)

T = TypeVar("T")

# Fiches minimales : toujours perimees, completees au premier acces
SUMMARY_CACHED_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RELATION_MODELS = (
    MediaGenreModel,
    MediaCastModel,
    MediaCrewModel,
    MediaVideoModel,
    MediaCompanyModel,
    MediaCountryModel,
    MediaLanguageModel,
)


def _as_utc(value: Optional[datetime]) -> datetime:
    """Horodatage UTC avec fuseau ; une valeur naive est lue comme UTC."""
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _parent_model(media_type: MediaType) -> type:
    return MovieModel if media_type is MediaType.MOVIE else TVShowModel


class SQLModelRecordStore(IRecordStore):
    """
    Store SQLModel des fiches films et series.

    Implemente IRecordStore avec conversion bidirectionnelle
    entre les entites Movie/TVShow (domaine) et les modeles (persistance).
    """

    def __init__(self, engine: Engine) -> None:
        """
        Initialise le store avec l'engine de la base.

        Args :
            engine : Engine SQLAlchemy partage (une session par operation)
        """
        self._engine = engine

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    async def get(self, media_type: MediaType, tmdb_id: int) -> Optional[MediaRecord]:
        return await self._run(self._get_sync, media_type, tmdb_id)

    def _get_sync(self, media_type: MediaType, tmdb_id: int) -> Optional[MediaRecord]:
        model_cls = _parent_model(media_type)
        with Session(self._engine) as session:
            model = session.exec(
                select(model_cls).where(model_cls.tmdb_id == tmdb_id)
            ).first()
            if model is None:
                return None

            relations = self._load_relations(session, media_type, model.id)
            if media_type is MediaType.MOVIE:
                return self._movie_to_entity(model, relations)
            relations["created_by"] = self._load_creators(session, model.id)
            return self._tv_to_entity(model, relations)

    def _load_relations(
        self, session: Session, media_type: MediaType, record_id: int
    ) -> dict[str, Any]:
        key = media_type.value

        genres = session.exec(
            select(GenreModel)
            .join(MediaGenreModel, MediaGenreModel.genre_id == GenreModel.id)
            .where(MediaGenreModel.media_type == key, MediaGenreModel.record_id == record_id)
            .order_by(GenreModel.name)
        ).all()

        cast_rows = session.exec(
            select(MediaCastModel, PersonModel)
            .join(PersonModel, PersonModel.id == MediaCastModel.person_id)
            .where(MediaCastModel.media_type == key, MediaCastModel.record_id == record_id)
            .order_by(MediaCastModel.cast_order)
        ).all()

        crew_rows = session.exec(
            select(MediaCrewModel, PersonModel)
            .join(PersonModel, PersonModel.id == MediaCrewModel.person_id)
            .where(MediaCrewModel.media_type == key, MediaCrewModel.record_id == record_id)
            .order_by(MediaCrewModel.id)
        ).all()

        def _rows(model_cls):
            return session.exec(
                select(model_cls)
                .where(model_cls.media_type == key, model_cls.record_id == record_id)
                .order_by(model_cls.id)
            ).all()

        return {
            "genres": tuple(Genre(id=g.id, name=g.name) for g in genres),
            "cast": tuple(
                CastCredit(person=self._person(p), character=c.character, order=c.cast_order)
                for c, p in cast_rows
            ),
            "crew": tuple(
                CrewCredit(person=self._person(p), job=c.job, department=c.department)
                for c, p in crew_rows
            ),
            "videos": tuple(
                Video(
                    key=v.key,
                    name=v.name,
                    site=v.site,
                    type=v.video_type,
                    official=v.official,
                    published_at=v.published_at,
                )
                for v in _rows(MediaVideoModel)
            ),
            "production_companies": tuple(
                ProductionCompany(
                    tmdb_id=c.company_tmdb_id,
                    name=c.name,
                    logo_path=c.logo_path,
                    origin_country=c.origin_country,
                )
                for c in _rows(MediaCompanyModel)
            ),
            "production_countries": tuple(
                ProductionCountry(iso_3166_1=c.iso_3166_1, name=c.name)
                for c in _rows(MediaCountryModel)
            ),
            "spoken_languages": tuple(
                SpokenLanguage(iso_639_1=lang.iso_639_1, name=lang.name, english_name=lang.english_name)
                for lang in _rows(MediaLanguageModel)
            ),
        }

    def _load_creators(self, session: Session, record_id: int) -> tuple[Person, ...]:
        people = session.exec(
            select(PersonModel)
            .join(TVCreatorModel, TVCreatorModel.person_id == PersonModel.id)
            .where(TVCreatorModel.tv_show_id == record_id)
            .order_by(PersonModel.name)
        ).all()
        return tuple(self._person(p) for p in people)

    @staticmethod
    def _person(model: PersonModel) -> Person:
        return Person(
            tmdb_id=model.tmdb_id,
            name=model.name,
            profile_path=model.profile_path,
            known_for_department=model.known_for_department,
        )

    @staticmethod
    def _movie_to_entity(model: MovieModel, relations: dict[str, Any]) -> Movie:
        return Movie(
            id=model.id,
            tmdb_id=model.tmdb_id,
            title=model.title,
            original_title=model.original_title,
            overview=model.overview,
            tagline=model.tagline,
            poster_path=model.poster_path,
            backdrop_path=model.backdrop_path,
            release_date=model.release_date,
            runtime=model.runtime,
            budget=model.budget,
            revenue=model.revenue,
            imdb_id=model.imdb_id,
            popularity=model.popularity,
            vote_average=model.vote_average,
            vote_count=model.vote_count,
            status=model.status,
            original_language=model.original_language,
            homepage=model.homepage,
            cached_at=_as_utc(model.cached_at),
            **relations,
        )

    @staticmethod
    def _tv_to_entity(model: TVShowModel, relations: dict[str, Any]) -> TVShow:
        return TVShow(
            id=model.id,
            tmdb_id=model.tmdb_id,
            name=model.name,
            original_name=model.original_name,
            overview=model.overview,
            tagline=model.tagline,
            poster_path=model.poster_path,
            backdrop_path=model.backdrop_path,
            first_air_date=model.first_air_date,
            last_air_date=model.last_air_date,
            number_of_seasons=model.number_of_seasons,
            number_of_episodes=model.number_of_episodes,
            episode_run_time=tuple(model.episode_run_time),
            in_production=model.in_production,
            type=model.show_type,
            networks=tuple(Network(**n) for n in model.networks),
            seasons=tuple(_season_from_json(s) for s in model.seasons),
            popularity=model.popularity,
            vote_average=model.vote_average,
            vote_count=model.vote_count,
            status=model.status,
            original_language=model.original_language,
            homepage=model.homepage,
            cached_at=_as_utc(model.cached_at),
            **relations,
        )

    # ------------------------------------------------------------------
    # Ecriture de la ligne parente
    # ------------------------------------------------------------------

    async def upsert_record(self, record: MediaRecord) -> int:
        return await self._run(self._upsert_record_sync, record)

    def _upsert_record_sync(self, record: MediaRecord) -> int:
        model_cls = _parent_model(record.media_type)
        values = self._parent_values(record)
        for attempt in range(2):
            with Session(self._engine) as session:
                model = session.exec(
                    select(model_cls).where(model_cls.tmdb_id == record.tmdb_id)
                ).first()
                if model is None:
                    model = model_cls(tmdb_id=record.tmdb_id, **values)
                else:
                    for field, value in values.items():
                        setattr(model, field, value)
                    model.updated_at = datetime.now(timezone.utc)
                session.add(model)
                try:
                    session.commit()
                except IntegrityError:
                    # Insertion concurrente du meme tmdb_id : relire et mettre a jour
                    session.rollback()
                    if attempt:
                        raise
                    logger.debug(
                        f"Conflit d'insertion {record.media_type.value} {record.tmdb_id}, nouvel essai"
                    )
                    continue
                session.refresh(model)
                return model.id
        raise RuntimeError("unreachable")

    @staticmethod
    def _parent_values(record: MediaRecord) -> dict[str, Any]:
        values: dict[str, Any] = {
            "overview": record.overview,
            "tagline": record.tagline,
            "poster_path": record.poster_path,
            "backdrop_path": record.backdrop_path,
            "popularity": record.popularity,
            "vote_average": record.vote_average,
            "vote_count": record.vote_count,
            "status": record.status,
            "original_language": record.original_language,
            "homepage": record.homepage,
            "cached_at": _as_utc(record.cached_at),
        }
        if isinstance(record, Movie):
            values.update(
                title=record.title,
                original_title=record.original_title,
                release_date=record.release_date,
                runtime=record.runtime,
                budget=record.budget,
                revenue=record.revenue,
                imdb_id=record.imdb_id,
            )
        elif isinstance(record, TVShow):
            values.update(
                name=record.name,
                original_name=record.original_name,
                first_air_date=record.first_air_date,
                last_air_date=record.last_air_date,
                number_of_seasons=record.number_of_seasons,
                number_of_episodes=record.number_of_episodes,
                in_production=record.in_production,
                show_type=record.type,
                episode_run_time_json=json.dumps(list(record.episode_run_time)),
                networks_json=json.dumps([_network_to_json(n) for n in record.networks]),
                seasons_json=json.dumps([_season_to_json(s) for s in record.seasons]),
            )
        return values

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    async def clear_relations(self, media_type: MediaType, record_id: int) -> None:
        await self._run(self._clear_relations_sync, media_type, record_id)

    def _clear_relations_sync(self, media_type: MediaType, record_id: int) -> None:
        key = media_type.value
        with Session(self._engine) as session:
            for model_cls in _RELATION_MODELS:
                session.exec(
                    delete(model_cls).where(
                        model_cls.media_type == key, model_cls.record_id == record_id
                    )
                )
            if media_type is MediaType.TV:
                session.exec(delete(TVCreatorModel).where(TVCreatorModel.tv_show_id == record_id))
            session.commit()

    def _insert_rows(self, session: Session, rows: list[Any], label: str) -> int:
        """Insere les lignes une a une ; un doublon est ignore sans interrompre le lot."""
        inserted = 0
        for row in rows:
            session.add(row)
            try:
                session.commit()
                inserted += 1
            except IntegrityError:
                session.rollback()
                logger.debug(f"{label} deja present, ignore: {row!r}")
        return inserted

    def _upsert_person(self, session: Session, person: Person) -> int:
        for attempt in range(2):
            model = session.exec(
                select(PersonModel).where(PersonModel.tmdb_id == person.tmdb_id)
            ).first()
            if model is None:
                model = PersonModel(tmdb_id=person.tmdb_id, name=person.name)
            model.name = person.name
            model.profile_path = person.profile_path
            model.known_for_department = person.known_for_department
            session.add(model)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                if attempt:
                    raise
                continue
            session.refresh(model)
            return model.id
        raise RuntimeError("unreachable")

    def _upsert_genre(self, session: Session, genre: Genre) -> None:
        model = session.get(GenreModel, genre.id)
        if model is None:
            model = GenreModel(id=genre.id, name=genre.name)
        else:
            model.name = genre.name
        session.add(model)
        try:
            session.commit()
        except IntegrityError:
            # Insere entre-temps par une autre fiche
            session.rollback()

    async def link_genres(
        self, media_type: MediaType, record_id: int, genres: tuple[Genre, ...]
    ) -> int:
        return await self._run(self._link_genres_sync, media_type, record_id, genres)

    def _link_genres_sync(
        self, media_type: MediaType, record_id: int, genres: tuple[Genre, ...]
    ) -> int:
        with Session(self._engine) as session:
            for genre in genres:
                self._upsert_genre(session, genre)
            rows = [
                MediaGenreModel(media_type=media_type.value, record_id=record_id, genre_id=g.id)
                for g in genres
            ]
            return self._insert_rows(session, rows, "Lien genre")

    async def add_cast(
        self, media_type: MediaType, record_id: int, cast: tuple[CastCredit, ...]
    ) -> int:
        return await self._run(self._add_cast_sync, media_type, record_id, cast)

    def _add_cast_sync(
        self, media_type: MediaType, record_id: int, cast: tuple[CastCredit, ...]
    ) -> int:
        inserted = 0
        with Session(self._engine) as session:
            for credit in cast:
                try:
                    person_id = self._upsert_person(session, credit.person)
                except Exception as e:
                    session.rollback()
                    logger.warning(f"Personne {credit.person.tmdb_id} ignoree (cast): {e}")
                    continue
                inserted += self._insert_rows(
                    session,
                    [
                        MediaCastModel(
                            media_type=media_type.value,
                            record_id=record_id,
                            person_id=person_id,
                            character=credit.character,
                            cast_order=credit.order,
                        )
                    ],
                    "Role",
                )
        return inserted

    async def add_crew(
        self, media_type: MediaType, record_id: int, crew: tuple[CrewCredit, ...]
    ) -> int:
        return await self._run(self._add_crew_sync, media_type, record_id, crew)

    def _add_crew_sync(
        self, media_type: MediaType, record_id: int, crew: tuple[CrewCredit, ...]
    ) -> int:
        inserted = 0
        with Session(self._engine) as session:
            for credit in crew:
                try:
                    person_id = self._upsert_person(session, credit.person)
                except Exception as e:
                    session.rollback()
                    logger.warning(f"Personne {credit.person.tmdb_id} ignoree (crew): {e}")
                    continue
                inserted += self._insert_rows(
                    session,
                    [
                        MediaCrewModel(
                            media_type=media_type.value,
                            record_id=record_id,
                            person_id=person_id,
                            job=credit.job,
                            department=credit.department,
                        )
                    ],
                    "Poste",
                )
        return inserted

    async def add_creators(self, record_id: int, creators: tuple[Person, ...]) -> int:
        return await self._run(self._add_creators_sync, record_id, creators)

    def _add_creators_sync(self, record_id: int, creators: tuple[Person, ...]) -> int:
        inserted = 0
        with Session(self._engine) as session:
            for person in creators:
                try:
                    person_id = self._upsert_person(session, person)
                except Exception as e:
                    session.rollback()
                    logger.warning(f"Createur {person.tmdb_id} ignore: {e}")
                    continue
                inserted += self._insert_rows(
                    session,
                    [TVCreatorModel(tv_show_id=record_id, person_id=person_id)],
                    "Createur",
                )
        return inserted

    async def add_videos(
        self, media_type: MediaType, record_id: int, videos: tuple[Video, ...]
    ) -> int:
        return await self._run(self._add_videos_sync, media_type, record_id, videos)

    def _add_videos_sync(
        self, media_type: MediaType, record_id: int, videos: tuple[Video, ...]
    ) -> int:
        rows = [
            MediaVideoModel(
                media_type=media_type.value,
                record_id=record_id,
                key=v.key,
                name=v.name,
                site=v.site,
                video_type=v.type,
                official=v.official,
                published_at=v.published_at,
            )
            for v in videos
        ]
        with Session(self._engine) as session:
            return self._insert_rows(session, rows, "Video")

    async def add_production(
        self,
        media_type: MediaType,
        record_id: int,
        companies: tuple[ProductionCompany, ...],
        countries: tuple[ProductionCountry, ...],
        languages: tuple[SpokenLanguage, ...],
    ) -> int:
        return await self._run(
            self._add_production_sync, media_type, record_id, companies, countries, languages
        )

    def _add_production_sync(
        self,
        media_type: MediaType,
        record_id: int,
        companies: tuple[ProductionCompany, ...],
        countries: tuple[ProductionCountry, ...],
        languages: tuple[SpokenLanguage, ...],
    ) -> int:
        key = media_type.value
        rows: list[Any] = [
            MediaCompanyModel(
                media_type=key,
                record_id=record_id,
                company_tmdb_id=c.tmdb_id,
                name=c.name,
                logo_path=c.logo_path,
                origin_country=c.origin_country,
            )
            for c in companies
        ]
        rows += [
            MediaCountryModel(media_type=key, record_id=record_id, iso_3166_1=c.iso_3166_1, name=c.name)
            for c in countries
        ]
        rows += [
            MediaLanguageModel(
                media_type=key,
                record_id=record_id,
                iso_639_1=lang.iso_639_1,
                name=lang.name,
                english_name=lang.english_name,
            )
            for lang in languages
        ]
        with Session(self._engine) as session:
            return self._insert_rows(session, rows, "Metadonnee de production")

    # ------------------------------------------------------------------
    # Genres partages
    # ------------------------------------------------------------------

    async def upsert_genres(self, genres: list[Genre]) -> None:
        await self._run(self._upsert_genres_sync, genres)

    def _upsert_genres_sync(self, genres: list[Genre]) -> None:
        with Session(self._engine) as session:
            for genre in genres:
                self._upsert_genre(session, genre)

    async def list_genres(self) -> list[Genre]:
        return await self._run(self._list_genres_sync)

    def _list_genres_sync(self) -> list[Genre]:
        with Session(self._engine) as session:
            models = session.exec(select(GenreModel).order_by(GenreModel.name)).all()
            return [Genre(id=m.id, name=m.name) for m in models]

    # ------------------------------------------------------------------
    # Fiches minimales issues des recherches
    # ------------------------------------------------------------------

    async def insert_movie_summaries(self, items: list[ContentSummary]) -> int:
        return await self._run(self._insert_movie_summaries_sync, items)

    def _insert_movie_summaries_sync(self, items: list[ContentSummary]) -> int:
        inserted = 0
        with Session(self._engine) as session:
            known_genres = set(session.exec(select(GenreModel.id)).all())
            for item in items:
                exists = session.exec(
                    select(MovieModel.id).where(MovieModel.tmdb_id == item.tmdb_id)
                ).first()
                if exists is not None:
                    continue
                model = MovieModel(
                    tmdb_id=item.tmdb_id,
                    title=item.title,
                    overview=item.overview,
                    poster_path=item.poster_path,
                    backdrop_path=item.backdrop_path,
                    release_date=_parse_date(item.date),
                    vote_average=item.vote_average,
                    vote_count=item.vote_count,
                    popularity=item.popularity,
                    cached_at=SUMMARY_CACHED_AT,
                )
                if not self._insert_rows(session, [model], "Film"):
                    continue
                inserted += 1
                # Genres non synchronises ignores (cle etrangere)
                self._insert_rows(
                    session,
                    [
                        MediaGenreModel(
                            media_type=MediaType.MOVIE.value, record_id=model.id, genre_id=genre_id
                        )
                        for genre_id in item.genre_ids
                        if genre_id in known_genres
                    ],
                    "Lien genre",
                )
        return inserted


def _network_to_json(network: Network) -> dict[str, Any]:
    return {
        "tmdb_id": network.tmdb_id,
        "name": network.name,
        "logo_path": network.logo_path,
        "origin_country": network.origin_country,
    }


def _season_to_json(season: SeasonSummary) -> dict[str, Any]:
    return {
        "tmdb_id": season.tmdb_id,
        "season_number": season.season_number,
        "name": season.name,
        "overview": season.overview,
        "air_date": season.air_date.isoformat() if season.air_date else None,
        "episode_count": season.episode_count,
        "poster_path": season.poster_path,
    }


def _season_from_json(data: dict[str, Any]) -> SeasonSummary:
    air_date = data.get("air_date")
    return SeasonSummary(
        tmdb_id=data["tmdb_id"],
        season_number=data["season_number"],
        name=data.get("name") or "",
        overview=data.get("overview"),
        air_date=datetime.fromisoformat(air_date).date() if air_date else None,
        episode_count=data.get("episode_count"),
        poster_path=data.get("poster_path"),
    )
