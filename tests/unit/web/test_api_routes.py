"""
Tests des routes de l'API JSON.

L'application est construite avec un container dont la configuration
pointe vers une base temporaire et dont le client TMDB est un mock :
resolveurs, store SQLite et persister d'arriere-plan sont reels.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from sqlmodel import Session, func, select

from cinifob.config import Settings
from cinifob.container import Container
from cinifob.core.entities.media import MediaType
from cinifob.core.exceptions import (
    FetchError,
    NotFoundError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from cinifob.infrastructure.persistence.models import MediaCastModel, MovieModel
from cinifob.services.persister import BackgroundPersister
from cinifob.web.app import create_app
from tests.fixtures.tmdb_responses import (
    TMDB_MOVIE_DETAILS_RESPONSE,
    TMDB_MOVIE_GENRES_RESPONSE,
    TMDB_MOVIE_SEARCH_RESPONSE,
    TMDB_POPULAR_TV_RESPONSE,
    TMDB_RECOMMENDATIONS_RESPONSE,
    TMDB_SEASON_RESPONSE,
    TMDB_SIMILAR_RESPONSE,
    TMDB_TV_DETAILS_RESPONSE,
    TMDB_TV_GENRES_RESPONSE,
    TMDB_TV_SEARCH_RESPONSE,
)


@pytest.fixture
def container(test_settings: Settings, mock_client: AsyncMock) -> Container:
    container = Container()
    container.config.override(test_settings)
    container.tmdb_client.override(providers.Object(mock_client))
    return container


@pytest.fixture
def client(container: Container):
    app = create_app(container, configure_logs=False)
    with TestClient(app) as test_client:
        yield test_client


def _drain(client: TestClient, container: Container) -> None:
    """Attend la fin des persistances lancees par les requetes precedentes."""
    client.portal.call(container.persister().shutdown)


def _seed_old_movie(client: TestClient, container: Container, age: timedelta) -> None:
    old = datetime.now(timezone.utc) - age
    persister = BackgroundPersister(container.record_store(), clock=lambda: old)
    client.portal.call(persister.persist, TMDB_MOVIE_DETAILS_RESPONSE, 27205, MediaType.MOVIE)


class TestMovieDetail:
    """GET /api/movies/{movie_id}."""

    def test_first_request_fetches_and_persists(self, container, mock_client) -> None:
        mock_client.fetch_detail.return_value = TMDB_MOVIE_DETAILS_RESPONSE
        app = create_app(container, configure_logs=False)

        with TestClient(app) as client:
            response = client.get("/api/movies/27205")

        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is False
        assert "stale" not in body
        assert body["movie"]["tmdbId"] == 27205
        assert body["movie"]["title"] == "Inception"
        assert body["movie"]["budget"] == "160000000"
        assert body["movie"]["credits"]["cast"][0]["name"] == "Leonardo DiCaprio"
        assert body["movie"]["productionCountries"][0]["iso31661"] == "GB"
        mock_client.fetch_detail.assert_awaited_once_with(MediaType.MOVIE, 27205)

        # La persistance s'est terminee a l'arret de l'application
        with Session(container.engine()) as session:
            assert session.exec(select(func.count()).select_from(MovieModel)).one() == 1
            assert session.exec(select(func.count()).select_from(MediaCastModel)).one() == 3

    def test_second_request_is_served_from_cache(self, client, container, mock_client) -> None:
        mock_client.fetch_detail.return_value = TMDB_MOVIE_DETAILS_RESPONSE
        client.get("/api/movies/27205")
        _drain(client, container)

        response = client.get("/api/movies/27205")

        body = response.json()
        assert body["cached"] is True
        assert body["movie"]["id"] == 1
        assert body["movie"]["cachedAt"].endswith("+00:00")
        assert [g["name"] for g in body["movie"]["genres"]] == [
            "Action",
            "Adventure",
            "Science Fiction",
        ]
        assert mock_client.fetch_detail.await_count == 1

    def test_large_budget_is_a_string(self, client, mock_client) -> None:
        mock_client.fetch_detail.return_value = {
            **TMDB_MOVIE_DETAILS_RESPONSE,
            "budget": 200000000,
            "revenue": 2799439100,
        }

        body = client.get("/api/movies/27205").json()

        assert body["movie"]["budget"] == "200000000"
        assert body["movie"]["revenue"] == "2799439100"

    def test_unknown_movie_returns_404(self, client, mock_client) -> None:
        mock_client.fetch_detail.side_effect = NotFoundError("gone")

        response = client.get("/api/movies/999999999")

        assert response.status_code == 404
        assert response.json() == {"error": "Movie not found"}

    @pytest.mark.parametrize("raw_id", ["abc", "0", "-3"])
    def test_invalid_id_returns_400(self, client, mock_client, raw_id) -> None:
        response = client.get(f"/api/movies/{raw_id}")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid movie ID"}
        mock_client.fetch_detail.assert_not_awaited()

    @pytest.mark.parametrize(
        ("error", "status", "message"),
        [
            (UpstreamUnavailableError("refused"), 503, "Network error - please try again"),
            (UpstreamTimeoutError("slow"), 504, "Request timeout - TMDb API is slow"),
            (FetchError("503 x3"), 500, "Failed to fetch movie details"),
            (RuntimeError("bug"), 500, "Failed to fetch movie details"),
        ],
    )
    def test_upstream_errors(self, client, mock_client, error, status, message) -> None:
        mock_client.fetch_detail.side_effect = error

        response = client.get("/api/movies/27205")

        assert response.status_code == status
        assert response.json() == {"error": message}

    def test_missing_api_key_returns_503(self, tmp_path) -> None:
        settings = Settings(
            _env_file=None,
            database_url=f"sqlite:///{tmp_path / 'nokey.db'}",
            tmdb_api_key=None,
            api_cache_dir=tmp_path / "cache",
        )
        container = Container()
        container.config.override(settings)

        with TestClient(create_app(container, configure_logs=False)) as client:
            response = client.get("/api/movies/27205")

        assert response.status_code == 503
        assert response.json() == {"error": "TMDb API key not configured"}


class TestStaleFallback:
    def test_network_error_serves_stale_record(self, client, container, mock_client) -> None:
        _seed_old_movie(client, container, timedelta(days=2))
        mock_client.fetch_detail.side_effect = UpstreamUnavailableError("refused")

        response = client.get("/api/movies/27205")

        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is True
        assert body["stale"] is True
        assert body["error"] is True
        assert body["movie"]["title"] == "Inception"

    def test_not_found_serves_stale_record_without_error_flag(
        self, client, container, mock_client
    ) -> None:
        _seed_old_movie(client, container, timedelta(days=2))
        mock_client.fetch_detail.side_effect = NotFoundError("gone")

        body = client.get("/api/movies/27205").json()

        assert body["stale"] is True
        assert "error" not in body


class TestTVRoutes:
    def test_tv_detail(self, client, mock_client) -> None:
        mock_client.fetch_detail.return_value = TMDB_TV_DETAILS_RESPONSE

        response = client.get("/api/tv/1396")

        assert response.status_code == 200
        show = response.json()["tvShow"]
        assert show["name"] == "Breaking Bad"
        assert show["createdBy"][0]["name"] == "Vince Gilligan"
        assert show["episodeRunTime"] == [45, 47]
        mock_client.fetch_detail.assert_awaited_once_with(MediaType.TV, 1396)

    def test_tv_invalid_id(self, client) -> None:
        response = client.get("/api/tv/abc")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid TV show ID"}

    def test_tv_not_found(self, client, mock_client) -> None:
        mock_client.fetch_detail.side_effect = NotFoundError("gone")

        assert client.get("/api/tv/1").json() == {"error": "TV show not found"}

    def test_season_detail(self, client, mock_client) -> None:
        mock_client.fetch_season.return_value = TMDB_SEASON_RESPONSE

        response = client.get("/api/tv/1396/season/1")

        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is False
        assert body["season"]["seasonNumber"] == 1
        assert [e["name"] for e in body["episodes"]] == ["Pilot", "Cat's in the Bag..."]
        assert body["episodes"][1]["airDate"] is None

    def test_season_invalid_number(self, client) -> None:
        response = client.get("/api/tv/1396/season/x")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid TV show or season ID"}


class TestRelatedContent:
    def test_related_both(self, client, mock_client) -> None:
        mock_client.fetch_related.side_effect = lambda media_type, tmdb_id, relation, page: (
            TMDB_SIMILAR_RESPONSE if relation == "similar" else TMDB_RECOMMENDATIONS_RESPONSE
        )

        response = client.get("/api/content/movie/27205/related")

        assert response.status_code == 200
        body = response.json()
        assert [r["id"] for r in body["results"]] == [155, 157336, 603]
        assert body["page"] == 1
        assert body["totalPages"] == 500
        assert body["results"][0]["relationType"] == "recommendation"

    def test_related_query_parameters(self, client, mock_client) -> None:
        mock_client.fetch_related.return_value = TMDB_SIMILAR_RESPONSE

        response = client.get("/api/content/tv/1396/related?relationType=similar&page=2")

        assert response.status_code == 200
        mock_client.fetch_related.assert_awaited_once_with(MediaType.TV, 1396, "similar", 2)

    @pytest.mark.parametrize("raw_page", ["abc", "0", "501"])
    def test_related_invalid_page(self, client, mock_client, raw_page) -> None:
        response = client.get(f"/api/content/movie/27205/related?page={raw_page}")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid page number"}
        mock_client.fetch_related.assert_not_awaited()

    def test_related_invalid_type(self, client) -> None:
        response = client.get("/api/content/person/1/related")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid content type"}


class TestMovieSearch:
    """GET /api/movies/search."""

    def test_search_returns_movies_and_stores_top_results(
        self, client, container, mock_client
    ) -> None:
        mock_client.search.return_value = TMDB_MOVIE_SEARCH_RESPONSE

        response = client.get("/api/movies/search?query=Matrix&page=1")

        assert response.status_code == 200
        body = response.json()
        assert [m["tmdbId"] for m in body["movies"]] == [603, 604]
        assert body["movies"][0]["releaseDate"] == "1999-03-30"
        assert body["movies"][0]["genres"] == [28, 878]
        assert body["totalResults"] == 2
        mock_client.search.assert_awaited_once_with(MediaType.MOVIE, "Matrix", 1)

        _drain(client, container)
        with Session(container.engine()) as session:
            assert session.exec(select(func.count()).select_from(MovieModel)).one() == 2

    def test_search_is_not_taken_for_a_movie_id(self, client, mock_client) -> None:
        mock_client.fetch_catalog.return_value = TMDB_SIMILAR_RESPONSE

        response = client.get("/api/movies/search?type=upcoming")

        assert response.status_code == 200
        mock_client.fetch_catalog.assert_awaited_once_with(MediaType.MOVIE, "upcoming", 1)
        mock_client.fetch_detail.assert_not_awaited()

    def test_search_invalid_page(self, client) -> None:
        response = client.get("/api/movies/search?query=Matrix&page=abc")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid page number"}

    def test_search_upstream_failure(self, client, mock_client) -> None:
        mock_client.search.side_effect = FetchError("503 x3")

        response = client.get("/api/movies/search?query=Matrix")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to search movies"}


class TestBrowse:
    """GET /api/browse."""

    def test_browse_all_search(self, client, mock_client) -> None:
        mock_client.search.side_effect = lambda media_type, query, page: (
            TMDB_MOVIE_SEARCH_RESPONSE if media_type is MediaType.MOVIE else TMDB_TV_SEARCH_RESPONSE
        )

        response = client.get("/api/browse?query=Matrix")

        assert response.status_code == 200
        body = response.json()
        assert [(r["mediaType"], r["id"]) for r in body["results"]] == [
            ("tv", 60625),
            ("movie", 603),
            ("movie", 604),
        ]
        assert "relationType" not in body["results"][0]
        assert body["totalPages"] == 4
        assert body["totalResults"] == 72

    def test_browse_tv_list_with_genre(self, client, mock_client) -> None:
        mock_client.fetch_catalog.return_value = TMDB_POPULAR_TV_RESPONSE

        response = client.get("/api/browse?type=tv&sort=top_rated&genre=16&page=2")

        assert response.status_code == 200
        body = response.json()
        assert body["results"] == []
        assert body["page"] == 2
        assert body["totalPages"] == 500
        mock_client.fetch_catalog.assert_awaited_once_with(MediaType.TV, "top_rated", 2)

    def test_browse_invalid_type(self, client) -> None:
        response = client.get("/api/browse?type=person")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid content type"}

    def test_browse_network_error(self, client, mock_client) -> None:
        mock_client.fetch_catalog.side_effect = UpstreamUnavailableError("refused")

        response = client.get("/api/browse?type=movie")

        assert response.status_code == 503
        assert response.json() == {"error": "Network error - please try again"}


class TestGenreSync:
    def test_sync(self, client, mock_client) -> None:
        mock_client.fetch_genres.side_effect = lambda media_type: (
            TMDB_MOVIE_GENRES_RESPONSE if media_type is MediaType.MOVIE else TMDB_TV_GENRES_RESPONSE
        )["genres"]

        response = client.post("/api/genres/sync")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Genres synchronized successfully"
        assert body["count"] == 4


class TestHealth:
    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok", "tmdb": "enabled"}
