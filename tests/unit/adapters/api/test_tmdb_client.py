"""
Tests for TMDBClient - TMDB API client implementation.

Uses respx to mock httpx calls and verifies:
- Detail requests bundle credits and videos
- Failures are classified (not found, client error, timeout, network, 5xx)
- Missing API key fails before any request
- Season and related pages are cache-first
"""

from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from cinifob.adapters.api.cache import APICache
from cinifob.adapters.api.tmdb_client import TMDBClient
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
from tests.fixtures.tmdb_responses import (
    TMDB_MOVIE_DETAILS_RESPONSE,
    TMDB_MOVIE_GENRES_RESPONSE,
    TMDB_MOVIE_SEARCH_RESPONSE,
    TMDB_NOT_FOUND_RESPONSE,
    TMDB_POPULAR_TV_RESPONSE,
    TMDB_SEASON_RESPONSE,
    TMDB_SIMILAR_RESPONSE,
)

BASE = "https://api.themoviedb.org/3"


@pytest.fixture
def mock_cache() -> AsyncMock:
    """Mock APICache for testing."""
    cache = AsyncMock(spec=APICache)
    cache.get.return_value = None  # Cache miss by default
    return cache


@pytest.fixture
def tmdb_client(mock_cache: AsyncMock, recording_sleep) -> TMDBClient:
    """TMDBClient instance with mocked cache and instant backoff."""
    return TMDBClient(api_key="test_api_key", cache=mock_cache, sleep=recording_sleep)


class TestTMDBClientInterface:
    """Test TMDBClient implements IMetadataClient correctly."""

    def test_implements_interface(self, tmdb_client: TMDBClient):
        assert isinstance(tmdb_client, IMetadataClient)

    def test_source_property_returns_tmdb(self, tmdb_client: TMDBClient):
        assert tmdb_client.source == "tmdb"


class TestFetchDetail:
    """Tests for TMDBClient.fetch_detail()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_raw_payload_with_appended_resources(self, tmdb_client: TMDBClient):
        route = respx.get(f"{BASE}/movie/27205").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        payload = await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

        assert payload["title"] == "Inception"
        request = route.calls.last.request
        assert request.url.params["append_to_response"] == "videos,credits"
        assert request.url.params["api_key"] == "test_api_key"

    @pytest.mark.asyncio
    @respx.mock
    async def test_tv_uses_tv_path(self, tmdb_client: TMDBClient):
        route = respx.get(f"{BASE}/tv/1396").mock(
            return_value=httpx.Response(200, json={"id": 1396, "name": "Breaking Bad"})
        )

        payload = await tmdb_client.fetch_detail(MediaType.TV, 1396)

        assert payload["name"] == "Breaking Bad"
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_v4_token_sent_as_bearer(self, mock_cache: AsyncMock):
        token = "eyJ" + "a" * 200
        client = TMDBClient(api_key=token, cache=mock_cache)
        route = respx.get(f"{BASE}/movie/27205").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        await client.fetch_detail(MediaType.MOVIE, 27205)

        request = route.calls.last.request
        assert request.headers["Authorization"] == f"Bearer {token}"
        assert "api_key" not in request.url.params
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_language_is_forwarded(self, mock_cache: AsyncMock):
        client = TMDBClient(api_key="k", cache=mock_cache, language="fr-FR")
        route = respx.get(f"{BASE}/movie/27205").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        await client.fetch_detail(MediaType.MOVIE, 27205)

        assert route.calls.last.request.url.params["language"] == "fr-FR"
        await client.close()


class TestErrorClassification:
    """Failures are mapped to the domain error taxonomy."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_404_raises_not_found_without_retry(self, tmdb_client: TMDBClient, recording_sleep):
        route = respx.get(f"{BASE}/movie/999999999").mock(
            return_value=httpx.Response(404, json=TMDB_NOT_FOUND_RESPONSE)
        )

        with pytest.raises(NotFoundError):
            await tmdb_client.fetch_detail(MediaType.MOVIE, 999999999)

        assert route.call_count == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_false_payload_is_not_found(self, tmdb_client: TMDBClient):
        respx.get(f"{BASE}/movie/1").mock(
            return_value=httpx.Response(200, json=TMDB_NOT_FOUND_RESPONSE)
        )

        with pytest.raises(NotFoundError):
            await tmdb_client.fetch_detail(MediaType.MOVIE, 1)

    @pytest.mark.asyncio
    @respx.mock
    async def test_401_raises_client_request_error(self, tmdb_client: TMDBClient):
        route = respx.get(f"{BASE}/movie/27205").mock(return_value=httpx.Response(401))

        with pytest.raises(ClientRequestError) as exc_info:
            await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

        assert exc_info.value.status_code == 401
        assert isinstance(exc_info.value, FetchError)
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_repeated_5xx_raises_fetch_error(self, tmdb_client: TMDBClient):
        route = respx.get(f"{BASE}/movie/27205").mock(return_value=httpx.Response(503))

        with pytest.raises(FetchError) as exc_info:
            await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

        assert type(exc_info.value) is FetchError
        assert exc_info.value.cause is not None
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_repeated_timeouts_raise_upstream_timeout(self, tmdb_client: TMDBClient):
        route = respx.get(f"{BASE}/movie/27205").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

        assert isinstance(exc_info.value.cause, httpx.TimeoutException)
        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_repeated_network_errors_raise_unavailable(self, tmdb_client: TMDBClient):
        route = respx.get(f"{BASE}/movie/27205").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(UpstreamUnavailableError):
            await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

        assert route.call_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_raises_fetch_error(self, tmdb_client: TMDBClient):
        respx.get(f"{BASE}/movie/27205").mock(
            return_value=httpx.Response(200, content=b"<html>oops</html>")
        )

        with pytest.raises(FetchError):
            await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

    @pytest.mark.asyncio
    @respx.mock
    async def test_decoding_error_raises_fetch_error_without_retry(self, tmdb_client: TMDBClient):
        route = respx.get(f"{BASE}/movie/27205").mock(side_effect=httpx.DecodingError("bad gzip"))

        with pytest.raises(FetchError) as exc_info:
            await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

        assert isinstance(exc_info.value.cause, httpx.DecodingError)
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_too_many_redirects_raises_fetch_error(self, tmdb_client: TMDBClient):
        respx.get(f"{BASE}/movie/27205").mock(side_effect=httpx.TooManyRedirects("loop"))

        with pytest.raises(FetchError):
            await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_api_key_raises_before_request(self, mock_cache: AsyncMock):
        client = TMDBClient(api_key=None, cache=mock_cache)
        route = respx.get(f"{BASE}/movie/27205").mock(return_value=httpx.Response(200, json={}))

        with pytest.raises(ConfigurationError):
            await client.fetch_detail(MediaType.MOVIE, 27205)

        assert route.call_count == 0


class TestCachedEndpoints:
    """Season and related pages are served cache-first."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_season_cache_hit_skips_api(self, tmdb_client: TMDBClient, mock_cache: AsyncMock):
        mock_cache.get.return_value = TMDB_SEASON_RESPONSE
        route = respx.get(f"{BASE}/tv/1396/season/1").mock(
            return_value=httpx.Response(200, json=TMDB_SEASON_RESPONSE)
        )

        payload = await tmdb_client.fetch_season(1396, 1)

        assert payload == TMDB_SEASON_RESPONSE
        assert route.call_count == 0
        mock_cache.get.assert_awaited_once_with("tmdb:season:1396:1")

    @pytest.mark.asyncio
    @respx.mock
    async def test_season_cache_miss_stores_result(self, tmdb_client: TMDBClient, mock_cache: AsyncMock):
        respx.get(f"{BASE}/tv/1396/season/1").mock(
            return_value=httpx.Response(200, json=TMDB_SEASON_RESPONSE)
        )

        await tmdb_client.fetch_season(1396, 1)

        mock_cache.set_list.assert_awaited_once_with("tmdb:season:1396:1", TMDB_SEASON_RESPONSE)

    @pytest.mark.asyncio
    @respx.mock
    async def test_related_passes_page_and_caches(self, tmdb_client: TMDBClient, mock_cache: AsyncMock):
        route = respx.get(f"{BASE}/movie/27205/similar").mock(
            return_value=httpx.Response(200, json=TMDB_SIMILAR_RESPONSE)
        )

        payload = await tmdb_client.fetch_related(MediaType.MOVIE, 27205, "similar", page=2)

        assert payload["total_results"] == 60
        assert route.calls.last.request.url.params["page"] == "2"
        mock_cache.set_list.assert_awaited_once_with(
            "tmdb:related:movie:27205:similar:2", TMDB_SIMILAR_RESPONSE
        )

    @pytest.mark.asyncio
    @respx.mock
    async def test_catalog_list_path_and_cache_key(self, tmdb_client: TMDBClient, mock_cache: AsyncMock):
        route = respx.get(f"{BASE}/trending/tv/week").mock(
            return_value=httpx.Response(200, json=TMDB_POPULAR_TV_RESPONSE)
        )

        payload = await tmdb_client.fetch_catalog(MediaType.TV, "trending", page=3)

        assert payload["total_pages"] == 800
        assert route.calls.last.request.url.params["page"] == "3"
        mock_cache.set_list.assert_awaited_once_with(
            "tmdb:catalog:tv:trending:3", TMDB_POPULAR_TV_RESPONSE
        )

    @pytest.mark.asyncio
    @respx.mock
    async def test_catalog_cache_hit_skips_api(self, tmdb_client: TMDBClient, mock_cache: AsyncMock):
        mock_cache.get.return_value = TMDB_POPULAR_TV_RESPONSE
        route = respx.get(f"{BASE}/tv/popular").mock(return_value=httpx.Response(500))

        payload = await tmdb_client.fetch_catalog(MediaType.TV, "popular")

        assert payload == TMDB_POPULAR_TV_RESPONSE
        assert route.call_count == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_sends_query(self, tmdb_client: TMDBClient, mock_cache: AsyncMock):
        route = respx.get(f"{BASE}/search/movie").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_SEARCH_RESPONSE)
        )

        await tmdb_client.search(MediaType.MOVIE, " The Matrix ", page=1)

        params = route.calls.last.request.url.params
        assert params["query"] == "The Matrix"
        assert params["page"] == "1"
        mock_cache.get.assert_awaited_once_with("tmdb:search:movie:the matrix:1")

    @pytest.mark.asyncio
    @respx.mock
    async def test_genres_returns_list(self, tmdb_client: TMDBClient):
        respx.get(f"{BASE}/genre/movie/list").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_GENRES_RESPONSE)
        )

        genres = await tmdb_client.fetch_genres(MediaType.MOVIE)

        assert [g["name"] for g in genres] == ["Action", "Drama", "Science Fiction"]


class TestClose:
    @pytest.mark.asyncio
    @respx.mock
    async def test_close_releases_client(self, tmdb_client: TMDBClient):
        respx.get(f"{BASE}/movie/27205").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )
        await tmdb_client.fetch_detail(MediaType.MOVIE, 27205)

        await tmdb_client.close()

        assert tmdb_client._client is None
