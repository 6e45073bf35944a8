"""
Tests unitaires pour GenreSyncService.
"""

from unittest.mock import AsyncMock

import pytest

from cinifob.core.entities.media import Genre, MediaType
from cinifob.core.exceptions import ConfigurationError, FetchError
from cinifob.services.genre_sync import GenreSyncService
from tests.fixtures.tmdb_responses import (
    TMDB_MOVIE_GENRES_RESPONSE,
    TMDB_TV_GENRES_RESPONSE,
)


@pytest.fixture
def service(mock_client: AsyncMock, mock_store: AsyncMock) -> GenreSyncService:
    mock_client.fetch_genres.side_effect = lambda media_type: (
        TMDB_MOVIE_GENRES_RESPONSE if media_type is MediaType.MOVIE else TMDB_TV_GENRES_RESPONSE
    )["genres"]
    return GenreSyncService(mock_client, mock_store)


class TestGenreSync:
    @pytest.mark.asyncio
    async def test_merges_movie_and_tv_lists(self, service, mock_store) -> None:
        genres = await service.sync()

        assert [g.name for g in genres] == [
            "Action",
            "Action & Adventure",
            "Drama",
            "Science Fiction",
        ]
        upserted = mock_store.upsert_genres.await_args.args[0]
        assert len(upserted) == 4
        assert [g.id for g in upserted].count(18) == 1

    @pytest.mark.asyncio
    async def test_fetches_both_lists(self, service, mock_client) -> None:
        await service.sync()

        assert [c.args[0] for c in mock_client.fetch_genres.await_args_list] == [
            MediaType.MOVIE,
            MediaType.TV,
        ]

    @pytest.mark.asyncio
    async def test_missing_key_propagates(self, service, mock_client, mock_store) -> None:
        mock_client.fetch_genres.side_effect = ConfigurationError("TMDb API key not configured")

        with pytest.raises(ConfigurationError):
            await service.sync()

        mock_store.upsert_genres.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_genre_list(self, service, mock_client) -> None:
        mock_client.fetch_genres.side_effect = None
        mock_client.fetch_genres.return_value = [{"name": "sans id"}]

        with pytest.raises(FetchError):
            await service.sync()

    @pytest.mark.asyncio
    async def test_sync_against_real_store(self, mock_client, store) -> None:
        mock_client.fetch_genres.side_effect = lambda media_type: (
            TMDB_MOVIE_GENRES_RESPONSE if media_type is MediaType.MOVIE else TMDB_TV_GENRES_RESPONSE
        )["genres"]

        await GenreSyncService(mock_client, store).sync()

        assert Genre(id=10759, name="Action & Adventure") in await store.list_genres()
