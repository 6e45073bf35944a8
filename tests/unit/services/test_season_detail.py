"""
Tests unitaires pour SeasonService.
"""

from unittest.mock import AsyncMock

import pytest

from cinifob.core.exceptions import FetchError, NotFoundError, ValidationError
from cinifob.services.season_detail import SeasonService
from tests.fixtures.tmdb_responses import TMDB_SEASON_RESPONSE


@pytest.fixture
def service(mock_client: AsyncMock) -> SeasonService:
    mock_client.fetch_season.return_value = TMDB_SEASON_RESPONSE
    return SeasonService(mock_client)


class TestGetSeason:
    @pytest.mark.asyncio
    async def test_returns_season_with_episodes(self, service, mock_client) -> None:
        result = await service.get_season("1396", "1")

        assert result.cached is False
        assert result.season.name == "Season 1"
        assert [e.episode_number for e in result.season.episodes] == [1, 2]
        mock_client.fetch_season.assert_awaited_once_with(1396, 1)

    @pytest.mark.asyncio
    async def test_season_zero_is_allowed(self, service, mock_client) -> None:
        await service.get_season(1396, 0)

        mock_client.fetch_season.assert_awaited_once_with(1396, 0)

    @pytest.mark.parametrize(("tv_id", "season"), [("abc", 1), (0, 1), (1396, -1), (1396, "x")])
    @pytest.mark.asyncio
    async def test_invalid_numbers(self, service, mock_client, tv_id, season) -> None:
        with pytest.raises(ValidationError, match="Invalid TV show or season ID"):
            await service.get_season(tv_id, season)

        mock_client.fetch_season.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_season(self, service, mock_client) -> None:
        mock_client.fetch_season.side_effect = NotFoundError("no season 99")

        with pytest.raises(NotFoundError):
            await service.get_season(1396, 99)

    @pytest.mark.asyncio
    async def test_invalid_payload(self, service, mock_client) -> None:
        mock_client.fetch_season.return_value = {"name": "sans numero"}

        with pytest.raises(FetchError):
            await service.get_season(1396, 1)
