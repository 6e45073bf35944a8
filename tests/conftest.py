"""
Fixtures pytest partagees pour les tests CiniFob.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec chemins temporaires
- Engine SQLite sur disque (tmp_path) et store SQLModel
- Mocks des ports (IRecordStore, IMetadataClient)
- Fausse fonction de pause pour le backoff (enregistre les delais)
"""

from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import Engine

from cinifob.config import Settings
from cinifob.core.ports.api_clients import IMetadataClient
from cinifob.core.ports.repositories import IRecordStore
from cinifob.infrastructure.persistence.database import create_db_engine, init_db
from cinifob.infrastructure.persistence.store import SQLModelRecordStore


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler la base, le cache API et
    les logs de chaque test.
    """
    return Settings(
        _env_file=None,  # Ignorer le fichier .env pour les tests
        database_url=f"sqlite:///{tmp_path / 'cinifob_test.db'}",
        tmdb_api_key="test_api_key",
        api_cache_dir=tmp_path / "cache",
        log_file=tmp_path / "logs" / "cinifob.log",
        log_level="DEBUG",
    )


@pytest.fixture
def engine(test_settings: Settings) -> Iterator[Engine]:
    """Engine SQLite avec les tables creees."""
    db_engine = init_db(create_db_engine(test_settings.database_url))
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def store(engine: Engine) -> SQLModelRecordStore:
    """Store SQLModel branche sur la base temporaire."""
    return SQLModelRecordStore(engine)


@pytest.fixture
def mock_store() -> AsyncMock:
    """
    Mock de IRecordStore.

    get() retourne None par defaut (cache vide).
    """
    mock = AsyncMock(spec=IRecordStore)
    mock.get.return_value = None
    mock.upsert_record.return_value = 1
    return mock


@pytest.fixture
def mock_client() -> AsyncMock:
    """Mock de IMetadataClient ; les retours sont configures dans chaque test."""
    return AsyncMock(spec=IMetadataClient)


class RecordingSleep:
    """Fausse pause async qui memorise les delais demandes."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
