"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe CINIFOB_,
et peut optionnellement être fournie via un fichier .env.

La clé API TMDB est optionnelle au démarrage : son absence est signalée
par une ConfigurationError au moment du premier appel upstream (503 côté HTTP).
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de cinifob/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe CINIFOB_.
    Exemple : CINIFOB_TMDB_API_KEY=xxxx
    """

    model_config = SettingsConfigDict(
        env_prefix="CINIFOB_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Base de données
    database_url: str = Field(default="sqlite:///cinifob.db")

    # API TMDB
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_base_url: str = Field(default="https://api.themoviedb.org/3")
    tmdb_language: Optional[str] = Field(default=None)

    # Cache des fiches (fraicheur) et cache court des listes (saisons, suggestions)
    cache_ttl_hours: float = Field(default=24, gt=0)
    api_cache_dir: Path = Field(default=Path(".cache/api"))

    # Politique de retry du client upstream
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    fetch_max_attempts: int = Field(default=3, ge=1)
    backoff_base_seconds: float = Field(default=1.0, ge=0)
    backoff_max_seconds: float = Field(default=5.0, ge=0)

    # Normalisation des credits
    cast_limit: int = Field(default=20, ge=0)
    crew_limit: int = Field(default=20, ge=0)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/cinifob.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("api_cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("tmdb_api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Une clé vide équivaut à une clé absente."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return self.tmdb_api_key is not None
