"""
Journalisation loguru de CiniFob.

Trois sorties :
- console (stderr) au niveau configure, pour suivre les requetes
- journal JSON complet (DEBUG), avec rotation
- journal JSON des echecs de persistance en arriere-plan

Les ecritures lancees par BackgroundPersister ne remontent jamais a
l'appelant HTTP : leurs erreurs sont isolees dans un fichier dedie
(<log_file>.persistence.<ext>) pour rester visibles.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from .config import Settings

PERSISTENCE_LOGGER = "cinifob.services.persister"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> "
    "<cyan>{name}</cyan> {message}"
)


def persistence_log_path(log_file: Path) -> Path:
    """logs/cinifob.log -> logs/cinifob.persistence.log"""
    return log_file.with_name(f"{log_file.stem}.persistence{log_file.suffix or '.log'}")


def is_persistence_failure(record: dict[str, Any]) -> bool:
    """Filtre loguru : erreurs emises par le persister d'arriere-plan."""
    return record["name"].startswith(PERSISTENCE_LOGGER) and record["level"].no >= 40


def configure_logging(settings: Settings) -> Path:
    """
    Remplace les sorties loguru par celles de l'application.

    Returns:
        Chemin du journal des echecs de persistance
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT, colorize=True)

    log_file = settings.log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_options = {
        "serialize": True,
        "rotation": settings.log_rotation_size,
        "retention": settings.log_retention_count,
        # Les ecritures SQLite journalisent depuis l'executor
        "enqueue": True,
    }
    logger.add(log_file, level="DEBUG", compression="zip", **file_options)

    failures = persistence_log_path(log_file)
    logger.add(failures, level="ERROR", filter=is_persistence_failure, **file_options)

    logger.debug(f"Journaux : {log_file} (echecs de persistance : {failures.name})")
    return failures
