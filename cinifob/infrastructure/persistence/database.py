"""
Configuration de la base de donnees SQLite pour CiniFob.

Ce module fournit :
- Engine SQLite avec configuration pour l'acces multi-thread (executor)
- Fonction d'initialisation des tables

La base de donnees est configuree via CINIFOB_DATABASE_URL (defaut: sqlite:///cinifob.db).
"""

from pathlib import Path

from loguru import logger
from sqlalchemy import Engine, event
from sqlmodel import SQLModel, create_engine


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Cree l'engine SQLAlchemy pour l'URL donnee.

    Pour un fichier SQLite, le repertoire parent est cree si necessaire
    et check_same_thread est desactive car les operations du store tournent
    dans les threads de l'executor par defaut.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        # Les groupes de relations sont ecrits en parallele : attendre le verrou
        connect_args["timeout"] = 30
        if database_url.startswith("sqlite:///") and not database_url.startswith(
            "sqlite:///:memory:"
        ):
            db_path = Path(database_url.replace("sqlite:///", "", 1))
            db_path.parent.mkdir(exist_ok=True, parents=True)

    engine = create_engine(database_url, echo=echo, connect_args=connect_args)

    if database_url.startswith("sqlite"):
        # Les FK ne sont appliquees par SQLite que si demande par connexion
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_db(engine: Engine) -> Engine:
    """
    Initialise la base de donnees en creant toutes les tables.

    Cette fonction importe les modeles pour enregistrer leurs metadonnees
    dans SQLModel.metadata, puis cree les tables correspondantes si elles
    n'existent pas deja.

    Doit etre appelee une fois au demarrage de l'application.

    Returns:
        L'engine recu, pour usage comme ressource du container
    """
    # Import des modeles pour enregistrer leurs metadonnees
    # L'import est fait ici pour eviter les imports circulaires
    from cinifob.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.debug(f"Tables initialisees ({engine.url.render_as_string(hide_password=True)})")
    return engine
