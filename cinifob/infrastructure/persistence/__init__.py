"""
Module de persistance SQLite pour CiniFob.

Ce module fournit l'infrastructure de stockage utilisant SQLModel (SQLAlchemy).
Il contient :

- database.py : Creation de l'engine, session factory, initialisation
- models.py : Modeles SQLModel representant les tables de la base de donnees
- store.py : SQLModelRecordStore, implementation de IRecordStore

Les modeles ici sont des adapters de persistance, distincts des entites de domaine
(dataclass dans core/entities/). La conversion entre les deux se fait dans le store.

Usage:
    from cinifob.infrastructure.persistence import create_db_engine, init_db

    engine = init_db(create_db_engine("sqlite:///cinifob.db"))
    store = SQLModelRecordStore(engine)
    movie = await store.get(MediaType.MOVIE, 27205)
"""

from cinifob.infrastructure.persistence.database import (
    create_db_engine,
    init_db,
)
from cinifob.infrastructure.persistence.store import SQLModelRecordStore

__all__ = [
    "SQLModelRecordStore",
    "create_db_engine",
    "init_db",
]
