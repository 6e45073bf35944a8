"""
Client API externe pour les metadonnees films et series.

Ce module fournit l'adaptateur pour communiquer avec TMDB (The Movie
Database) et son infrastructure partagee:
- APICache: Cache persistant court (saisons, contenus lies)
- RetryableStatusError: Exception pour les reponses 429/5xx
- with_retry / request_with_retry: Backoff exponentiel plafonne
- tmdb_payloads: Validation pydantic des reponses et conversion en entites

Le client implemente IMetadataClient defini dans core/ports/api_clients.py.
"""

from cinifob.adapters.api.cache import APICache
from cinifob.adapters.api.retry import (
    RetryableStatusError,
    request_with_retry,
    with_retry,
)
from cinifob.adapters.api.tmdb_client import TMDBClient

__all__ = [
    "APICache",
    "RetryableStatusError",
    "TMDBClient",
    "request_with_retry",
    "with_retry",
]
