"""
Utilitaires et constantes pour CiniFob.

Ce module contient les constantes partagees.
"""

from cinifob.utils.constants import (
    CREW_JOB_ALLOWLIST,
    DETAIL_APPEND_TO_RESPONSE,
    MAX_RELATED_PAGES,
    RELATION_TYPES,
    RETRYABLE_STATUS_CODES,
)

__all__ = [
    "CREW_JOB_ALLOWLIST",
    "DETAIL_APPEND_TO_RESPONSE",
    "MAX_RELATED_PAGES",
    "RELATION_TYPES",
    "RETRYABLE_STATUS_CODES",
]
