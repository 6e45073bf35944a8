"""
Conversion des erreurs du domaine en reponses JSON ``{"error": "..."}``.

| Erreur                      | HTTP |
|-----------------------------|------|
| ValidationError             | 400  |
| NotFoundError               | 404  |
| ConfigurationError          | 503  |
| UpstreamUnavailableError    | 503  |
| UpstreamTimeoutError        | 504  |
| FetchError et imprevues     | 500  |
"""

from dataclasses import dataclass

from fastapi.responses import JSONResponse
from loguru import logger

from cinifob.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
    ValidationError,
)

MISSING_KEY_MESSAGE = "TMDb API key not configured"
NETWORK_MESSAGE = "Network error - please try again"
TIMEOUT_MESSAGE = "Request timeout - TMDb API is slow"


@dataclass(frozen=True)
class ErrorMessages:
    """Messages propres a un endpoint (404 et 500)."""

    not_found: str
    failure: str


MOVIE_ERRORS = ErrorMessages("Movie not found", "Failed to fetch movie details")
TV_ERRORS = ErrorMessages("TV show not found", "Failed to fetch TV show details")
SEASON_ERRORS = ErrorMessages("Season not found", "Failed to fetch season details")
RELATED_ERRORS = ErrorMessages("Content not found", "Failed to fetch related content")
GENRE_SYNC_ERRORS = ErrorMessages("Genres not found", "Failed to sync genres")
SEARCH_ERRORS = ErrorMessages("Movies not found", "Failed to search movies")
BROWSE_ERRORS = ErrorMessages("Content not found", "Failed to fetch content")


def error_body(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def error_response(exc: Exception, messages: ErrorMessages) -> JSONResponse:
    """
    Construit la reponse HTTP correspondant a une exception.

    Les erreurs non categorisees sont journalisees avec leur trace.
    """
    if isinstance(exc, ValidationError):
        return error_body(str(exc), 400)
    if isinstance(exc, NotFoundError):
        return error_body(messages.not_found, 404)
    if isinstance(exc, ConfigurationError):
        return error_body(MISSING_KEY_MESSAGE, 503)
    if isinstance(exc, UpstreamUnavailableError):
        logger.warning(f"TMDB injoignable: {exc}")
        return error_body(NETWORK_MESSAGE, 503)
    if isinstance(exc, UpstreamTimeoutError):
        logger.warning(f"TMDB trop lent: {exc}")
        return error_body(TIMEOUT_MESSAGE, 504)

    logger.opt(exception=exc).error(f"{messages.failure}: {exc}")
    return error_body(messages.failure, 500)
