"""
Mecanisme de retry avec backoff exponentiel pour l'API upstream.

Relance les requetes sur les erreurs transitoires uniquement :
- HTTP 429 (rate limiting) et toute reponse 5xx
- erreurs de transport httpx (connexion refusee/reset, timeout)

Les autres reponses 4xx (dont 404) remontent immediatement sous forme
d'httpx.HTTPStatusError, sans nouvelle tentative.

Le delai entre deux tentatives vaut min(base * 2^(tentative-1), max),
soit 1s puis 2s puis 4s plafonne a 5s avec les valeurs par defaut.

Usage:
    # Avec le decorateur
    @with_retry(max_attempts=3)
    async def my_api_call():
        ...

    # Avec la fonction helper
    response = await request_with_retry(client, "GET", url, timeout=10.0)
"""

from typing import Awaitable, Callable, Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cinifob.utils.constants import RETRYABLE_STATUS_CODES

SleepFn = Callable[[float], Awaitable[None]]


class RetryableStatusError(Exception):
    """
    Exception levee quand l'API retourne 429 ou 5xx.

    Attributes:
        status_code: Code HTTP de la reponse
        retry_after: Nombre de secondes indique par le header Retry-After,
                     ou None si absent ou illisible
        response: Reponse httpx d'origine
    """

    def __init__(
        self,
        status_code: int,
        retry_after: Optional[int] = None,
        response: Optional[httpx.Response] = None,
    ) -> None:
        self.status_code = status_code
        self.retry_after = retry_after
        self.response = response
        super().__init__(f"Upstream returned {status_code}. Retry after: {retry_after}s")


# httpx.TimeoutException herite de httpx.TransportError
RETRYABLE_EXCEPTIONS = (RetryableStatusError, httpx.TransportError)


def _log_retry(retry_state: RetryCallState) -> None:
    """Journalise chaque tentative echouee avant la pause."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Tentative {retry_state.attempt_number} echouee ({type(exc).__name__}: {exc}), "
        f"nouvel essai dans {wait:.1f}s"
    )


def with_retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 5.0,
    sleep: Optional[SleepFn] = None,
):
    """
    Decorateur pour relancer sur erreur transitoire avec backoff exponentiel.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        base_delay: Delai avant la 2e tentative en secondes (defaut: 1)
        max_delay: Plafond du delai entre tentatives en secondes (defaut: 5)
        sleep: Fonction de pause async injectable (tests), asyncio.sleep sinon

    Returns:
        Decorateur a appliquer sur une fonction async

    Example:
        @with_retry(max_attempts=3, max_delay=5)
        async def fetch_data():
            # Sera relance jusqu'a 3 fois sur 429/5xx/erreur reseau
            ...
    """
    kwargs = {
        "retry": retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        "wait": wait_exponential(multiplier=base_delay, max=max_delay),
        "stop": stop_after_attempt(max_attempts),
        "before_sleep": _log_retry,
        "reraise": True,
    }
    if sleep is not None:
        kwargs["sleep"] = sleep
    return retry(**kwargs)


def _parse_retry_after(response: httpx.Response) -> Optional[int]:
    header = response.headers.get("Retry-After")
    if header is None:
        return None
    try:
        return int(header)
    except ValueError:
        return None


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 5.0,
    sleep: Optional[SleepFn] = None,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique sur erreur transitoire.

    Convertit les reponses 429/5xx en RetryableStatusError et relance avec
    backoff exponentiel. Chaque tentative a son propre timeout (kwarg
    ``timeout`` transmis a client.request()).

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        base_delay: Delai de base du backoff en secondes
        max_delay: Plafond du backoff en secondes
        sleep: Fonction de pause async injectable
        **kwargs: Arguments supplementaires passes a client.request()

    Returns:
        httpx.Response en cas de succes

    Raises:
        RetryableStatusError: Si 429/5xx apres epuisement des tentatives
        httpx.TransportError: Si erreur reseau/timeout apres epuisement
        httpx.HTTPStatusError: Pour les autres erreurs HTTP (sans retry)
    """

    @with_retry(
        max_attempts=max_attempts,
        base_delay=base_delay,
        max_delay=max_delay,
        sleep=sleep,
    )
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableStatusError(
                response.status_code,
                retry_after=_parse_retry_after(response),
                response=response,
            )
        response.raise_for_status()
        return response

    return await _do_request()
