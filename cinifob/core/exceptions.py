"""
Taxonomie des erreurs du domaine.

Chaque erreur correspond a une reponse HTTP precise (voir web/errors.py).
Les erreurs de persistance en arriere-plan ne font pas partie de cette
taxonomie : elles sont journalisees et jamais propagees.
"""

from typing import Optional


class CiniFobError(Exception):
    """Classe de base de toutes les erreurs CiniFob."""


class ValidationError(CiniFobError):
    """Identifiant mal forme (non numerique ou non positif)."""


class NotFoundError(CiniFobError):
    """L'API upstream confirme l'absence du contenu (404 authoritatif)."""


class ConfigurationError(CiniFobError):
    """Cle API du fournisseur de metadonnees absente."""


class FetchError(CiniFobError):
    """
    Echec de recuperation upstream non categorise.

    Attributes:
        cause: Derniere exception sous-jacente (reponse HTTP, erreur reseau...)
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


class ClientRequestError(FetchError):
    """
    Erreur 4xx permanente (hors 404 et 429), jamais relancee.

    Attributes:
        status_code: Code HTTP retourne par l'API
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message or f"Upstream rejected request ({status_code})", cause)


class UpstreamUnavailableError(FetchError):
    """Erreur reseau (connexion refusee, reset...) apres epuisement des tentatives."""


class UpstreamTimeoutError(FetchError):
    """Toutes les tentatives ont depasse leur timeout."""
