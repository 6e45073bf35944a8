"""
Utilitaires partages pour les commandes CLI de CiniFob.

Ce module fournit :
- console : instance Rich Console partagee
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container initialise
- async_command : decorateur transformant une fonction async en commande sync
"""

import asyncio
import inspect
from contextlib import contextmanager
from functools import wraps

from loguru import logger as loguru_logger
from rich.console import Console

from cinifob.container import Container

# Console globale pour tous les affichages
console = Console()


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("cinifob")
    try:
        yield
    finally:
        loguru_logger.enable("cinifob")


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    A la sortie, les persistances en arriere-plan sont attendues puis le
    client HTTP, le cache et l'engine sont fermes : sans cela asyncio.run()
    annulerait les ecritures encore en cours.

    Args:
        requires_db: Si True (defaut), initialise la base de donnees.

    Usage:
        @with_container()
        async def my_command(container, ...):
            config = container.config()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            try:
                return await func(container, *args, **kwargs)
            finally:
                await container.persister().shutdown()
                await container.tmdb_client().close()
                container.api_cache().close()
                container.engine().dispose()

        # Le container n'est pas un parametre de la commande Typer
        signature = inspect.signature(func)
        params = list(signature.parameters.values())[1:]
        wrapper.__signature__ = signature.replace(parameters=params)
        return wrapper
    return decorator


def async_command(func):
    """
    Transforme une fonction async en commande sync via asyncio.run().

    Preserve les annotations Typer pour que les options/arguments soient
    correctement interpretes.

    Usage:
        @async_command
        @with_container()
        async def my_command(container, ...):
            ...
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        return asyncio.run(func(*args, **kwargs))
    # Preserver les annotations Typer
    wrapper.__signature__ = inspect.signature(func)
    return wrapper
