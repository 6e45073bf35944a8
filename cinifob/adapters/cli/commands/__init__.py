"""Sous-package CLI commands - re-exporte les commandes publiques."""

from cinifob.adapters.cli.commands.metadata_commands import fetch, sync_genres

__all__ = [
    "fetch",
    "sync_genres",
]
