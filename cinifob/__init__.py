"""
CiniFob - Fiches films et series TMDB avec cache relationnel local.

Ce package fournit une API JSON qui sert les fiches depuis la base locale
tant qu'elles sont fraiches, les recupere sur TMDB sinon, et les reecrit
en base en arriere-plan.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, erreurs)
- services/ : Couche application (resolution, persistance, synchronisation)
- adapters/ : Client TMDB et CLI
- infrastructure/ : Persistance SQLModel
- web/ : API FastAPI
"""

__version__ = "0.1.0"
