"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Port repository : Contrat de persistance des fiches
- IRecordStore : Stockage des films, séries et de leurs relations

Port client API : Contrat pour le fournisseur de métadonnées
- IMetadataClient : Récupération des fiches, saisons, contenus liés et genres
"""

from cinifob.core.ports.api_clients import IMetadataClient
from cinifob.core.ports.repositories import IRecordStore

__all__ = [
    "IMetadataClient",
    "IRecordStore",
]
