"""
Couche domaine (core).

Contient les entités métier, les ports (interfaces abstraites) et la
taxonomie des erreurs. Cette couche n'a AUCUNE dépendance vers
l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- entities/ : Entités métier (Movie, TVShow, Person, Genre...)
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- exceptions.py : Erreurs catégorisées (ValidationError, NotFoundError...)
"""
