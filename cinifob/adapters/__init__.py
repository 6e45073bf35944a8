"""
Couche adaptateurs (infrastructure).

Les adaptateurs implementent les ports definis dans core/ports/ et fournissent
des implementations concretes pour les systemes externes.

Sous-packages :
- api/ : Client TMDB, retry, cache court et validation des payloads

Chaque adaptateur depend de core/ mais core/ ne depend jamais des adaptateurs.
Cela permet de changer les implementations sans affecter la logique metier.
"""
