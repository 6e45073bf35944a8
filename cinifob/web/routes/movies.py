"""
Routes films :
- GET /api/movies/search : recherche et listes officielles
- GET /api/movies/{movie_id} : fiche complete

La route de recherche est declaree avant la route parametree.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...services.catalog import CatalogService
from ...services.resolver import DetailResolver, Resolution
from ...utils.constants import MOVIE_SEARCH
from ..deps import get_catalog_service, get_movie_resolver
from ..errors import MOVIE_ERRORS, SEARCH_ERRORS, error_response
from ..serializers import movie_summary_to_dict, record_to_dict

router = APIRouter(prefix="/api/movies", tags=["movies"])


def resolution_body(key: str, resolution: Resolution) -> dict:
    """Corps commun des reponses de detail (stale/error seulement si vrais)."""
    body = {key: record_to_dict(resolution.record), "cached": resolution.cached}
    if resolution.stale:
        body["stale"] = True
    if resolution.error:
        body["error"] = True
    return body


@router.get("/search")
async def search_movies(
    query: Optional[str] = Query(default=None),
    page: str = Query(default="1"),
    list_type: str = Query(default=MOVIE_SEARCH, alias="type"),
    service: CatalogService = Depends(get_catalog_service),
):
    """Recherche de films (ou populaires, tendances, a venir, a l'affiche)."""
    try:
        result = await service.search_movies(query, page, list_type)
    except Exception as e:
        return error_response(e, SEARCH_ERRORS)
    return JSONResponse(
        {
            "movies": [movie_summary_to_dict(item) for item in result.results],
            "page": result.page,
            "totalPages": result.total_pages,
            "totalResults": result.total_results,
        }
    )


@router.get("/{movie_id}")
async def movie_detail(
    movie_id: str,
    resolver: DetailResolver = Depends(get_movie_resolver),
):
    """Fiche complete d'un film (cache local, TMDB ou cache perime)."""
    try:
        resolution = await resolver.resolve(movie_id)
    except Exception as e:
        return error_response(e, MOVIE_ERRORS)
    return JSONResponse(resolution_body("movie", resolution))
