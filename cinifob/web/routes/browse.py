"""
Route de navigation : GET /api/browse.

Parametres : query, type (all/movie/tv), sort, genre, page.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...services.catalog import CatalogService
from ...utils.constants import BROWSE_ALL, CATALOG_DEFAULT_LIST
from ..deps import get_catalog_service
from ..errors import BROWSE_ERRORS, error_response
from ..serializers import content_summary_to_dict

router = APIRouter(prefix="/api", tags=["browse"])


@router.get("/browse")
async def browse(
    query: Optional[str] = Query(default=None),
    content_type: str = Query(default=BROWSE_ALL, alias="type"),
    sort: str = Query(default=CATALOG_DEFAULT_LIST),
    genre: Optional[str] = Query(default=None),
    page: str = Query(default="1"),
    service: CatalogService = Depends(get_catalog_service),
):
    """Recherche ou listes du catalogue, films et/ou series."""
    try:
        result = await service.browse(content_type, query, sort, genre, page)
    except Exception as e:
        return error_response(e, BROWSE_ERRORS)
    return JSONResponse(
        {
            "results": [content_summary_to_dict(item) for item in result.results],
            "page": result.page,
            "totalPages": result.total_pages,
            "totalResults": result.total_results,
        }
    )
