"""
Routes series : fiche complete et detail de saison.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...services.resolver import DetailResolver
from ...services.season_detail import SeasonService
from ..deps import get_season_service, get_tv_resolver
from ..errors import SEASON_ERRORS, TV_ERRORS, error_response
from ..serializers import episodes_to_list, season_to_dict
from .movies import resolution_body

router = APIRouter(prefix="/api/tv", tags=["tv"])


@router.get("/{tv_id}")
async def tv_detail(
    tv_id: str,
    resolver: DetailResolver = Depends(get_tv_resolver),
):
    """Fiche complete d'une serie (cache local, TMDB ou cache perime)."""
    try:
        resolution = await resolver.resolve(tv_id)
    except Exception as e:
        return error_response(e, TV_ERRORS)
    return JSONResponse(resolution_body("tvShow", resolution))


@router.get("/{tv_id}/season/{season_number}")
async def season_detail(
    tv_id: str,
    season_number: str,
    service: SeasonService = Depends(get_season_service),
):
    """Detail d'une saison avec ses episodes."""
    try:
        result = await service.get_season(tv_id, season_number)
    except Exception as e:
        return error_response(e, SEASON_ERRORS)
    return JSONResponse(
        {
            "season": season_to_dict(result.season),
            "episodes": episodes_to_list(result.season),
            "cached": result.cached,
        }
    )
