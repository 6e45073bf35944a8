"""
Route de synchronisation des genres : POST /api/genres/sync.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...services.genre_sync import GenreSyncService
from ..deps import get_genre_sync_service
from ..errors import GENRE_SYNC_ERRORS, error_response

router = APIRouter(prefix="/api/genres", tags=["genres"])


@router.post("/sync")
async def sync_genres(service: GenreSyncService = Depends(get_genre_sync_service)):
    try:
        genres = await service.sync()
    except Exception as e:
        return error_response(e, GENRE_SYNC_ERRORS)
    return JSONResponse(
        {
            "message": "Genres synchronized successfully",
            "count": len(genres),
            "genres": [{"id": g.id, "name": g.name} for g in genres],
        }
    )
