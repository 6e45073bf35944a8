"""
Route de sante : GET /health.
"""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    settings = request.app.state.container.config()
    return {"status": "ok", "tmdb": "enabled" if settings.tmdb_enabled else "disabled"}
