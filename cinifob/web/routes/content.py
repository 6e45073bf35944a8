"""
Route des contenus lies : GET /api/content/{content_type}/{content_id}/related.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...services.related_content import RelatedContentService
from ...utils.constants import RELATION_BOTH
from ..deps import get_related_content_service
from ..errors import RELATED_ERRORS, error_response
from ..serializers import content_summary_to_dict

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("/{content_type}/{content_id}/related")
async def related_content(
    content_type: str,
    content_id: str,
    page: str = Query(default="1"),
    relation_type: str = Query(default=RELATION_BOTH, alias="relationType"),
    service: RelatedContentService = Depends(get_related_content_service),
):
    """Contenus similaires et/ou recommandes, tries par popularite."""
    try:
        result = await service.get_related(content_type, content_id, page, relation_type)
    except Exception as e:
        return error_response(e, RELATED_ERRORS)
    return JSONResponse(
        {
            "results": [content_summary_to_dict(item) for item in result.results],
            "page": result.page,
            "totalPages": result.total_pages,
            "totalResults": result.total_results,
        }
    )
