"""Stock media search routes for the Reelsmith API."""

from typing import Annotated, Literal

from api.dependencies import UserId, get_media_resolver
from api.schemas import MediaSearchResponse
from fastapi import APIRouter, Depends, Query
from services.errors import ValidationError
from services.media_resolver import StockMediaResolver

router = APIRouter(tags=["Media"])


@router.get(
    "/api/media/search",
    response_model=MediaSearchResponse,
    summary="Search stock media",
    description="Searches the stock media provider; returns sample media when the provider is unavailable.",
    responses={400: {"description": "Query parameter is required"}},
)
async def search_media(
    user_id: UserId,
    resolver: Annotated[StockMediaResolver, Depends(get_media_resolver)],
    query: Annotated[str, Query()] = "",
    type: Annotated[Literal["video", "image"], Query()] = "video",
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=80)] = 15,
) -> dict:
    """Search stock videos or images."""
    if not query.strip():
        raise ValidationError("Query parameter is required")

    result = await resolver.search(query.strip(), media_type=type, page=page, per_page=per_page)
    return result.to_dict()
