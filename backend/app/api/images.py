"""Image search endpoints."""
from fastapi import APIRouter, Depends, Query

from app.auth.identity import UserIdentity, get_current_user
from app.schemas.images import ImageSearchResponse
from app.services.image_search import ImageSearchClient, get_image_search_client

router = APIRouter(prefix="/api/images", tags=["images"])


@router.get("/search", response_model=ImageSearchResponse)
async def search_images(
    query: str = Query(..., min_length=1, description="Search terms"),
    per_page: int = Query(5, ge=1, le=80),
    orientation: str = Query("landscape", pattern="^(landscape|portrait|square)$"),
    user: UserIdentity = Depends(get_current_user),
    client: ImageSearchClient = Depends(get_image_search_client),
) -> ImageSearchResponse:
    """Search stock photos for generated sites."""
    return await client.search(query, per_page=per_page, orientation=orientation)
