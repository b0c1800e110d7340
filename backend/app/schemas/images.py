"""Schemas for the image search pass-through."""
from typing import List, Optional

from pydantic import BaseModel


class ImageResult(BaseModel):
    """One stock photo, trimmed to what the generated sites need."""
    id: int
    url: str
    alt: Optional[str] = None
    photographer: Optional[str] = None
    photographerUrl: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class ImageSearchResponse(BaseModel):
    """Response schema for GET /api/images/search."""
    images: List[ImageResult]
    total: int
