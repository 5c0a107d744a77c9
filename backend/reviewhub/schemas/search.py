"""App search schemas."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class AppSearchResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    developer: Optional[str] = None
    rating: Optional[float] = None
    category: Optional[str] = None
    price: Optional[str] = None
    url: Optional[str] = None


class AppSearchResponse(BaseModel):
    success: bool = True
    term: str
    count: int = 0
    results: List[AppSearchResultResponse] = []
