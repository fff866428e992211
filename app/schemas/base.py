from typing import List, Generic, TypeVar
from pydantic import BaseModel

T = TypeVar('T')

class PageInfo(BaseModel):
    has_next_page: bool
    has_previous_page: bool

# Base response model for offset-windowed results
class PaginatedResponse(BaseModel, Generic[T]):
    """Base response model for paginated results"""
    total_count: int
    limit: int
    offset: int
    page_info: PageInfo
    items: List[T]
