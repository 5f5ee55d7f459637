"""
Item DTOs and paged response models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class CreateItemDto(BaseModel):
    """DTO for creating a single item"""

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(Decimal("0"), ge=0)

    class Config:
        from_attributes = True


class CreateItemBulkDto(BaseModel):
    """DTO for bulk creating items"""

    data: List[CreateItemDto] = Field(..., min_length=1)


class ItemResponse(BaseModel):
    """Response model for Item entity"""

    id: int
    name: str
    category: str
    price: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class CategorySummary(BaseModel):
    """One row of the per-category summary"""

    category: str
    itemCount: int


class PageNumbers(BaseModel):
    current: int
    total: int


class PagedResponse(BaseModel):
    """Common envelope of every paged endpoint"""

    totalItems: int
    page_numbers: PageNumbers
    from_: int = Field(..., alias="from")
    to: int
    limit: int
    links: str
    count_strategy: str
    has_more: bool
    perPageSelectBox: Optional[str] = None

    class Config:
        populate_by_name = True


class PagedItemsResponse(PagedResponse):
    data: List[ItemResponse]


class PagedCategoriesResponse(PagedResponse):
    data: List[CategorySummary]
