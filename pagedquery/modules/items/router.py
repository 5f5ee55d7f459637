"""
Items Router - paged item listings.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pagedquery.core.config import config
from pagedquery.core.db.engine import get_db_util
from pagedquery.core.pager import PagerMode
from .service import ItemService
from .schemas import (
    CreateItemBulkDto,
    ItemResponse,
    PagedItemsResponse,
    PagedCategoriesResponse,
)

router = APIRouter(prefix="/items", tags=["items"])


def _pager_options(
    request: Request,
    per_page: Optional[int],
    mode: Optional[PagerMode],
    delta: Optional[int],
) -> dict:
    """Pager options for the request; links point back to the request URL."""
    options = {
        "requestParams": request.query_params,
        "path": str(request.url),
    }
    if per_page is not None:
        options["perPage"] = per_page
    if mode is not None:
        options["mode"] = mode
    if delta is not None:
        options["delta"] = delta
    return options


@router.post("/bulk", response_model=List[ItemResponse], status_code=201)
async def bulk_create_items(
    data: CreateItemBulkDto,
    db: AsyncSession = Depends(get_db_util),
):
    """Bulk create items"""
    return await ItemService.bulk_create(db, data)


@router.get("", response_model=PagedItemsResponse)
async def get_items(
    request: Request,
    per_page: Optional[int] = Query(
        None, alias="perPage", ge=1, le=config.pager_max_per_page
    ),
    mode: Optional[PagerMode] = Query(None),
    delta: Optional[int] = Query(None, ge=1),
    show_all: bool = Query(False, alias="all", description="Disable paging"),
    category: Optional[str] = Query(None, description="Filter by category"),
    db: AsyncSession = Depends(get_db_util),
):
    """
    Get one page of items.
    The page number is read from the pageID query parameter.
    """
    options = _pager_options(request, per_page, mode, delta)
    page = await ItemService.find_page(db, options, show_all, category)
    data = [ItemResponse.model_validate(item) for item in page.rows]
    return ItemService.to_response(page, data)


@router.get("/categories", response_model=PagedCategoriesResponse)
async def get_categories(
    request: Request,
    per_page: Optional[int] = Query(
        None, alias="perPage", ge=1, le=config.pager_max_per_page
    ),
    mode: Optional[PagerMode] = Query(None),
    delta: Optional[int] = Query(None, ge=1),
    show_all: bool = Query(False, alias="all", description="Disable paging"),
    db: AsyncSession = Depends(get_db_util),
):
    """Get one page of per-category item counts (GROUP BY query)."""
    options = _pager_options(request, per_page, mode, delta)
    page = await ItemService.category_page(db, options, show_all)
    return ItemService.to_response(page, page.rows)
