"""
ItemService - item creation and paged listings.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pagedquery.core.pagination import PageResult
from pagedquery.wrappers import paginate_select_async, paginate_sql_async
from .models import Item
from .schemas import CreateItemBulkDto

logger = logging.getLogger(__name__)

# Grouped query: counted by fetching every group
CATEGORY_SUMMARY_SQL = (
    "SELECT category, COUNT(*) AS itemCount FROM item "
    "GROUP BY category ORDER BY category"
)


class ItemService:
    """
    Item service. Listings go through the paginate_* wrappers so only one
    page of rows is loaded per request.
    """

    @staticmethod
    async def bulk_create(db: AsyncSession, data: CreateItemBulkDto) -> List[Item]:
        """
        Bulk create items.
        Single bulk INSERT + single bulk SELECT instead of N refreshes.
        """
        items = [Item(**item.model_dump()) for item in data.data]
        db.add_all(items)
        await db.flush()

        item_ids = [item.id for item in items]
        # populate_existing loads server defaults (created_at) onto the new objects
        result = await db.execute(
            select(Item)
            .where(Item.id.in_(item_ids))
            .execution_options(populate_existing=True)
        )
        id_to_item = {item.id: item for item in result.scalars().all()}
        logger.info(f"Created {len(item_ids)} items")
        return [id_to_item[item_id] for item_id in item_ids]

    @staticmethod
    async def find_page(
        db: AsyncSession,
        pager_options: Any,
        disabled: bool = False,
        category: Optional[str] = None,
    ) -> PageResult:
        """
        One page of items, oldest first.

        Args:
            db: Database session
            pager_options: Options forwarded to the pager
            disabled: Return every item on a single page
            category: Optional exact category filter
        """
        query = select(Item)
        if category:
            query = query.where(Item.category == category)
        query = query.order_by(Item.id)
        return await paginate_select_async(db, query, pager_options, disabled)

    @staticmethod
    async def category_page(
        db: AsyncSession, pager_options: Any, disabled: bool = False
    ) -> PageResult:
        """One page of the per-category item counts."""
        return await paginate_sql_async(
            db, CATEGORY_SUMMARY_SQL, pager_options, disabled
        )

    @staticmethod
    def to_response(page: PageResult, data: List[Any]) -> dict:
        """Map a PageResult onto the paged response envelope."""
        return {
            "data": data,
            "totalItems": page.total_items,
            "page_numbers": page.page_numbers,
            "from": page.from_index,
            "to": page.to_index,
            "limit": page.limit,
            "links": page.links,
            "count_strategy": page.count_strategy.value,
            "has_more": page.has_more,
            "perPageSelectBox": page.per_page_select_box,
        }
