"""
Paging SQLAlchemy Select statements (ORM entities or Core columns).

IMPORTANT: the statement should already carry its WHERE clauses, eager
loading (selectinload) and ORDER BY. The count runs over a subquery of the
statement so WHERE clauses, joins and GROUP BY are preserved.
"""

import logging
from typing import Any, List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session
from sqlalchemy.sql.selectable import Select

from pagedquery.core.exceptions import DataSourceError
from pagedquery.core.pager import build_options
from pagedquery.core.pagination import (
    CountStrategy,
    PageResult,
    assemble_page,
    build_pager,
    fetch_window,
)

logger = logging.getLogger(__name__)


def count_statement(query: Select) -> Select:
    """SELECT count(*) over the query without its ORDER BY/LIMIT/OFFSET."""
    base = query.order_by(None).limit(None).offset(None)
    return select(func.count()).select_from(base.subquery())


def _rows(result: Any, scalars: bool) -> List[Any]:
    if scalars:
        return list(result.scalars().all())
    return [dict(row._mapping) for row in result.all()]


def paginate_select(
    db: Session,
    query: Select,
    pager_options: Any = None,
    disabled: bool = False,
    scalars: bool = True,
) -> PageResult:
    """
    Page a Select statement on a Session.

    Args:
        db: SQLAlchemy session (or Connection)
        query: Base query with filters and ordering already applied
        pager_options: PagerOptions or mapping (perPage, totalItems, ...)
        disabled: Return every row on a single page
        scalars: Return the first column of each row (ORM entities) rather
            than dicts keyed by column name

    Returns:
        PageResult for the requested page

    Raises:
        DataSourceError: If the count or the fetch query fails
        ConstructionError: If the pager options are invalid
    """
    options = build_options(pager_options)

    total_items = None
    strategy = CountStrategy.SUPPLIED
    if options.total_items is None:
        try:
            total_items = db.execute(count_statement(query)).scalar()
        except SQLAlchemyError as e:
            logger.error(f"Count query failed: {e}")
            raise DataSourceError(f"Count query failed: {e}") from e
        strategy = CountStrategy.COUNT_QUERY

    pager = build_pager(options, total_items)
    offset, limit = fetch_window(pager, disabled)

    try:
        result = db.execute(query.offset(offset).limit(limit))
        rows = _rows(result, scalars)
    except SQLAlchemyError as e:
        logger.error(f"Paged query failed: {e}")
        raise DataSourceError(f"Paged query failed: {e}") from e

    return assemble_page(pager, rows, strategy, disabled)


async def paginate_select_async(
    db: AsyncSession,
    query: Select,
    pager_options: Any = None,
    disabled: bool = False,
    scalars: bool = True,
) -> PageResult:
    """Page a Select statement on an AsyncSession. See paginate_select."""
    options = build_options(pager_options)

    total_items = None
    strategy = CountStrategy.SUPPLIED
    if options.total_items is None:
        try:
            result = await db.execute(count_statement(query))
            total_items = result.scalar()
        except SQLAlchemyError as e:
            logger.error(f"Count query failed: {e}")
            raise DataSourceError(f"Count query failed: {e}") from e
        strategy = CountStrategy.COUNT_QUERY

    pager = build_pager(options, total_items)
    offset, limit = fetch_window(pager, disabled)

    try:
        result = await db.execute(query.offset(offset).limit(limit))
        rows = _rows(result, scalars)
    except SQLAlchemyError as e:
        logger.error(f"Paged query failed: {e}")
        raise DataSourceError(f"Paged query failed: {e}") from e

    return assemble_page(pager, rows, strategy, disabled)
