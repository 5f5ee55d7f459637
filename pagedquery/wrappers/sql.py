"""
Paging textual SQL through SQLAlchemy.

Works with a Connection or Session (paginate_sql) and with an
AsyncConnection or AsyncSession (paginate_sql_async). The bounded fetch
appends LIMIT/OFFSET to the query text with bind parameters, so the query's
own ORDER BY stays on the outermost SELECT and rows keep the cursor order.

LIMIT ... OFFSET ... is SQLite, PostgreSQL and MySQL/MariaDB syntax. Backends
that spell it differently (SQL Server, older Oracle) need a Select statement
and paginate_select instead.
"""

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from pagedquery.core.exceptions import DataSourceError
from pagedquery.core.pager import PagerOptions, build_options
from pagedquery.core.pagination import (
    CountStrategy,
    FetchMode,
    PageResult,
    assemble_page,
    build_pager,
    count_query_for,
    fetch_window,
    log_full_fetch,
    strip_terminator,
)

logger = logging.getLogger(__name__)


def bounded_statement(query: str, offset: int, limit: int) -> TextClause:
    """<query> LIMIT :_pq_limit OFFSET :_pq_offset"""
    return text(
        f"{strip_terminator(query)} LIMIT :_pq_limit OFFSET :_pq_offset"
    ).bindparams(_pq_limit=int(limit), _pq_offset=int(offset))


def shape_rows(result: Any, fetch_mode: FetchMode) -> List[Any]:
    rows = result.all()
    if fetch_mode == FetchMode.ASSOC:
        return [dict(row._mapping) for row in rows]
    if fetch_mode == FetchMode.ORDERED:
        return [tuple(row) for row in rows]
    return list(rows)


def _count_plan(options: PagerOptions, query: str):
    if options.total_items is not None:
        return None, CountStrategy.SUPPLIED
    count_query = count_query_for(query)
    if count_query is None:
        log_full_fetch(query)
        return None, CountStrategy.FULL_FETCH
    logger.debug(f"Count query: {count_query}")
    return count_query, CountStrategy.COUNT_QUERY


def paginate_sql(
    conn: Any,
    query: str,
    pager_options: Any = None,
    disabled: bool = False,
    params: Optional[Mapping[str, Any]] = None,
    fetch_mode: FetchMode = FetchMode.ASSOC,
) -> PageResult:
    """
    Page a textual SQL query on a SQLAlchemy Connection or Session.

    Args:
        conn: SQLAlchemy Connection or Session
        query: SELECT statement with :named bind parameters
        pager_options: PagerOptions or mapping (perPage, totalItems, ...)
        disabled: Return every row on a single page
        params: Bind parameter values, used for both queries
        fetch_mode: Shape of the returned rows

    Returns:
        PageResult for the requested page

    Raises:
        DataSourceError: If the count or the fetch query fails
        ConstructionError: If the pager options are invalid
    """
    options = build_options(pager_options)
    query = strip_terminator(query)
    params = dict(params or {})
    count_query, strategy = _count_plan(options, query)

    total_items = None
    try:
        if strategy == CountStrategy.COUNT_QUERY:
            total_items = conn.execute(text(count_query), params).scalar()
        elif strategy == CountStrategy.FULL_FETCH:
            total_items = len(conn.execute(text(query), params).all())
    except SQLAlchemyError as e:
        logger.error(f"Count query failed: {e}")
        raise DataSourceError(f"Count query failed: {e}") from e

    pager = build_pager(options, total_items)
    offset, limit = fetch_window(pager, disabled)

    try:
        result = conn.execute(bounded_statement(query, offset, limit), params)
        rows = shape_rows(result, FetchMode(fetch_mode))
    except SQLAlchemyError as e:
        logger.error(f"Paged query failed: {e}")
        raise DataSourceError(f"Paged query failed: {e}") from e

    return assemble_page(pager, rows, strategy, disabled)


async def paginate_sql_async(
    conn: Any,
    query: str,
    pager_options: Any = None,
    disabled: bool = False,
    params: Optional[Mapping[str, Any]] = None,
    fetch_mode: FetchMode = FetchMode.ASSOC,
) -> PageResult:
    """
    Page a textual SQL query on an AsyncConnection or AsyncSession.

    Same arguments and errors as paginate_sql.
    """
    options = build_options(pager_options)
    query = strip_terminator(query)
    params = dict(params or {})
    count_query, strategy = _count_plan(options, query)

    total_items = None
    try:
        if strategy == CountStrategy.COUNT_QUERY:
            result = await conn.execute(text(count_query), params)
            total_items = result.scalar()
        elif strategy == CountStrategy.FULL_FETCH:
            result = await conn.execute(text(query), params)
            total_items = len(result.all())
    except SQLAlchemyError as e:
        logger.error(f"Count query failed: {e}")
        raise DataSourceError(f"Count query failed: {e}") from e

    pager = build_pager(options, total_items)
    offset, limit = fetch_window(pager, disabled)

    try:
        result = await conn.execute(bounded_statement(query, offset, limit), params)
        rows = shape_rows(result, FetchMode(fetch_mode))
    except SQLAlchemyError as e:
        logger.error(f"Paged query failed: {e}")
        raise DataSourceError(f"Paged query failed: {e}") from e

    return assemble_page(pager, rows, strategy, disabled)
