"""
Paging over a plain DB-API 2 (PEP 249) connection.
"""

import logging
from contextlib import closing
from typing import Any, List, Optional, Sequence

from pagedquery.core.exceptions import DataSourceError
from pagedquery.core.pager import build_options
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


def limit_query(query: str, offset: int, limit: int) -> str:
    """Append LIMIT/OFFSET to a query (MySQL, PostgreSQL and SQLite syntax)."""
    return f"{strip_terminator(query)} LIMIT {int(limit)} OFFSET {int(offset)}"


def _shape_rows(cursor: Any, rows: Sequence[Any], fetch_mode: FetchMode) -> List[Any]:
    if fetch_mode == FetchMode.ASSOC:
        columns = [col[0] for col in cursor.description or ()]
        return [dict(zip(columns, row)) for row in rows]
    if fetch_mode == FetchMode.ORDERED:
        return [tuple(row) for row in rows]
    return list(rows)


def paginate_dbapi(
    conn: Any,
    query: str,
    pager_options: Any = None,
    disabled: bool = False,
    params: Optional[Any] = None,
    fetch_mode: FetchMode = FetchMode.ASSOC,
) -> PageResult:
    """
    Page the result of a SQL query run on a DB-API connection.

    Args:
        conn: DB-API 2 connection (sqlite3, psycopg, pymysql, ...)
        query: SELECT statement, placeholders in the driver's paramstyle
        pager_options: PagerOptions or mapping (perPage, totalItems, ...)
        disabled: Return every row on a single page
        params: Bind parameters for the placeholders, used for both queries
        fetch_mode: Shape of the returned rows

    Returns:
        PageResult for the requested page

    Raises:
        DataSourceError: If the count or the fetch query fails
        ConstructionError: If the pager options are invalid
    """
    options = build_options(pager_options)
    query = strip_terminator(query)
    bind = params if params is not None else ()
    # PEP 249 optional extension: the driver's exception base on the connection
    db_error = getattr(conn, "Error", Exception)

    total_items = None
    strategy = CountStrategy.SUPPLIED
    if options.total_items is None:
        count_query = count_query_for(query)
        try:
            with closing(conn.cursor()) as cursor:
                if count_query is not None:
                    logger.debug(f"Count query: {count_query}")
                    cursor.execute(count_query, bind)
                    total_items = int(cursor.fetchone()[0])
                    strategy = CountStrategy.COUNT_QUERY
                else:
                    log_full_fetch(query)
                    cursor.execute(query, bind)
                    total_items = len(cursor.fetchall())
                    strategy = CountStrategy.FULL_FETCH
        except db_error as e:
            logger.error(f"Count query failed: {e}")
            raise DataSourceError(f"Count query failed: {e}") from e

    pager = build_pager(options, total_items)
    offset, limit = fetch_window(pager, disabled)

    try:
        with closing(conn.cursor()) as cursor:
            cursor.execute(limit_query(query, offset, limit), bind)
            rows = _shape_rows(cursor, cursor.fetchall(), FetchMode(fetch_mode))
    except db_error as e:
        logger.error(f"Paged query failed: {e}")
        raise DataSourceError(f"Paged query failed: {e}") from e

    return assemble_page(pager, rows, strategy, disabled)
