"""
pagedquery - page the result of a query without fetching the whole result set.

Sample usage:

    from pagedquery import paginate_sql

    page = paginate_sql(conn, "SELECT this, that FROM mytable",
                        {"mode": "Sliding", "delta": 2, "perPage": 15})
    page.rows          # paged data
    page.links         # HTML links for page navigation
    page.page_numbers  # {"current": ..., "total": ...}
"""

from pagedquery.core.exceptions import (
    ConstructionError,
    DataSourceError,
    PaginationError,
)
from pagedquery.core.pager import Pager, PagerMode, PagerOptions
from pagedquery.core.pagination import CountStrategy, FetchMode, PageResult
from pagedquery.wrappers import (
    paginate_dbapi,
    paginate_rows,
    paginate_select,
    paginate_select_async,
    paginate_sql,
    paginate_sql_async,
)

__all__ = [
    "ConstructionError",
    "DataSourceError",
    "PaginationError",
    "Pager",
    "PagerMode",
    "PagerOptions",
    "CountStrategy",
    "FetchMode",
    "PageResult",
    "paginate_dbapi",
    "paginate_rows",
    "paginate_select",
    "paginate_select_async",
    "paginate_sql",
    "paginate_sql_async",
]
