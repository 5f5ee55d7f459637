"""Paginate wrappers, one per data-access layer"""

from .dbapi import paginate_dbapi
from .sql import paginate_sql, paginate_sql_async
from .orm import paginate_select, paginate_select_async
from .rows import paginate_rows

__all__ = [
    "paginate_dbapi",
    "paginate_sql",
    "paginate_sql_async",
    "paginate_select",
    "paginate_select_async",
    "paginate_rows",
]
