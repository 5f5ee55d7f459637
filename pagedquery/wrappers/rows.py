"""
Paging an already executed result held in memory.

Use when the query layer hands back the complete result (a list, a
fetched SQLAlchemy Result, a cursor's fetchall()). No query is issued: the
page is sliced from the rows and the total defaults to their count.
"""

from typing import Any, Iterable

from pagedquery.core.pager import build_options
from pagedquery.core.pagination import (
    CountStrategy,
    PageResult,
    assemble_page,
    build_pager,
    fetch_window,
)


def paginate_rows(
    rows: Iterable[Any],
    pager_options: Any = None,
    disabled: bool = False,
) -> PageResult:
    """
    Page a materialised row sequence.

    The current page comes from currentPage or from request_params[urlVar],
    clamped to the last page. The result also carries a per-page select box.

    Raises:
        ConstructionError: If the pager options are invalid
    """
    options = build_options(pager_options)
    rows = list(rows)

    total_items = None
    strategy = CountStrategy.SUPPLIED
    if options.total_items is None:
        total_items = len(rows)
        strategy = CountStrategy.FULL_FETCH

    pager = build_pager(options, total_items)
    offset, limit = fetch_window(pager, disabled)
    page_rows = rows[offset:offset + limit]

    return assemble_page(
        pager,
        page_rows,
        strategy,
        disabled,
        per_page_select_box=pager.per_page_select_box(),
    )
