"""
Pagination utilities shared by every paginate_* wrapper.

Each wrapper runs the same recipe against its own data-access layer:
1. Resolve the total number of rows (supplied, COUNT(*) rewrite, or full fetch)
2. Build a Pager from the total and the caller's options
3. Compute the offset/limit window of the requested page
4. Run the bounded query and assemble a PageResult

The steps that do not touch the database live here.
"""

import enum
import logging
import re
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel

from pagedquery.core.exceptions import ConstructionError
from pagedquery.core.pager import Pager, PagerOptions

logger = logging.getLogger(__name__)

# Clauses after which SELECT COUNT(*) no longer counts the result rows
_FULL_COUNT_PATTERN = re.compile(r"\bGROUP\s+BY\b|\bDISTINCT\b|\bUNION\b", re.IGNORECASE)
_FROM_PATTERN = re.compile(r"\sFROM\s", re.IGNORECASE)
_ORDER_BY_PATTERN = re.compile(r"\bORDER\s+BY\s", re.IGNORECASE)
_LIMIT_PATTERN = re.compile(r"\bLIMIT\s", re.IGNORECASE)


class CountStrategy(str, enum.Enum):
    SUPPLIED = "supplied"
    COUNT_QUERY = "count_query"
    FULL_FETCH = "full_fetch"


class FetchMode(str, enum.Enum):
    """Shape of the rows placed in PageResult.rows."""

    ASSOC = "assoc"  # dict keyed by column name
    ORDERED = "ordered"  # tuple in column order
    OBJECT = "object"  # the driver's own row object


class PageResult(BaseModel):
    """A page of rows plus its pagination metadata."""

    rows: List[Any]
    total_items: int
    current_page: int
    total_pages: int
    from_index: int
    to_index: int
    limit: int
    links: str
    per_page_select_box: Optional[str] = None
    count_strategy: CountStrategy
    has_more: bool

    @property
    def page_numbers(self) -> dict:
        return {"current": self.current_page, "total": self.total_pages}


def strip_terminator(query: str) -> str:
    """Drop trailing whitespace and statement terminators (`;`)."""
    return query.rstrip().rstrip(";").rstrip()


def count_query_for(query: str) -> Optional[str]:
    """
    Rewrite a SELECT into a cheap COUNT(*) over the same rows.

    The select list up to the first FROM is replaced with COUNT(*), and
    anything from ORDER BY or LIMIT onwards is dropped.

    Returns:
        The count query, or None when a rewrite would miscount (GROUP BY,
        DISTINCT, UNION, no FROM clause) and the rows must be counted instead
    """
    if _FULL_COUNT_PATTERN.search(query):
        return None
    match = _FROM_PATTERN.search(query)
    if match is None:
        return None
    count_query = "SELECT COUNT(*)" + query[match.start():]
    count_query = _ORDER_BY_PATTERN.split(count_query, maxsplit=1)[0]
    count_query = _LIMIT_PATTERN.split(count_query, maxsplit=1)[0]
    return count_query.rstrip()


def log_full_fetch(query: Any) -> None:
    logger.warning(
        f"Counting rows by fetching the full result set (query cannot be "
        f"rewritten to COUNT(*)): {query}"
    )


def build_pager(options: PagerOptions, total_items: Optional[int] = None) -> Pager:
    """
    Build the Pager, filling in total_items when it was computed.

    Raises:
        ConstructionError: If the resulting options are invalid
    """
    if total_items is not None:
        if total_items < 0:
            raise ConstructionError(f"totalItems must be >= 0, got {total_items}")
        options = options.model_copy(update={"total_items": int(total_items)})
    return Pager(options)


def fetch_window(pager: Pager, disabled: bool = False) -> Tuple[int, int]:
    """
    Offset (0-based) and limit of the bounded fetch.

    Disabled paging fetches all total_items rows from offset 0.
    """
    if disabled:
        return 0, pager.total_items
    from_index, _ = pager.offset_by_page_id()
    return from_index - 1, pager.per_page


def assemble_page(
    pager: Pager,
    rows: List[Any],
    count_strategy: CountStrategy,
    disabled: bool = False,
    per_page_select_box: Optional[str] = None,
) -> PageResult:
    """
    Build the PageResult for the fetched rows.

    When paging is disabled the links are emptied and the page numbers are
    forced to 1/1, whatever the real counts are.
    """
    from_index, to_index = pager.offset_by_page_id()
    if disabled:
        links = ""
        current_page, total_pages = 1, 1
    else:
        links = pager.links
        current_page, total_pages = pager.current_page, pager.total_pages

    return PageResult(
        rows=rows,
        total_items=pager.total_items,
        current_page=current_page,
        total_pages=total_pages,
        from_index=from_index,
        to_index=to_index,
        limit=max(to_index - from_index + 1, 0),
        links=links,
        per_page_select_box=per_page_select_box,
        count_strategy=count_strategy,
        has_more=current_page < total_pages,
    )
