"""
Pager - page metadata and navigation links for an offset-paged result.

Computes the current page, the number of pages, the 1-based inclusive
row bounds of a page, and renders the HTML navigation links. Two page
range modes are supported:

- Jumping: pages are shown in fixed blocks of ``delta`` pages
  (1-10, 11-20, ...), the block containing the current page is shown.
- Sliding: a window of ``delta`` pages either side of the current page,
  with links to the first and last page when they fall outside it.
"""

import enum
import html
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from starlette.datastructures import URL

from pagedquery.core.config import config
from pagedquery.core.exceptions import ConstructionError


class PagerMode(str, enum.Enum):
    JUMPING = "Jumping"
    SLIDING = "Sliding"


class PagerOptions(BaseModel):
    """
    Options accepted by the pager and by every paginate_* wrapper.

    Keys can be given in the camelCase form used by query strings and
    config maps (``perPage``, ``totalItems``, ``urlVar``) or by field name.
    """

    total_items: Optional[int] = Field(None, ge=0, alias="totalItems")
    per_page: int = Field(
        default_factory=lambda: config.pager_per_page, ge=1, alias="perPage"
    )
    current_page: Optional[int] = Field(None, ge=1, alias="currentPage")
    mode: PagerMode = Field(default_factory=lambda: PagerMode(config.pager_mode))
    delta: int = Field(default_factory=lambda: config.pager_delta, ge=1)
    url_var: str = Field(
        default_factory=lambda: config.pager_url_var, min_length=1, alias="urlVar"
    )
    request_params: Optional[Mapping[str, Any]] = Field(None, alias="requestParams")
    path: str = ""

    # Link rendering
    prev_text: str = Field("&lt;&lt; Back", alias="prevText")
    next_text: str = Field("Next &gt;&gt;", alias="nextText")
    separator: str = " "
    link_class: str = Field("", alias="linkClass")
    cur_page_class: str = Field("current", alias="curPageClass")
    per_page_var: str = Field("setPerPage", alias="perPageVar")

    class Config:
        populate_by_name = True


def build_options(pager_options: Any = None, **overrides: Any) -> PagerOptions:
    """
    Normalise caller options into a PagerOptions instance.

    Accepts None, a mapping or a PagerOptions; ``overrides`` are applied on top.

    Raises:
        ConstructionError: If the options do not validate
    """
    if isinstance(pager_options, PagerOptions):
        data = pager_options.model_dump(exclude_unset=True)
    else:
        data = dict(pager_options or {})
    data.update(overrides)
    try:
        return PagerOptions.model_validate(data)
    except PydanticValidationError as e:
        raise ConstructionError(f"Invalid pager options: {e}") from e


class Pager:
    """
    Page metadata for ``total_items`` rows split into pages of ``per_page``.

    Raises:
        ConstructionError: If options.total_items is not set
    """

    def __init__(self, options: PagerOptions):
        if options.total_items is None:
            raise ConstructionError("Pager requires totalItems")
        self.options = options
        self.total_items = options.total_items
        self.per_page = options.per_page
        self.delta = options.delta
        self.mode = PagerMode(options.mode)
        self.total_pages = max(1, math.ceil(self.total_items / self.per_page))
        self.current_page = self._resolve_current_page()

    def _resolve_current_page(self) -> int:
        page = self.options.current_page
        if page is None:
            page = 1
            params = self.options.request_params or {}
            raw = params.get(self.options.url_var)
            if raw is not None:
                try:
                    page = int(raw)
                except (TypeError, ValueError):
                    page = 1
        return min(max(page, 1), self.total_pages)

    def is_first_page(self) -> bool:
        return self.current_page == 1

    def is_last_page(self) -> bool:
        return self.current_page == self.total_pages

    def offset_by_page_id(self, page_id: Optional[int] = None) -> Tuple[int, int]:
        """
        Row bounds (1-based, inclusive) of a page.

        For an empty result this is (1, 0): an empty range.
        """
        page = self.current_page if page_id is None else page_id
        start = max(self.per_page * (page - 1) + 1, 1)
        end = min(self.total_items, self.per_page * page)
        return start, end

    def page_range(self) -> range:
        """Page numbers shown in the navigation for the current page."""
        if self.mode == PagerMode.SLIDING:
            if self.total_pages <= 2 * self.delta + 1:
                return range(1, self.total_pages + 1)
            start = self.current_page - self.delta
            end = self.current_page + self.delta
            if start < 1:
                end += 1 - start
                start = 1
            if end > self.total_pages:
                start -= end - self.total_pages
                end = self.total_pages
            return range(start, end + 1)

        start = ((self.current_page - 1) // self.delta) * self.delta + 1
        end = min(start + self.delta - 1, self.total_pages)
        return range(start, end + 1)

    # Link rendering

    def page_url(self, page_id: int) -> str:
        url = URL(self.options.path).include_query_params(
            **{self.options.url_var: page_id}
        )
        return str(url)

    def _link(self, page_id: int, text: str, title: str) -> str:
        attrs = f'href="{html.escape(self.page_url(page_id))}"'
        if self.options.link_class:
            attrs += f' class="{html.escape(self.options.link_class)}"'
        return f'<a {attrs} title="{html.escape(title)}">{text}</a>'

    def _current(self, page_id: int) -> str:
        return f'<span class="{html.escape(self.options.cur_page_class)}">{page_id}</span>'

    def link_parts(self) -> Dict[str, str]:
        """
        Navigation links split into pieces.

        Keys: back, first, pages, last, next, all. Pieces that do not apply
        to the current page are empty strings.
        """
        parts = {"back": "", "first": "", "pages": "", "last": "", "next": "", "all": ""}
        if self.total_pages <= 1:
            return parts

        sep = self.options.separator
        if not self.is_first_page():
            parts["back"] = self._link(
                self.current_page - 1, self.options.prev_text, "previous page"
            )
        if not self.is_last_page():
            parts["next"] = self._link(
                self.current_page + 1, self.options.next_text, "next page"
            )

        pages = self.page_range()
        if self.mode == PagerMode.SLIDING:
            # "..." only where pages are skipped
            if pages.start > 1:
                parts["first"] = self._link(1, "1", "first page")
                if pages.start > 2:
                    parts["first"] += sep + "..."
            if pages.stop - 1 < self.total_pages:
                last = self._link(self.total_pages, str(self.total_pages), "last page")
                if pages.stop - 1 < self.total_pages - 1:
                    last = "..." + sep + last
                parts["last"] = last

        parts["pages"] = sep.join(
            self._current(n) if n == self.current_page
            else self._link(n, str(n), f"page {n}")
            for n in pages
        )
        parts["all"] = sep.join(
            p for p in (
                parts["back"], parts["first"], parts["pages"], parts["last"], parts["next"]
            ) if p
        )
        return parts

    @property
    def links(self) -> str:
        return self.link_parts()["all"]

    def per_page_select_box(
        self, start: int = 5, end: int = 30, step: int = 5, show_all: bool = False
    ) -> str:
        """
        Render a <select> with per-page choices, the current one selected.

        Raises:
            ConstructionError: If the range is empty or step is not positive
        """
        if step < 1 or start < 1 or end < start:
            raise ConstructionError(
                f"Invalid per-page range: start={start}, end={end}, step={step}"
            )
        choices: List[int] = list(range(start, end + 1, step))
        if show_all and self.total_items not in choices:
            choices.append(self.total_items)

        name = html.escape(self.options.per_page_var)
        options = []
        for value in choices:
            selected = ' selected="selected"' if value == self.per_page else ""
            label = "all" if show_all and value == self.total_items else str(value)
            options.append(f'<option value="{value}"{selected}>{label}</option>')
        return f'<select name="{name}">' + "".join(options) + "</select>"
