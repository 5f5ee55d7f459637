"""
paginate_dbapi tests on a stdlib sqlite3 connection
"""
import sqlite3
from unittest.mock import MagicMock

import pytest

from pagedquery.core.exceptions import DataSourceError
from pagedquery.core.pagination import CountStrategy, FetchMode
from pagedquery.wrappers.dbapi import limit_query, paginate_dbapi


QUERY = "SELECT id, name FROM t ORDER BY id"
GROUPED_QUERY = "SELECT grp, COUNT(*) AS n FROM t GROUP BY grp ORDER BY grp"


class TestLimitQuery:
    def test_appends_limit_offset(self):
        assert limit_query("SELECT id FROM t", 10, 5) == (
            "SELECT id FROM t LIMIT 5 OFFSET 10"
        )

    def test_strips_trailing_semicolon(self):
        assert limit_query("SELECT id FROM t;\n", 0, 5) == (
            "SELECT id FROM t LIMIT 5 OFFSET 0"
        )


class TestPaginateDbapi:
    """Counted and bounded paging on DB-API"""

    def test_second_page(self, sqlite_db):
        """25 rows, 10 per page, page 2: rows 11-20 via one count + one bounded fetch"""
        page = paginate_dbapi(sqlite_db.conn, QUERY, {"perPage": 10, "currentPage": 2})

        assert page.total_items == 25
        assert page.count_strategy == CountStrategy.COUNT_QUERY
        assert page.page_numbers == {"current": 2, "total": 3}
        assert (page.from_index, page.to_index) == (11, 20)
        assert [row["id"] for row in page.rows] == list(range(11, 21))
        assert page.rows[0] == {"id": 11, "name": "row11"}
        assert sqlite_db.statements == [
            "SELECT COUNT(*) FROM t",
            "SELECT id, name FROM t ORDER BY id LIMIT 10 OFFSET 10",
        ]

    @pytest.mark.parametrize("page_id", [1, 2, 3])
    def test_row_count_per_page(self, sqlite_db, page_id):
        page = paginate_dbapi(
            sqlite_db.conn, QUERY, {"perPage": 10, "currentPage": page_id}
        )

        assert len(page.rows) == min(10, page.total_items - (page.from_index - 1))

    def test_page_from_request_params(self, sqlite_db):
        page = paginate_dbapi(
            sqlite_db.conn, QUERY, {"perPage": 10, "requestParams": {"pageID": "3"}}
        )

        assert page.current_page == 3
        assert [row["id"] for row in page.rows] == list(range(21, 26))
        assert page.has_more is False

    def test_grouped_query_counts_full_result(self, sqlite_db):
        """GROUP BY queries are counted by fetching every group"""
        page = paginate_dbapi(
            sqlite_db.conn, GROUPED_QUERY, {"perPage": 2, "currentPage": 3}
        )

        assert page.total_items == 5
        assert page.total_pages == 3
        assert page.count_strategy == CountStrategy.FULL_FETCH
        assert page.rows == [{"grp": "e", "n": 5}]
        assert sqlite_db.statements[0] == GROUPED_QUERY
        assert len(sqlite_db.statements) == 2

    def test_supplied_total_skips_count(self, sqlite_db):
        page = paginate_dbapi(
            sqlite_db.conn, QUERY, {"perPage": 10, "totalItems": 25, "currentPage": 2}
        )

        assert page.count_strategy == CountStrategy.SUPPLIED
        assert len(page.rows) == 10
        assert sqlite_db.statements == [
            "SELECT id, name FROM t ORDER BY id LIMIT 10 OFFSET 10"
        ]

    def test_disabled_returns_everything(self, sqlite_db):
        page = paginate_dbapi(
            sqlite_db.conn, QUERY, {"perPage": 10, "currentPage": 2}, disabled=True
        )

        assert len(page.rows) == page.total_items == 25
        assert page.total_pages == 1
        assert page.current_page == 1
        assert page.links == ""

    def test_disabled_bounded_by_supplied_total(self, sqlite_db):
        """Disabled paging fetches totalItems rows from the start"""
        page = paginate_dbapi(
            sqlite_db.conn, QUERY, {"perPage": 10, "totalItems": 5}, disabled=True
        )

        assert [row["id"] for row in page.rows] == [1, 2, 3, 4, 5]
        assert sqlite_db.statements == [
            "SELECT id, name FROM t ORDER BY id LIMIT 5 OFFSET 0"
        ]

    def test_bind_params(self, sqlite_db):
        """Placeholders are bound in both the count and the fetch"""
        page = paginate_dbapi(
            sqlite_db.conn,
            "SELECT id FROM t WHERE grp = ? ORDER BY id",
            {"perPage": 2, "currentPage": 2},
            params=("a",),
            fetch_mode=FetchMode.ORDERED,
        )

        assert page.total_items == 5
        assert page.rows == [(15,), (20,)]

    def test_object_fetch_mode(self, sqlite_db):
        sqlite_db.conn.row_factory = sqlite3.Row
        page = paginate_dbapi(
            sqlite_db.conn, QUERY, {"perPage": 3}, fetch_mode=FetchMode.OBJECT
        )

        assert isinstance(page.rows[0], sqlite3.Row)
        assert page.rows[0]["name"] == "row1"

    def test_empty_result(self, sqlite_db):
        page = paginate_dbapi(
            sqlite_db.conn, "SELECT id FROM t WHERE grp = 'z'", {"perPage": 10}
        )

        assert page.total_items == 0
        assert page.rows == []
        assert page.total_pages == 1
        assert page.links == ""

    def test_same_page_twice_is_identical(self, sqlite_db):
        options = {"perPage": 7, "currentPage": 3}

        first = paginate_dbapi(sqlite_db.conn, QUERY, options)
        second = paginate_dbapi(sqlite_db.conn, QUERY, options)

        assert first.rows == second.rows

    def test_failing_query_raises_data_source_error(self, sqlite_db):
        with pytest.raises(DataSourceError) as exc_info:
            paginate_dbapi(sqlite_db.conn, "SELECT id FROM missing", {"perPage": 10})

        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    def test_failing_fetch_with_supplied_total(self, sqlite_db):
        with pytest.raises(DataSourceError):
            paginate_dbapi(
                sqlite_db.conn, "SELECT nope FROM t", {"perPage": 10, "totalItems": 3}
            )


class DriverError(Exception):
    pass


def failing_connection():
    """Connection double whose cursors fail on execute."""
    cursor = MagicMock()
    cursor.execute.side_effect = DriverError("connection lost")
    conn = MagicMock()
    conn.cursor.return_value = cursor
    conn.Error = DriverError
    return conn, cursor


class TestCursorCleanup:
    """Cursors are closed even when the query fails"""

    @pytest.mark.parametrize(
        "options", [{"perPage": 10}, {"perPage": 10, "totalItems": 25}]
    )
    def test_cursor_closed_on_error(self, options):
        conn, cursor = failing_connection()

        with pytest.raises(DataSourceError) as exc_info:
            paginate_dbapi(conn, QUERY, options)

        assert isinstance(exc_info.value.__cause__, DriverError)
        cursor.close.assert_called_once()
