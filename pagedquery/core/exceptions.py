"""
Exception classes for paging failures.
"""

from fastapi import HTTPException, status


class PaginationError(HTTPException):
    """Base class for every failure of a paging attempt."""

    def __init__(self, status_code: int, message: str):
        super().__init__(status_code=status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class DataSourceError(PaginationError):
    """Raised when the count query or the bounded fetch fails."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class ConstructionError(PaginationError):
    """Raised when the pager cannot be built from the given options."""

    def __init__(self, message: str):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, message)
