from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Generic, TypeVar

from typing_extensions import TypedDict

T = TypeVar("T")

__all__ = [
    "PageRequest",
    "PageResponse",
    "parse_page_params",
    "make_page_response",
    "PaginationError",
]

# ---- Contracts -----------------------------------------------------------------

class PageRequest(TypedDict):
    page: int  # 1-based
    size: int


class PageResponse(TypedDict, Generic[T]):  # type: ignore[misc]
    data: list[T]
    count: int  # rows matching the filter, independent of page
    page: int
    pageSize: int


class PaginationError(ValueError):
    """Raised when pagination query params are invalid."""


DEFAULT_PAGE = 1
DEFAULT_SIZE = 20
MAX_SIZE = 100


def parse_page_params(args: Mapping[str, str | None]) -> PageRequest:
    """Parse pagination query params from a dict-like (e.g. request.args).

    Non-numeric input raises PaginationError; numeric input is clamped to
    page >= 1 and 1 <= pageSize <= MAX_SIZE.
    """
    page_raw = args.get("page")
    size_raw = args.get("pageSize")

    try:
        page = int(page_raw) if page_raw else DEFAULT_PAGE
    except ValueError as e:
        raise PaginationError("invalid page parameter") from e
    try:
        size = int(size_raw) if size_raw else DEFAULT_SIZE
    except ValueError as e:
        raise PaginationError("invalid pageSize parameter") from e

    page = max(1, page)
    size = min(MAX_SIZE, max(1, size))
    return PageRequest(page=page, size=size)


def make_page_response(items: Sequence[T], page_req: PageRequest, total: int) -> PageResponse[T]:
    return PageResponse(  # type: ignore[call-arg]
        data=list(items),
        count=total,
        page=page_req["page"],
        pageSize=page_req["size"],
    )
