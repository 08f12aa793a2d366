import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Protocol, TypeVar
from urllib.parse import parse_qs, urlparse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Link(Protocol):
    href: str
    start: str | None


class _Named(Protocol):
    @property
    def name(self) -> str: ...


N = TypeVar("N", bound=_Named)

# fetch_page(start) -> (records on this page, start cursor of the next page or None)
PageFetcher = Callable[[str | None], Awaitable[tuple[list[T], str | None]]]


def get_next_start(next_link: _Link | None) -> str | None:
    """Cursor for the page after this one, or None on the last page."""
    if next_link is None:
        return None
    if next_link.start:
        return next_link.start
    values = parse_qs(urlparse(next_link.href).query).get("start")
    return values[0] if values and values[0] else None


async def collect_pages(fetch_page: PageFetcher[T]) -> list[T]:
    """Fetch every page in order and return all records.

    There is no page cap: the loop runs until a page comes back without a
    cursor. Any fetch error propagates and the records gathered so far are
    dropped with the local list.
    """
    records: list[T] = []
    start: str | None = None
    pages = 0
    while True:
        items, start = await fetch_page(start)
        pages += 1
        records.extend(items)
        if not start:
            break
    logger.debug("Pages collected", extra={"pages": pages, "record_count": len(records)})
    return records


def find_by_name(records: Iterable[N], name: str) -> N | None:
    """First record whose name equals ``name`` exactly (case-sensitive)."""
    for record in records:
        if record.name == name:
            return record
    return None
