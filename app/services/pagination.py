"""
Paginated Scanning
One lazy page iterator shared by decision log listing and review queue scans
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterator, List, Optional, TypeVar

import structlog

from app.exceptions import ScanCancelledError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of results plus the token needed to fetch the next one."""

    items: List[T] = field(default_factory=list)
    next_token: Optional[Any] = None


def iterate_pages(
    fetch_page: Callable[[Optional[Any]], Page[T]],
    cancel_event: Optional[threading.Event] = None,
    start_token: Optional[Any] = None,
) -> Iterator[Page[T]]:
    """
    Yield pages until the continuation token is exhausted.

    The sequence is lazy: nothing is fetched until the caller asks for the
    next page, and a scan can be restarted from any token it has seen.

    Args:
        fetch_page: Callable taking a continuation token (None for the first page)
        cancel_event: Set by the caller to stop before the next page fetch
        start_token: Token to resume from

    Raises:
        ScanCancelledError: If cancel_event is set before a page is fetched
    """
    token = start_token
    pages = 0
    while True:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("scan_cancelled", pages_fetched=pages)
            raise ScanCancelledError("Scan cancelled by caller")

        page = fetch_page(token)
        pages += 1
        yield page

        if page.next_token is None:
            return
        token = page.next_token
