"""
Tests for the shared page iterator.
"""

import threading

import pytest

from app.exceptions import ScanCancelledError
from app.services.pagination import Page, iterate_pages


def paged_source(pages):
    """fetch_page over a fixed list of item lists; tokens are page indexes."""
    calls = []

    def fetch(token):
        calls.append(token)
        index = token or 0
        next_token = index + 1 if index + 1 < len(pages) else None
        return Page(items=pages[index], next_token=next_token)

    return fetch, calls


class TestIteratePages:

    def test_walks_until_token_exhausted(self):
        fetch, calls = paged_source([[1, 2], [3], [4, 5]])

        items = [item for page in iterate_pages(fetch) for item in page.items]

        assert items == [1, 2, 3, 4, 5]
        assert calls == [None, 1, 2]

    def test_lazy(self):
        fetch, calls = paged_source([[1], [2]])

        pages = iterate_pages(fetch)
        assert calls == []
        next(pages)
        assert calls == [None]

    def test_resume_from_token(self):
        fetch, calls = paged_source([[1], [2], [3]])

        items = [item for page in iterate_pages(fetch, start_token=1) for item in page.items]

        assert items == [2, 3]

    @pytest.mark.parametrize("falsy_token", [0, ""])
    def test_falsy_token_continues(self, falsy_token):
        """Only a missing token ends the scan."""
        calls = []

        def fetch(token):
            calls.append(token)
            if token is None:
                return Page(items=["first"], next_token=falsy_token)
            return Page(items=["second"], next_token=None)

        items = [item for page in iterate_pages(fetch) for item in page.items]

        assert items == ["first", "second"]
        assert calls == [None, falsy_token]

    def test_cancel_between_pages(self):
        fetch, calls = paged_source([[1], [2], [3]])
        cancel_event = threading.Event()

        pages = iterate_pages(fetch, cancel_event=cancel_event)
        next(pages)
        cancel_event.set()

        with pytest.raises(ScanCancelledError):
            next(pages)
        assert calls == [None]
