"""
Incremental windowing over a session list.

PURPOSE: Track how many pages of an already filtered and sorted list are
visible, the way an infinite-scroll list grows.
AI CONTEXT: The only stateful engine piece. One owner mutates it through
load_more / go_to_page / reset / set_source.

RESET RULE:
Whenever the source sequence is replaced by a different object (new filter,
new search term, reloaded snapshot) the window returns to page 0. Keeping
the old page against a new source would show a stale or out-of-range window.

USAGE:
    window = PaginationWindow(sorted_sessions)
    first_page = window.visible()
    if window.has_more():
        window.load_more()
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from .config import Config

__all__ = ["PaginationWindow"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PaginationWindow(Generic[T]):
    """
    Window of the first (current_page + 1) * page_size items of a source.

    DESIGN:
    - The source is held by reference and never copied or mutated
    - current_page is 0-indexed and only moves through the public methods
    - load_more() ignores calls made while a previous call is still running,
      e.g. from an on_page_loaded listener reacting to the new page

    Example:
        >>> window = PaginationWindow(list(range(50)), page_size=20)
        >>> window.load_more(); window.load_more()
        True
        True
        >>> len(window.visible()), window.has_more()
        (50, False)
    """

    def __init__(
        self,
        source: Sequence[T] = (),
        page_size: int | None = None,
        on_page_loaded: Callable[[PaginationWindow[T]], None] | None = None,
    ) -> None:
        """
        Initialize window over a source sequence.

        Args:
            source: Filtered, sorted sequence to window over.
            page_size: Items per page. Default: Config.PAGE_SIZE (20)
            on_page_loaded: Optional callback invoked after load_more()
                advances a page, receiving this window.

        Raises:
            ValueError: If page_size is less than 1.
        """
        self.page_size = Config.PAGE_SIZE if page_size is None else page_size
        if self.page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {self.page_size}")
        self._source: Sequence[T] = source
        self._current_page = 0
        self._loading = False
        self._on_page_loaded = on_page_loaded

    @property
    def source(self) -> Sequence[T]:
        return self._source

    @property
    def current_page(self) -> int:
        """0-indexed page the window currently extends to."""
        return self._current_page

    @property
    def total_pages(self) -> int:
        """Pages needed to show the whole source; 0 for an empty source."""
        return math.ceil(len(self._source) / self.page_size)

    def visible(self) -> list[T]:
        """Items currently shown: the first (current_page + 1) * page_size."""
        return list(self._source[: (self._current_page + 1) * self.page_size])

    def has_more(self) -> bool:
        """True while part of the source is still hidden."""
        return (self._current_page + 1) * self.page_size < len(self._source)

    def load_more(self) -> bool:
        """
        Advance the window by one page.

        No-op when nothing is hidden or when called re-entrantly while a
        previous load_more() is still in progress, so overlapping scroll
        triggers never skip a page.

        Business context: The session list fires this when the user scrolls
        near the bottom; several threshold events can arrive for one scroll.

        Returns:
            True if a page was added, False otherwise.
        """
        if self._loading:
            logger.debug("load_more ignored: load already in progress")
            return False
        if not self.has_more():
            return False
        self._loading = True
        try:
            self._current_page += 1
            if self._on_page_loaded is not None:
                self._on_page_loaded(self)
        finally:
            self._loading = False
        return True

    def go_to_page(self, page: int) -> bool:
        """
        Jump so the window extends to `page` (0-indexed).

        Returns:
            True if the page exists and was applied; out-of-range pages are
            ignored and return False.
        """
        if page < 0 or page >= max(1, self.total_pages):
            return False
        self._current_page = page
        return True

    def reset(self) -> None:
        """Return to the first page."""
        self._current_page = 0
        self._loading = False

    def set_source(self, source: Sequence[T]) -> None:
        """
        Replace the windowed sequence.

        Resets to page 0 whenever `source` is a different object from the
        current one. Passing the same object again keeps the position.
        """
        if source is self._source:
            return
        self._source = source
        self.reset()
