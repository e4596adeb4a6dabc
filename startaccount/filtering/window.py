from collections.abc import Sequence
from typing import Generic, TypeVar

from startaccount.config import ACCOUNTS_PER_PAGE

T = TypeVar("T")


class CatalogWindow(Generic[T]):
    """
    Incrementally revealed window over a result list.

    Starts with one page visible; each `load_more` reveals another page.
    Once everything is visible, `load_more` is a no-op.
    """

    def __init__(self, items: Sequence[T], page_size: int = ACCOUNTS_PER_PAGE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._items = list(items)
        self.page_size = page_size
        self.pages = 1

    @classmethod
    def at_page(
        cls, items: Sequence[T], page: int, page_size: int = ACCOUNTS_PER_PAGE
    ) -> "CatalogWindow[T]":
        """Window with `page` pages revealed (clamped to what exists)."""
        window = cls(items, page_size)
        for _ in range(max(page, 1) - 1):
            if not window.load_more():
                break
        return window

    @property
    def total(self) -> int:
        return len(self._items)

    @property
    def visible_count(self) -> int:
        return min(self.pages * self.page_size, self.total)

    @property
    def visible(self) -> list[T]:
        return self._items[: self.visible_count]

    @property
    def has_more(self) -> bool:
        return self.total > self.pages * self.page_size

    def load_more(self) -> bool:
        """Reveal the next page. Returns False (and changes nothing) when exhausted."""
        if not self.has_more:
            return False
        self.pages += 1
        return True

    def reset(self, items: Sequence[T] | None = None) -> None:
        """Back to the first page, optionally over a new result list."""
        if items is not None:
            self._items = list(items)
        self.pages = 1
