from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Generic, List, Sequence, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class PageCursor:
    page_index: int = 0
    page_size: int = 3

    def __post_init__(self) -> None:
        object.__setattr__(self, "page_index", max(0, int(self.page_index)))
        object.__setattr__(self, "page_size", max(1, int(self.page_size)))


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    page_index: int
    page_size: int
    total_pages: int
    total_items: int

    @property
    def can_go_next(self) -> bool:
        return self.page_index + 1 < self.total_pages

    @property
    def can_go_previous(self) -> bool:
        return self.page_index > 0


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(max(0, count) / max(1, page_size))


def paginate(items: Sequence[T], page_size: int, page_index: int) -> List[T]:
    size = max(1, page_size)
    index = max(0, page_index)
    return list(items[index * size:(index + 1) * size])


def reconcile(cursor: PageCursor, count: int) -> PageCursor:
    """Reset to the first page if the cursor no longer points inside ``count`` items."""
    if cursor.page_index == 0 or cursor.page_index < total_pages(count, cursor.page_size):
        return cursor
    return replace(cursor, page_index=0)


def next_page(cursor: PageCursor, count: int) -> PageCursor:
    if cursor.page_index + 1 < total_pages(count, cursor.page_size):
        return replace(cursor, page_index=cursor.page_index + 1)
    return cursor


def previous_page(cursor: PageCursor) -> PageCursor:
    if cursor.page_index > 0:
        return replace(cursor, page_index=cursor.page_index - 1)
    return cursor


def first_page(cursor: PageCursor) -> PageCursor:
    return cursor if cursor.page_index == 0 else replace(cursor, page_index=0)


def build_page(items: Sequence[T], cursor: PageCursor) -> Page[T]:
    cursor = reconcile(cursor, len(items))
    return Page(
        items=paginate(items, cursor.page_size, cursor.page_index),
        page_index=cursor.page_index,
        page_size=cursor.page_size,
        total_pages=total_pages(len(items), cursor.page_size),
        total_items=len(items),
    )
