"""Bounded, ordered paging over querysets.

Pages are 1-based at every external boundary and translated here to a
0-based offset. Querysets must carry an explicit ordering so that slices
are stable between requests.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from django.conf import settings
from django.db.models import QuerySet

from .errors import ValidationFailedError

# Keeps the computed offset inside a 64-bit database integer.
MAX_PAGE_NUMBER = 1_000_000


def _default_size() -> int:
    return getattr(settings, "DEFAULT_PAGE_SIZE", 10)


def _max_size() -> int:
    return getattr(settings, "MAX_PAGE_SIZE", 100)


def bounded_limit(limit: int) -> int:
    """Clamp a result-count limit to ``0..MAX_PAGE_SIZE``."""
    return min(max(limit, 0), _max_size())


def _to_int(field: str, value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailedError({field: "Must be an integer."})


@dataclass(frozen=True)
class PageRequest:
    """A 1-based page number and a positive page size."""

    page: int = 1
    size: int = 10

    @classmethod
    def of(cls, page: int | None = None, size: int | None = None) -> "PageRequest":
        """Normalize raw values: ``page`` is clamped to ``1..MAX_PAGE_NUMBER``, ``size <= 0`` becomes the default."""
        page = min(max(page or 1, 1), MAX_PAGE_NUMBER)
        if size is None or size <= 0:
            size = _default_size()
        return cls(page=page, size=min(size, _max_size()))

    @classmethod
    def from_params(cls, params, default_size: int | None = None) -> "PageRequest":
        """Build a request from query parameters (``page``, ``size``)."""
        page = _to_int("page", params.get("page"))
        size = _to_int("size", params.get("size"))
        if size is None:
            size = default_size
        return cls.of(page, size)

    @property
    def index(self) -> int:
        """0-based page index."""
        return self.page - 1

    @property
    def offset(self) -> int:
        return self.index * self.size


@dataclass(frozen=True)
class Page:
    items: Sequence[Any]
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.total_elements == 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def map(self, func: Callable[[Any], Any]) -> "Page":
        """Return a page with each item transformed, keeping the counters."""
        return Page(
            items=[func(item) for item in self.items],
            page=self.page,
            size=self.size,
            total_elements=self.total_elements,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": list(self.items),
            "page": self.page,
            "size": self.size,
            "total_elements": self.total_elements,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def paginate(queryset: QuerySet, page_request: PageRequest) -> Page:
    """Slice an ordered queryset into a :class:`Page`."""
    if not queryset.ordered:
        raise ValueError("paginate() requires an ordered queryset")
    total = queryset.count()
    start = page_request.offset
    items = list(queryset[start:start + page_request.size])
    return Page(
        items=items,
        page=page_request.page,
        size=page_request.size,
        total_elements=total,
    )


__all__ = ["MAX_PAGE_NUMBER", "PageRequest", "Page", "bounded_limit", "paginate"]
