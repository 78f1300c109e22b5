from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """One page of results.

    ``page`` and ``pages`` are set only in page mode, ``offset`` only in
    offset mode. ``pages`` is ``math.inf`` when ``limit`` is 0.
    """

    docs: list[T]
    total: int
    limit: int
    page: int | None = None
    pages: int | float | None = None
    offset: int | None = None

    @property
    def is_offset_mode(self) -> bool:
        return self.offset is not None

    @property
    def has_next(self) -> bool:
        if self.limit == 0:
            return False
        if self.is_offset_mode:
            return self.offset + self.limit < self.total
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        if self.is_offset_mode:
            return self.offset > 0
        return self.page > 1

    def as_dict(self) -> dict[str, Any]:
        """Return the result as a mapping without the other mode's fields."""
        data: dict[str, Any] = {"docs": self.docs, "total": self.total, "limit": self.limit}
        if self.is_offset_mode:
            data["offset"] = self.offset
        else:
            data["page"] = self.page
            data["pages"] = self.pages
        return data

    def __len__(self) -> int:
        return len(self.docs)


def is_unbounded(pages: int | float | None) -> bool:
    return isinstance(pages, float) and math.isinf(pages)
