"""Pagination options and their resolution into a concrete page plan."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mongo_paginate.paginate.result import PageResult
from mongo_paginate.utils.exceptions import InvalidPaginationOptions
from mongo_paginate.utils.types import (
    ProjectionSpec,
    SortSpec,
    normalize_populate,
    normalize_projection,
    normalize_sort,
)

DEFAULT_LIMIT = 10
DEFAULT_PAGE = 1


class PaginationOptions(BaseModel):
    """Options bag for a single paginate call.

    Every field defaults to ``None`` meaning "unset", so an options bag can be
    layered over a defaults bag with :meth:`merged_over`. Keys may be given
    in snake_case or as ``leanWithId``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    select: str | list[str] | dict[str, Any] | None = None
    sort: str | list[Any] | dict[str, Any] | None = None
    populate: str | list[Any] | dict[str, Any] | None = None
    lean: bool | None = None
    lean_with_id: bool | None = Field(default=None, alias="leanWithId")
    offset: int | None = Field(default=None, ge=0)
    page: int | None = Field(default=None, ge=1)
    limit: int | None = Field(default=None, ge=0)

    @classmethod
    def coerce(cls, value: PaginationOptions | Mapping[str, Any] | None) -> PaginationOptions:
        """Build options from None, a mapping or an existing instance.

        Raises:
            InvalidPaginationOptions: On unknown keys or out-of-range values
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        try:
            return cls.model_validate(value)
        except ValidationError as e:
            raise InvalidPaginationOptions(f"Invalid pagination options: {e}") from e

    def merged_over(self, defaults: PaginationOptions) -> PaginationOptions:
        """Return a copy of ``defaults`` with every field set here taking precedence."""
        return defaults.model_copy(update=self.model_dump(exclude_none=True))

    def plan(self) -> PagePlan:
        """Resolve limit, skip and mode.

        ``offset`` selects offset mode; otherwise page mode with page 1 by
        default. Limit defaults to 10.
        """
        limit = DEFAULT_LIMIT if self.limit is None else self.limit
        try:
            query = {
                "projection": normalize_projection(self.select),
                "sort": normalize_sort(self.sort),
                "populate": normalize_populate(self.populate),
            }
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidPaginationOptions(f"Invalid pagination options: {e}") from e

        lean = bool(self.lean)
        lean_with_id = True if self.lean_with_id is None else self.lean_with_id

        if self.offset is not None:
            return PagePlan(limit=limit, skip=self.offset, offset=self.offset, lean=lean, lean_with_id=lean_with_id, **query)

        page = DEFAULT_PAGE if self.page is None else self.page
        return PagePlan(limit=limit, skip=(page - 1) * limit, page=page, lean=lean, lean_with_id=lean_with_id, **query)


@dataclass(frozen=True)
class PagePlan:
    """Fully resolved query parameters for one page."""

    limit: int
    skip: int
    page: int | None = None
    offset: int | None = None
    lean: bool = False
    lean_with_id: bool = True
    projection: ProjectionSpec | None = None
    sort: SortSpec = field(default_factory=list)
    populate: list[str] = field(default_factory=list)

    @property
    def mode(self) -> str:
        return "offset" if self.offset is not None else "page"

    def result(self, docs: list[Any], total: int) -> PageResult:
        """Assemble the PageResult for this plan."""
        if self.offset is not None:
            return PageResult(docs=docs, total=total, limit=self.limit, offset=self.offset)
        pages = math.ceil(total / self.limit) if self.limit > 0 else math.inf
        return PageResult(docs=docs, total=total, limit=self.limit, page=self.page, pages=pages)
