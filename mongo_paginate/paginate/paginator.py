"""Paginate any source that can count and fetch records.

Example:
    paginator = Paginator(limit=20, lean=True)
    result = await paginator.paginate(Student, {"class": class_id}, {"page": 2})
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import MutableMapping
from typing import Any, Mapping

from mongo_paginate.lifecycle.observability import track_query
from mongo_paginate.paginate.options import PaginationOptions
from mongo_paginate.paginate.result import PageResult
from mongo_paginate.paginate.source import as_source
from mongo_paginate.utils.types import FilterSpec

logger = logging.getLogger(__name__)

OptionsLike = PaginationOptions | Mapping[str, Any] | None


class Paginator:
    """Holds default options and computes pages.

    Defaults are fixed at construction; use :meth:`configure` to derive a
    paginator with different defaults.
    """

    def __init__(self, defaults: OptionsLike = None, **overrides: Any) -> None:
        base = PaginationOptions.coerce(defaults)
        if overrides:
            base = PaginationOptions.coerce(overrides).merged_over(base)
        self._defaults = base

    def __repr__(self) -> str:
        return f"Paginator({self._defaults.model_dump(exclude_none=True)!r})"

    @property
    def defaults(self) -> PaginationOptions:
        return self._defaults

    def configure(self, options: OptionsLike = None, **overrides: Any) -> Paginator:
        """Return a new Paginator whose defaults are layered over these."""
        return Paginator(self.resolve(options, **overrides))

    def resolve(self, options: OptionsLike = None, **overrides: Any) -> PaginationOptions:
        """Merge per-call options and keyword overrides over the defaults."""
        resolved = PaginationOptions.coerce(options).merged_over(self._defaults)
        if overrides:
            resolved = PaginationOptions.coerce(overrides).merged_over(resolved)
        return resolved

    async def paginate(
        self,
        source: Any,
        filter: FilterSpec | None = None,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> PageResult:
        """Compute one page of ``source`` matching ``filter``.

        Count and fetch run concurrently and are not read from a single
        snapshot; under concurrent writes ``total`` and ``docs`` may
        disagree. With ``limit=0`` no fetch is issued.

        Raises:
            InvalidPaginationOptions: Before any store call, on bad options
            Exception: Whatever the source raises, unchanged
        """
        plan = self.resolve(options, **overrides).plan()
        source = as_source(source)
        filter = dict(filter or {})

        logger.debug(
            "Paginating %r in %s mode: skip=%d limit=%d",
            source,
            plan.mode,
            plan.skip,
            plan.limit,
        )

        async with track_query(
            "paginate",
            getattr(source, "collection_name", ""),
            filter=filter,
            mode=plan.mode,
            skip=plan.skip,
            limit=plan.limit,
        ) as ctx:
            if plan.limit > 0:
                total, docs = await _gather(
                    source.count(filter),
                    source.fetch(
                        filter,
                        projection=plan.projection,
                        sort=plan.sort,
                        populate=plan.populate,
                        skip=plan.skip,
                        limit=plan.limit,
                        lean=plan.lean,
                    ),
                )
            else:
                total, docs = await source.count(filter), []
            ctx["result_count"] = len(docs)

        if plan.lean:
            docs = [_lean_record(doc, plan.lean_with_id) for doc in docs]

        return plan.result(list(docs), total)


async def _gather(*aws: Any) -> list[Any]:
    """Run awaitables concurrently; on the first failure cancel the rest and re-raise it."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


def _lean_record(record: Any, with_id: bool) -> MutableMapping[str, Any]:
    if not isinstance(record, MutableMapping):
        to_lean = getattr(record, "to_lean", None)
        if to_lean is None:
            raise TypeError(f"Cannot convert {type(record).__name__} to a lean mapping")
        record = to_lean(with_id=False)
    if with_id and "_id" in record:
        record["id"] = str(record["_id"])
    return record


_default_paginator = Paginator()


async def paginate(
    source: Any,
    filter: FilterSpec | None = None,
    options: OptionsLike = None,
    **overrides: Any,
) -> PageResult:
    """Paginate with the library defaults (page 1, limit 10, not lean)."""
    return await _default_paginator.paginate(source, filter, options, **overrides)
