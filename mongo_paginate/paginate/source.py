from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pymongo.asynchronous.collection import AsyncCollection

from mongo_paginate.core.document import Document
from mongo_paginate.core.queryset import QuerySet
from mongo_paginate.lifecycle.observability import track_query
from mongo_paginate.utils.exceptions import PaginateError
from mongo_paginate.utils.types import FilterSpec, ProjectionSpec, SortSpec


@runtime_checkable
class PaginationSource(Protocol):
    """Anything that can count and fetch records for a filter."""

    async def count(self, filter: FilterSpec) -> int: ...

    async def fetch(
        self,
        filter: FilterSpec,
        *,
        projection: ProjectionSpec | None = None,
        sort: SortSpec | None = None,
        populate: list[str] | None = None,
        skip: int = 0,
        limit: int = 0,
        lean: bool = False,
    ) -> list[Any]: ...


class DocumentSource:
    """Paginates a Document class, or a QuerySet narrowing one.

    The per-call filter is merged into the QuerySet's own filter. A per-call
    sort replaces the QuerySet's sort; without one the QuerySet's sort is kept.
    A lean QuerySet stays lean even when the call does not ask for it.
    """

    def __init__(self, target: type[Document] | QuerySet) -> None:
        self._base: QuerySet = target if isinstance(target, QuerySet) else target.find()

    def __repr__(self) -> str:
        return f"DocumentSource({self._base.document_class.__name__})"

    @property
    def collection_name(self) -> str:
        return self._base.document_class._collection_name

    async def count(self, filter: FilterSpec) -> int:
        return await self._base.filter(filter).count()

    async def fetch(
        self,
        filter: FilterSpec,
        *,
        projection: ProjectionSpec | None = None,
        sort: SortSpec | None = None,
        populate: list[str] | None = None,
        skip: int = 0,
        limit: int = 0,
        lean: bool = False,
    ) -> list[Any]:
        qs = self._base.filter(filter).skip(skip).limit(limit)
        if lean:
            qs = qs.lean()
        if sort:
            qs = qs.sort(sort)
        if projection:
            qs = qs.select(projection)

        paths = list(populate or [])
        paths += [p for p in self._base.document_class._auto_populate if p not in paths]
        if paths:
            qs = qs.populate(*paths)
        return await qs.all()


class CollectionSource:
    """Paginates a raw pymongo AsyncCollection.

    Records are always returned as mappings; populate needs Ref metadata and
    is therefore rejected.
    """

    def __init__(self, collection: AsyncCollection) -> None:
        self._collection = collection

    def __repr__(self) -> str:
        return f"CollectionSource({self._collection.name})"

    @property
    def collection_name(self) -> str:
        return self._collection.name

    async def count(self, filter: FilterSpec) -> int:
        async with track_query("count", self._collection.name, filter=filter) as ctx:
            result = await self._collection.count_documents(filter)
            ctx["result_count"] = result
        return result

    async def fetch(
        self,
        filter: FilterSpec,
        *,
        projection: ProjectionSpec | None = None,
        sort: SortSpec | None = None,
        populate: list[str] | None = None,
        skip: int = 0,
        limit: int = 0,
        lean: bool = False,
    ) -> list[Any]:
        if populate:
            raise PaginateError("populate is only supported when paginating a Document")

        async with track_query(
            "find", self._collection.name, filter=filter, skip=skip or None, limit=limit or None, sort=sort or None
        ) as ctx:
            cursor = self._collection.find(filter, projection)
            if sort:
                cursor = cursor.sort(sort)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            results = [raw async for raw in cursor]
            ctx["result_count"] = len(results)
        return results


def as_source(obj: Any) -> PaginationSource:
    """Wrap Document classes, QuerySets and collections; pass sources through.

    Raises:
        TypeError: If ``obj`` cannot be paginated
    """
    if isinstance(obj, type) and issubclass(obj, Document):
        return DocumentSource(obj)
    if isinstance(obj, QuerySet):
        return DocumentSource(obj)
    if isinstance(obj, AsyncCollection):
        return CollectionSource(obj)
    if isinstance(obj, PaginationSource):
        return obj
    raise TypeError(f"Cannot paginate {obj!r}: expected a Document class, QuerySet, collection or source")
