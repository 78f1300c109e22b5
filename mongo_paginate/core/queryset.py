from __future__ import annotations

from typing import Any, Generic, TypeVar, TYPE_CHECKING

from bson import ObjectId

from mongo_paginate.lifecycle.observability import track_query
from mongo_paginate.utils.types import (
    FilterSpec,
    ProjectionSpec,
    SortSpec,
    merge_filters,
    normalize_populate,
    normalize_projection,
    normalize_sort,
)

if TYPE_CHECKING:
    from mongo_paginate.paginate.result import PageResult

T = TypeVar("T")


class QuerySet(Generic[T]):
    """Fluent, lazy, immutable query builder for MongoDB documents.

    Each chainable method returns a new QuerySet instance.
    Queries are only executed when a terminal method is called.
    """

    def __init__(
        self,
        document_class: type[T],
        filter: FilterSpec | None = None,
        sort: SortSpec | None = None,
        skip_count: int = 0,
        limit_count: int = 0,
        projection: ProjectionSpec | None = None,
        populate_fields: list[str] | None = None,
        lean: bool = False,
    ) -> None:
        self._document_class = document_class
        self._filter: FilterSpec = filter or {}
        self._sort: SortSpec = sort or []
        self._skip_count = skip_count
        self._limit_count = limit_count
        self._projection = projection
        self._populate_fields: list[str] = populate_fields or []
        self._lean = lean

    def _clone(self, **overrides: Any) -> QuerySet[T]:
        """Return a new QuerySet with merged overrides."""
        defaults = {
            "document_class": self._document_class,
            "filter": self._filter.copy(),
            "sort": self._sort.copy(),
            "skip_count": self._skip_count,
            "limit_count": self._limit_count,
            "projection": self._projection.copy() if self._projection else None,
            "populate_fields": self._populate_fields.copy(),
            "lean": self._lean,
        }
        defaults.update(overrides)
        return QuerySet(**defaults)

    @property
    def document_class(self) -> type[T]:
        return self._document_class

    # --- Chainable methods ---

    def filter(self, _filter: FilterSpec | str | ObjectId | None = None, **kwargs: Any) -> QuerySet[T]:
        """Add filter conditions. Merges with existing filter.

        Examples:
            Student.find().filter("507f1f77bcf86cd799439011")  # by id string
            Student.find(name="Ann").filter({"class": class_id})
        """
        if isinstance(_filter, str):
            _filter = {"_id": ObjectId(_filter)}
        elif isinstance(_filter, ObjectId):
            _filter = {"_id": _filter}

        merged = merge_filters(self._filter, _filter, **kwargs)
        return self._clone(filter=merged)

    def sort(self, *fields: Any) -> QuerySet[T]:
        """Set sort order. Prefix with '-' for descending.

        Example: .sort("-birthdate", "name") or .sort({"birthdate": -1})
        """
        spec = fields[0] if len(fields) == 1 else list(fields)
        return self._clone(sort=normalize_sort(spec))

    def skip(self, n: int) -> QuerySet[T]:
        return self._clone(skip_count=n)

    def limit(self, n: int) -> QuerySet[T]:
        return self._clone(limit_count=n)

    def select(self, *fields: Any) -> QuerySet[T]:
        """Set field projection: .select("name", "-birthdate") or .select({"name": 1})."""
        spec = fields[0] if len(fields) == 1 else list(fields)
        return self._clone(projection=normalize_projection(spec))

    def populate(self, *fields: Any) -> QuerySet[T]:
        """Mark reference fields to be populated after query execution."""
        merged = self._populate_fields + normalize_populate(list(fields))
        return self._clone(populate_fields=merged)

    def lean(self, enabled: bool = True) -> QuerySet[T]:
        """Return raw MongoDB mappings instead of hydrated documents."""
        return self._clone(lean=enabled)

    # --- Terminal methods ---

    async def all(self) -> list[Any]:
        """Execute the query and return all matching documents."""
        async with track_query(
            "find",
            self._document_class._collection_name,
            self._document_class.__name__,
            filter=self._filter,
            skip=self._skip_count or None,
            limit=self._limit_count or None,
            sort=self._sort or None,
            projection=self._projection,
        ) as ctx:
            results = [self._load(raw) async for raw in self._build_cursor()]
            ctx["result_count"] = len(results)

        if self._populate_fields and results:
            from mongo_paginate.core.reference import PopulateEngine

            engine = PopulateEngine(lean=self._lean)
            for path in self._populate_fields:
                await engine.populate_path(results, path, self._document_class)

        return results

    async def first(self) -> Any | None:
        """Return the first matching document, or None."""
        results = await self.limit(1).all()
        return results[0] if results else None

    async def count(self) -> int:
        """Count matching documents, ignoring skip, limit and sort."""
        async with track_query(
            "count", self._document_class._collection_name, self._document_class.__name__, filter=self._filter
        ) as ctx:
            collection = self._document_class.get_collection()
            result = await collection.count_documents(self._filter)
            ctx["result_count"] = result
        return result

    async def paginate(self, options: Any = None, **overrides: Any) -> PageResult:
        """Paginate this query. See mongo_paginate.paginate.Paginator.

        Uses the document's own paginator when it has one (PaginateMixin),
        else the library defaults. A lean QuerySet paginates in lean mode.
        """
        from mongo_paginate.paginate.paginator import _default_paginator
        from mongo_paginate.paginate.source import DocumentSource

        get_paginator = getattr(self._document_class, "get_paginator", None)
        paginator = get_paginator() if get_paginator else _default_paginator
        if self._lean:
            paginator = paginator.configure(lean=True)
        return await paginator.paginate(DocumentSource(self), None, options, **overrides)

    # --- Async iteration ---

    async def __aiter__(self):
        async for raw in self._build_cursor():
            yield self._load(raw)

    # --- Internal ---

    def _load(self, raw: dict[str, Any]) -> Any:
        if self._lean:
            return raw
        return self._document_class._from_mongo(raw, partial=self._projection is not None)

    def _build_cursor(self):
        """Compose a pymongo cursor from stored query parameters."""
        collection = self._document_class.get_collection()
        cursor = collection.find(self._filter, self._projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._skip_count:
            cursor = cursor.skip(self._skip_count)
        if self._limit_count:
            cursor = cursor.limit(self._limit_count)
        return cursor
