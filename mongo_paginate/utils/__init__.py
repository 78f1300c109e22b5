from mongo_paginate.utils.exceptions import (
    PaginateError,
    DocumentNotFound,
    NotConnected,
    InvalidPaginationOptions,
)
from mongo_paginate.utils.types import (
    DocumentData,
    FilterSpec,
    SortSpec,
    ProjectionSpec,
    DocumentId,
    merge_filters,
    normalize_sort,
    normalize_projection,
    normalize_populate,
    MAX_POPULATE_DEPTH,
)

__all__ = [
    "PaginateError",
    "DocumentNotFound",
    "NotConnected",
    "InvalidPaginationOptions",
    "DocumentData",
    "FilterSpec",
    "SortSpec",
    "ProjectionSpec",
    "DocumentId",
    "merge_filters",
    "normalize_sort",
    "normalize_projection",
    "normalize_populate",
    "MAX_POPULATE_DEPTH",
]
