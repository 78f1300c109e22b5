from typing import Any, Mapping, Sequence, TypeVar

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

# Type aliases for better clarity
DocumentData = dict[str, Any]
FilterSpec = dict[str, Any]
SortSpec = list[tuple[str, int]]
ProjectionSpec = dict[str, int]
DocumentId = ObjectId | str

# Generic type variable for documents
T = TypeVar("T")

# Constants
MAX_POPULATE_DEPTH = 5  # Maximum depth for nested population

_DIRECTIONS = {
    1: ASCENDING,
    -1: DESCENDING,
    "1": ASCENDING,
    "-1": DESCENDING,
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


def merge_filters(
    base: FilterSpec | None = None,
    override: FilterSpec | None = None,
    **kwargs: Any
) -> FilterSpec:
    """Merge multiple filter dictionaries with proper precedence.

    Args:
        base: Base filter dict
        override: Override filter dict (takes precedence over base)
        **kwargs: Additional filters (highest precedence)

    Returns:
        Merged filter dictionary
    """
    return {**(base or {}), **(override or {}), **kwargs}


def _tokens(value: str | Sequence[str]) -> list[str]:
    if isinstance(value, str):
        return value.replace(",", " ").split()
    return [token for item in value for token in _tokens(item)]


def _direction(field: str, value: Any) -> int:
    key = value.lower() if isinstance(value, str) else value
    try:
        return _DIRECTIONS[key]
    except (KeyError, TypeError):
        raise ValueError(f"Invalid sort direction for '{field}': {value!r}")


def normalize_sort(sort: Any) -> SortSpec:
    """Convert a mongoose-style sort into a pymongo sort list.

    Accepts "-created_at name", ["-created_at", "name"],
    {"created_at": -1, "name": "asc"} or [("created_at", -1)].
    """
    if not sort:
        return []
    if isinstance(sort, Mapping):
        return [(field, _direction(field, value)) for field, value in sort.items()]

    items = [sort] if isinstance(sort, str) else list(sort)
    sort_spec: SortSpec = []
    for item in items:
        if isinstance(item, (tuple, list)) and len(item) == 2:
            field, value = item
            sort_spec.append((field, _direction(field, value)))
            continue
        if not isinstance(item, str):
            raise ValueError(f"Invalid sort item: {item!r}")
        for field in _tokens(item):
            if field.startswith("-"):
                sort_spec.append((field[1:], DESCENDING))
            else:
                sort_spec.append((field.lstrip("+"), ASCENDING))
    return sort_spec


def normalize_projection(select: Any) -> ProjectionSpec | None:
    """Convert a mongoose-style select into a pymongo projection.

    "name -birthdate" style strings and lists become {field: 1|0}. Inclusion
    projections always keep _id unless it is excluded explicitly.
    """
    if not select:
        return None
    if isinstance(select, Mapping):
        return dict(select)
    if not isinstance(select, (str, list, tuple)):
        raise ValueError(f"Invalid select: {select!r}")

    projection: ProjectionSpec = {}
    for field in _tokens(select):
        if field.startswith("-"):
            projection[field[1:]] = 0
        else:
            projection[field.lstrip("+")] = 1
    if any(projection.values()) and "_id" not in projection:
        projection["_id"] = 1
    return projection


def normalize_populate(populate: Any) -> list[str]:
    """Convert "author tags" or ["author", {"path": "post.author"}] into a list of paths."""
    if not populate:
        return []
    if isinstance(populate, Mapping):
        return _tokens(populate["path"])
    if isinstance(populate, str):
        return _tokens(populate)
    if not isinstance(populate, (list, tuple)):
        raise ValueError(f"Invalid populate: {populate!r}")

    paths: list[str] = []
    for item in populate:
        paths.extend(normalize_populate(item))
    return paths
