from __future__ import annotations

from typing import Any, Generic, TypeVar, get_args

from bson import ObjectId
from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from mongo_paginate.utils.types import MAX_POPULATE_DEPTH

T = TypeVar("T")


class Ref(Generic[T]):
    """Reference type for linking MongoDB documents.

    At runtime holds an ObjectId (unresolved) or a T instance (after populate).
    In MongoDB, always stored as ObjectId. In JSON, serialized as string.
    """

    def __class_getitem__(cls, item: Any) -> Any:
        # Ref["ClassName"] and Ref[ClassName]
        return type(
            f"Ref[{item if isinstance(item, str) else item.__name__}]",
            (Ref,),
            {"__ref_target__": item, "__origin__": Ref, "__args__": (item,)},
        )

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_wrap_validator_function(
            cls._validate,
            core_schema.union_schema(
                [
                    core_schema.is_instance_schema(ObjectId),
                    core_schema.str_schema(),
                    # Already-resolved document
                    core_schema.any_schema(),
                ]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                cls._serialize,
                info_arg=True,
                when_used="unless-none",
            ),
        )

    @staticmethod
    def _validate(value: Any, handler: Any) -> Any:
        if value is None or isinstance(value, ObjectId):
            return value
        if isinstance(value, str):
            if ObjectId.is_valid(value):
                return ObjectId(value)
            raise ValueError(f"Invalid ObjectId string: {value}")

        from mongo_paginate.core.document import Document

        if isinstance(value, Document):
            return value
        raise ValueError(f"Cannot convert {type(value)} to Ref")

    @staticmethod
    def _serialize(value: Any, info: Any) -> Any:
        """Keep ObjectId in python mode (used by _to_mongo), hex string in json mode."""
        mode = getattr(info, "mode", "python")

        if isinstance(value, ObjectId):
            return str(value) if mode == "json" else value

        from mongo_paginate.core.document import Document

        if isinstance(value, Document):
            return value.model_dump(by_alias=True, mode=mode)

        return str(value)


def _resolve_field(doc_class: type, name: str) -> tuple[str, str]:
    """Map a populate path segment to (attribute name, MongoDB key).

    The segment may be the field name or its alias.
    """
    fields = doc_class.model_fields
    if name in fields:
        return name, fields[name].alias or name
    for field_name, field_info in fields.items():
        if field_info.alias == name:
            return field_name, name
    raise ValueError(f"Cannot populate unknown field '{name}' on {doc_class.__name__}")


def _resolve_target_class(doc_class: type, field_name: str) -> type:
    """Resolve the target Document class for a Ref field."""
    from mongo_paginate.core.document import _document_registry

    annotation = doc_class.model_fields[field_name].annotation
    target = getattr(annotation, "__ref_target__", None)
    if target is None:
        # Optional[Ref[T]]
        for arg in get_args(annotation):
            target = getattr(arg, "__ref_target__", None)
            if target is not None:
                break

    if target is None:
        raise ValueError(f"Field '{field_name}' on {doc_class.__name__} is not a Ref")

    if isinstance(target, str):
        if target not in _document_registry:
            raise ValueError(
                f"Cannot resolve reference '{target}'. "
                f"Known documents: {list(_document_registry.keys())}"
            )
        return _document_registry[target]

    return target


class _Slot:
    """Reads and writes one reference field on documents or lean mappings."""

    def __init__(self, doc_class: type, name: str) -> None:
        self.attr, self.key = _resolve_field(doc_class, name)
        self.target_class = _resolve_target_class(doc_class, self.attr)

    def get(self, doc: Any) -> Any:
        if isinstance(doc, dict):
            return doc.get(self.key)
        return getattr(doc, self.attr, None)

    def set(self, doc: Any, value: Any) -> None:
        if isinstance(doc, dict):
            doc[self.key] = value
        else:
            object.__setattr__(doc, self.attr, value)


def _identity(doc: Any) -> Any:
    if isinstance(doc, dict):
        return doc.get("_id")
    return getattr(doc, "id", None)


class PopulateEngine:
    """Resolves Ref[T] fields on hydrated documents or on lean mappings.

    In lean mode references are replaced by the raw MongoDB mapping of the
    target; otherwise by a hydrated target Document. Resolved targets are
    cached per engine, so use one engine per query.
    """

    def __init__(self, lean: bool = False) -> None:
        self.lean = lean
        self._cache: dict[tuple[str, ObjectId], Any] = {}

    async def populate_many(self, docs: list[Any], field: str, document_class: type | None = None) -> type:
        """Batch-resolve a reference field across multiple documents.

        Collects all ObjectIds and performs a single $in query to avoid N+1.
        ``document_class`` is required for lean mappings. Returns the target
        Document class.
        """
        slot = _Slot(document_class or type(docs[0]), field)
        target_class = slot.target_class

        id_to_docs: dict[ObjectId, list[Any]] = {}
        for doc in docs:
            value = slot.get(doc)
            if isinstance(value, ObjectId):
                id_to_docs.setdefault(value, []).append(doc)

        uncached_ids: list[ObjectId] = []
        for oid, doc_list in id_to_docs.items():
            key = (target_class._collection_name, oid)
            if key in self._cache:
                for doc in doc_list:
                    slot.set(doc, self._cache[key])
            else:
                uncached_ids.append(oid)

        if uncached_ids:
            collection = target_class.get_collection()
            async for raw in collection.find({"_id": {"$in": uncached_ids}}):
                resolved = raw if self.lean else target_class._from_mongo(raw)
                self._cache[(target_class._collection_name, raw["_id"])] = resolved
                for doc in id_to_docs.get(raw["_id"], []):
                    slot.set(doc, resolved)

        return target_class

    async def populate_path(self, docs: list[Any], path: str, document_class: type | None = None) -> None:
        """Handle plain and dot-notation paths like 'author.company'.

        Populates level by level: first 'author', then 'company' on the
        resolved authors.

        Raises:
            ValueError: If the path is too deep, has an empty segment or
                names a field that is not a Ref
        """
        parts = path.split(".")

        if len(parts) > MAX_POPULATE_DEPTH:
            raise ValueError(
                f"Populate path exceeds maximum depth ({MAX_POPULATE_DEPTH}): {path}"
            )
        if any(not part for part in parts):
            raise ValueError(f"Invalid populate path (empty segment): {path}")

        current_docs = docs
        current_class = document_class

        for part in parts:
            if not current_docs:
                break

            slot = _Slot(current_class or type(current_docs[0]), part)
            current_class = await self.populate_many(current_docs, part, current_class)

            seen: set[Any] = set()
            next_docs = []
            for doc in current_docs:
                resolved = slot.get(doc)
                if resolved is None or isinstance(resolved, ObjectId):
                    continue
                if _identity(resolved) not in seen:
                    seen.add(_identity(resolved))
                    next_docs.append(resolved)
            current_docs = next_docs
