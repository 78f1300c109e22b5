from __future__ import annotations

from typing import Any, ClassVar, Optional, Self, TYPE_CHECKING

if TYPE_CHECKING:
    from mongo_paginate.core.queryset import QuerySet

from bson import ObjectId
from pydantic import BaseModel, Field
from pymongo.asynchronous.collection import AsyncCollection

from mongo_paginate.core.connection import get_database
from mongo_paginate.fields.base import PyObjectId
from mongo_paginate.lifecycle.observability import track_query
from mongo_paginate.utils.exceptions import DocumentNotFound
from mongo_paginate.utils.settings import SettingsResolver
from mongo_paginate.utils.types import DocumentData, FilterSpec, merge_filters

# Global registry mapping class name -> Document subclass
_document_registry: dict[str, type[Document]] = {}


class Document(BaseModel):
    """Base document class for MongoDB models.

    Binds a pydantic model to a collection and provides the read and insert
    operations pagination is built on.
    """

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    # Set by __init_subclass__
    _collection_name: ClassVar[str] = ""
    _connection_alias: ClassVar[str] = "default"
    _auto_populate: ClassVar[list[str]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        cls._collection_name = SettingsResolver.get_collection_name(cls)
        cls._connection_alias = SettingsResolver.get_connection_alias(cls)
        cls._auto_populate = SettingsResolver.get_auto_populate_fields(cls)

        _document_registry[cls.__name__] = cls

    # --- Serialization ---

    def _to_mongo(self) -> DocumentData:
        """Convert document to a MongoDB-compatible dict (ObjectIds preserved)."""
        data = self.model_dump(by_alias=True, mode="python")
        if data.get("_id") is None:
            data.pop("_id", None)
        return data

    @classmethod
    def _from_mongo(cls, data: DocumentData, *, partial: bool = False) -> Self:
        """Create a document instance from MongoDB data.

        Projected results skip validation, so fields left out by the
        projection are simply absent instead of failing as required.
        """
        if partial:
            return cls.model_construct(**data)
        return cls.model_validate(data)

    def to_lean(self, *, with_id: bool = True) -> DocumentData:
        """Return the plain mapping for this document, as a lean query would."""
        data = self._to_mongo()
        if with_id and "_id" in data:
            data["id"] = str(data["_id"])
        return data

    # --- Collection access ---

    @classmethod
    def get_collection(cls) -> AsyncCollection:
        db = get_database(cls._connection_alias)
        return db[cls._collection_name]

    # --- Class-level operations ---

    @classmethod
    async def create(cls, **kwargs: Any) -> Self:
        """Create and insert a new document."""
        doc = cls(**kwargs)
        await doc.insert()
        return doc

    @classmethod
    async def get(cls, id: ObjectId | str) -> Self:
        """Find a document by its _id. Raises DocumentNotFound if missing."""
        doc = await cls.find_one({"_id": ObjectId(id) if isinstance(id, str) else id})
        if doc is None:
            raise DocumentNotFound(f"{cls.__name__} with id '{id}' not found")
        return doc

    @classmethod
    async def find_one(cls, filter: FilterSpec | None = None, **kwargs: Any) -> Self | None:
        """Find a single document matching the filter."""
        filter = merge_filters(filter, **kwargs)
        async with track_query("find_one", cls._collection_name, cls.__name__, filter=filter) as ctx:
            data = await cls.get_collection().find_one(filter)
            ctx["result_count"] = 0 if data is None else 1
        if data is None:
            return None
        doc = cls._from_mongo(data)
        if cls._auto_populate:
            await doc.populate(*cls._auto_populate)
        return doc

    @classmethod
    def find(cls, filter: FilterSpec | None = None, **kwargs: Any) -> "QuerySet[Self]":
        """Return a QuerySet for fluent query building."""
        from mongo_paginate.core.queryset import QuerySet

        return QuerySet(cls, merge_filters(filter, **kwargs))

    @classmethod
    async def count(cls, filter: FilterSpec | None = None, **kwargs: Any) -> int:
        return await cls.find(filter, **kwargs).count()

    # --- Instance-level operations ---

    async def insert(self) -> None:
        """Insert this document into the database."""
        async with track_query("insert", self._collection_name, self.__class__.__name__):
            result = await self.get_collection().insert_one(self._to_mongo())
            self.id = result.inserted_id

    async def populate(self, *fields: str) -> Self:
        """Populate reference fields on this document."""
        from mongo_paginate.core.reference import PopulateEngine

        engine = PopulateEngine()
        for field in fields:
            await engine.populate_path([self], field)
        return self
