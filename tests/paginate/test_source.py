import pytest
from bson import ObjectId
from pymongo import AsyncMongoClient

from mongo_paginate import (
    CollectionSource,
    Document,
    DocumentSource,
    PaginateError,
    PaginateMixin,
    PaginationSource,
    QuerySet,
)
from mongo_paginate.paginate.source import as_source


class Gadget(Document):
    name: str


class ConfiguredGadget(PaginateMixin, Document):
    name: str

    class Settings:
        collection = "gadgets"
        paginate = {"limit": 3, "lean": True}


@pytest.fixture
def executed(monkeypatch):
    """Run QuerySets in memory and record each one executed."""
    queries = []

    async def all(self):
        queries.append(self)
        if self._lean:
            return [{"_id": ObjectId(), "name": "lean"}]
        return [self.document_class(name="hydrated")]

    async def count(self):
        return 1

    monkeypatch.setattr(QuerySet, "all", all)
    monkeypatch.setattr(QuerySet, "count", count)
    return queries


class TestAsSource:
    def test_document_class(self):
        assert isinstance(as_source(Gadget), DocumentSource)

    def test_queryset(self):
        assert isinstance(as_source(Gadget.find(name="x")), DocumentSource)

    def test_existing_source_passes_through(self, student_source):
        assert as_source(student_source) is student_source
        assert isinstance(student_source, PaginationSource)

    def test_document_instance_is_rejected(self):
        with pytest.raises(TypeError):
            as_source(Gadget(name="x"))

    async def test_collection(self):
        client = AsyncMongoClient("mongodb://localhost:27017", serverSelectionTimeoutMS=100)
        try:
            assert isinstance(as_source(client["db"]["gadgets"]), CollectionSource)
        finally:
            await client.close()

    async def test_collection_source_rejects_populate(self):
        client = AsyncMongoClient("mongodb://localhost:27017", serverSelectionTimeoutMS=100)
        try:
            source = CollectionSource(client["db"]["gadgets"])
            with pytest.raises(PaginateError, match="populate"):
                await source.fetch({}, populate=["owner"], limit=10)
        finally:
            await client.close()


class TestQuerySetPaginate:
    async def test_lean_queryset_stays_lean(self, executed):
        result = await Gadget.find().lean().paginate()
        assert executed[-1]._lean is True
        assert result.docs[0]["id"] == str(result.docs[0]["_id"])

    async def test_lean_queryset_through_module_paginate(self, executed):
        from mongo_paginate import paginate

        result = await paginate(Gadget.find().lean())
        assert executed[-1]._lean is True
        assert isinstance(result.docs[0], dict)

    async def test_plain_queryset_hydrates(self, executed):
        result = await Gadget.find().paginate()
        assert executed[-1]._lean is False
        assert isinstance(result.docs[0], Gadget)
        assert result.limit == 10

    async def test_uses_document_defaults(self, executed):
        result = await ConfiguredGadget.find().paginate()
        assert result.limit == 3
        assert executed[-1]._limit_count == 3
        assert isinstance(result.docs[0], dict)

    async def test_call_options_override_document_defaults(self, executed):
        result = await ConfiguredGadget.find().paginate({"limit": 5, "lean": False})
        assert result.limit == 5
        assert executed[-1]._lean is False
        assert isinstance(result.docs[0], ConfiguredGadget)
