from typing import Optional

import pytest

from mongo_paginate import Document, DocumentNotFound, Ref


class Company(Document):
    name: str

    class Settings:
        collection = "companies"


class Author(Document):
    name: str
    company: Optional[Ref["Company"]] = None

    class Settings:
        collection = "authors"


class Post(Document):
    title: str
    views: int
    author: Optional[Ref["Author"]] = None

    class Settings:
        collection = "posts"


@pytest.fixture
async def posts(mongo_connection):
    company = await Company.create(name="Acme")
    author = await Author.create(name="Ann", company=company.id)
    return [await Post.create(title=f"Post {i}", views=i, author=author.id) for i in range(5)]


class TestQuerySet:
    async def test_lean_returns_mappings(self, posts):
        results = await Post.find().lean().all()
        assert all(isinstance(r, dict) for r in results)
        assert {r["title"] for r in results} == {f"Post {i}" for i in range(5)}

    async def test_select_hydrates_partial_documents(self, posts):
        results = await Post.find().select("title").all()
        assert results[0].title.startswith("Post")
        assert getattr(results[0], "views", None) is None

    async def test_sort_skip_limit(self, posts):
        results = await Post.find().sort("-views").skip(1).limit(2).all()
        assert [r.views for r in results] == [3, 2]

    async def test_sort_accepts_mapping(self, posts):
        first = await Post.find().sort({"views": -1}).first()
        assert first.views == 4

    async def test_count_ignores_skip_and_limit(self, posts):
        assert await Post.find().skip(3).limit(1).count() == 5

    async def test_async_iteration(self, posts):
        titles = [post.title async for post in Post.find(views={"$lt": 2})]
        assert sorted(titles) == ["Post 0", "Post 1"]

    async def test_chaining_is_immutable(self, posts):
        base = Post.find()
        narrowed = base.lean().limit(1)
        assert base._lean is False
        assert base._limit_count == 0
        assert narrowed._lean is True


class TestPopulate:
    async def test_hydrated_nested(self, posts):
        results = await Post.find().populate("author.company").all()
        assert results[0].author.name == "Ann"
        assert results[0].author.company.name == "Acme"

    async def test_lean_nested(self, posts):
        results = await Post.find().lean().populate("author.company").all()
        assert results[0]["author"]["name"] == "Ann"
        assert results[0]["author"]["company"]["name"] == "Acme"

    async def test_non_ref_field_raises(self, posts):
        with pytest.raises(ValueError, match="not a Ref"):
            await Post.find().populate("title").all()

    async def test_unknown_field_raises(self, posts):
        with pytest.raises(ValueError, match="unknown field"):
            await Post.find().populate("editor").all()

    async def test_document_populate(self, posts):
        post = await Post.get(posts[0].id)
        await post.populate("author")
        assert post.author.name == "Ann"


class TestDocument:
    async def test_get_missing_raises(self, mongo_connection):
        from bson import ObjectId

        with pytest.raises(DocumentNotFound):
            await Post.get(ObjectId())

    async def test_get_accepts_string_id(self, posts):
        post = await Post.get(str(posts[1].id))
        assert post.title == "Post 1"

    async def test_to_lean(self, posts):
        lean = posts[0].to_lean()
        assert lean["_id"] == posts[0].id
        assert lean["id"] == str(posts[0].id)
        assert "id" not in posts[0].to_lean(with_id=False)
