import asyncio
import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from bson import ObjectId
from pymongo.errors import PyMongoError

from mongo_paginate import connect, disconnect, disable_tracing, ping
from mongo_paginate.core.connection import _databases

MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017/mongo_paginate_test")


class FakeRecord:
    """Stand-in for a hydrated document."""

    def __init__(self, data):
        self.__dict__.update(data)
        self._data = data

    def to_lean(self, *, with_id=True):
        data = dict(self._data)
        if with_id:
            data["id"] = str(data["_id"])
        return data


class FakeSource:
    """In-memory pagination source over a list of mappings.

    Supports equality filters, sort lists, inclusion projections, skip and
    limit. ``count_hook``/``fetch_hook`` are awaited before each call returns.
    """

    def __init__(self, records, *, honor_lean=True, count_hook=None, fetch_hook=None):
        self.records = [dict(r) for r in records]
        self.honor_lean = honor_lean
        self.count_hook = count_hook
        self.fetch_hook = fetch_hook
        self.calls = []

    def _match(self, filter):
        return [r for r in self.records if all(r.get(k) == v for k, v in filter.items())]

    async def count(self, filter):
        self.calls.append(("count", dict(filter)))
        await asyncio.sleep(0)
        if self.count_hook is not None:
            await self.count_hook()
        return len(self._match(filter))

    async def fetch(self, filter, *, projection=None, sort=None, populate=None, skip=0, limit=0, lean=False):
        self.calls.append(
            (
                "fetch",
                {
                    "filter": dict(filter),
                    "projection": projection,
                    "sort": sort,
                    "populate": populate,
                    "skip": skip,
                    "limit": limit,
                    "lean": lean,
                },
            )
        )
        await asyncio.sleep(0)
        if self.fetch_hook is not None:
            await self.fetch_hook()

        rows = self._match(filter)
        for field, direction in reversed(sort or []):
            rows = sorted(rows, key=lambda r, f=field: r[f], reverse=direction < 0)
        rows = rows[skip:skip + limit] if limit else rows[skip:]
        if projection:
            rows = [{k: v for k, v in r.items() if projection.get(k)} for r in rows]
        else:
            rows = [dict(r) for r in rows]

        if lean and self.honor_lean:
            return rows
        return [FakeRecord(r) for r in rows]

    def operations(self):
        return [name for name, _ in self.calls]


def seed_students(n=50):
    birthdate = datetime(2020, 1, 1, tzinfo=timezone.utc)
    return [
        {
            "_id": ObjectId(),
            "name": f"Student #{i}",
            "birthdate": birthdate + timedelta(milliseconds=i),
        }
        for i in range(1, n + 1)
    ]


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def student_records():
    return seed_students()


@pytest.fixture
def student_source(student_records):
    return FakeSource(student_records)


@pytest.fixture(autouse=True)
def reset_tracing():
    yield
    disable_tracing()


@pytest_asyncio.fixture
async def mongo_connection():
    """Connect to MongoDB before the test, drop the DB after. Skips when unreachable."""
    db = await connect(MONGO_URI, serverSelectionTimeoutMS=1500)
    try:
        await ping()
    except PyMongoError as e:
        await disconnect()
        pytest.skip(f"MongoDB not reachable at {MONGO_URI}: {e}")
    yield db
    # Reconnect if the test disconnected
    if "default" not in _databases:
        db = await connect(MONGO_URI, serverSelectionTimeoutMS=1500)
    for name in await db.list_collection_names():
        await db.drop_collection(name)
    await disconnect()
