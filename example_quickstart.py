"""
mongo-paginate Quick Start Example

Paginate a collection of students in a few lines.

Features covered:
- Attach paginate() to a document with PaginateMixin
- Page mode and offset mode
- Sort, select, populate and lean results
- Paginator defaults and callbacks

Run with: python example_quickstart.py
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import Field

from mongo_paginate import Document, PaginateMixin, Paginator, Ref, connect, disconnect


# ============================================================================
# 1. DEFINE YOUR DOCUMENTS
# ============================================================================


class SchoolClass(Document):
    name: str

    class Settings:
        collection = "classes"


class Student(PaginateMixin, Document):
    """A student that can be paginated with Student.paginate()."""

    name: str
    birthdate: datetime
    klass: Optional[Ref["SchoolClass"]] = Field(default=None, alias="class")

    class Settings:
        collection = "students"
        paginate = {"limit": 10}


# ============================================================================
# 2. ASYNC MAIN FUNCTION
# ============================================================================


async def main():
    db = await connect("mongodb://localhost:27017/mongo_paginate_demo")
    print("✅ Connected to MongoDB\n")

    try:
        class_obj = await SchoolClass.create(name="1A")
        birthdate = datetime.now(timezone.utc)
        for i in range(1, 51):
            await Student.create(
                name=f"Student #{i}",
                birthdate=birthdate + timedelta(milliseconds=i),
                klass=class_obj.id,
            )
        print("1️⃣  Seeded 50 students\n")

        # ====== PAGE MODE ======
        result = await Student.paginate({}, {"page": 2})
        print(f"2️⃣  Page {result.page}/{result.pages}: {[s.name for s in result.docs]}")

        # ====== OFFSET MODE ======
        result = await Student.paginate({}, {"offset": 45, "limit": 20})
        print(f"3️⃣  Offset {result.offset}: {len(result.docs)} of {result.total} students")

        # ====== SORT, SELECT, POPULATE ======
        result = await Student.paginate(
            {}, {"sort": "-birthdate", "select": "name class", "populate": "class", "limit": 3}
        )
        for student in result.docs:
            print(f"4️⃣  {student.name} in {student.klass.name}")

        # ====== LEAN ======
        result = await Student.paginate({"name": "Student #10"}, {"lean": True})
        print(f"5️⃣  Lean document: {result.docs[0]}")

        # ====== PAGINATOR DEFAULTS ======
        paginator = Paginator(limit=25, lean=True, leanWithId=False)
        result = await paginator.paginate(Student)
        print(f"6️⃣  Paginator page size {result.limit}, {result.pages} pages")

        # ====== CALLBACK ======
        await Student.paginate(
            {}, {"limit": 0}, lambda err, res: print(f"7️⃣  Callback got total={res.total}, pages={res.pages}")
        )

        print("\n✅ All operations completed successfully!")

    finally:
        for name in await db.list_collection_names():
            await db.drop_collection(name)
        await disconnect()
        print("\n✅ Disconnected from MongoDB")


# ============================================================================
# 3. RUN THE EXAMPLE
# ============================================================================

if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("MONGO-PAGINATE QUICKSTART EXAMPLE")
    print("=" * 60 + "\n")

    asyncio.run(main())
