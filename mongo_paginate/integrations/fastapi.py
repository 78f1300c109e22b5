from __future__ import annotations

import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from bson import ObjectId
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mongo_paginate.core.connection import connect, disconnect
from mongo_paginate.paginate.options import PaginationOptions
from mongo_paginate.paginate.result import PageResult, is_unbounded
from mongo_paginate.utils.exceptions import DocumentNotFound, InvalidPaginationOptions, PaginateError


def _default_handler(obj: Any) -> Any:
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class ObjectIDJSONResponse(JSONResponse):
    """JSONResponse that serializes ObjectId (and datetime) values.

    Lets endpoints return lean pages containing raw ``_id`` values.
    """

    def render(self, content: Any) -> bytes:
        return json.dumps(content, default=_default_handler, separators=(",", ":")).encode("utf-8")


def init_app(app: Any, uri: str, alias: str = "default", **client_options: Any) -> Any:
    """Initialize a FastAPI app with mongo-paginate.

    Sets up:
    - MongoDB connection/disconnection in app lifespan
    - ObjectId-aware JSON responses
    """
    app.default_response_class = ObjectIDJSONResponse

    original_lifespan = getattr(app, "router", app).lifespan_context

    @asynccontextmanager
    async def lifespan(a: Any):
        await connect(uri, alias=alias, **client_options)
        try:
            if original_lifespan is not None:
                async with original_lifespan(a) as state:
                    yield state
            else:
                yield
        finally:
            await disconnect(alias)

    app.router.lifespan_context = lifespan
    return app


def register_exception_handlers(app: Any) -> None:
    """Map mongo-paginate exceptions to HTTP responses."""

    @app.exception_handler(InvalidPaginationOptions)
    async def invalid_options_handler(request: Any, exc: InvalidPaginationOptions):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(DocumentNotFound)
    async def document_not_found_handler(request: Any, exc: DocumentNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PaginateError)
    async def paginate_error_handler(request: Any, exc: PaginateError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})


class PaginationParams:
    """FastAPI dependency reading page/limit/offset/sort query parameters.

    Usage: ``params: PaginationParams = Depends()``
    """

    max_limit = 100

    def __init__(
        self,
        page: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
        sort: str | None = None,
    ):
        self.page = None if page is None else max(1, page)
        self.limit = None if limit is None else min(max(0, limit), self.max_limit)
        self.offset = None if offset is None else max(0, offset)
        self.sort = sort

    def to_options(self) -> PaginationOptions:
        return PaginationOptions(
            page=self.page,
            limit=self.limit,
            offset=self.offset,
            sort=self.sort,
        )


def encode_document(doc: Any) -> Any:
    """Convert a Document or lean mapping into JSON-compatible data."""
    if isinstance(doc, BaseModel):
        return doc.model_dump(by_alias=True, mode="json")
    if isinstance(doc, dict):
        return {key: encode_document(value) for key, value in doc.items()}
    if isinstance(doc, (list, tuple)):
        return [encode_document(value) for value in doc]
    if isinstance(doc, ObjectId):
        return str(doc)
    return doc


class PageResponse(BaseModel):
    """Response model for a paginated endpoint.

    ``pages`` is ``None`` when the page size is 0.
    """

    docs: list[dict[str, Any]]
    total: int
    limit: int
    page: int | None = None
    pages: int | None = None
    offset: int | None = None
    has_next: bool
    has_prev: bool

    @classmethod
    def from_result(cls, result: PageResult) -> PageResponse:
        pages = None if result.pages is None or is_unbounded(result.pages) else int(result.pages)
        return cls(
            docs=[encode_document(doc) for doc in result.docs],
            total=result.total,
            limit=result.limit,
            page=result.page,
            pages=pages,
            offset=result.offset,
            has_next=result.has_next,
            has_prev=result.has_prev,
        )
