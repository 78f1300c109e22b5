from mongo_paginate.core import (
    Document,
    QuerySet,
    Ref,
    PopulateEngine,
    connect,
    disconnect,
    ping,
    get_database,
    get_client,
)
from mongo_paginate.fields import PyObjectId
from mongo_paginate.lifecycle import (
    enable_tracing,
    disable_tracing,
    QueryEvent,
    add_listener,
    remove_listener,
)
from mongo_paginate.paginate import (
    PageResult,
    PaginationOptions,
    PaginationSource,
    Paginator,
    DocumentSource,
    CollectionSource,
    paginate,
    with_callback,
)
from mongo_paginate.plugins import PaginateMixin
from mongo_paginate.utils import (
    PaginateError,
    DocumentNotFound,
    NotConnected,
    InvalidPaginationOptions,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Document",
    "QuerySet",
    "Ref",
    "PopulateEngine",
    "connect",
    "disconnect",
    "ping",
    "get_database",
    "get_client",
    # Fields
    "PyObjectId",
    # Lifecycle
    "enable_tracing",
    "disable_tracing",
    "QueryEvent",
    "add_listener",
    "remove_listener",
    # Pagination
    "PageResult",
    "PaginationOptions",
    "PaginationSource",
    "Paginator",
    "DocumentSource",
    "CollectionSource",
    "paginate",
    "with_callback",
    # Plugins
    "PaginateMixin",
    # Utils
    "PaginateError",
    "DocumentNotFound",
    "NotConnected",
    "InvalidPaginationOptions",
]
