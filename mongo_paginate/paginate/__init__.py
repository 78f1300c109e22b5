from mongo_paginate.paginate.callback import with_callback
from mongo_paginate.paginate.options import PagePlan, PaginationOptions
from mongo_paginate.paginate.paginator import Paginator, paginate
from mongo_paginate.paginate.result import PageResult
from mongo_paginate.paginate.source import (
    CollectionSource,
    DocumentSource,
    PaginationSource,
    as_source,
)

__all__ = [
    "with_callback",
    "PagePlan",
    "PaginationOptions",
    "Paginator",
    "paginate",
    "PageResult",
    "CollectionSource",
    "DocumentSource",
    "PaginationSource",
    "as_source",
]
