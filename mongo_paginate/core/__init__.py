from mongo_paginate.core.document import Document
from mongo_paginate.core.queryset import QuerySet
from mongo_paginate.core.reference import Ref, PopulateEngine
from mongo_paginate.core.connection import connect, disconnect, ping, get_database, get_client

__all__ = [
    "Document",
    "QuerySet",
    "Ref",
    "PopulateEngine",
    "connect",
    "disconnect",
    "ping",
    "get_database",
    "get_client",
]
