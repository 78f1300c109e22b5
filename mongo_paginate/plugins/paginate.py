from __future__ import annotations

from typing import Any

from mongo_paginate.paginate.callback import Callback, with_callback
from mongo_paginate.paginate.paginator import OptionsLike, Paginator
from mongo_paginate.paginate.result import PageResult
from mongo_paginate.utils.settings import SettingsResolver
from mongo_paginate.utils.types import FilterSpec


class PaginateMixin:
    """Mixin that adds a ``paginate`` classmethod to a Document.

    Usage:
        class Student(PaginateMixin, Document):
            name: str

            class Settings:
                paginate = {"limit": 20, "lean": True}

        result = await Student.paginate({"name": "Ann"}, {"page": 2})

    A class attribute ``paginator: ClassVar[Paginator]`` takes precedence;
    otherwise ``Settings.paginate`` may be a mapping, PaginationOptions or a
    Paginator.
    """

    @classmethod
    def get_paginator(cls) -> Paginator:
        paginator = getattr(cls, "paginator", None)
        if isinstance(paginator, Paginator):
            return paginator
        defaults = SettingsResolver.get_paginate_options(cls)
        if isinstance(defaults, Paginator):
            return defaults
        return Paginator(defaults)

    @classmethod
    async def paginate(
        cls,
        filter: FilterSpec | None = None,
        options: OptionsLike = None,
        callback: Callback | None = None,
        **overrides: Any,
    ) -> PageResult:
        """Return one page of this document class matching ``filter``.

        When ``callback`` is given it is also called as ``callback(None, result)``
        or ``callback(error, None)``.
        """
        return await with_callback(cls._paginate(filter, options, **overrides), callback)

    @classmethod
    async def _paginate(cls, filter: FilterSpec | None, options: OptionsLike, **overrides: Any) -> PageResult:
        return await cls.get_paginator().paginate(cls, filter, options, **overrides)
