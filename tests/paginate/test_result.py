import math

from mongo_paginate import PageResult


class TestPageResult:
    def test_page_mode_navigation(self):
        first = PageResult(docs=[1, 2], total=5, limit=2, page=1, pages=3)
        last = PageResult(docs=[5], total=5, limit=2, page=3, pages=3)
        assert first.has_next is True
        assert first.has_prev is False
        assert last.has_next is False
        assert last.has_prev is True

    def test_offset_mode_navigation(self):
        result = PageResult(docs=[3, 4], total=5, limit=2, offset=2)
        assert result.has_next is True
        assert result.has_prev is True
        assert PageResult(docs=[5], total=5, limit=2, offset=4).has_next is False
        assert PageResult(docs=[1], total=5, limit=2, offset=0).has_prev is False

    def test_zero_limit_has_no_next(self):
        result = PageResult(docs=[], total=5, limit=0, page=1, pages=math.inf)
        assert result.has_next is False

    def test_as_dict_page_mode(self):
        result = PageResult(docs=[], total=0, limit=10, page=1, pages=0)
        assert result.as_dict() == {"docs": [], "total": 0, "limit": 10, "page": 1, "pages": 0}

    def test_as_dict_offset_mode(self):
        result = PageResult(docs=[], total=0, limit=10, offset=0)
        assert result.as_dict() == {"docs": [], "total": 0, "limit": 10, "offset": 0}

    def test_len(self):
        assert len(PageResult(docs=[1, 2, 3], total=3, limit=10, page=1, pages=1)) == 3
