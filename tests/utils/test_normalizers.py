import pytest
from pymongo import ASCENDING, DESCENDING

from mongo_paginate.utils.types import (
    merge_filters,
    normalize_populate,
    normalize_projection,
    normalize_sort,
)


class TestNormalizeSort:
    @pytest.mark.parametrize("empty", [None, "", [], {}])
    def test_empty(self, empty):
        assert normalize_sort(empty) == []

    def test_string(self):
        assert normalize_sort("-birthdate name") == [("birthdate", DESCENDING), ("name", ASCENDING)]

    def test_comma_separated_string(self):
        assert normalize_sort("name,-age") == [("name", ASCENDING), ("age", DESCENDING)]

    def test_mapping(self):
        assert normalize_sort({"birthdate": -1, "name": "asc"}) == [
            ("birthdate", DESCENDING),
            ("name", ASCENDING),
        ]

    def test_list_of_tuples(self):
        assert normalize_sort([("a", 1), ("b", -1)]) == [("a", ASCENDING), ("b", DESCENDING)]

    def test_list_of_strings(self):
        assert normalize_sort(["-a", "b"]) == [("a", DESCENDING), ("b", ASCENDING)]

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            normalize_sort({"a": 2})


class TestNormalizeProjection:
    def test_none(self):
        assert normalize_projection(None) is None

    def test_inclusion_keeps_id(self):
        assert normalize_projection("name") == {"name": 1, "_id": 1}

    def test_exclusion(self):
        assert normalize_projection("-birthdate") == {"birthdate": 0}

    def test_list(self):
        assert normalize_projection(["name", "class"]) == {"name": 1, "class": 1, "_id": 1}

    def test_mapping_passthrough(self):
        assert normalize_projection({"name": 1}) == {"name": 1}

    def test_invalid(self):
        with pytest.raises(ValueError):
            normalize_projection(42)


class TestNormalizePopulate:
    def test_string(self):
        assert normalize_populate("class tutor") == ["class", "tutor"]

    def test_list_and_mapping(self):
        assert normalize_populate(["class", {"path": "tutor.school"}]) == ["class", "tutor.school"]

    def test_empty(self):
        assert normalize_populate(None) == []

    def test_invalid(self):
        with pytest.raises(ValueError):
            normalize_populate(3)


def test_merge_filters_precedence():
    assert merge_filters({"a": 1, "b": 1}, {"b": 2}, c=3) == {"a": 1, "b": 2, "c": 3}
