from uuid import UUID

import pytest
from pydantic import TypeAdapter, ValidationError

from search_api.app.domain.models import (
    Direction,
    Facet,
    Filter,
    IntegerRangeFacet,
    IntegerRangeFilter,
    KeywordFilter,
    ScoreSorter,
    SearchResult,
    Sorter,
    TextSorter,
)


def test_filter_union_is_discriminated_by_kind():
    adapter = TypeAdapter(list[Filter])
    filters = adapter.validate_python([
        {"kind": "keyword", "field_name": "authorName", "values": ["Jane"]},
        {"kind": "integer_range", "field_name": "year", "ranges": [{"min_value": 2000}], "negate": True},
    ])
    assert isinstance(filters[0], KeywordFilter)
    assert isinstance(filters[1], IntegerRangeFilter)
    assert filters[1].negate is True
    assert filters[1].ranges[0].max_value is None


def test_unknown_filter_kind_is_rejected():
    with pytest.raises(ValidationError):
        TypeAdapter(Filter).validate_python({"kind": "geo", "field_name": "x", "values": []})


def test_facet_union():
    facet = TypeAdapter(Facet).validate_python(
        {"kind": "integer_range", "field_name": "year", "ranges": [{"key": "old", "max_value": 2000}]}
    )
    assert isinstance(facet, IntegerRangeFacet)
    assert facet.ranges[0].key == "old"


def test_sorter_default_directions():
    assert ScoreSorter().direction is Direction.descending
    assert TextSorter(field_name="name").direction is Direction.ascending
    sorter = TypeAdapter(Sorter).validate_python({"kind": "score", "direction": "asc"})
    assert sorter.direction is Direction.ascending


def test_empty_search_result():
    result = SearchResult.empty()
    assert result.total == 0
    assert result.documents == []
    assert result.facets == []


def test_search_result_serializes_ids_as_strings():
    result = SearchResult(
        total=1,
        documents=[{"id": UUID(int=1), "object_type": "Document"}],
    )
    dumped = result.model_dump(mode="json")
    assert dumped["documents"][0] == {"id": str(UUID(int=1)), "object_type": "Document"}
