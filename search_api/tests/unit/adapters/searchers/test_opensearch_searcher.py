# search_api/tests/unit/adapters/searchers/test_opensearch_searcher.py

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import UUID
import pytest

from opensearchpy.exceptions import ConnectionError

from search_api.app.adapters.searchers.opensearch_searcher import (
    OpenSearchSearcher,
    build_facet_result,
)
from search_api.app.domain.models import (
    DateTimeRange,
    DateTimeRangeFacet,
    Document,
    IntegerRange,
    IntegerRangeFacet,
    IntegerRangeFacetValue,
    KeywordFacet,
    KeywordFacetValue,
    KeywordFilter,
    ObjectType,
    ScoreSorter,
)


@pytest.fixture
def mock_client():
    c = MagicMock()
    c.search.return_value = {"hits": {"total": {"value": 0}, "hits": []}}
    return c


@pytest.fixture
def searcher(mock_client, alias_resolver):
    return OpenSearchSearcher(client=mock_client, alias_resolver=alias_resolver)


def test_empty_request_does_not_call_backend(searcher, mock_client):
    result = searcher.search("idx", query="  ")
    assert result.total == 0
    mock_client.search.assert_not_called()


def test_build_query_basic_structure(searcher):
    body = searcher._build_query("fastapi", [{"term": {"segment": "def"}}], skip=20, take=5)

    assert body["from"] == 20
    assert body["size"] == 5
    assert body["track_total_hits"] is True
    assert body["_source"] == ["key", "objectType"]
    assert body["query"]["bool"]["must"][0]["multi_match"]["query"] == "fastapi"
    assert body["query"]["bool"]["filter"] == [{"term": {"segment": "def"}}]
    assert "aggs" not in body
    assert "sort" not in body


def test_search_calls_client_with_physical_index_and_body(searcher, mock_client):
    mock_client.search.return_value = {
        "hits": {
            "total": {"value": 12, "relation": "eq"},
            "hits": [
                {"_id": "x", "_source": {"key": str(UUID(int=1)), "objectType": "Document"}},
                {"_id": "y", "_source": {"key": str(UUID(int=2)), "objectType": "Weird"}},
                {"_id": "z", "_source": {"key": "not-a-uuid"}},
            ],
        }
    }

    res = searcher.search(
        "Umb_PublishedContent",
        query="fastapi",
        filters=[KeywordFilter(field_name="authorName", values=["Jane"])],
        sorters=[ScoreSorter()],
        skip=10,
        take=3,
    )

    assert res.total == 12
    assert res.documents == [
        Document(id=UUID(int=1), object_type=ObjectType.document),
        Document(id=UUID(int=2), object_type=ObjectType.unknown),
    ]

    kwargs = mock_client.search.call_args.kwargs
    assert kwargs["index"] == "umb_publishedcontent_test"
    body = kwargs["body"]
    assert body["from"] == 10
    assert body["size"] == 3
    assert body["sort"] == [{"_score": {"order": "desc"}}]
    filters = body["query"]["bool"]["filter"]
    # culture / segment / access + 요청 filter
    assert len(filters) == 4
    assert filters[-1] == {"terms": {"fields_authorName_keywords": ["Jane"]}}


def test_backend_failure_returns_empty_result(searcher, mock_client):
    mock_client.search.side_effect = ConnectionError("N/A", "down", Exception("boom"))
    res = searcher.search("idx", query="anything")
    assert res.total == 0
    assert res.documents == []
    assert res.facets == []


def test_facet_expansion_issues_one_subquery_per_filtered_facet(searcher, mock_client):
    main = {
        "hits": {"total": {"value": 1}, "hits": []},
        "aggregations": {
            "1:fields_authorName_keywords": {"buckets": [{"key": "Jane", "doc_count": 1}]},
            "0:fields_categoryName_keywords": {"buckets": [{"key": "Tech", "doc_count": 1}]},
        },
    }
    expanded = {
        "hits": {"total": {"value": 3}, "hits": []},
        "aggregations": {
            "1:fields_authorName_keywords": {
                "buckets": [{"key": "Jane", "doc_count": 1}, {"key": "John", "doc_count": 2}]
            }
        },
    }
    mock_client.search.side_effect = [main, expanded]

    res = searcher.search(
        "idx",
        filters=[KeywordFilter(field_name="AuthorName", values=["Jane"])],
        facets=[KeywordFacet(field_name="categoryName"), KeywordFacet(field_name="authorName")],
    )

    assert mock_client.search.call_count == 2
    sub_body = mock_client.search.call_args_list[1].kwargs["body"]
    assert sub_body["size"] == 0
    assert sub_body["track_total_hits"] is False
    assert list(sub_body["aggs"]) == ["1:fields_authorName_keywords"]
    # 자기 자신의 filter 는 빠진다 (culture / segment / access 만 남음)
    assert len(sub_body["query"]["bool"]["filter"]) == 3

    # 요청 순서 유지, 확장 결과로 대체
    assert [f.field_name for f in res.facets] == ["categoryName", "authorName"]
    assert res.facets[0].values == [KeywordFacetValue(key="Tech", count=1)]
    assert res.facets[1].values == [
        KeywordFacetValue(key="Jane", count=1),
        KeywordFacetValue(key="John", count=2),
    ]
    # total 은 원래 질의 기준
    assert res.total == 1


def test_facet_expansion_can_be_disabled(mock_client, alias_resolver):
    searcher = OpenSearchSearcher(mock_client, alias_resolver, expand_facet_values=False)
    searcher.search(
        "idx",
        filters=[KeywordFilter(field_name="authorName", values=["Jane"])],
        facets=[KeywordFacet(field_name="authorName")],
    )
    assert mock_client.search.call_count == 1


# ---------- response mapping ----------
def test_range_facet_counts_contained_buckets():
    facet = IntegerRangeFacet(field_name="year", ranges=[
        IntegerRange(key="a", min_value=0, max_value=100),
        IntegerRange(key="b", min_value=50, max_value=200),
        IntegerRange(key="c", min_value=300, max_value=400),
    ])
    aggregations = {
        "fields_year_integers_sort": {
            "buckets": [
                {"from": 0.0, "to": 50.0, "doc_count": 1},
                {"from": 50.0, "to": 100.0, "doc_count": 2},
                {"from": 100.0, "to": 200.0, "doc_count": 4},
            ]
        }
    }
    result = build_facet_result(facet, aggregations)
    assert result.values == [
        IntegerRangeFacetValue(key="a", min_value=0, max_value=100, count=3),
        IntegerRangeFacetValue(key="b", min_value=50, max_value=200, count=6),
        IntegerRangeFacetValue(key="c", min_value=300, max_value=400, count=0),
    ]


def test_open_range_facet_lists_zero_counts_without_aggregation():
    facet = IntegerRangeFacet(field_name="year", ranges=[IntegerRange(key="all")])
    result = build_facet_result(facet, {})
    assert result.values == [IntegerRangeFacetValue(key="all", min_value=None, max_value=None, count=0)]


def test_datetime_range_facet_uses_epoch_millis_buckets():
    jan = datetime(2024, 1, 1, tzinfo=timezone.utc)
    feb = datetime(2024, 2, 1, tzinfo=timezone.utc)
    facet = DateTimeRangeFacet(field_name="d", ranges=[DateTimeRange(key="jan", min_value=jan, max_value=feb)])
    aggregations = {
        "fields_d_datetimes_sort": {
            "buckets": [{"from": jan.timestamp() * 1000, "to": feb.timestamp() * 1000, "doc_count": 5}]
        }
    }
    (value,) = build_facet_result(facet, aggregations).values
    assert value.key == "jan"
    assert value.count == 5


def test_overlapping_ranges_share_the_common_bucket():
    facet = IntegerRangeFacet(field_name="year", ranges=[
        IntegerRange(key="a", min_value=0, max_value=10),
        IntegerRange(key="b", min_value=5, max_value=15),
    ])
    aggregations = {
        "fields_year_integers_sort": {
            "buckets": [
                {"from": 0.0, "to": 5.0, "doc_count": 1},
                {"from": 5.0, "to": 10.0, "doc_count": 2},
                {"from": 10.0, "to": 15.0, "doc_count": 4},
            ]
        }
    }
    result = build_facet_result(facet, aggregations)
    assert [(v.key, v.count) for v in result.values] == [("a", 3), ("b", 6)]


def test_gap_bucket_is_not_counted_in_any_range():
    facet = IntegerRangeFacet(field_name="year", ranges=[
        IntegerRange(key="low", min_value=0, max_value=5),
        IntegerRange(key="high", min_value=10, max_value=15),
    ])
    aggregations = {
        "fields_year_integers_sort": {
            "buckets": [
                {"from": 0.0, "to": 5.0, "doc_count": 1},
                {"from": 5.0, "to": 10.0, "doc_count": 8},
                {"from": 10.0, "to": 15.0, "doc_count": 4},
            ]
        }
    }
    result = build_facet_result(facet, aggregations)
    assert [(v.key, v.count) for v in result.values] == [("low", 1), ("high", 4)]


def test_facets_on_the_same_field_keep_their_own_buckets(searcher, mock_client):
    mock_client.search.return_value = {
        "hits": {"total": {"value": 3}, "hits": []},
        "aggregations": {
            "0:fields_year_integers_sort": {
                "buckets": [{"from": 2000.0, "to": 2010.0, "doc_count": 3}]
            },
            "1:fields_year_integers_sort": {
                "buckets": [
                    {"from": 2000.0, "to": 2005.0, "doc_count": 1},
                    {"from": 2005.0, "to": 2010.0, "doc_count": 2},
                ]
            },
        },
    }
    decade = IntegerRangeFacet(field_name="year", ranges=[IntegerRange(key="2000s", min_value=2000, max_value=2010)])
    halves = IntegerRangeFacet(field_name="year", ranges=[
        IntegerRange(key="early", min_value=2000, max_value=2005),
        IntegerRange(key="late", min_value=2005, max_value=2010),
    ])

    res = searcher.search("idx", facets=[decade, halves])

    body = mock_client.search.call_args.kwargs["body"]
    assert list(body["aggs"]) == ["0:fields_year_integers_sort", "1:fields_year_integers_sort"]
    assert [(v.key, v.count) for v in res.facets[0].values] == [("2000s", 3)]
    assert [(v.key, v.count) for v in res.facets[1].values] == [("early", 1), ("late", 2)]
