from unittest.mock import MagicMock
from uuid import UUID

from search_api.app.domain.models import (
    AccessContext,
    Document,
    KeywordFacet,
    KeywordFilter,
    ScoreSorter,
    SearchResult,
)
from search_api.app.domain.services.search_service import SearchService


def test_search_delegates_all_arguments():
    searcher = MagicMock()
    expected = SearchResult(total=1, documents=[Document(id=UUID(int=1))])
    searcher.search.return_value = expected
    svc = SearchService(searcher)

    filters = [KeywordFilter(field_name="authorName", values=["Jane"])]
    facets = [KeywordFacet(field_name="authorName")]
    sorters = [ScoreSorter()]
    access = AccessContext(principal_id=UUID(int=5))

    result = svc.search(
        "umb_publishedcontent", query="fastapi", filters=filters, facets=facets, sorters=sorters,
        culture="en-US", segment=None, access_context=access, skip=10, take=5,
    )

    assert result is expected
    searcher.search.assert_called_once_with(
        "umb_publishedcontent",
        query="fastapi",
        filters=filters,
        facets=facets,
        sorters=sorters,
        culture="en-US",
        segment=None,
        access_context=access,
        skip=10,
        take=5,
    )


def test_search_defaults():
    searcher = MagicMock()
    searcher.search.return_value = SearchResult.empty()
    SearchService(searcher).search("idx")

    kwargs = searcher.search.call_args.kwargs
    assert kwargs["query"] is None
    assert kwargs["filters"] is None
    assert kwargs["skip"] == 0
    assert kwargs["take"] == 10
