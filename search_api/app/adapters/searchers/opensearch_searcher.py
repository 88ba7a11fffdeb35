"""
추상 검색 요청을 OpenSearch 로 수행하는 SearchPort 구현체.

검색 실패는 사용자 화면을 깨뜨리지 않도록 로그만 남기고 빈 결과를 반환한다.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence
from uuid import UUID

from opensearchpy import OpenSearch
from opensearchpy.exceptions import OpenSearchException

from search_api.app.adapters.indexers.alias_resolver import IndexAliasResolver
from search_api.app.adapters.searchers.opensearch_query import (
    aggregation_name,
    facet_aggregation,
    facet_aggregations,
    facet_field,
    filter_clauses,
    sort_clauses,
    text_query,
    variation_filters,
)
from search_api.app.domain.fields import (
    DATETIME_MAX,
    DATETIME_MIN,
    DECIMAL_MAX,
    DECIMAL_MIN,
    INTEGER_MAX,
    INTEGER_MIN,
    FieldNames,
    as_utc,
    datetime_from_millis,
)
from search_api.app.domain.models import (
    AccessContext,
    DateTimeExactFacet,
    DateTimeExactFacetValue,
    DateTimeRangeFacet,
    DateTimeRangeFacetValue,
    DecimalExactFacet,
    DecimalExactFacetValue,
    DecimalRangeFacet,
    DecimalRangeFacetValue,
    Document,
    Facet,
    FacetResult,
    Filter,
    IntegerExactFacet,
    IntegerExactFacetValue,
    IntegerRangeFacet,
    IntegerRangeFacetValue,
    KeywordFacet,
    KeywordFacetValue,
    ObjectType,
    SearchResult,
    Sorter,
)
from search_api.app.domain.ports import SearchPort

logger = logging.getLogger(__name__)


class OpenSearchSearcher(SearchPort):

    def __init__(
        self,
        client: OpenSearch,
        alias_resolver: IndexAliasResolver,
        expand_facet_values: bool = True,
        max_facet_values: int = 100,
    ) -> None:
        self.client = client
        self.alias_resolver = alias_resolver
        self.expand_facet_values = expand_facet_values
        self.max_facet_values = max_facet_values

    def search(
        self,
        index_alias: str,
        query: str | None = None,
        filters: Sequence[Filter] | None = None,
        facets: Sequence[Facet] | None = None,
        sorters: Sequence[Sorter] | None = None,
        culture: str | None = None,
        segment: str | None = None,
        access_context: AccessContext | None = None,
        skip: int = 0,
        take: int = 10,
    ) -> SearchResult:
        """
        OpenSearch 에 검색을 수행하여 추상 결과 모델로 돌려준다.

        검색어, filter, facet, sorter 가 모두 없으면 백엔드를 호출하지 않고 빈 결과를 반환한다.

        Args:
            index_alias (str): 논리 alias
            query (str | None): 검색어
            filters / facets / sorters: 추상 검색 조건
            culture, segment: 대상 variation
            access_context: 요청자 principal/group (없으면 공개 문서만)
            skip, take: 페이징
        Returns:
            SearchResult: 전체 건수, 문서 id 목록, facet 결과
        """
        filters = list(filters or [])
        facets = list(facets or [])
        sorters = list(sorters or [])
        if not (query and query.strip()) and not filters and not facets and not sorters:
            return SearchResult.empty()

        base_filters = variation_filters(culture, segment, access_context)
        body = self._build_query(
            query,
            base_filters + filter_clauses(filters),
            aggs=facet_aggregations(facets, self.max_facet_values),
            sort=sort_clauses(sorters),
            skip=skip,
            take=take,
        )

        index_name = self.alias_resolver.resolve(index_alias)
        try:
            response = self.client.search(index=index_name, body=body)
            aggregations = response.get("aggregations") or {}

            expanded: Dict[int, FacetResult] = {}
            if self.expand_facet_values:
                expanded = self._expand_facets(index_name, query, base_filters, filters, facets)

            facet_results = [
                expanded[i] if i in expanded
                else build_facet_result(facet, aggregations, aggregation_name(i, facet))
                for i, facet in enumerate(facets)
            ]
        except OpenSearchException:
            logger.error("Error performing search in %s", index_name, exc_info=True)
            return SearchResult.empty()

        hits = response.get("hits") or {}
        return SearchResult(
            total=_total(hits),
            documents=_documents(hits.get("hits") or []),
            facets=facet_results,
        )

    def _build_query(
        self,
        query: str | None,
        filters: List[Dict[str, Any]],
        aggs: Dict[str, Any] | None = None,
        sort: List[Dict[str, Any]] | None = None,
        skip: int = 0,
        take: int = 10,
        track_total_hits: bool = True,
    ) -> Dict[str, Any]:
        """
        검색 쿼리 바디를 구성한다. 문서는 key, objectType 만 가져온다.
        """
        body: Dict[str, Any] = {
            "from": skip,
            "size": take,
            "track_total_hits": track_total_hits,
            "_source": [FieldNames.KEY, FieldNames.OBJECT_TYPE],
            "query": {
                "bool": {
                    "must": [text_query(query)],
                    "filter": filters,
                }
            },
        }
        if aggs:
            body["aggs"] = aggs
        if sort:
            body["sort"] = sort
        return body

    def _expand_facets(
        self,
        index_name: str,
        query: str | None,
        base_filters: List[Dict[str, Any]],
        filters: List[Filter],
        facets: List[Facet],
    ) -> Dict[int, FacetResult]:
        """
        활성 filter 가 걸린 facet 마다, 그 facet 자신의 filter 만 뺀 조건으로
        facet 하나만 다시 집계한다. 선택된 값 외의 다른 값들의 건수도 보여주기 위함.

        facet 과 filter 는 필드 이름(대소문자 무시)으로 대응시킨다.

        Returns:
            Dict[int, FacetResult]: 요청 facet 순번 → 다시 집계한 결과
        """
        filtered_names = {f.field_name.lower() for f in filters}
        expanded: Dict[int, FacetResult] = {}
        for i, facet in enumerate(facets):
            name = facet.field_name.lower()
            if name not in filtered_names:
                continue

            agg = facet_aggregation(facet, self.max_facet_values)
            if agg is None:
                expanded[i] = build_facet_result(facet, {})
                continue

            remaining = [f for f in filters if f.field_name.lower() != name]
            body = self._build_query(
                query,
                base_filters + filter_clauses(remaining),
                aggs={aggregation_name(i, facet): agg},
                skip=0,
                take=0,
                track_total_hits=False,
            )
            response = self.client.search(index=index_name, body=body)
            expanded[i] = build_facet_result(
                facet, response.get("aggregations") or {}, aggregation_name(i, facet)
            )
        return expanded


# ================== response mapping ==================
def _total(hits: Dict[str, Any]) -> int:
    total = hits.get("total") or 0
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total)


def _documents(hits: List[Dict[str, Any]]) -> List[Document]:
    documents: List[Document] = []
    for hit in hits:
        source = hit.get("_source") or {}
        try:
            key = UUID(str(source.get(FieldNames.KEY)))
        except ValueError:
            continue
        try:
            object_type = ObjectType(source.get(FieldNames.OBJECT_TYPE))
        except ValueError:
            object_type = ObjectType.unknown
        documents.append(Document(id=key, object_type=object_type))
    return documents


def _contained_count(buckets: List[Dict[str, Any]], low: Any, high: Any, convert=lambda v: v) -> int:
    """[low, high] 안에 완전히 들어가는 bucket 들의 건수 합."""
    count = 0
    for b in buckets:
        if b.get("from") is None or b.get("to") is None:
            continue
        if convert(b["from"]) >= low and convert(b["to"]) <= high:
            count += int(b.get("doc_count", 0))
    return count


def build_facet_result(facet: Facet, aggregations: Dict[str, Any], name: str | None = None) -> FacetResult:
    """
    aggregation 응답을 facet 종류에 맞는 FacetResult 로 변환한다.
    name 은 응답에서 찾을 aggregation 이름(기본: 집계 필드 이름).
    응답에 해당 aggregation 이 없으면 값 없는(구간은 0건) 결과를 만든다.
    """
    buckets = (aggregations.get(name or facet_field(facet)) or {}).get("buckets") or []
    match facet:
        case KeywordFacet():
            values = [KeywordFacetValue(key=str(b["key"]), count=b["doc_count"]) for b in buckets]
        case IntegerExactFacet():
            values = [IntegerExactFacetValue(key=int(b["key"]), count=b["doc_count"]) for b in buckets]
        case DecimalExactFacet():
            values = [DecimalExactFacetValue(key=float(b["key"]), count=b["doc_count"]) for b in buckets]
        case DateTimeExactFacet():
            values = [
                DateTimeExactFacetValue(key=datetime_from_millis(b["key"]), count=b["doc_count"])
                for b in buckets
            ]
        case IntegerRangeFacet():
            values = [
                IntegerRangeFacetValue(
                    key=r.key, min_value=r.min_value, max_value=r.max_value,
                    count=_contained_count(
                        buckets,
                        r.min_value if r.min_value is not None else INTEGER_MIN,
                        r.max_value if r.max_value is not None else INTEGER_MAX,
                    ),
                )
                for r in facet.ranges
            ]
        case DecimalRangeFacet():
            values = [
                DecimalRangeFacetValue(
                    key=r.key, min_value=r.min_value, max_value=r.max_value,
                    count=_contained_count(
                        buckets,
                        r.min_value if r.min_value is not None else DECIMAL_MIN,
                        r.max_value if r.max_value is not None else DECIMAL_MAX,
                    ),
                )
                for r in facet.ranges
            ]
        case DateTimeRangeFacet():
            values = [
                DateTimeRangeFacetValue(
                    key=r.key, min_value=r.min_value, max_value=r.max_value,
                    count=_contained_count(
                        buckets,
                        as_utc(r.min_value) if r.min_value is not None else DATETIME_MIN,
                        as_utc(r.max_value) if r.max_value is not None else DATETIME_MAX,
                        convert=datetime_from_millis,
                    ),
                )
                for r in facet.ranges
            ]
        case _:
            values = []
    return FacetResult(field_name=facet.field_name, values=values)
