"""
추상 Filter / Facet / Sorter 를 OpenSearch query DSL 로 변환한다.

- filter: bool.filter 에 들어갈 절. negate 이면 bool.must_not 으로 감싼다.
- facet: aggregation. 이름은 대상 물리 필드 이름을 쓴다.
- sorter: sort 절. 숫자/날짜는 정렬용 단일 값 projection 을 쓴다.

종류가 늘어나면 여기 match 문에 case 하나와 fields.Suffix 항목 하나를 추가한다.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Sequence

from search_api.app.domain.fields import (
    DATETIME_MAX,
    DATETIME_MIN,
    DECIMAL_MAX,
    DECIMAL_MIN,
    INTEGER_MAX,
    INTEGER_MIN,
    INVARIANT_CULTURE,
    PUBLIC_ACCESS_KEY,
    RAW_SUBFIELD,
    FieldNames,
    Suffix,
    as_utc,
    format_datetime,
    index_culture,
    index_segment,
    physical_name,
    sortable_name,
)
from search_api.app.domain.models import (
    AccessContext,
    DateTimeExactFacet,
    DateTimeExactFilter,
    DateTimeRangeFacet,
    DateTimeRangeFilter,
    DateTimeSorter,
    DecimalExactFacet,
    DecimalExactFilter,
    DecimalRangeFacet,
    DecimalRangeFilter,
    DecimalSorter,
    Facet,
    Filter,
    IntegerExactFacet,
    IntegerExactFilter,
    IntegerRangeFacet,
    IntegerRangeFilter,
    IntegerSorter,
    KeywordFacet,
    KeywordFilter,
    KeywordSorter,
    ScoreSorter,
    Sorter,
    TextFilter,
    TextSorter,
)

Clause = Dict[str, Any]

# 전문 검색 대상 필드와 가중치. relevance 단계가 높을수록 크게.
FULL_TEXT_FIELDS = (
    f"{FieldNames.ALL_TEXTS_R1}^4",
    f"{FieldNames.ALL_TEXTS_R2}^3",
    f"{FieldNames.ALL_TEXTS_R3}^2",
    FieldNames.ALL_TEXTS,
)


# ================== query text ==================
def text_query(query: str | None) -> Clause:
    if not query or not query.strip():
        return {"match_all": {}}
    return {
        "multi_match": {
            "query": query,
            "fields": list(FULL_TEXT_FIELDS),
            "type": "best_fields",
            "operator": "or",
        }
    }


# ================== filters ==================
def variation_filters(
    culture: str | None,
    segment: str | None,
    access_context: AccessContext | None,
) -> List[Clause]:
    """
    culture / segment / 접근 제어 절.

    - culture: 요청 culture 또는 invariant 문서
    - segment: 정확히 일치 (fallback 없음)
    - access: 공개 키 + (있으면) principal, group 키 중 하나라도 포함
    """
    cultures = [INVARIANT_CULTURE] if not culture else [index_culture(culture), INVARIANT_CULTURE]

    access_keys = [PUBLIC_ACCESS_KEY]
    if access_context is not None:
        for key in [access_context.principal_id, *(access_context.group_ids or [])]:
            if key not in access_keys:
                access_keys.append(key)

    return [
        {"terms": {FieldNames.CULTURE: cultures}},
        {"term": {FieldNames.SEGMENT: index_segment(segment)}},
        {"terms": {FieldNames.ACCESS_KEYS: [str(k) for k in access_keys]}},
    ]


def _any_of(clauses: List[Clause]) -> Clause:
    if len(clauses) == 1:
        return clauses[0]
    return {"bool": {"should": clauses, "minimum_should_match": 1}}


def _ranges(field: str, ranges: Sequence[Any], low: Any, high: Any, fmt=lambda v: v) -> Clause:
    """[min, max) 구간들의 OR. 열린 경계는 타입의 극값으로 채운다."""
    return _any_of([
        {
            "range": {
                field: {
                    "gte": fmt(r.min_value if r.min_value is not None else low),
                    "lt": fmt(r.max_value if r.max_value is not None else high),
                }
            }
        }
        for r in ranges
    ])


def filter_clause(f: Filter) -> Clause | None:
    """
    Filter 하나를 OpenSearch 절로 변환한다. 값/구간이 비어 있으면 None.
    """
    match f:
        case TextFilter():
            if not f.values:
                return None
            field = physical_name(f.field_name, Suffix.texts)
            clause = _any_of([{"match_phrase_prefix": {field: {"query": v}}} for v in f.values])
        case KeywordFilter():
            if not f.values:
                return None
            clause = {"terms": {physical_name(f.field_name, Suffix.keywords): list(f.values)}}
        case IntegerExactFilter():
            if not f.values:
                return None
            clause = {"terms": {physical_name(f.field_name, Suffix.integers): list(f.values)}}
        case IntegerRangeFilter():
            if not f.ranges:
                return None
            clause = _ranges(physical_name(f.field_name, Suffix.integers), f.ranges, INTEGER_MIN, INTEGER_MAX)
        case DecimalExactFilter():
            if not f.values:
                return None
            clause = {"terms": {physical_name(f.field_name, Suffix.decimals): list(f.values)}}
        case DecimalRangeFilter():
            if not f.ranges:
                return None
            clause = _ranges(physical_name(f.field_name, Suffix.decimals), f.ranges, DECIMAL_MIN, DECIMAL_MAX)
        case DateTimeExactFilter():
            if not f.values:
                return None
            clause = {"terms": {physical_name(f.field_name, Suffix.datetimes): [format_datetime(v) for v in f.values]}}
        case DateTimeRangeFilter():
            if not f.ranges:
                return None
            clause = _ranges(
                physical_name(f.field_name, Suffix.datetimes), f.ranges,
                DATETIME_MIN, DATETIME_MAX, fmt=format_datetime,
            )
        case _:
            return None

    if f.negate:
        return {"bool": {"must_not": [clause]}}
    return clause


def filter_clauses(filters: Sequence[Filter]) -> List[Clause]:
    clauses = []
    for f in filters:
        clause = filter_clause(f)
        if clause is not None:
            clauses.append(clause)
    return clauses


# ================== facets ==================
def facet_field(facet: Facet) -> str:
    """
    facet 이 집계할 물리 필드.
    구간 facet 은 문서당 값이 하나인 정렬용 projection 을 쓴다.
    """
    match facet:
        case KeywordFacet():
            return physical_name(facet.field_name, Suffix.keywords)
        case IntegerExactFacet():
            return physical_name(facet.field_name, Suffix.integers)
        case IntegerRangeFacet():
            return sortable_name(facet.field_name, Suffix.integers)
        case DecimalExactFacet():
            return physical_name(facet.field_name, Suffix.decimals)
        case DecimalRangeFacet():
            return sortable_name(facet.field_name, Suffix.decimals)
        case DateTimeExactFacet():
            return physical_name(facet.field_name, Suffix.datetimes)
        case DateTimeRangeFacet():
            return sortable_name(facet.field_name, Suffix.datetimes)
    raise ValueError(f"unsupported facet: {facet!r}")


def range_boundaries(facet: IntegerRangeFacet | DecimalRangeFacet | DateTimeRangeFacet) -> List[Any]:
    """모든 구간의 min/max 중 열린 경계를 뺀 값을 중복 없이 정렬한다."""
    values = {
        as_utc(v) if isinstance(v, datetime) else v
        for r in facet.ranges
        for v in (r.min_value, r.max_value)
        if v is not None
    }
    return sorted(values)


def facet_aggregation(facet: Facet, max_facet_values: int) -> Clause | None:
    """
    facet 하나의 aggregation.

    구간 facet 은 이름 붙은 구간을 그대로 보내지 않고, 경계값 목록의
    인접한 두 값 사이 구간들을 보낸다. 응답 bucket 은 원래 구간 key 를 모르므로
    결과 매핑 단계에서 포함 관계로 되돌린다.
    """
    field = facet_field(facet)
    match facet:
        case KeywordFacet() | IntegerExactFacet() | DecimalExactFacet() | DateTimeExactFacet():
            return {"terms": {"field": field, "size": max_facet_values}}
        case IntegerRangeFacet() | DecimalRangeFacet() | DateTimeRangeFacet():
            boundaries = range_boundaries(facet)
            if len(boundaries) < 2:
                return None
            fmt = format_datetime if isinstance(facet, DateTimeRangeFacet) else (lambda v: v)
            return {
                "range": {
                    "field": field,
                    "ranges": [
                        {"from": fmt(lo), "to": fmt(hi)}
                        for lo, hi in zip(boundaries, boundaries[1:])
                    ],
                }
            }
    return None


def aggregation_name(index: int, facet: Facet) -> str:
    """요청 내 facet 순번을 붙인 aggregation 이름. 같은 필드의 facet 이 여럿이어도 겹치지 않는다."""
    return f"{index}:{facet_field(facet)}"


def facet_aggregations(facets: Sequence[Facet], max_facet_values: int) -> Dict[str, Clause]:
    aggs: Dict[str, Clause] = {}
    for i, facet in enumerate(facets):
        agg = facet_aggregation(facet, max_facet_values)
        if agg is not None:
            aggs[aggregation_name(i, facet)] = agg
    return aggs


# ================== sorters ==================
def sort_clause(sorter: Sorter) -> Clause | None:
    order = {"order": sorter.direction.value}
    match sorter:
        case ScoreSorter():
            return {"_score": order}
        case TextSorter():
            return {f"{physical_name(sorter.field_name, Suffix.texts)}.{RAW_SUBFIELD}": order}
        case KeywordSorter():
            return {physical_name(sorter.field_name, Suffix.keywords): order}
        case IntegerSorter():
            return {sortable_name(sorter.field_name, Suffix.integers): order}
        case DecimalSorter():
            return {sortable_name(sorter.field_name, Suffix.decimals): order}
        case DateTimeSorter():
            return {sortable_name(sorter.field_name, Suffix.datetimes): order}
    return None


def sort_clauses(sorters: Sequence[Sorter]) -> List[Clause]:
    """호출자가 준 순서 그대로(첫 번째가 1차 정렬 키)."""
    clauses = []
    for sorter in sorters:
        clause = sort_clause(sorter)
        if clause is not None:
            clauses.append(clause)
    return clauses
