"""
사이트 기사 목록 API.

쿼리 파라미터로 고정된 filter/facet/sorter 를 만들어 기본 인덱스를 검색한다.
표시용 데이터는 호출자가 문서 id 로 다시 조회한다.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from search_api.app.api.deps import get_search_service
from search_api.app.domain.fields import CoreFieldNames
from search_api.app.domain.models import (
    Direction,
    Facet,
    Filter,
    IntegerExactFacet,
    IntegerExactFilter,
    IntegerSorter,
    KeywordFacet,
    KeywordFilter,
    ScoreSorter,
    Sorter,
    TextSorter,
)
from search_api.app.domain.services.search_service import SearchService
from search_api.app.models.schemas import ApiResponse
from search_api.app.platform.config import settings
from search_api.app.platform.response import ok

router = APIRouter(prefix="/articles", tags=["articles"])

CONTENT_TYPE_ALIAS = "contentTypeAlias"


def article_filters(
    author: List[str] | None,
    categories: List[str] | None,
    article_year: List[str] | None,
) -> List[Filter]:
    filters: List[Filter] = [KeywordFilter(field_name=CONTENT_TYPE_ALIAS, values=["article"])]
    if author:
        filters.append(KeywordFilter(field_name="authorName", values=author))
    if categories:
        filters.append(KeywordFilter(field_name="categoryName", values=categories))

    # 숫자가 아닌 값은 무시
    years = sorted({int(y) for y in article_year or [] if y.strip().lstrip("-").isdigit()})
    if years:
        filters.append(IntegerExactFilter(field_name="articleYear", values=years))
    return filters


def article_facets() -> List[Facet]:
    return [
        KeywordFacet(field_name="authorName"),
        KeywordFacet(field_name="categoryName"),
        IntegerExactFacet(field_name="articleYear"),
    ]


def article_sorters(sort_by: str | None, sort_direction: str | None) -> List[Sorter]:
    direction = Direction.ascending if sort_direction == "asc" else Direction.descending
    match sort_by:
        case "title":
            return [TextSorter(field_name=CoreFieldNames.NAME, direction=direction)]
        case "date":
            return [IntegerSorter(field_name="articleYear", direction=direction)]
        case _:
            return [ScoreSorter(direction=direction)]


@router.get(
    "",
    summary="기사 목록 검색",
    operation_id="searchArticles",
    response_model=ApiResponse,
)
def get_articles(
    query: str | None = None,
    author: List[str] | None = Query(None),
    categories: List[str] | None = Query(None),
    article_year: List[str] | None = Query(None, alias="articleYear"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_direction: str | None = Query(None, alias="sortDirection"),
    skip: int = Query(0, ge=0),
    take: int = Query(6, ge=0, le=100),
    svc: SearchService = Depends(get_search_service),
):
    result = svc.search(
        settings.DEFAULT_INDEX_ALIAS,
        query=query,
        filters=article_filters(author, categories, article_year),
        facets=article_facets(),
        sorters=article_sorters(sort_by, sort_direction),
        skip=skip,
        take=take,
    )
    return ApiResponse(**ok(result.model_dump(mode="json"), message="검색 성공"))
