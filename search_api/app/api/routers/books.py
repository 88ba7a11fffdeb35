from typing import List

from fastapi import APIRouter, Depends, Query
from search_api.app.api.deps import get_search_service
from search_api.app.api.routers.articles import CONTENT_TYPE_ALIAS
from search_api.app.domain.fields import CoreFieldNames
from search_api.app.domain.models import (
    Direction,
    Filter,
    IntegerRange,
    IntegerRangeFilter,
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

router = APIRouter(prefix="/books", tags=["books"])


def parse_integer_range(value: str | None) -> IntegerRange | None:
    """
    "min,max" 형식의 구간. 한쪽을 비우면 열린 경계("2000," → 2000 이상).
    형식이 맞지 않으면 None.
    """
    parts = (value or "").split(",")
    if len(parts) != 2:
        return None
    bounds = []
    for part in parts:
        part = part.strip()
        if not part:
            bounds.append(None)
            continue
        try:
            bounds.append(int(part))
        except ValueError:
            return None
    return IntegerRange(key=value, min_value=bounds[0], max_value=bounds[1])


def book_filters(author: List[str] | None, publish_year: List[str] | None) -> List[Filter]:
    filters: List[Filter] = [KeywordFilter(field_name=CONTENT_TYPE_ALIAS, values=["book"])]
    ranges = [r for r in (parse_integer_range(v) for v in publish_year or []) if r is not None]
    if ranges:
        filters.append(IntegerRangeFilter(field_name="publishYear", ranges=ranges))
    if author:
        filters.append(KeywordFilter(field_name="authorName", values=author))
    return filters


def book_sorters(sort_by: str | None, sort_direction: str | None) -> List[Sorter]:
    direction = Direction.ascending if sort_direction == "asc" else Direction.descending
    match sort_by:
        case "title":
            return [TextSorter(field_name=CoreFieldNames.NAME, direction=direction)]
        case "publishYear":
            return [IntegerSorter(field_name="publishYear", direction=direction)]
        case _:
            return [ScoreSorter(direction=direction)]


@router.get(
    "",
    summary="도서 목록 검색",
    description="`publishYear` 는 `min,max` 형식이며 max 는 포함하지 않습니다.",
    operation_id="searchBooks",
    response_model=ApiResponse,
)
def get_books(
    query: str | None = None,
    author: List[str] | None = Query(None),
    publish_year: List[str] | None = Query(None, alias="publishYear"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_direction: str | None = Query(None, alias="sortDirection"),
    skip: int = Query(0, ge=0),
    take: int = Query(6, ge=0, le=100),
    svc: SearchService = Depends(get_search_service),
):
    result = svc.search(
        settings.DEFAULT_INDEX_ALIAS,
        query=query,
        filters=book_filters(author, publish_year),
        facets=[KeywordFacet(field_name="authorName")],
        sorters=book_sorters(sort_by, sort_direction),
        skip=skip,
        take=take,
    )
    return ApiResponse(**ok(result.model_dump(mode="json"), message="검색 성공"))
