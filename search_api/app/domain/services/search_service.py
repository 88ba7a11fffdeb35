# app/domain/services/search_service.py
"""
SearchService
==============

검색 유스케이스.

Flow:
    API(요청 DTO) → SearchService → SearchPort(OpenSearchSearcher) → SearchResult

- 도메인은 **Port(인터페이스)** 에만 의존합니다. (DIP)
- 구현체는 adapters 레이어에서 주입(의존성 주입; DI)합니다.

예시:
    svc = SearchService(searcher)
    result = svc.search("umb_publishedcontent", query="fastapi", facets=[KeywordFacet(field_name="authorName")])
"""

from __future__ import annotations

import logging
from typing import Sequence

from search_api.app.domain.models import AccessContext, Facet, Filter, SearchResult, Sorter
from search_api.app.domain.ports import SearchPort

logger = logging.getLogger(__name__)

class SearchService:

    def __init__(
        self,
        searcher: SearchPort) -> None:
        self._searcher = searcher

    # ================= public API =================
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
        take: int = 10) -> SearchResult:
        """
        검색을 수행하는 메서드.
        Args:
            index_alias: str            : 논리 인덱스 alias
            query: str | None           : 검색어
            filters/facets/sorters      : 추상 검색 조건
            culture/segment             : 대상 variation
            access_context              : 요청자 접근 정보
            skip/take: int              : 페이징
        Returns:
            SearchResult: 검색 결과
        """
        logger.info(
            "service.search: index=%s query=%s filters=%d facets=%d sorters=%d skip=%s take=%s",
            index_alias, query, len(filters or []), len(facets or []), len(sorters or []), skip, take,
        )
        return self._searcher.search(
            index_alias,
            query=query,
            filters=filters,
            facets=facets,
            sorters=sorters,
            culture=culture,
            segment=segment,
            access_context=access_context,
            skip=skip,
            take=take,
        )
