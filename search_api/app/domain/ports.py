"""
도메인 포트(추상 인터페이스).

애플리케이션 서비스(유스케이스)는 아래 포트들(추상)에만 의존합니다.
구체 구현은 adapters 레이어에서 제공하고, FastAPI DI로 주입합니다.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence
from uuid import UUID

from .models import (
    AccessContext,
    ContentProtection,
    Facet,
    Filter,
    IndexField,
    IndexResult,
    ObjectType,
    SearchResult,
    Sorter,
    Variation,
)


class KnownFieldsPort(Protocol):
    """인덱스 alias 별 allow-list 조회."""

    def get_known_fields(self, index_alias: str) -> list[str]:
        ...


class IndexManagerPort(Protocol):
    """
    물리 인덱스(스키마)의 생성/초기화.
    primary 가 아닌 서버에서는 아무것도 하지 않는다.
    """

    def ensure(self, index_alias: str) -> None:
        """인덱스가 없으면 선언된 스키마로 생성한다."""
        ...

    def reset(self, index_alias: str) -> None:
        """인덱스를 삭제(없으면 무시)한 뒤 다시 생성한다."""
        ...


class IndexPort(Protocol):
    """
    콘텐츠 변경을 물리 문서로 펼쳐 적재/삭제.
    """

    def add_or_update(
        self,
        index_alias: str,
        content_id: UUID,
        object_type: ObjectType,
        variations: Iterable[Variation],
        fields: Iterable[IndexField],
        protection: ContentProtection | None = None,
    ) -> IndexResult:
        """
        Returns:
            IndexResult: 성공 건수 및 실패 상세
        """
        ...

    def delete(self, index_alias: str, content_ids: Iterable[UUID]) -> IndexResult:
        ...


class SearchPort(Protocol):
    """
    추상 검색 요청을 백엔드 질의로 변환해 수행합니다.
    """

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
        ...
