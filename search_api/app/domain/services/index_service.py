"""
IndexService
==============

색인 유스케이스.

Flow:
    콘텐츠 변경 이벤트 → IndexService → IndexPort(OpenSearchIndexer) → OpenSearch
    스키마 생성/초기화 → IndexService → IndexManagerPort(OpenSearchIndexManager)

- 도메인은 **Port(인터페이스)** 에만 의존합니다. (DIP)
- 구현체는 adapters 레이어에서 주입(의존성 주입; DI)합니다.
"""

from __future__ import annotations

import logging
from typing import Iterable, List
from uuid import UUID

from search_api.app.domain.models import (
    ContentProtection,
    IndexField,
    IndexResult,
    ObjectType,
    Variation,
)
from search_api.app.domain.ports import IndexManagerPort, IndexPort

logger = logging.getLogger(__name__)


class IndexService:
    """콘텐츠 변경을 색인하고 인덱스 스키마를 관리하는 유스케이스 서비스."""

    def __init__(
        self,
        indexer: IndexPort,
        index_manager: IndexManagerPort,
    ) -> None:
        """
        인덱스 서비스 초기화.
        Args:
            indexer: IndexPort                : 문서 적재/삭제
            index_manager: IndexManagerPort   : 인덱스 생성/초기화
        """
        self._indexer = indexer
        self._index_manager = index_manager

    # ================= public API =================
    def ensure(self, index_alias: str) -> None:
        logger.info("service.ensure: index=%s", index_alias)
        self._index_manager.ensure(index_alias)

    def ensure_all(self, index_aliases: Iterable[str]) -> List[str]:
        """
        설정된 모든 인덱스를 준비한다(앱 시작 시).
        하나라도 실패하면 예외를 그대로 전파한다.

        Returns:
            List[str]: 처리한 alias 목록
        """
        done = []
        for index_alias in index_aliases:
            self.ensure(index_alias)
            done.append(index_alias)
        return done

    def reset(self, index_alias: str) -> None:
        logger.info("service.reset: index=%s", index_alias)
        self._index_manager.reset(index_alias)

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
        콘텐츠 하나를 색인하는 메서드.
        Args:
            index_alias: str
            content_id: UUID
            object_type: ObjectType
            variations: Iterable[Variation]
            fields: Iterable[IndexField]
            protection: ContentProtection | None
        Returns:
            IndexResult: 색인 결과
        """
        variations = list(variations)
        logger.info(
            "service.add_or_update: index=%s id=%s variations=%d",
            index_alias, content_id, len(variations),
            extra={"index_alias": index_alias, "content_id": str(content_id)},
        )
        return self._indexer.add_or_update(
            index_alias, content_id, object_type, variations, fields, protection
        )

    def delete(self, index_alias: str, content_ids: Iterable[UUID]) -> IndexResult:
        content_ids = list(content_ids)
        logger.info("service.delete: index=%s ids=%s", index_alias, content_ids)
        return self._indexer.delete(index_alias, content_ids)
