"""
콘텐츠 변경을 OpenSearch 문서로 펼쳐 색인하는 IndexPort 구현체.

콘텐츠 하나는 요청된 variation(culture, segment) 마다 문서 하나가 된다.
문서 id 는 {contentId}_{culture}_{segment} 이므로 같은 조합을 다시 색인하면 덮어쓴다.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List
from uuid import UUID

from opensearchpy import OpenSearch, helpers
from opensearchpy.exceptions import OpenSearchException

from search_api.app.adapters.indexers.alias_resolver import IndexAliasResolver
from search_api.app.domain.fields import (
    PUBLIC_ACCESS_KEY,
    CoreFieldNames,
    FieldNames,
    Suffix,
    document_id,
    format_datetime,
    index_culture,
    index_segment,
    physical_name,
    sortable_name,
)
from search_api.app.domain.models import (
    ContentProtection,
    IndexErrorItem,
    IndexField,
    IndexResult,
    ObjectType,
    Variation,
)
from search_api.app.domain.ports import IndexPort, KnownFieldsPort
from search_api.app.domain.variations import group_by_field_name, resolve
from search_api.app.platform.exceptions import IndexingFailed

logger = logging.getLogger(__name__)

# (IndexValue 속성, 전체 텍스트 필드, projection 접미사)
_TEXT_TIERS = (
    ("texts", FieldNames.ALL_TEXTS, Suffix.texts),
    ("texts_r1", FieldNames.ALL_TEXTS_R1, Suffix.texts_r1),
    ("texts_r2", FieldNames.ALL_TEXTS_R2, Suffix.texts_r2),
    ("texts_r3", FieldNames.ALL_TEXTS_R3, Suffix.texts_r3),
)

# (IndexValue 속성, projection 접미사, 정렬용 단일 값 projection 여부)
_VALUE_KINDS = (
    ("keywords", Suffix.keywords, False),
    ("integers", Suffix.integers, True),
    ("decimals", Suffix.decimals, True),
    ("datetimes", Suffix.datetimes, True),
)

# allow-list 와 무관하게 항상 keyword 로 싣는 필드(타입 필터, 상위 노드 기준 삭제에 필요)
_ALWAYS_MATERIALIZED = (CoreFieldNames.CONTENT_TYPE_ID, CoreFieldNames.PATH_IDS)


def _wire_values(kind: str, values: List[Any]) -> List[Any]:
    if kind == "datetimes":
        return [format_datetime(v) for v in values]
    return list(values)


class OpenSearchIndexer(IndexPort):

    def __init__(
        self,
        client: OpenSearch,
        alias_resolver: IndexAliasResolver,
        known_fields: KnownFieldsPort,
        manage_indexes: bool = True,
    ) -> None:
        self.client = client
        self.alias_resolver = alias_resolver
        self.known_fields = known_fields
        self.manage_indexes = manage_indexes

    # ================== add / update ==================
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
            콘텐츠 하나를 variation 별 문서로 만들어 한 번의 bulk 요청으로 적재한다.

            - 문서 일부 실패는 첫 번째 오류만 경고로 남기고 나머지는 계속 진행
            - 전송 자체가 실패하면 로그를 남기고 IndexingFailed 로 전파

            Args:
                index_alias: 논리 alias
                content_id: 콘텐츠 id
                object_type: 콘텐츠 객체 유형
                variations: 문서를 만들 (culture, segment) 목록
                fields: 이번 변경에서 새로 만든 필드 값 전체
                protection: 접근 제한(없으면 공개)
            Returns:
                IndexResult: 성공 건수 및 실패 상세
        """
        if not self.manage_indexes:
            return IndexResult()

        fields_by_name = group_by_field_name(fields)
        # 소문자 이름 → allow-list 표기. 물리 필드 이름은 매핑과 같은 표기를 써야 한다
        known = {f.lower(): f for f in self.known_fields.get_known_fields(index_alias)}
        documents = [
            self.build_document(content_id, object_type, variation, fields_by_name, known, protection)
            for variation in variations
        ]
        if not documents:
            return IndexResult()

        index_name = self.alias_resolver.resolve(index_alias)
        return self._bulk(index_name, documents)

    def build_document(
        self,
        content_id: UUID,
        object_type: ObjectType,
        variation: Variation,
        fields_by_name: Dict[str, List[IndexField]],
        known: Dict[str, str],
        protection: ContentProtection | None,
    ) -> Dict[str, Any]:
        """
            variation 하나에 해당하는 물리 문서를 만든다.
        """
        variation_fields = resolve(fields_by_name, variation)

        access_keys = (
            protection.access_ids
            if protection is not None and protection.access_ids
            else [PUBLIC_ACCESS_KEY]
        )

        document: Dict[str, Any] = {
            FieldNames.ID: document_id(content_id, variation.culture, variation.segment),
            FieldNames.OBJECT_TYPE: object_type.value,
            FieldNames.KEY: str(content_id),
            FieldNames.CULTURE: index_culture(variation.culture),
            FieldNames.SEGMENT: index_segment(variation.segment),
            FieldNames.ACCESS_KEYS: [str(k) for k in access_keys],
        }

        # 특정 필드를 지정하지 않은 전문 검색용
        for attr, all_texts_field, _ in _TEXT_TIERS:
            document[all_texts_field] = " ".join(
                text for f in variation_fields for text in (getattr(f.value, attr) or [])
            )

        for field in variation_fields:
            canonical = known.get(field.field_name.lower())
            if canonical is not None:
                document.update(self._projections(canonical, field))

        for field in variation_fields:
            if field.field_name in _ALWAYS_MATERIALIZED and field.value.keywords:
                document[physical_name(field.field_name, Suffix.keywords)] = list(field.value.keywords)

        return document

    def _projections(self, field_name: str, field: IndexField) -> Dict[str, Any]:
        """값이 하나 이상 있는 projection 만 채운다."""
        projections: Dict[str, Any] = {}
        for attr, _, suffix in _TEXT_TIERS:
            texts = getattr(field.value, attr)
            if texts:
                projections[physical_name(field_name, suffix)] = " ".join(texts)

        for attr, suffix, has_sortable in _VALUE_KINDS:
            values = getattr(field.value, attr)
            if not values:
                continue
            wire = _wire_values(attr, values)
            projections[physical_name(field_name, suffix)] = wire
            if has_sortable:
                # 정렬용은 첫 번째 값 (min/max 아님)
                projections[sortable_name(field_name, suffix)] = wire[0]
        return projections

    def _bulk(self, index_name: str, documents: List[Dict[str, Any]]) -> IndexResult:
        def actions():
            for doc in documents:
                yield {
                    "_op_type": "index",
                    "_index": index_name,
                    "_id": doc[FieldNames.ID],
                    "_source": doc,
                }

        try:
            ok, errors = helpers.bulk(self.client, actions(), raise_on_error=False)
        except OpenSearchException as e:
            logger.error("Error performing add/update to %s", index_name, exc_info=True)
            raise IndexingFailed(index_name, str(e)) from e

        result = IndexResult(indexed=ok, errors=self._error_items(errors, "index"))
        logger.info(
            "Indexed %d of %d documents into %s", ok, len(documents), index_name,
            extra={"index_name": index_name, "documents": len(documents)},
        )
        if result.errors:
            logger.warning(
                "Failed to index some documents. First error: %s", result.errors[0].reason
            )
        return result

    # ================== delete ==================
    def delete(self, index_alias: str, content_ids: Iterable[UUID]) -> IndexResult:
        """
            콘텐츠의 모든 variation 문서를 삭제한다.

            pathIds 에 주어진 id 가 하나라도 포함된 문서를 먼저 조회해
            문서 id 를 모은 뒤 bulk delete 한다(하위 콘텐츠 문서도 함께 삭제됨).
        """
        if not self.manage_indexes:
            return IndexResult()

        ids = [str(content_id) for content_id in content_ids]
        if not ids:
            return IndexResult()

        index_name = self.alias_resolver.resolve(index_alias)
        query = {
            "query": {
                "terms": {physical_name(CoreFieldNames.PATH_IDS, Suffix.keywords): ids}
            }
        }
        try:
            doc_ids = [
                hit["_id"]
                for hit in helpers.scan(self.client, query=query, index=index_name, _source=False)
            ]
            if not doc_ids:
                return IndexResult()
            ok, errors = helpers.bulk(
                self.client,
                ({"_op_type": "delete", "_index": index_name, "_id": doc_id} for doc_id in doc_ids),
                raise_on_error=False,
            )
        except OpenSearchException as e:
            logger.error("Error performing delete from %s", index_name, exc_info=True)
            raise IndexingFailed(index_name, str(e)) from e

        result = IndexResult(indexed=ok, errors=self._error_items(errors, "delete"))
        if result.errors:
            logger.warning(
                "Failed to delete some documents. First error: %s", result.errors[0].reason
            )
        return result

    @staticmethod
    def _error_items(errors: Any, op_type: str) -> List[IndexErrorItem]:
        items: List[IndexErrorItem] = []
        for e in errors or []:
            detail = e.get(op_type, {}) if isinstance(e, dict) else {}
            reason = detail.get("error", e)
            items.append(IndexErrorItem(doc_id=str(detail.get("_id", "")), reason=str(reason)))
        return items
