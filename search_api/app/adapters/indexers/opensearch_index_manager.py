"""
물리 인덱스 스키마를 관리하는 IndexManagerPort 구현체.

OpenSearch 매핑은 `dynamic: strict` 로 선언하므로 여기서 선언한 필드만 색인할 수 있다.
스키마는 제자리에서 마이그레이션하지 않고, 필드를 늘리려면 reset(삭제 후 재생성)한다.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable

from opensearchpy import OpenSearch
from opensearchpy.exceptions import NotFoundError, OpenSearchException

from search_api.app.adapters.indexers.alias_resolver import IndexAliasResolver
from search_api.app.domain.fields import (
    RAW_SUBFIELD,
    SORTABLE_SUFFIXES,
    CoreFieldNames,
    FieldNames,
    Suffix,
    physical_name,
    sortable_name,
)
from search_api.app.domain.ports import IndexManagerPort, KnownFieldsPort
from search_api.app.platform.exceptions import SchemaError

logger = logging.getLogger(__name__)

TEXT_ANALYZER = "content_text"

_VALUE_TYPES: Dict[Suffix, str] = {
    Suffix.keywords: "keyword",
    Suffix.integers: "integer",
    Suffix.decimals: "double",
    Suffix.datetimes: "date",
}


def _text(analyzer: str = TEXT_ANALYZER, sortable: bool = False) -> Dict[str, Any]:
    mapping: Dict[str, Any] = {"type": "text", "analyzer": analyzer}
    if sortable:
        mapping["fields"] = {RAW_SUBFIELD: {"type": "keyword", "ignore_above": 256}}
    return mapping


def build_properties(known_fields: Iterable[str]) -> Dict[str, Any]:
    """
    인덱스 매핑의 properties 를 만든다.

    - 시스템 필드: id, objectType, key, culture, segment, accessKeys
    - 전문 검색용 allTexts, allTextsR1~R3
    - 항상 존재하는 contentTypeId, pathIds keyword projection
    - allow-list 의 각 필드: texts(4단계) / keywords / integers / decimals / datetimes
      + 숫자/날짜의 정렬용 단일 값 projection
    """
    keyword = {"type": "keyword"}
    properties: Dict[str, Any] = {
        FieldNames.ID: dict(keyword),
        FieldNames.OBJECT_TYPE: dict(keyword),
        FieldNames.KEY: dict(keyword),
        FieldNames.CULTURE: dict(keyword),
        FieldNames.SEGMENT: dict(keyword),
        FieldNames.ACCESS_KEYS: dict(keyword),
        FieldNames.ALL_TEXTS: _text(),
        FieldNames.ALL_TEXTS_R1: _text(),
        FieldNames.ALL_TEXTS_R2: _text(),
        FieldNames.ALL_TEXTS_R3: _text(),
        physical_name(CoreFieldNames.CONTENT_TYPE_ID, Suffix.keywords): dict(keyword),
        physical_name(CoreFieldNames.PATH_IDS, Suffix.keywords): dict(keyword),
    }

    for field in known_fields:
        properties[physical_name(field, Suffix.texts)] = _text(sortable=True)
        for tier in (Suffix.texts_r1, Suffix.texts_r2, Suffix.texts_r3):
            properties[physical_name(field, tier)] = _text()
        for suffix, value_type in _VALUE_TYPES.items():
            properties[physical_name(field, suffix)] = {"type": value_type}
            if suffix in SORTABLE_SUFFIXES:
                properties[sortable_name(field, suffix)] = {"type": value_type}
    return properties


class OpenSearchIndexManager(IndexManagerPort):

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
        self._load_index_settings()

    def _load_index_settings(self) -> None:
        """
            정적 인덱스 설정(샤드, analyzer)을 JSON 파일에서 로드한다.
        """
        root_dir = Path(os.path.dirname(__file__)).resolve().parents[2]
        settings_path = root_dir / "resources/schema/index_settings.json"
        with open(settings_path, 'r', encoding='utf-8') as f:
            self.index_settings = json.load(f)

    def build_index_body(self, index_alias: str) -> Dict[str, Any]:
        """
            논리 alias 의 allow-list 로 인덱스 생성 바디를 만든다.
        """
        body = copy.deepcopy(self.index_settings)
        body["mappings"] = {
            "dynamic": "strict",
            "properties": build_properties(self.known_fields.get_known_fields(index_alias)),
        }
        return body

    def ensure(self, index_alias: str) -> None:
        """
            인덱스가 없으면 생성한다. 이미 있으면 아무것도 하지 않는다.

            Args:
                index_alias: 논리 alias (allow-list 조회에 사용)
            Raises:
                SchemaError: 생성 요청이 거절된 경우
        """
        if not self.manage_indexes:
            return

        index_name = self.alias_resolver.resolve(index_alias)
        if self.client.indices.exists(index=index_name):
            return

        logger.info("Creating index %s (alias=%s)...", index_name, index_alias)
        body = self.build_index_body(index_alias)
        try:
            self.client.indices.create(index=index_name, body=body)
        except OpenSearchException as e:
            logger.error("Failed to create index %s", index_name, exc_info=True)
            raise SchemaError(index_name, str(e)) from e
        logger.info("Index %s has been created.", index_name)

    def reset(self, index_alias: str) -> None:
        """
            인덱스를 삭제한 뒤 다시 생성한다.
            - 인덱스가 없으면(404) 그대로 진행
            - 그 밖의 삭제 오류는 로그만 남기고 재생성하지 않는다
        """
        if not self.manage_indexes:
            return

        index_name = self.alias_resolver.resolve(index_alias)
        try:
            self.client.indices.delete(index=index_name)
            logger.info("Deleted index %s", index_name)
        except NotFoundError:
            pass
        except OpenSearchException:
            logger.error("Failed to delete index %s", index_name, exc_info=True)
            return

        self.ensure(index_alias)
