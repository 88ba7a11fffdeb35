"""
물리 스키마를 부여받는 논리 필드(allow-list) 조회.

allow-list 에 있는 필드만 filter/facet/sort 대상이 된다.
나머지 필드는 전문 검색용 allTexts* 필드에만 기여한다.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from search_api.app.domain.fields import CoreFieldNames


class KnownFieldsOptions(BaseModel):
    """
    - global_fields: 모든 인덱스에 적용
    - by_index_alias: 인덱스 alias 별 추가 필드(alias 대소문자 무시)
    - include_name_field: 문서 이름 필드 항상 포함 여부
    """
    global_fields: list[str] = Field(default_factory=list)
    by_index_alias: dict[str, list[str]] = Field(default_factory=dict)
    include_name_field: bool = True


class KnownFieldsProvider:

    def __init__(self, options: KnownFieldsOptions) -> None:
        self._options = options

    def get_known_fields(self, index_alias: str) -> list[str]:
        """
        global + alias 별 필드 + name 필드의 합집합.
        빈 값은 무시하고, 대소문자 무시 중복 제거 후 처음 등장한 순서를 유지한다.
        """
        candidates = list(self._options.global_fields)
        if index_alias:
            for alias, fields in self._options.by_index_alias.items():
                if alias.lower() == index_alias.lower():
                    candidates.extend(fields)
        if self._options.include_name_field:
            candidates.append(CoreFieldNames.NAME)

        seen: set[str] = set()
        known: list[str] = []
        for name in candidates:
            if not name or not name.strip():
                continue
            if name.lower() in seen:
                continue
            seen.add(name.lower())
            known.append(name)
        return known
