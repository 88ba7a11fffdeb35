"""
색인 필드 명명 규칙과 상수.

논리 필드 이름 + 값 종류 접미사 → 물리 필드 이름으로의 결정적인 매핑을 정의한다.
모든 물리 필드는 시스템 필드와 겹치지 않도록 `fields_` 접두사를 가진다.

    physical_name("author", Suffix.keywords)   -> "fields_author_keywords"
    sortable_name("year", Suffix.integers)     -> "fields_year_integers_sort"
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

FIELDS_PREFIX = "fields"

# ---- variation sentinels ----
INVARIANT_CULTURE = "inv"
DEFAULT_SEGMENT = "def"

# 공개 문서용 접근 키. 보호/비보호 문서가 같은 접근 필터 형태를 공유하도록 항상 포함된다.
PUBLIC_ACCESS_KEY = UUID(int=0)


class FieldNames:
    """시스템 필드 이름."""
    ID = "id"
    OBJECT_TYPE = "objectType"
    KEY = "key"
    CULTURE = "culture"
    SEGMENT = "segment"
    ACCESS_KEYS = "accessKeys"
    ALL_TEXTS = "allTexts"
    ALL_TEXTS_R1 = "allTextsR1"
    ALL_TEXTS_R2 = "allTextsR2"
    ALL_TEXTS_R3 = "allTextsR3"


class CoreFieldNames:
    """콘텐츠 호스트가 모든 문서에 공통으로 넘겨주는 논리 필드."""
    NAME = "name"
    CONTENT_TYPE_ID = "contentTypeId"
    PATH_IDS = "pathIds"


class Suffix(str, Enum):
    texts = "_texts"
    texts_r1 = "_texts_r1"
    texts_r2 = "_texts_r2"
    texts_r3 = "_texts_r3"
    keywords = "_keywords"
    integers = "_integers"
    decimals = "_decimals"
    datetimes = "_datetimes"


SORTABLE_SUFFIX = "_sort"

# 정렬용 단일 값 projection 을 따로 두는 종류
SORTABLE_SUFFIXES = (Suffix.integers, Suffix.decimals, Suffix.datetimes)

# text projection 의 정렬용 keyword 서브필드
RAW_SUBFIELD = "raw"

# ---- open bound extremes ----
INTEGER_MIN = -(2 ** 31)
INTEGER_MAX = 2 ** 31 - 1
DECIMAL_MIN = -sys.float_info.max
DECIMAL_MAX = sys.float_info.max
DATETIME_MIN = datetime(1, 1, 1, tzinfo=timezone.utc)
DATETIME_MAX = datetime(9999, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)


def physical_name(field_name: str, suffix: Suffix | str) -> str:
    suffix = suffix.value if isinstance(suffix, Suffix) else suffix
    return f"{FIELDS_PREFIX}_{field_name}{suffix}"


def sortable_name(field_name: str, suffix: Suffix) -> str:
    """multi-valued 숫자/날짜 필드의 정렬용 단일 값 projection 이름."""
    if suffix not in SORTABLE_SUFFIXES:
        raise ValueError(f"no sortable projection for {suffix.value}")
    return physical_name(field_name, f"{suffix.value}{SORTABLE_SUFFIX}")


def index_culture(culture: str | None) -> str:
    return culture.lower() if culture else INVARIANT_CULTURE


def index_segment(segment: str | None) -> str:
    return segment.lower() if segment else DEFAULT_SEGMENT


def document_id(content_id: UUID, culture: str | None, segment: str | None) -> str:
    """문서 식별자: {contentId}_{culture}_{segment}. 같은 조합은 덮어쓰기된다."""
    return f"{content_id}_{index_culture(culture)}_{index_segment(segment)}"


def as_utc(value: datetime) -> datetime:
    """naive datetime 은 UTC 로 간주한다."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_datetime(value: datetime) -> str:
    return as_utc(value).isoformat()


def datetime_from_millis(millis: float) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
