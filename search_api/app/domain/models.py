"""
도메인 모델 정의.

- IndexValue / IndexField: 콘텐츠 속성 하나가 색인 시점에 가지는 값 묶음
- Variation / ContentProtection / AccessContext: 문서 변형(culture, segment)과 접근 제어
- Filter / Facet / Sorter: 검색 요청을 구성하는 추상 모델 (kind 로 구분되는 tagged union)
- Document / FacetResult / SearchResult: 검색 결과 모델
- IndexResult: 색인 결과 요약

Pydantic v2 기반 모델이라 API 바디로 그대로 받거나 내려줄 수 있습니다.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field


# ================== indexing ==================

class ObjectType(str, Enum):
    """색인 문서의 대략적인 객체 유형."""
    unknown = "Unknown"
    document = "Document"
    media = "Media"
    member = "Member"


class IndexValue(BaseModel):
    """
    논리 필드 하나에 붙는 다중 타입 값 컨테이너.
    값이 없는 종류는 None(= 해당 종류의 값 없음)으로 둔다.
    """
    texts: list[str] | None = Field(None, description="기본 relevance 텍스트")
    texts_r1: list[str] | None = Field(None, description="relevance 1 텍스트(가장 높음)")
    texts_r2: list[str] | None = Field(None, description="relevance 2 텍스트")
    texts_r3: list[str] | None = Field(None, description="relevance 3 텍스트")
    keywords: list[str] | None = None
    integers: list[int] | None = None
    decimals: list[float] | None = None
    datetimes: list[datetime] | None = None


class IndexField(BaseModel):
    """culture/segment 가 None 이면 해당 축의 모든 변형에 적용된다(invariant)."""
    field_name: str
    value: IndexValue
    culture: str | None = None
    segment: str | None = None


class Variation(BaseModel):
    culture: str | None = None
    segment: str | None = None


class ContentProtection(BaseModel):
    """접근 가능한 principal/group 키 목록. 비어 있으면 공개 문서."""
    access_ids: list[UUID] = Field(default_factory=list)


class AccessContext(BaseModel):
    principal_id: UUID
    group_ids: list[UUID] | None = None


# ================== filters ==================

class IntegerRange(BaseModel):
    """[min_value, max_value) 구간. None 이면 열린 경계."""
    key: str | None = None
    min_value: int | None = None
    max_value: int | None = None


class DecimalRange(BaseModel):
    key: str | None = None
    min_value: float | None = None
    max_value: float | None = None


class DateTimeRange(BaseModel):
    key: str | None = None
    min_value: datetime | None = None
    max_value: datetime | None = None


class TextFilter(BaseModel):
    kind: Literal["text"] = "text"
    field_name: str
    values: list[str]
    negate: bool = False


class KeywordFilter(BaseModel):
    kind: Literal["keyword"] = "keyword"
    field_name: str
    values: list[str]
    negate: bool = False


class IntegerExactFilter(BaseModel):
    kind: Literal["integer_exact"] = "integer_exact"
    field_name: str
    values: list[int]
    negate: bool = False


class IntegerRangeFilter(BaseModel):
    kind: Literal["integer_range"] = "integer_range"
    field_name: str
    ranges: list[IntegerRange]
    negate: bool = False


class DecimalExactFilter(BaseModel):
    kind: Literal["decimal_exact"] = "decimal_exact"
    field_name: str
    values: list[float]
    negate: bool = False


class DecimalRangeFilter(BaseModel):
    kind: Literal["decimal_range"] = "decimal_range"
    field_name: str
    ranges: list[DecimalRange]
    negate: bool = False


class DateTimeExactFilter(BaseModel):
    kind: Literal["datetime_exact"] = "datetime_exact"
    field_name: str
    values: list[datetime]
    negate: bool = False


class DateTimeRangeFilter(BaseModel):
    kind: Literal["datetime_range"] = "datetime_range"
    field_name: str
    ranges: list[DateTimeRange]
    negate: bool = False


Filter = Annotated[
    Union[
        TextFilter,
        KeywordFilter,
        IntegerExactFilter,
        IntegerRangeFilter,
        DecimalExactFilter,
        DecimalRangeFilter,
        DateTimeExactFilter,
        DateTimeRangeFilter,
    ],
    Field(discriminator="kind"),
]


# ================== facets ==================

class KeywordFacet(BaseModel):
    kind: Literal["keyword"] = "keyword"
    field_name: str


class IntegerExactFacet(BaseModel):
    kind: Literal["integer_exact"] = "integer_exact"
    field_name: str


class IntegerRangeFacet(BaseModel):
    kind: Literal["integer_range"] = "integer_range"
    field_name: str
    ranges: list[IntegerRange]


class DecimalExactFacet(BaseModel):
    kind: Literal["decimal_exact"] = "decimal_exact"
    field_name: str


class DecimalRangeFacet(BaseModel):
    kind: Literal["decimal_range"] = "decimal_range"
    field_name: str
    ranges: list[DecimalRange]


class DateTimeExactFacet(BaseModel):
    kind: Literal["datetime_exact"] = "datetime_exact"
    field_name: str


class DateTimeRangeFacet(BaseModel):
    kind: Literal["datetime_range"] = "datetime_range"
    field_name: str
    ranges: list[DateTimeRange]


Facet = Annotated[
    Union[
        KeywordFacet,
        IntegerExactFacet,
        IntegerRangeFacet,
        DecimalExactFacet,
        DecimalRangeFacet,
        DateTimeExactFacet,
        DateTimeRangeFacet,
    ],
    Field(discriminator="kind"),
]


# ================== sorters ==================

class Direction(str, Enum):
    ascending = "asc"
    descending = "desc"


class ScoreSorter(BaseModel):
    kind: Literal["score"] = "score"
    direction: Direction = Direction.descending


class TextSorter(BaseModel):
    kind: Literal["text"] = "text"
    field_name: str
    direction: Direction = Direction.ascending


class KeywordSorter(BaseModel):
    kind: Literal["keyword"] = "keyword"
    field_name: str
    direction: Direction = Direction.ascending


class IntegerSorter(BaseModel):
    kind: Literal["integer"] = "integer"
    field_name: str
    direction: Direction = Direction.ascending


class DecimalSorter(BaseModel):
    kind: Literal["decimal"] = "decimal"
    field_name: str
    direction: Direction = Direction.ascending


class DateTimeSorter(BaseModel):
    kind: Literal["datetime"] = "datetime"
    field_name: str
    direction: Direction = Direction.ascending


Sorter = Annotated[
    Union[
        ScoreSorter,
        TextSorter,
        KeywordSorter,
        IntegerSorter,
        DecimalSorter,
        DateTimeSorter,
    ],
    Field(discriminator="kind"),
]


# ================== results ==================

class Document(BaseModel):
    """검색 결과 한 건. 표시용 데이터는 호출자가 id 로 다시 조회한다."""
    id: UUID
    object_type: ObjectType = ObjectType.unknown


class KeywordFacetValue(BaseModel):
    key: str
    count: int


class IntegerExactFacetValue(BaseModel):
    key: int
    count: int


class DecimalExactFacetValue(BaseModel):
    key: float
    count: int


class DateTimeExactFacetValue(BaseModel):
    key: datetime
    count: int


class IntegerRangeFacetValue(BaseModel):
    key: str | None
    min_value: int | None
    max_value: int | None
    count: int


class DecimalRangeFacetValue(BaseModel):
    key: str | None
    min_value: float | None
    max_value: float | None
    count: int


class DateTimeRangeFacetValue(BaseModel):
    key: str | None
    min_value: datetime | None
    max_value: datetime | None
    count: int


FacetValue = Union[
    KeywordFacetValue,
    IntegerExactFacetValue,
    DecimalExactFacetValue,
    DateTimeExactFacetValue,
    IntegerRangeFacetValue,
    DecimalRangeFacetValue,
    DateTimeRangeFacetValue,
]


class FacetResult(BaseModel):
    field_name: str
    values: list[FacetValue] = Field(default_factory=list)


class SearchResult(BaseModel):
    total: int = Field(0, ge=0)
    documents: list[Document] = Field(default_factory=list)
    facets: list[FacetResult] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> SearchResult:
        return cls(total=0, documents=[], facets=[])


class IndexErrorItem(BaseModel):
    """인덱싱 실패 항목 요약."""
    doc_id: str
    reason: str


class IndexResult(BaseModel):
    """인덱싱 실행 결과."""
    indexed: int = Field(0, ge=0)
    errors: list[IndexErrorItem] = Field(default_factory=list)
