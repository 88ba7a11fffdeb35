from typing import Any, List
from uuid import UUID

from pydantic import BaseModel, Field

from search_api.app.domain.models import (
    AccessContext,
    ContentProtection,
    Facet,
    Filter,
    IndexField,
    ObjectType,
    Sorter,
    Variation,
)


class SearchRequest(BaseModel):
    """
    추상 검색 요청 바디. filters/facets/sorters 는 `kind` 로 구분한다.
    """
    index_alias: str | None = Field(None, description="논리 인덱스 alias (미지정 시 기본 인덱스)")
    query: str | None = Field(None, description="검색어")
    filters: List[Filter] = Field(default_factory=list)
    facets: List[Facet] = Field(default_factory=list)
    sorters: List[Sorter] = Field(default_factory=list)
    culture: str | None = None
    segment: str | None = None
    access_context: AccessContext | None = None
    skip: int = Field(0, ge=0)
    take: int = Field(10, ge=0, le=1000)


class ContentChangeRequest(BaseModel):
    """콘텐츠 변경 이벤트. fields 는 변경 시점마다 새로 만들어 통째로 보낸다."""
    id: UUID
    object_type: ObjectType = ObjectType.document
    variations: List[Variation] = Field(default_factory=lambda: [Variation()])
    fields: List[IndexField] = Field(default_factory=list)
    protection: ContentProtection | None = None


class DeleteRequest(BaseModel):
    ids: List[UUID] = Field(..., min_length=1)


class ApiResponse(BaseModel):
    success: bool = Field(..., description="성공 여부")
    message: str = Field(..., description="결과 메시지")
    data: Any = Field(None, description="결과 데이터")
    trace_id: str | None = None
