"""
인덱스 스키마 관리 및 콘텐츠 변경 색인 API 라우터.

콘텐츠 호스트가 변경 알림을 받을 때마다 호출한다. API_KEY 가 설정돼 있으면
`X-API-Key` 헤더가 필요하다.
"""

from fastapi import APIRouter, Depends
from search_api.app.api.deps import get_index_service, resolve_index_alias
from search_api.app.domain.services.index_service import IndexService
from search_api.app.models.schemas import ApiResponse, ContentChangeRequest, DeleteRequest
from search_api.app.platform.response import ok
from search_api.app.security.guards import require_api_key
import logging
logger = logging.getLogger(__name__)


router = APIRouter(prefix="/index", tags=["index"], dependencies=[Depends(require_api_key)])


@router.post(
    "/{index_alias}/ensure",
    summary="인덱스 생성",
    description="물리 인덱스가 없으면 현재 allow-list 로 생성합니다. 이미 있으면 아무것도 하지 않습니다.",
    operation_id="ensureIndex",
    response_model=ApiResponse,
    responses={
        401: {"description": "API 키 불일치"},
        404: {"description": "설정되지 않은 인덱스"},
        502: {"description": "인덱스 생성 실패"},
    },
)
def ensure(index_alias: str, svc: IndexService = Depends(get_index_service)):
    alias = resolve_index_alias(index_alias)
    svc.ensure(alias)
    return ApiResponse(**ok({"index_alias": alias}, message="인덱스 준비 완료"))


@router.post(
    "/{index_alias}/reset",
    summary="인덱스 초기화",
    description="물리 인덱스를 삭제한 뒤 다시 생성합니다. 모든 문서가 사라지므로 재색인이 필요합니다.",
    operation_id="resetIndex",
    response_model=ApiResponse,
    responses={
        401: {"description": "API 키 불일치"},
        404: {"description": "설정되지 않은 인덱스"},
        502: {"description": "인덱스 생성 실패"},
    },
)
def reset(index_alias: str, svc: IndexService = Depends(get_index_service)):
    alias = resolve_index_alias(index_alias)
    svc.reset(alias)
    return ApiResponse(**ok({"index_alias": alias}, message="인덱스 초기화 완료"))


@router.post(
    "/{index_alias}/documents",
    summary="콘텐츠 색인",
    description=(
        "콘텐츠 하나를 요청한 variation(culture, segment) 마다 문서 하나로 색인합니다. "
        "같은 콘텐츠의 같은 variation 은 덮어씁니다."
    ),
    operation_id="indexDocument",
    response_model=ApiResponse,
    responses={
        200: {
            "description": "색인 성공",
            "content": {
                "application/json": {
                    "examples": {
                        "basic": {
                            "summary": "두 culture 색인 예",
                            "value": {
                                "success": True,
                                "message": "문서 인덱싱 성공",
                                "data": {"indexed": 2, "errors": []},
                            },
                        }
                    }
                }
            },
        },
        401: {"description": "API 키 불일치"},
        404: {"description": "설정되지 않은 인덱스"},
        502: {"description": "검색 서비스 전송 실패"},
    },
)
def index_document(
    index_alias: str,
    req: ContentChangeRequest,
    svc: IndexService = Depends(get_index_service),
):
    logger.info("ContentChangeRequest: id=%s variations=%d fields=%d", req.id, len(req.variations), len(req.fields))
    result = svc.add_or_update(
        resolve_index_alias(index_alias),
        req.id,
        req.object_type,
        req.variations,
        req.fields,
        req.protection,
    )
    return ApiResponse(**ok(result.model_dump(mode="json"), message="문서 인덱싱 성공"))


@router.post(
    "/{index_alias}/documents/delete",
    summary="콘텐츠 삭제",
    description="주어진 콘텐츠와 그 하위 콘텐츠의 모든 variation 문서를 삭제합니다.",
    operation_id="deleteDocuments",
    response_model=ApiResponse,
    responses={
        401: {"description": "API 키 불일치"},
        404: {"description": "설정되지 않은 인덱스"},
        502: {"description": "검색 서비스 전송 실패"},
    },
)
def delete_documents(
    index_alias: str,
    req: DeleteRequest,
    svc: IndexService = Depends(get_index_service),
):
    result = svc.delete(resolve_index_alias(index_alias), req.ids)
    return ApiResponse(**ok(result.model_dump(mode="json"), message="문서 삭제 성공"))
