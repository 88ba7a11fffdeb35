from fastapi import APIRouter, Depends
from search_api.app.api.deps import get_search_service, resolve_index_alias
from search_api.app.domain.services.search_service import SearchService
from search_api.app.models.schemas import ApiResponse, SearchRequest
from search_api.app.platform.response import ok
import logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

@router.post(
    "",
    summary="문서 검색",
    description=(
        "검색어와 추상 filter/facet/sorter 로 문서를 검색합니다. "
        "각 조건은 `kind` 로 종류를 구분하며, 결과는 문서 id 와 facet 집계만 포함합니다."
    ),
    operation_id="searchDocuments",
    status_code=200,
    response_model=ApiResponse,
    responses={
        200: {
            "description": "검색 성공",
            "content": {
                "application/json": {
                    "examples": {
                        "basic": {
                            "summary": "기본 검색 예시",
                            "value": {
                                "success": True,
                                "message": "검색 성공",
                                "data": {
                                    "total": 2,
                                    "documents": [
                                        {"id": "1f0e4a43-6c3a-4b52-9d77-5d0c7a9b2f10", "object_type": "Document"},
                                        {"id": "6a9b1c8e-2d4f-4e0a-8b3c-7f1e2d3c4b5a", "object_type": "Document"},
                                    ],
                                    "facets": [
                                        {
                                            "field_name": "authorName",
                                            "values": [
                                                {"key": "Jane", "count": 1},
                                                {"key": "John", "count": 1},
                                            ],
                                        }
                                    ],
                                },
                            },
                        }
                    }
                }
            },
        },
        404: {"description": "설정되지 않은 인덱스"},
        422: {"description": "잘못된 요청 값"},
        500: {"description": "서버 내부 오류"},
    },
)
def search(req: SearchRequest, svc: SearchService = Depends(get_search_service)):
    logger.info("SearchRequest: %s", req)
    result = svc.search(
        resolve_index_alias(req.index_alias),
        query=req.query,
        filters=req.filters,
        facets=req.facets,
        sorters=req.sorters,
        culture=req.culture,
        segment=req.segment,
        access_context=req.access_context,
        skip=req.skip,
        take=req.take,
    )
    return ApiResponse(**ok(result.model_dump(mode="json"), message="검색 성공"))
