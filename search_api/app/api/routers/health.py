from fastapi import APIRouter, Depends, HTTPException, status
from opensearchpy import OpenSearch

from search_api.app.api.deps import get_opensearch
from search_api.app.platform.config import settings

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
def health():
    return {"ok": True}

@router.get("/ready")
def ready(os: OpenSearch = Depends(get_opensearch)):
    """OpenSearch 에 연결되지 않으면 503."""
    if not os.ping():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="OpenSearch unreachable")
    return {"ok": True, "role": settings.SERVER_ROLE}
