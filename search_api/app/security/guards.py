from fastapi import Header, HTTPException, status
from search_api.app.platform.config import settings

def require_api_key(x_api_key: str = Header(None, alias="X-API-Key")):
    # API_KEY 미설정이면 보호하지 않는다(로컬/내부망 전용 배포)
    if not settings.API_KEY:
        return
    if not x_api_key or x_api_key != settings.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key")
