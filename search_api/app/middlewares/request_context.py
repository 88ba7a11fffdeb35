import time, uuid, logging
from starlette.middleware.base import BaseHTTPMiddleware
from search_api.app.platform.logging import request_id_ctx

access_logger = logging.getLogger("uvicorn.access")

class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_ctx.set(rid)
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            ms = (time.perf_counter() - start) * 1000
            access_logger.info(
                "%s %s %s %.2fms", request.method, request.url.path, status_code, ms,
                extra={"http_method": request.method, "path": request.url.path,
                       "status_code": status_code, "duration_ms": round(ms, 2)},
            )
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = rid
        return response
