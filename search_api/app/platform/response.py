# app/platform/response.py
from typing import Any

from search_api.app.platform.logging import request_id_ctx

def ok(data: Any = None, message: str = "ok") -> dict[str, Any]:
    return {"success": True, "message": message, "data": data, "trace_id": request_id_ctx.get()}
