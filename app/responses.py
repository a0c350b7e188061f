"""Standard JSON envelopes for API responses."""

import math
from typing import Any, Optional

from fastapi.responses import JSONResponse


def success_response(data: Any, meta: Optional[dict] = None, status_code: int = 200) -> JSONResponse:
    body = {"success": True, "data": data}
    if meta:
        body["meta"] = meta
    return JSONResponse(body, status_code=status_code)


def error_response(
    message: str,
    code: Optional[str] = None,
    status_code: int = 500,
    details: Optional[dict] = None,
) -> JSONResponse:
    error = {"message": message}
    if code:
        error["code"] = code
    if details:
        error["details"] = details
    return JSONResponse({"success": False, "error": error}, status_code=status_code)


def paginated_response(data: list, page: int, limit: int, total: int) -> JSONResponse:
    """Wrap one page of items with ``{page, limit, total, totalPages}`` metadata."""
    meta = {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit > 0 else 0,
    }
    return success_response(data, meta)
