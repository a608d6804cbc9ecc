"""
JSON envelope shared by every endpoint:
``{success, message?, data?, error?}``.
"""

from typing import Any, Dict, Optional


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def error_response(message: str, error: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    """Paging block returned next to a sliced list."""
    total_pages = (total + limit - 1) // limit
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "hasNextPage": page * limit < total,
        "hasPrevPage": page > 1,
    }
