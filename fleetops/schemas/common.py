from pydantic import BaseModel
from sqlalchemy.orm import Query
from typing import TypeVar, Generic, Any

T = TypeVar("T")


# ─── Standard Success Response ────────────────────────────────────────────────
class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T | None = None


# ─── Helper Functions ─────────────────────────────────────────────────────────
def success_response(message: str, data: Any = None) -> dict:
    """Return a standardized success dict (used in route handlers)."""
    return {"success": True, "message": message, "data": data}


def paginate(query: Query, page: int, limit: int) -> tuple[list, int]:
    """
    Slice an already ordered query into one page.

    Returns (rows, total) where total counts every row the filters match,
    which is what `paginated_response` reports as meta.total.
    """
    total = query.count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, total


def paginated_response(
    message: str,
    data: list,
    total: int,
    page: int,
    limit: int,
) -> dict:
    """Envelope for list endpoints: `data` is the page, `meta` the totals the UI pages with."""
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    return {
        "success": True,
        "message": message,
        "data": data,
        "meta": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        }
    }
