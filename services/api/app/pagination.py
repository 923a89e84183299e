import math

from app.schemas import PaginationMeta


def build_pagination_meta(total: int, page: int, limit: int) -> PaginationMeta:
    total_pages = max(1, math.ceil(total / limit))
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
