from typing import Sequence

from .schemas import PageMeta, PaginatedProducts, ProductOut


def total_pages(total_count: int, limit: int) -> int:
    if total_count <= 0 or limit <= 0:
        return 0
    return -(-total_count // limit)


def paginated_response(
    rows: Sequence[ProductOut], page: int, limit: int, total_count: int
) -> PaginatedProducts:
    pages = total_pages(total_count, limit)
    return PaginatedProducts(
        data=list(rows),
        meta=PageMeta(
            page=page,
            limit=limit,
            totalItems=total_count,
            totalPages=pages,
            hasNextPage=page < pages,
            hasPrevPage=page > 1,
        ),
    )
