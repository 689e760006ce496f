"""
Query builder and runners for the product listing and single-product lookup.

The listing issues two statements built from the same predicates: the page of
rows and the total count. Both run at once on separate pooled connections.
"""

import asyncio
from typing import Any, List, Tuple

from sqlalchemy import Select, and_, func, select
from sqlalchemy.exc import SQLAlchemyError

from .db import AppContext
from .errors import ErrorKind, Failure, Result
from .models import Product
from .pagination import paginated_response
from .params import DESC, FilterSet, ListingRequest, parse_int
from .schemas import PaginatedProducts, ProductOut

# Allow-listed sort names -> mapped columns. Nothing else reaches ORDER BY.
SORTABLE_COLUMNS = {
    "id": Product.id,
    "name": Product.name,
    "category": Product.category,
    "price": Product.price,
    "created_at": Product.created_at,
}

# Ids outside a signed 64-bit integer cannot exist in the table.
MIN_ID = -(2 ** 63)
MAX_ID = 2 ** 63 - 1


def build_predicates(filters: FilterSet) -> List[Any]:
    predicates = []
    if filters.category is not None:
        predicates.append(Product.category == filters.category)
    if filters.price_min is not None:
        predicates.append(Product.price >= filters.price_min)
    if filters.price_max is not None:
        predicates.append(Product.price <= filters.price_max)
    if filters.search is not None:
        # % and _ in the term match literally
        predicates.append(Product.name.contains(filters.search, autoescape=True))
    return predicates


def build_listing_queries(listing: ListingRequest) -> Tuple[Select, Select]:
    """Return (data statement, count statement) sharing one WHERE clause."""
    predicates = build_predicates(listing.filters)

    column = SORTABLE_COLUMNS.get(listing.sort.field, Product.id)
    ordering = column.desc() if listing.sort.direction == DESC else column.asc()

    data_stmt = select(Product)
    count_stmt = select(func.count()).select_from(Product)
    if predicates:
        where = and_(*predicates)
        data_stmt = data_stmt.where(where)
        count_stmt = count_stmt.where(where)

    page = listing.pagination
    data_stmt = data_stmt.order_by(ordering).limit(page.limit).offset(page.offset)
    return data_stmt, count_stmt


def _fetch_products(ctx: AppContext, stmt: Select) -> List[ProductOut]:
    with ctx.session() as session:
        return [ProductOut.model_validate(p) for p in session.execute(stmt).scalars()]


def fetch_scalar(ctx: AppContext, stmt: Select) -> Any:
    with ctx.session() as session:
        return session.execute(stmt).scalar_one()


def storage_failure(exc: SQLAlchemyError) -> Failure:
    return Failure(ErrorKind.INTERNAL, "Database error", cause=exc)


async def list_products(ctx: AppContext, listing: ListingRequest) -> Result[PaginatedProducts]:
    data_stmt, count_stmt = build_listing_queries(listing)
    try:
        rows, total = await asyncio.gather(
            asyncio.to_thread(_fetch_products, ctx, data_stmt),
            asyncio.to_thread(fetch_scalar, ctx, count_stmt),
        )
    except SQLAlchemyError as exc:
        return storage_failure(exc)

    page = listing.pagination
    return paginated_response(rows, page.page, page.limit, int(total))


def _load_product(ctx: AppContext, product_id: int):
    with ctx.session() as session:
        p = session.get(Product, product_id)
        return ProductOut.model_validate(p) if p is not None else None


async def get_product(ctx: AppContext, raw_id: str) -> Result[ProductOut]:
    product_id = parse_int(raw_id)
    if product_id is None:
        return Failure(ErrorKind.INVALID_ARGUMENT, "Invalid product id")
    if not MIN_ID <= product_id <= MAX_ID:
        return Failure(ErrorKind.NOT_FOUND, "Product not found")

    try:
        product = await asyncio.to_thread(_load_product, ctx, product_id)
    except SQLAlchemyError as exc:
        return storage_failure(exc)
    if product is None:
        return Failure(ErrorKind.NOT_FOUND, "Product not found")
    return product
