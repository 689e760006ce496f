"""
Fixed, parameter-free statistics over the productos table.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .db import AppContext
from .errors import Result
from .models import Product
from .queries import fetch_scalar, storage_failure
from .schemas import (
    CategoryStats,
    PriceAnalysisOut,
    PriceRangeCount,
    StatsOut,
    Summary,
    TopProduct,
)

TOP_N = 5

# Half-open [min, max); None means no upper bound.
PRICE_RANGES: Tuple[Tuple[str, int, Optional[int]], ...] = (
    ("Bajo costo (0-50)", 0, 50),
    ("Costo medio (50-200)", 50, 200),
    ("Costo alto (200-500)", 200, 500),
    ("Premium (500+)", 500, None),
)


def category_stats(ctx: AppContext) -> List[CategoryStats]:
    total = func.count(Product.id).label("total")
    stmt = (
        select(
            Product.category.label("category"),
            total,
            func.min(Product.price).label("min_price"),
            func.max(Product.price).label("max_price"),
            func.round(func.avg(Product.price), 2).label("avg_price"),
            func.sum(Product.price).label("total_value"),
        )
        .group_by(Product.category)
        .order_by(total.desc())
    )
    with ctx.session() as session:
        rows = session.execute(stmt).mappings().all()
    return [CategoryStats.model_validate(dict(r)) for r in rows]


def summary(ctx: AppContext) -> Summary:
    stmt = select(
        func.count(Product.id).label("total_products"),
        func.round(func.avg(Product.price), 2).label("avg_price"),
        func.min(Product.price).label("min_price"),
        func.max(Product.price).label("max_price"),
        func.sum(Product.price).label("inventory_value"),
    )
    with ctx.session() as session:
        row = session.execute(stmt).mappings().one()
    return Summary.model_validate(dict(row))


def top_products(ctx: AppContext, n: int = TOP_N) -> List[TopProduct]:
    # No secondary key: order among equal prices is whatever the engine returns.
    stmt = (
        select(Product.id, Product.name, Product.category, Product.price)
        .order_by(Product.price.desc())
        .limit(n)
    )
    with ctx.session() as session:
        rows = session.execute(stmt).mappings().all()
    return [TopProduct.model_validate(dict(r)) for r in rows]


def range_count_statement(low: int, high: Optional[int]):
    stmt = select(func.count()).select_from(Product).where(Product.price >= Decimal(low))
    if high is not None:
        stmt = stmt.where(Product.price < Decimal(high))
    return stmt


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def statistics(ctx: AppContext) -> Result[StatsOut]:
    try:
        resumen, categorias, top = await asyncio.gather(
            asyncio.to_thread(summary, ctx),
            asyncio.to_thread(category_stats, ctx),
            asyncio.to_thread(top_products, ctx),
        )
    except SQLAlchemyError as exc:
        return storage_failure(exc)
    return StatsOut(resumen=resumen, categorias=categorias, topProductos=top, timestamp=_now())


async def price_distribution(ctx: AppContext) -> Result[PriceAnalysisOut]:
    try:
        counts = await asyncio.gather(
            *[
                asyncio.to_thread(fetch_scalar, ctx, range_count_statement(low, high))
                for _, low, high in PRICE_RANGES
            ]
        )
    except SQLAlchemyError as exc:
        return storage_failure(exc)

    buckets = [
        PriceRangeCount(rango=label, total=int(count), min=low, max=high)
        for (label, low, high), count in zip(PRICE_RANGES, counts)
    ]
    return PriceAnalysisOut(distribucionPrecios=buckets, timestamp=_now())
