"""
Turns raw query-string values into validated listing parameters.

Nothing here raises: malformed paging or sorting input falls back to the
configured defaults, and unusable filter values are dropped.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from fastapi import Depends, Query, Request

from .config import Settings

# Columns that may appear in ORDER BY for /productos.
PRODUCT_SORT_FIELDS = ("id", "name", "category", "price", "created_at")

ASC = "ASC"
DESC = "DESC"

_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)


@dataclass(frozen=True)
class PaginationRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: str


@dataclass(frozen=True)
class FilterSet:
    category: Optional[str] = None
    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    search: Optional[str] = None


@dataclass(frozen=True)
class ListingRequest:
    pagination: PaginationRequest
    sort: SortSpec
    filters: FilterSet


def parse_int(raw: Optional[str]) -> Optional[int]:
    """Plain ASCII integers only: no "1_0", no non-ASCII digits."""
    if raw is None:
        return None
    text = raw.strip()
    if not _INT_RE.fullmatch(text):
        return None
    return int(text)


def _parse_decimal(raw: Optional[str]) -> Optional[Decimal]:
    if raw is None or not raw.strip():
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return None
    # NaN and Infinity cannot bound a price
    return value if value.is_finite() else None


def _non_empty(raw: Optional[str]) -> Optional[str]:
    if raw is None or raw == "":
        return None
    return raw


def parse_pagination(
    page: Optional[str],
    limit: Optional[str],
    default_limit: int,
    max_limit: int,
) -> PaginationRequest:
    page_value = parse_int(page)
    if page_value is None or page_value < 1:
        page_value = 1

    limit_value = parse_int(limit)
    if limit_value is None or limit_value < 1:
        limit_value = default_limit
    # hard ceiling, not an error
    limit_value = min(limit_value, max_limit)
    return PaginationRequest(page=page_value, limit=limit_value)


def parse_sort(
    field: Optional[str],
    direction: Optional[str],
    allowed_fields: Iterable[str],
    default_field: str,
) -> SortSpec:
    # The field name ends up in ORDER BY, so only allow-listed names pass.
    if field is None or field not in tuple(allowed_fields):
        field = default_field
    normalized = DESC if direction is not None and direction.upper() == DESC else ASC
    return SortSpec(field=field, direction=normalized)


def parse_filters(
    category: Optional[str] = None,
    price_min: Optional[str] = None,
    price_max: Optional[str] = None,
    search: Optional[str] = None,
) -> FilterSet:
    return FilterSet(
        category=_non_empty(category),
        price_min=_parse_decimal(price_min),
        price_max=_parse_decimal(price_max),
        search=_non_empty(search),
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.ctx.settings


def listing_params(
    page: Optional[str] = Query(None, description="Page number (1-indexed)"),
    limit: Optional[str] = Query(None, description="Items per page, capped by MAX_PAGE_SIZE"),
    order_by: Optional[str] = Query(None, alias="orderBy"),
    order_dir: Optional[str] = Query(None, alias="orderDir"),
    categoria: Optional[str] = Query(None),
    precio_min: Optional[str] = Query(None, alias="precioMin"),
    precio_max: Optional[str] = Query(None, alias="precioMax"),
    busqueda: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> ListingRequest:
    """FastAPI dependency: raw strings in, a validated ListingRequest out."""
    return ListingRequest(
        pagination=parse_pagination(
            page, limit, settings.default_page_size, settings.max_page_size
        ),
        sort=parse_sort(
            order_by, order_dir, PRODUCT_SORT_FIELDS, settings.default_sort_field
        ),
        filters=parse_filters(categoria, precio_min, precio_max, busqueda),
    )
