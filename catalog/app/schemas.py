from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    price: float
    created_at: Optional[datetime] = None


class PageMeta(BaseModel):
    page: int
    limit: int
    totalItems: int
    totalPages: int
    hasNextPage: bool
    hasPrevPage: bool


class PaginatedProducts(BaseModel):
    data: List[ProductOut]
    meta: PageMeta


class CategoryStats(BaseModel):
    category: str
    total: int
    min_price: float
    max_price: float
    avg_price: float
    total_value: float


class Summary(BaseModel):
    total_products: int
    avg_price: Optional[float] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    inventory_value: Optional[float] = None


class TopProduct(BaseModel):
    id: int
    name: str
    category: str
    price: float


class StatsOut(BaseModel):
    resumen: Summary
    categorias: List[CategoryStats]
    topProductos: List[TopProduct]
    timestamp: datetime


class PriceRangeCount(BaseModel):
    rango: str
    total: int
    min: float
    max: Optional[float] = None


class PriceAnalysisOut(BaseModel):
    distribucionPrecios: List[PriceRangeCount]
    timestamp: datetime


class StatusOut(BaseModel):
    status: str
    environment: str
    timestamp: datetime
