import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import aggregates, queries
from .config import Settings, configure_logging
from .db import AppContext, create_context, init_db
from .errors import ErrorKind, Failure, error_response, is_failure
from .params import ListingRequest, listing_params
from .schemas import PaginatedProducts, PriceAnalysisOut, ProductOut, StatsOut, StatusOut

APP_NAME = "catalog"

logger = logging.getLogger(__name__)

# Prefix and CORS origins are fixed when the routes are mounted.
_boot_settings = Settings.from_env()
configure_logging(_boot_settings.log_level)

app = FastAPI(title=APP_NAME)
router = APIRouter(prefix=f"{_boot_settings.api_prefix}/productos", tags=["productos"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_boot_settings.cors_origins),
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
)

# ---- Startup / shutdown: build the context, drain the pool ----
@app.on_event("startup")
def on_startup():
    ctx = create_context()
    init_db(ctx.engine)
    app.state.ctx = ctx
    logger.info("%s started (environment=%s)", APP_NAME, ctx.settings.environment)

@app.on_event("shutdown")
def on_shutdown():
    ctx = getattr(app.state, "ctx", None)
    if ctx is not None:
        ctx.dispose()

# ---- Prometheus metrics + request log ----
REQS = Counter("http_requests_total", "Total HTTP requests", ["service", "path", "method", "status"])
LAT  = Histogram("http_request_duration_seconds", "Request latency", ["service", "path", "method"])

@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    elapsed = time.time() - start
    # label by route template so /productos/{product_id} is one series
    route = request.scope.get("route")
    path = route.path if route is not None else "unmatched"
    REQS.labels(APP_NAME, path, request.method, response.status_code).inc()
    LAT.labels(APP_NAME, path, request.method).observe(elapsed)
    logger.info("%s %s %d %dms", request.method, request.url.path, response.status_code, elapsed * 1000)
    return response

def get_context(request: Request) -> AppContext:
    return request.app.state.ctx

def _include_stack(request: Request) -> bool:
    ctx = getattr(request.app.state, "ctx", None)
    settings = ctx.settings if ctx is not None else _boot_settings
    return settings.is_dev

def _respond(request: Request, failure: Failure):
    return error_response(request, failure, include_stack=_include_stack(request))

# ---- Error boundary ----
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        failure = Failure(ErrorKind.ROUTE_NOT_FOUND, f"Route not found: {request.url.path}")
    else:
        kind = ErrorKind.INTERNAL if exc.status_code >= 500 else ErrorKind.INVALID_ARGUMENT
        failure = Failure(kind, str(exc.detail), status=exc.status_code)
    return _respond(request, failure)

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    return _respond(request, Failure(ErrorKind.INTERNAL, "Internal server error", cause=exc))

# ---- Routes ----
@app.get("/status", response_model=StatusOut)
def status(ctx: AppContext = Depends(get_context)):
    return StatusOut(
        status="online",
        environment=ctx.settings.environment,
        timestamp=datetime.now(timezone.utc),
    )

@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

@router.get("", response_model=PaginatedProducts)
async def list_products(
    request: Request,
    listing: ListingRequest = Depends(listing_params),
    ctx: AppContext = Depends(get_context),
):
    result = await queries.list_products(ctx, listing)
    if is_failure(result):
        return _respond(request, result)
    return result

# Fixed paths first; /{product_id} would otherwise swallow them.
@router.get("/estadisticas", response_model=StatsOut)
async def get_statistics(request: Request, ctx: AppContext = Depends(get_context)):
    result = await aggregates.statistics(ctx)
    if is_failure(result):
        return _respond(request, result)
    return result

@router.get("/analisis/precios", response_model=PriceAnalysisOut)
async def get_price_analysis(request: Request, ctx: AppContext = Depends(get_context)):
    result = await aggregates.price_distribution(ctx)
    if is_failure(result):
        return _respond(request, result)
    return result

@router.get("/{product_id}", response_model=ProductOut)
async def get_product(product_id: str, request: Request, ctx: AppContext = Depends(get_context)):
    result = await queries.get_product(ctx, product_id)
    if is_failure(result):
        return _respond(request, result)
    return result

app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=_boot_settings.port)
