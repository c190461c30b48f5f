import asyncio
import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from app.config import allowed_origins, ensure_secure_runtime_settings, settings
from app.db.migration_check import prepare_schema
from app.db.session import engine
from app.observability import configure_logging, log_event, metrics_store, set_request_id
from app.routers.health import router as health_router
from app.routers.metrics import router as metrics_router
from app.routers.orders import router as orders_router
from app.routers.realtime import router as realtime_router
from app.routers.store import router as store_router
from app.services.broadcast import broadcaster
from app.services.errors import OrderingError


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import app.models  # noqa: F401 (register all SQLAlchemy models)

    ensure_secure_runtime_settings()
    if not settings.testing:
        configure_logging()
    prepare_schema(engine)
    broadcaster.bind_loop(asyncio.get_running_loop())
    try:
        yield
    finally:
        broadcaster.unbind_loop()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Tum Panich ordering API for the storefront and the POS dashboard",
    lifespan=lifespan,
)


def custom_openapi():
    """
    Adds HTTP Bearer (JWT) auth to the OpenAPI schema so Swagger UI shows an
    'Authorize' button and sends the Authorization: Bearer <token> header.
    """
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    components = openapi_schema.setdefault("components", {})
    security_schemes = components.setdefault("securitySchemes", {})
    security_schemes["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }

    # Public storefront endpoints ignore the header when Swagger sends it.
    openapi_schema["security"] = [{"BearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    set_request_id(request_id)

    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start

    response.headers["X-Request-ID"] = request_id
    metrics_store.increment("http_requests_total")
    metrics_store.observe("http_request_duration_seconds", elapsed)
    log_event("http_request", order_id=request.path_params.get("order_id"))
    return response


@app.exception_handler(OrderingError)
async def ordering_error_handler(_request: Request, exc: OrderingError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(HTTPException)
async def http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log_event(f"database_error:{type(exc).__name__}", level=logging.ERROR)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log_event(
        f"unhandled_error:{type(exc).__name__}",
        order_id=request.path_params.get("order_id"),
        level=logging.ERROR,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(health_router)
app.include_router(orders_router)
app.include_router(store_router)
app.include_router(realtime_router)
app.include_router(metrics_router)

app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
