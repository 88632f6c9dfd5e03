# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Customer Service
================
Backs the customer data grid: paginated/filtered reads, validated create and
update, destroy, and the per-category percentage report.

Writes are checked against the field rule-set and the email uniqueness rule
before anything reaches storage; rejected writes come back as a structured
result with ``success: false``.

Port: 8005
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.controllers import customer_controller, system_controller
from app.core.config import settings
from app.core.database import create_schema, engine
from app.core.dependencies import get_customer_service
from app.core.errors import InvalidCategoryError, InvalidSortError, StorageError
from app.core.logging import get_logger
from app.middleware import MetricsMiddleware, RequestIDMiddleware
from app.schemas import ErrorResponse

logger = get_logger("customer-service")


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    if settings.CREATE_SCHEMA:
        create_schema(engine)
        logger.info("Schema ensured on %s", engine.url.render_as_string(hide_password=True))
    try:
        get_customer_service().seed_gauges()
    except Exception:
        logger.warning("Could not seed gauges, DB may not be ready yet")
    yield
    engine.dispose()
    logger.info("Shutting down, connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Customer Service",
    description="Customer grid reads, validated writes and category statistics.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
    body = ErrorResponse(error=error, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, "storage_error", exc)


@app.exception_handler(InvalidCategoryError)
@app.exception_handler(InvalidSortError)
async def bad_request_handler(request: Request, exc: ValueError):
    logger.info("Bad request on %s %s: %s", request.method, request.url.path, exc)
    return _error(400, "bad_request", exc)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return _error(500, "internal_server_error", exc)


app.include_router(system_controller.router)
app.include_router(customer_controller.router)
