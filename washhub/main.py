import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager

from arq import create_pool
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401 - registers tables with Base
from .database import Base, engine
from .domain.bookings.router import router as bookings_router
from .domain.cars.router import router as cars_router
from .domain.carwashes.router import router as carwashes_router
from .domain.notifications.router import router as notifications_router
from .domain.orders.router import router as orders_router
from .domain.payments.router import router as payments_router
from .domain.reviews.router import router as reviews_router
from .domain.workers.router import router as workers_router
from .errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .jobs import ArqJobQueue, DisabledJobQueue
from .worker import get_redis_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("arq").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    try:
        pool = await create_pool(get_redis_settings())
        app.state.job_queue = ArqJobQueue(pool, asyncio.get_running_loop())
        logger.info("Redis connection established, background jobs enabled")
    except Exception as e:
        app.state.job_queue = DisabledJobQueue()
        logger.warning(f"Redis connection failed - notification emails will not be sent: {e}")

    yield

    logger.info("Application shutting down...")
    await app.state.job_queue.close()


app = FastAPI(title="WashHub API", version="1.0.0", lifespan=lifespan)


# ============================================================================
# ERROR MAPPING
# ============================================================================


def _error_response(status_code: int, exc) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message, "entity": exc.entity})


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
    logger.warning(f"Permission denied for {request.url.path}: {exc.message}")
    return _error_response(403, exc)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _error_response(409, exc)


@app.exception_handler(DependencyError)
async def dependency_error_handler(request: Request, exc: DependencyError):
    logger.error(f"{request.method} {request.url.path} - Store error: {exc.message}")
    if exc.retriable:
        return JSONResponse(
            status_code=503, content={"detail": exc.message}, headers={"Retry-After": "1"}
        )
    return _error_response(502, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    elapsed_ms = (time.time() - start) * 1000
    logger.info(f"{request.method} {request.url.path} - {response.status_code} ({elapsed_ms:.0f}ms)")
    return response


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

app.include_router(carwashes_router)
app.include_router(cars_router)
app.include_router(bookings_router)
app.include_router(orders_router)
app.include_router(workers_router)
app.include_router(reviews_router)
app.include_router(payments_router)
app.include_router(notifications_router)


# Routes


@app.get("/")
def root():
    return {"message": "WashHub API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
