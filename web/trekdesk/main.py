"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import select

from .core import BaseError, get_settings
from .infrastructure.database import engine, AsyncSessionFactory
from .deps import SessionDep
from .models import Base
from .services import BatchService
from .api.v1.api import api_v1_router
from .api.v1.middleware import base_error_handler, unhandled_error_handler, validation_exception_handler

# Rate limiting
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def refresh_batch_statuses() -> int:
    """Move every batch to the status its dates imply and commit"""
    async with AsyncSessionFactory() as sess:
        changed = await BatchService(sess).refresh_statuses()
        if changed:
            await sess.commit()
        return changed


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Periodically move batches along upcoming -> ongoing -> completed
    async def _batch_status_loop():
        while True:
            try:
                await refresh_batch_statuses()
            except Exception:
                logger.exception("Batch status refresh failed")
            await asyncio.sleep(settings.BATCH_STATUS_REFRESH_SECONDS)

    task = asyncio.create_task(_batch_status_loop())

    yield

    # Shutdown
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Trekdesk API",
    description="Admin back office for trek batches, bookings and refunds",
    version="1.0.0",
    lifespan=lifespan
)

# Attach rate-limiter
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"]
)


# Rate limiting
@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return PlainTextResponse("Too many requests", status_code=429)

app.add_middleware(SlowAPIMiddleware)

# Exception handling
app.add_exception_handler(BaseError, base_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include v1 API with all endpoints
app.include_router(api_v1_router, prefix="/api/v1")


# Health check
@app.get("/healthz")
async def healthz(sess: SessionDep):
    """Health check endpoint."""
    status = {"db": "ok"}

    try:
        await sess.scalar(select(1))
    except Exception:
        logger.exception("Database health check failed")
        status["db"] = "error"

    return status
