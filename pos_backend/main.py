"""
Restaurant POS - Main Application Entry Point
Order lifecycle and payment reconciliation API
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog

from pos_backend import __version__
from pos_backend.core.config import get_settings
from pos_backend.core.database import init_db
from pos_backend.core.exceptions import POSError, StoreError
from pos_backend.core.logging import configure_logging
from pos_backend.api import orders, payments, tables

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Initializing Restaurant POS backend", environment=settings.ENVIRONMENT)
    init_db()

    yield

    logger.info("Shutting down Restaurant POS backend")


app = FastAPI(
    title="Restaurant POS API",
    description="Order lifecycle and payment reconciliation for restaurant point of sale",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(POSError)
async def pos_error_handler(request: Request, exc: POSError):
    """Render core errors as {success, message, error} with their status code"""
    if isinstance(exc, StoreError):
        logger.error("Store error", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(orders.router, prefix=f"{settings.API_V1_PREFIX}/orders", tags=["orders"])
app.include_router(payments.router, prefix=f"{settings.API_V1_PREFIX}/orders", tags=["payments"])
app.include_router(tables.router, prefix=f"{settings.API_V1_PREFIX}/tables", tags=["tables"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "restaurant-pos-api"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pos_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
