"""
Inventory & Orders Admin - Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
import structlog
from datetime import datetime

from config import settings, check_connection
from exceptions import AppError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Check database connection and webhook configuration
    Shutdown: Clean up resources
    """
    # Startup
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info("database_connected", inventory=db_status["inventory_count"])
    else:
        logger.error(
            "database_connection_failed",
            error=db_status.get("error")
        )

    if not settings.inventory_webhook_configured:
        logger.warning("inventory_webhook_not_configured")

    yield

    # Shutdown
    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Inventory & Orders Admin",
    description="Inventory reads, webhook proxy and unmapped product reconciliation",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status, database state and webhook configuration
    """
    db_status = check_connection()

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "database": db_status,
        "webhooks": {
            "inventory": bool(settings.inventory_webhook_url),
            "dictionary": bool(settings.dictionary_webhook_url),
            "dictionary_combos": bool(settings.dictionary_combos_webhook_url),
        }
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Inventory & Orders Admin API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "inventory": "/api/inventory",
            "movements": "/api/inventory/control",
            "dictionary": "/api/inventory/dictionary",
            "orders": "/api/orders",
            "reconciliation": "/api/reconciliation",
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Reject malformed requests with 400 before any webhook call.
    """
    errors = jsonable_encoder(exc.errors())

    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        error_count=len(errors)
    )

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "VALIDATION_ERROR",
            "message": "Campos requeridos faltantes o inválidos",
            "details": {"errors": errors},
            "timestamp": datetime.utcnow().isoformat()
        }
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render application errors raised outside route handlers."""
    logger.warning("app_error", path=request.url.path, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns the standard error envelope.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": str(exc) if settings.debug else None,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.inventory import router as inventory_router
from routes.dictionary import router as dictionary_router
from routes.orders import router as orders_router
from routes.reconciliation import router as reconciliation_router

app.include_router(dictionary_router, prefix="/api/inventory/dictionary", tags=["Dictionary"])
app.include_router(inventory_router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(orders_router, prefix="/api/orders", tags=["Orders"])
app.include_router(reconciliation_router, prefix="/api/reconciliation", tags=["Reconciliation"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
