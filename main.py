"""
Bulk CSV Importer - application entry point.

Run locally: python main.py
Run in production: uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from config import settings, check_connection
from routes import importer_router

APP_VERSION = "1.3.0"


def configure_logging() -> None:
    """stdlib logging carries structlog output; JSON in production, console otherwise."""
    logging.basicConfig(format="%(message)s", level=settings.log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the environment and check Supabase before serving uploads."""
    logger.info(
        "importer_starting",
        environment=settings.environment,
        bucket=settings.storage_bucket,
        max_workers=settings.import_max_workers
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "database_connected",
            records=db_status["records_count"],
            assets=db_status["assets_count"]
        )
    else:
        logger.error("database_connection_failed", error=db_status.get("error"))

    yield

    logger.info("importer_shutting_down")


app = FastAPI(
    title="Bulk CSV Importer",
    description="Bulk-import product records, images and datasheets from CSV",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.include_router(importer_router, prefix="/api/import", tags=["Import"])


@app.get("/health")
async def health_check():
    """Service and database status."""
    db_status = check_connection()

    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": db_status
    }


@app.get("/")
async def root():
    return {
        "name": "Bulk CSV Importer API",
        "version": APP_VERSION,
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "import_form": "/api/import",
            "import_report": "/api/import/report",
        }
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything that escaped a route becomes a 500 in the usual error envelope."""
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
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
