
"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, upload, report
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.database import engine
from core.logging import setup_logging
import logging

setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="CSV User Ingestion API",
    description="Streams a CSV file of users into PostgreSQL and reports their age distribution",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(upload.router)
app.include_router(report.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting CSV User Ingestion API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    logger.info(f"CSV file: {settings.CSV_FILE_PATH or 'not configured'}")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down CSV User Ingestion API")
    await engine.dispose()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": "API is running",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "upload": "/upload",
            "report": "/report"
        }
    }
