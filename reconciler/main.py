from fastapi import FastAPI
from contextlib import asynccontextmanager
import uvicorn
import logging
from datetime import datetime, timezone

from reconciler import __version__
from reconciler.routers import reports
from reconciler.core.config import settings
from reconciler.core.exceptions import (
    ReconcilerException,
    reconciler_exception_handler,
    general_exception_handler
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Drone build reconciler service...")
    yield
    logger.info("Shutting down Drone build reconciler service...")

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Compares how two Drone CI generations built the same commits",
    version=__version__,
    lifespan=lifespan
)

# Add exception handlers
app.add_exception_handler(ReconcilerException, reconciler_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(reports.router, prefix=f"{settings.API_V1_STR}/reports", tags=["Reports"])

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": __version__,
        "status": "running"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "drone-build-reconciler",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__
    }

if __name__ == "__main__":
    uvicorn.run(
        "reconciler.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
