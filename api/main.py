"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, runs
from core.config import settings
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Legacy Migration Status API",
    description="Read-only view of migration runs, row errors and checkpoints",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(runs.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting migration status API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    target = settings.TARGET_DATABASE_URL or ""
    logger.info(f"Target database: {target.split('@')[1] if '@' in target else 'configured' if target else 'missing'}")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Legacy Migration Status API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "runs": "/runs",
            "checkpoints": "/checkpoints"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
