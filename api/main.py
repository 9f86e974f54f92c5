"""
FastAPI Backend for Tubely video ingestion
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware.error_handler import add_error_handlers
from api.routes import assets, settings, upload, videos
from api.services.container import ServiceContainer, build_container
from config.settings import HOST, PORT, STORAGE_BACKEND
from utils.logger import setup_logger

logger = setup_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting Tubely API...")

    if app.state.container is None:
        app.state.container = build_container()
        logger.info(f"Services initialized (storage backend: {STORAGE_BACKEND})")

    logger.info("API ready to accept requests")

    yield

    logger.info("Shutting down API...")


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the application

    Args:
        container: Pre-built services; when omitted they are created at startup
    """
    app = FastAPI(
        title="Tubely API",
        description="Upload, optimize and serve short-form video",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.container = container

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add error handlers
    add_error_handlers(app)

    # Include routers
    app.include_router(videos.router, prefix="/api/v1/videos", tags=["Videos"])
    app.include_router(upload.router, prefix="/api/v1", tags=["Upload"])
    app.include_router(assets.router, prefix="/api/v1/assets", tags=["Assets"])
    app.include_router(settings.router, prefix="/api/v1/settings", tags=["Settings"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": "Tubely API",
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs",
            "health": "/health"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "services": {
                "database": "operational",
                "object_store": type(app.state.container.store).__name__
                if app.state.container else "not initialized"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level="info"
    )
