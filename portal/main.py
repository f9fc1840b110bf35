"""
Hive Portal - Main Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.api import auth, posts, wishlist
from portal.api.admin import admin_router
from portal.core.config import get_settings
from portal.core.database import close_db, init_db
from portal.core.exceptions import PortalError, portal_error_handler
from portal.middleware.security import setup_security_middleware
from portal.services.auth_service import close_redis

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    await init_db()
    logger.info("Database initialized")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_redis()
    await close_db()
    logger.info("Database connections closed")


settings = get_settings()

# Create FastAPI application
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Community portal: articles, videos and the resident wishlist",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_security_middleware(app)
app.add_exception_handler(PortalError, portal_error_handler)

# Include routers
app.include_router(auth.router, prefix="/api", tags=["Authentication"])
app.include_router(posts.router, prefix="/api", tags=["Content"])
app.include_router(wishlist.router, prefix="/api", tags=["Wishlist"])

# Admin router
app.include_router(admin_router, prefix="/api/admin")


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portal.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
