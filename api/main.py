"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.cache import redis_cache
from core.config import settings
from database.engine import init_db, close_db
from api.routes import health
from api.routes.v1 import admin, company, players, profiles

# Import middleware components
from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
)

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()
    await redis_cache.init()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await redis_cache.close()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Recruiting marketplace connecting companies with club players and supporters",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Setup error handlers (before middleware)
setup_error_handlers(app)

# Add middleware (order matters - they execute in reverse order)
# 1. Error handling middleware (outermost - catches all errors)
app.add_middleware(
    ErrorHandlingMiddleware,
    debug=settings.debug,
)

# 2. Structured logging middleware (logs all requests/responses)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    log_response_body=settings.log_response_body,
    max_body_size=settings.log_max_body_size,
)

# 3. CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check routes
app.include_router(health.router, tags=["Health"])

# API v1 routes
app.include_router(company.router, prefix=settings.api_v1_prefix, tags=["Company"])
app.include_router(
    players.router,
    prefix=f"{settings.api_v1_prefix}/player",
    tags=["Player"],
)
app.include_router(
    players.router,
    prefix=f"{settings.api_v1_prefix}/supporter",
    tags=["Supporter"],
)
app.include_router(profiles.router, prefix=settings.api_v1_prefix, tags=["Profiles"])
app.include_router(admin.router, prefix=settings.api_v1_prefix, tags=["Admin"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
