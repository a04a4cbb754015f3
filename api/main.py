"""
Main FastAPI application for the Nester property chat service.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import chat, notifications, properties, social_campaign, content, dashboard
from .services import get_services, initialize_services
from .middleware.metrics import MetricsMiddleware, metrics_endpoint
from .middleware.rate_limit import RateLimitMiddleware
from config.settings import get_settings
from database.session import close_db, init_db

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Nester property chat starting up...")

    settings = get_settings()
    await init_db(settings.database_url)

    initialize_services()
    logger.info("Nester property chat ready")
    yield
    logger.info("Nester property chat shutting down...")

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Nester Property Chat API",
        description="AI property chat assistant with lead qualification, agent notifications, "
                    "70-day social campaigns, brochures, microsites and AI-styled images.",
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Prometheus metrics middleware
    app.add_middleware(MetricsMiddleware)

    # Rate limiting middleware
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=settings.rate_limit_per_minute,
    )

    app.include_router(chat.router, prefix="/api", tags=["Chat"])
    app.include_router(notifications.router, prefix="/api", tags=["Notifications"])
    app.include_router(properties.router, prefix="/api", tags=["Properties"])
    app.include_router(social_campaign.router, prefix="/api", tags=["Social Campaign"])
    app.include_router(content.router, prefix="/api", tags=["Listing Content"])
    app.include_router(dashboard.router, prefix="/api", tags=["Dashboard"])

    app.get("/metrics", tags=["Monitoring"])(metrics_endpoint)

    @app.get("/")
    async def root():
        return {
            "service": "Nester Property Chat",
            "version": settings.api_version,
            "status": "operational",
            "docs": "/docs",
        }

    @app.get("/health")
    async def health():
        services = get_services()
        return {
            "status": "healthy" if services.is_ready else "degraded",
            "services": services.health(),
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    s = get_settings()
    uvicorn.run(app, host=s.api_host, port=s.api_port)
