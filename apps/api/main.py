# FastAPI entrypoint for the OAuth2 token service
#
# Run with:
#   uvicorn apps.api.main:create_app --factory

from typing import Optional

from fastapi import FastAPI
from loguru import logger

from oauth2_server.config import Settings
from oauth2_server.database import DatabaseManager
from oauth2_server.errors import OAuth2Error
from oauth2_server.log_config import configure_logging
from oauth2_server.routes import oauth2_error_handler, router as oauth2_router
from oauth2_server.service import OAuth2Service


def create_app(settings: Optional[Settings] = None, service: Optional[OAuth2Service] = None) -> FastAPI:
    """Build the application. Pass a ready OAuth2Service to reuse an existing database."""
    if service is None:
        settings = settings or Settings()
        configure_logging(settings.log_level)
        db = DatabaseManager(settings)
        db.create_tables()
        service = OAuth2Service(db)

    app = FastAPI(
        title="OAuth2 Token Service",
        description="Issues and validates OAuth2 bearer tokens",
        version="1.0.0",
    )
    app.state.oauth2_service = service

    app.add_exception_handler(OAuth2Error, oauth2_error_handler)

    # ==================== ROUTER REGISTRATION ====================

    app.include_router(oauth2_router)       # /oauth2

    # ==================== ROOT ENDPOINTS ====================

    @app.get("/")
    async def root():
        """Root endpoint that returns API information and routes."""
        routes = [
            {"path": path, "methods": sorted(method.upper() for method in operations)}
            for path, operations in app.openapi()["paths"].items()
        ]
        return {"message": "OAuth2 Token Service", "routes": routes}

    @app.get("/health")
    def health_check():
        """Health check endpoint for monitoring."""
        if service.db.health_check():
            return {"status": "healthy", "database": service.db.engine.dialect.name}
        return {"status": "unhealthy", "database": service.db.engine.dialect.name}

    logger.info("OAuth2 token service ready")
    return app
