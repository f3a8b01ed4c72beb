"""
Lyncx API backend
Bearer-token authentication and per-user subscription plans
"""

from pathlib import Path
from typing import Optional
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from auth import auth_router
from backend.utils.responses import ENDPOINT_NOT_FOUND, INTERNAL_ERROR, error_response
from config import Settings, settings as default_settings
from crud.documents import DocumentStore
from database import create_engine_from_settings, create_session_factory, init_db
from routers.health_router import health_router
from routers.user_router import user_router

# Logging setup - write ALL events to /logs/app.log
LOGS_DIR = Path("./logs")
LOGS_DIR.mkdir(exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOGS_DIR / "app.log"),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


# Uncaught exception middleware - logs all unhandled exceptions and returns 500
class UncaughtExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Uncaught exception: {e}\n{traceback.format_exc()}")
            return error_response(INTERNAL_ERROR, status=500, message="Internal server error")


def create_app(
    settings: Optional[Settings] = None,
    document_store: Optional[DocumentStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Settings and the document store are attached to app.state once here and
    reach handlers only through dependencies. When no store is supplied, one
    is built from settings.database_url and its tables are created on startup.
    """
    settings = settings or default_settings
    app = FastAPI(title="Lyncx API")

    app.state.settings = settings
    app.state.engine = None
    if document_store is None:
        engine = create_engine_from_settings(settings)
        app.state.engine = engine
        document_store = DocumentStore(create_session_factory(engine))
    app.state.document_store = document_store

    if not settings.jwt_secret_key:
        logger.warning("JWT_SECRET_KEY is not set. Token issuance and verification will fail.")

    app.add_middleware(UncaughtExceptionMiddleware)

    # CORS MUST be near the bottom
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(ENDPOINT_NOT_FOUND, status=404, message="Endpoint not found")
        return await http_exception_handler(request, exc)

    # Initialize database on startup
    @app.on_event("startup")
    async def initialize_database():
        """Create the documents table when the app owns its engine."""
        if app.state.engine is None:
            return
        try:
            await init_db(app.state.engine)
            logger.info("✅ Database initialized successfully")
        except Exception as e:
            logger.error(f"❌ Database initialization failed: {e}")
            raise

    @app.on_event("shutdown")
    async def dispose_engine():
        if app.state.engine is not None:
            await app.state.engine.dispose()

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(user_router)

    logger.info("🚀 API configured (health check: /api/health, base URL: /api)")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=default_settings.port)
