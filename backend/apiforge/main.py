"""
APIForge - FastAPI Main Application
"""
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from typing import Optional
import structlog
import time

from apiforge.config import Settings, get_settings
from apiforge.connections.connection_manager import ConnectionManager
from apiforge.core.crypto import CredentialVault
from apiforge.core.errors import ForgeError, RemoteExecutionError
from apiforge.database import MetadataStore
from apiforge.logging_config import configure_logging

logger = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None,
    metadata_store: Optional[MetadataStore] = None,
    connection_manager: Optional[ConnectionManager] = None
) -> FastAPI:
    """
    Build the application.

    Collaborators not passed in are created from settings; a metadata
    store passed in is left open on shutdown for its owner to dispose.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the metadata store on startup, dispose it on shutdown."""
        configure_logging(debug=settings.DEBUG, json_logs=settings.LOG_JSON)

        store = metadata_store or MetadataStore(settings.DATABASE_URL, echo=settings.DEBUG)
        store.create_all()
        app.state.metadata_store = store
        logger.info("application_startup", version=settings.APP_VERSION)

        yield

        if metadata_store is None:
            store.dispose()
        logger.info("application_shutdown")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Register databases, define tables and get a CRUD API for them",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.vault = CredentialVault(settings.ENCRYPTION_KEY)
    app.state.connection_manager = connection_manager or ConnectionManager(
        timeout=settings.CONNECT_TIMEOUT_SECONDS
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Report handler duration in seconds."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Exception handlers
    @app.exception_handler(ForgeError)
    async def forge_exception_handler(request: Request, exc: ForgeError):
        """Handled failures become {"error": message}."""
        if isinstance(exc, RemoteExecutionError):
            logger.warning("remote_execution_error", error=exc.original_message, path=request.url.path)
        elif exc.status_code >= 500:
            logger.error("request_failed", error_type=type(exc).__name__, error=exc.message,
                         path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies and parameters."""
        logger.warning("validation_error", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "Validation error",
                "detail": jsonable_encoder(exc.errors())
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Anything not raised as a ForgeError."""
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc) if settings.DEBUG else "An error occurred"}
        )

    # Health check endpoint
    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness probe; does not touch remote databases."""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "app": settings.APP_NAME
        }

    @app.get("/", tags=["System"])
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/docs"
        }

    from apiforge.api import databases, tables, endpoints

    app.include_router(databases.router, prefix="/api/databases", tags=["Databases"])
    app.include_router(tables.router, prefix="/api/databases", tags=["Tables"])
    app.include_router(endpoints.router, prefix="/api/endpoints", tags=["Endpoints"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "apiforge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().DEBUG
    )
