"""
FastAPI Application
==================

Main FastAPI application hosting the stateless MCP endpoint and the
instance retrieval API used by the browser renderer.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from nlui_mcp.config.settings import get_settings, Settings
from nlui_mcp.config.logging import get_logger
from nlui_mcp.core.errors import ErrorType, NLUIError
from nlui_mcp.core.storage import InstanceStore
from nlui_mcp.mcp_server.server import NLUIMCPServer
from nlui_mcp.models.schemas import ErrorResponse
from nlui_mcp.api.routes.health import router as health_router
from nlui_mcp.api.routes.instances import router as instances_router
from nlui_mcp.api.routes.mcp import router as mcp_router

logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    ErrorType.VALIDATION: 400,
    ErrorType.NOT_FOUND: 404,
}


def create_app(settings: Optional[Settings] = None, store: Optional[InstanceStore] = None) -> FastAPI:
    """
    Application factory function for creating FastAPI app instance.

    Args:
        settings: Settings to use instead of the environment ones
        store: Instance store to use instead of a fresh one

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    # An empty store is falsy
    if store is None:
        store = InstanceStore(
            ttl_seconds=settings.instance_ttl_seconds,
            sweep_interval_seconds=settings.instance_sweep_interval_seconds,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        logger.info("Starting FastAPI application", base_url=settings.base_url)
        store.start()
        try:
            yield
        finally:
            logger.info("Shutting down FastAPI application")
            await store.stop()

    app = FastAPI(
        title=settings.app_name,
        description="Render natural-language UI descriptions through an MCP tool",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_docs else None,
    )
    app.state.settings = settings
    app.state.instance_store = store
    app.state.mcp_server = NLUIMCPServer(store, settings)

    # Add middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):  # type: ignore
        """Add request ID to all requests."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

    # Exception handlers
    @app.exception_handler(HTTPException)
    async def custom_http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Custom HTTP exception handler with structured error response."""
        error_response = ErrorResponse(
            error=str(exc.detail),
            error_code=str(exc.status_code),
            details=None,
            request_id=getattr(request.state, "request_id", None),
        )

        logger.error(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            request_id=error_response.request_id,
        )

        return JSONResponse(status_code=exc.status_code, content=error_response.model_dump(mode="json"))

    @app.exception_handler(NLUIError)
    async def nlui_exception_handler(request: Request, exc: NLUIError) -> JSONResponse:
        """Map service errors to HTTP status codes without leaking payloads."""
        status_code = ERROR_STATUS_CODES.get(exc.error_type, 500)
        error_response = ErrorResponse(
            error=exc.message if status_code < 500 else "Internal server error",
            error_code=exc.error_type.value,
            details=None,
            request_id=getattr(request.state, "request_id", None),
        )

        logger.error(
            "Service error",
            status_code=status_code,
            error_type=exc.error_type.value,
            error_message=exc.message,
            request_id=error_response.request_id,
        )

        return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        error_response = ErrorResponse(
            error="Internal server error",
            error_code="INTERNAL_ERROR",
            details={"exception": str(exc)} if settings.debug else None,
            request_id=getattr(request.state, "request_id", None),
        )

        logger.error(
            "Unhandled exception",
            exception=str(exc),
            request_id=error_response.request_id,
            exc_info=True,
        )

        return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))

    # Routes
    app.include_router(mcp_router, prefix=settings.mcp_path)
    app.include_router(instances_router)
    app.include_router(health_router)

    @app.get("/", tags=["Root"])
    async def root() -> dict:
        """Service information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "health_check": "/health",
            "endpoints": {
                "mcp": f"POST {settings.mcp_path}",
                "instance": "GET /instances/{instance_id}",
            },
        }

    return app


app = create_app()


# Development server runner
def run_development_server() -> None:
    """Run development server with auto-reload."""
    settings = get_settings()
    uvicorn.run(
        "nlui_mcp.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_development_server()
