"""
Memory Book Face Recognition API - Main Entry Point

This is the FastAPI application entry point.
Uses core/ for configuration, exceptions, and logging.
"""

from dotenv import load_dotenv
load_dotenv()

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from core.config import Settings, VERSION, get_settings
from core.exceptions import AppException
from core.responses import ApiResponse
from core.logging import setup_logging, get_logger

from routers import faces, people
from services import FaceServices, build_services

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, services: Optional[FaceServices] = None) -> FastAPI:
    """
    Build the application.

    Tests pass their own settings and services; otherwise both are built
    from the environment.
    """
    settings = settings or get_settings()
    setup_logging(level="DEBUG" if settings.debug else "INFO")

    app = FastAPI(
        title="Memory Book Face Recognition API",
        description="Face indexing, matching and identity assignment for photo memory books",
        version=VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        redirect_slashes=False,  # Don't redirect /api/people to /api/people/
    )

    # ============================================================
    # CORS Configuration
    # ============================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    # ============================================================
    # Global Exception Handlers
    # ============================================================

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """
        Handle all custom AppException and subclasses.
        Returns unified ApiResponse format.
        """
        logger.warning(f"AppException: {exc.code} - {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiResponse.from_exception(exc).model_dump()
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", [])), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=ApiResponse.fail(
                message="Request validation failed",
                code="VALIDATION_ERROR",
                meta={"errors": errors},
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.
        Logs full traceback and returns generic error.
        """
        logger.error(f"Unhandled exception: {type(exc).__name__}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ApiResponse.fail(
                message="Internal server error",
                code="INTERNAL_ERROR"
            ).model_dump()
        )

    # ============================================================
    # Service Initialization (Dependency Injection)
    # ============================================================

    logger.info(f"Starting Face Recognition API v{VERSION}")
    app.state.settings = settings
    app.state.services = services or build_services(settings)
    logger.info("✓ Services attached to app state")

    # ============================================================
    # Root Endpoints
    # ============================================================

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return ApiResponse.ok({
            "status": "healthy",
            "service": "face-recognition",
            "version": VERSION,
        }).model_dump()

    # ============================================================
    # Router Registration
    # ============================================================

    app.include_router(faces.router, prefix="/api/faces", tags=["faces"])
    app.include_router(people.router, prefix="/api/people", tags=["people"])

    logger.info(f"Application startup complete. Running on {settings.server_host}:{settings.server_port}")
    return app


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug
    )
