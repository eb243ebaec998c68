"""
VendorHub API application.

Wires configuration, the MongoDB lifespan, error envelopes, routers and the
static upload directory into one FastAPI app.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_database_manager, lifespan, settings
from .routes import admin_router, app_router
from .schemas.common import ErrorResponse, HealthCheckResponse, RootResponse
from .services.upload_service import upload_service

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def error_messages(errors: List[Dict[str, Any]]) -> List[str]:
    """Readable messages from pydantic error dicts."""
    messages = []
    for error in errors:
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        if location and error.get("type") != "value_error":
            message = f"{'.'.join(location)}: {message}"
        messages.append(message)
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure leaves as ``{"success": false, "message": ...}``."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content={"success": False, "message": "Route not found", "path": request.url.path},
            )
        content: Dict[str, Any] = {"success": False}
        if isinstance(exc.detail, dict):
            content.update(exc.detail)
        else:
            content["message"] = str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        messages = error_messages(exc.errors())
        logger.warning(f"Validation error on {request.url.path}: {messages}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": messages[0] if messages else "Validation error", "errors": messages},
        )

    @app.exception_handler(ValidationError)
    async def handle_model_validation(request: Request, exc: ValidationError):
        messages = error_messages(exc.errors())
        logger.warning(f"Validation error on {request.url.path}: {messages}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": messages[0] if messages else "Validation error", "errors": messages},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error", "error": str(exc)},
        )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # documented failure bodies; the handlers above produce them
    error_responses = {code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 500)}
    app.include_router(admin_router, prefix="/api/admin", responses=error_responses)
    app.include_router(app_router, prefix="/api/app", responses=error_responses)

    app.mount("/uploads", StaticFiles(directory=str(upload_service.ensure_dir())), name="uploads")

    @app.get("/", response_model=RootResponse, tags=["Root"])
    async def root():
        """Root endpoint - Always accessible"""
        return {
            "success": True,
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/api/health",
            "status": "running",
            "timestamp": datetime.utcnow().isoformat(),
        }

    @app.get("/api/health", response_model=HealthCheckResponse, tags=["Health"])
    async def health_check():
        """Health check endpoint - Always accessible"""
        manager = get_database_manager()
        try:
            if manager.is_connected():
                await manager.get_database().command("ping")
                db_status = "connected"
            else:
                db_status = "disconnected"
        except Exception as e:
            db_status = f"error: {str(e)}"

        return {
            "success": True,
            "message": "Server is running",
            "database": db_status,
            "timestamp": datetime.utcnow().isoformat(),
            "version": settings.app_version,
        }

    return app


app = create_app()
