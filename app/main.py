"""
File Connectors - Main FastAPI Application

Runs the file source and file sink connectors in-process:
- File source: polls a directory and emits file contents/metadata as messages
- File sink: writes incoming messages to files
- Health and admin endpoints for operating the connectors
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
import sys

from app.runtime import ConnectorRuntime
from app.utils.config import get_settings
from app.api import health, admin


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """Install the single stdout log sink."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")

    runtime = getattr(app.state, "runtime", None) or ConnectorRuntime.from_settings()
    app.state.runtime = runtime
    runtime.start()

    yield

    # Cleanup
    logger.info("Shutting down application...")
    runtime.stop()
    app.state.runtime = None
    logger.success("Application shut down complete")


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()
    application = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Directory-polling file source and message-to-file sink",
        lifespan=lifespan
    )

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.log_level == "DEBUG" else "An error occurred"
            }
        )

    application.include_router(health.router, tags=["Health"])
    application.include_router(admin.router, prefix="/admin", tags=["Admin"])

    @application.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "status": "operational",
            "docs": "/docs",
            "health": "/health"
        }

    return application


configure_logging(get_settings().log_level)
app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
