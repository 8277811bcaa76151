import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from fileserver.exceptions import FileServerError
from fileserver.logging_config import setup_logging
from fileserver.settings import Settings, get_settings
from fileserver.storage import FileStorage
from services.api.exception_handlers import fileserver_exception_handler
from services.api.routes import router as files_router, storage_for_app


def _load_settings() -> Settings:
    try:
        return get_settings()
    except FileNotFoundError as exc:
        logger.warning(f"{exc}; falling back to default settings")
        return Settings()


def create_app(settings: Settings | None = None, storage: FileStorage | None = None) -> FastAPI:
    # Setup structured logging
    json_logging = os.getenv("JSON_LOGGING", "false").lower() in {"true", "1", "yes"}
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE")
    setup_logging(
        level=log_level,
        json_format=json_logging,
        log_file=Path(log_file) if log_file else None,
    )

    settings = settings or _load_settings()

    app = FastAPI(
        title="File Server",
        version="0.1.0",
        description="Stores, serves, copies and deletes files on local disk or Amazon S3",
    )
    app.state.settings = settings
    app.state.storage = storage

    allowed_origins = settings.cors.allowed_origins
    logger.info(f"CORS allowed origins: {sorted(allowed_origins)}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _init_storage() -> None:
        storage_for_app(app)
        logger.info(
            "API initialised with storage backend={backend} prevent_cleanup={prevent_cleanup}",
            backend=settings.storage.backend,
            prevent_cleanup=settings.storage.prevent_cleanup,
        )

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(FileServerError, fileserver_exception_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions without exposing their details."""
        logger.opt(exception=exc).error("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content={
                "error": "InternalServerError",
                "message": "Internal server error",
            },
        )

    app.include_router(files_router)

    return app


app = create_app()


__all__ = ["app", "create_app"]
