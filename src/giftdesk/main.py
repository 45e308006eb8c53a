"""FastAPI application entrypoint for GiftDesk."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from .api.v1.router import api_router
from .core.config import get_settings
from .core.errors import InternalError
from .jobs import register_scheduler

logger = logging.getLogger(__name__)


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("database error on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="GiftDesk API", version="0.1.0")
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
    if settings.cors_origin_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origin_list,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )
    app.include_router(api_router, prefix="/api/v1")
    if settings.storage_backend.strip().lower() == "local":
        app.mount("/media", StaticFiles(directory=settings.storage_root, check_dir=False), name="media")
    if settings.reconcile_enabled:
        register_scheduler(app)
    return app


app = create_app()
