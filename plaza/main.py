"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from plaza.config import get_settings
from plaza.exceptions import PlazaError
from plaza.infra.logging_config import setup_logging
from plaza.routers import api


async def plaza_error_handler(request: Request, exc: PlazaError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(testing: bool = False) -> FastAPI:
    """Build the app. testing=True leaves out the CORS middleware."""
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version="0.1.0")
    if not testing:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["POST", "OPTIONS"],
            allow_headers=["*"],
        )

    app.add_exception_handler(PlazaError, plaza_error_handler)
    app.include_router(api.router)
    return app


app = create_app()
