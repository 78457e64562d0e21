"""FastAPI application wiring for the exercise read API."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..config import Config
from ..errors import BadRequestError, CatalogError, NotFoundError
from ..query import CatalogReader
from .routes import API_PREFIX, ENDPOINTS, router

logger = logging.getLogger(__name__)

ASSETS_ROUTE = "/assets"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(config: Config) -> FastAPI:
    """Build the API application serving the dataset under ``config.data_dir``."""
    app = FastAPI(title=config.project_name, version=__version__)
    app.state.config = config
    app.state.reader = CatalogReader(config.data_dir, initial_version=config.initial_version)

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Data-Version"],
    )

    @app.middleware("http")
    async def asset_cache_headers(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)
        if request.url.path.startswith(f"{ASSETS_ROUTE}/") and response.status_code == 200:
            response.headers["Cache-Control"] = f"public, max-age={config.api.asset_cache_seconds}"
        return response

    @app.exception_handler(BadRequestError)
    async def bad_request(request: Request, exc: BadRequestError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def invalid_parameters(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ())[1:])}: {error.get('msg')}"
            for error in exc.errors()
        )
        return _error(400, f"Invalid request parameters: {details}")

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(CatalogError)
    async def catalog_failure(request: Request, exc: CatalogError) -> JSONResponse:
        logger.error("Failed to serve %s: %s", request.url.path, exc)
        return _error(500, "Error reading exercise data")

    @app.exception_handler(OSError)
    async def read_failure(request: Request, exc: OSError) -> JSONResponse:
        logger.error("I/O failure serving %s: %s", request.url.path, exc)
        return _error(500, "Error reading exercise data")

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/")
    def index() -> dict[str, object]:
        """Describe the available endpoints."""
        return {
            "name": config.project_name,
            "version": config.api.api_version,
            "dataVersion": app.state.reader.version_info().version,
            "endpoints": [
                {"path": f"{API_PREFIX}{path}", "description": description}
                for path, description in ENDPOINTS
            ],
        }

    app.include_router(router)

    if config.api.serve_assets and config.assets_dir.is_dir():
        app.mount(ASSETS_ROUTE, StaticFiles(directory=config.assets_dir), name="assets")

    return app
