from __future__ import annotations

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipetrio.shared.config.settings import settings
from recipetrio.shared.errors import (
    AllGenerationsFailedError,
    InputValidationError,
    RecipeNotFoundError,
    RecipeServiceError,
    UpstreamGenerationError,
)
from recipetrio.shared.api.envelope import failure
from recipetrio.shared.logging.logger import setup_logging
from recipetrio.shared.persistence.mongo import ensure_indexes
from recipetrio.shared.persistence.write_queue import start_worker, stop_worker

from recipetrio.shared.api.health import router as health_router
from recipetrio.features.feedback.api.routes import router as feedback_router
from recipetrio.features.recipes.api.routes import router as recipes_router
from recipetrio.features.recipes.api.stream import router as stream_router

log = logging.getLogger("app")


def _split(value: str) -> list:
    return [v.strip() for v in (value or "").split(",")] if value and value != "*" else ["*"]


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        log.warning("Invalid request %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content=failure("Invalid input data", InputValidationError.code))

    @app.exception_handler(InputValidationError)
    async def _input_error(request: Request, exc: InputValidationError):
        log.warning("Invalid input on %s: %s", request.url.path, exc.details)
        return JSONResponse(status_code=400, content=failure(str(exc), exc.code))

    @app.exception_handler(RecipeNotFoundError)
    async def _not_found(request: Request, exc: RecipeNotFoundError):
        return JSONResponse(status_code=404, content=failure(str(exc), exc.code))

    @app.exception_handler(AllGenerationsFailedError)
    async def _all_failed(request: Request, exc: AllGenerationsFailedError):
        log.error("All persona generations failed: %s", exc.errors)
        return JSONResponse(status_code=502, content=failure("Failed to generate recipes", exc.code))

    @app.exception_handler(UpstreamGenerationError)
    async def _upstream(request: Request, exc: UpstreamGenerationError):
        log.error("Upstream generation failed on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content=failure(str(exc), exc.code))

    @app.exception_handler(RecipeServiceError)
    async def _service_error(request: Request, exc: RecipeServiceError):
        log.exception("Unhandled service error on %s", request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=failure("Internal server error", exc.code))


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="RecipeTrio", version="1.0.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_split(settings.CORS_ALLOW_ORIGINS),
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=_split(settings.CORS_ALLOW_METHODS),
        allow_headers=_split(settings.CORS_ALLOW_HEADERS),
    )

    _install_error_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(recipes_router,  prefix="/v1")
    app.include_router(stream_router,   prefix="/v1")
    app.include_router(feedback_router, prefix="/v1")

    @app.on_event("startup")
    async def _on_startup():
        try:
            ensure_indexes()
        except Exception:
            log.warning("ensure_indexes failed or is a no-op")
        await start_worker()

    @app.on_event("shutdown")
    async def _on_shutdown():
        await stop_worker()

    return app

# Uvicorn/Gunicorn entry point
app = create_app()
