"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from nutrilens.api.auth import router as auth_router
from nutrilens.api.billing import router as billing_router
from nutrilens.api.meals import router as meals_router
from nutrilens.app_logging import configure_logging
from nutrilens.containers import AppContainer
from nutrilens.errors import AppError, ErrorKind, format_validation_errors

SESSION_COOKIE = "nutrilens_session"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="NutriLens", lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.secure_cookies,
    )

    app.include_router(auth_router)
    app.include_router(meals_router)
    app.include_router(billing_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.kind == ErrorKind.UPSTREAM:
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc.cause or exc.message,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"message": format_validation_errors(exc.errors())},
        )

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
