"""Application configuration and router setup."""

import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware import cors
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from components.core import init_db
from components.core.config import get_settings
from components.core.exceptions import LedgerError
from restapi.endpoints import health_check, auth, loans, investors

logger = logging.getLogger(__name__)
settings = get_settings()


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    await init_db.db_manager.create_all()
    yield
    await init_db.db_manager.dispose()


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    app = fastapi.FastAPI(
        title="Farm Lending Marketplace",
        description="Peer-to-peer agricultural lending: loan applications, funding and investor portfolios",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _envelope(exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
            for error in exc.errors()
        )
        return _envelope(400, errors or "Invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        response = _envelope(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    # Include routers
    app.include_router(health_check.router)
    app.include_router(auth.router)
    app.include_router(loans.router)
    app.include_router(investors.router)

    return app
