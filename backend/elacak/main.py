"""
FastAPI application factory.

Startup sequence:
  1. Validate settings
  2. Check DB connectivity (warn on failure; do not crash, the ALB will detect)
  3. Mount all API routers

Dev-mode notes:
  When DEV_SKIP_AUTH=true (development only), get_current_user() accepts an
  X-Dev-User-ID header instead of a bearer token. It is never honoured in
  staging/production.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from elacak.api.v1.analytics import router as analytics_router
from elacak.api.v1.audit import router as audit_router
from elacak.api.v1.auth import router as auth_router
from elacak.api.v1.backlogs import router as backlogs_router
from elacak.api.v1.documents import router as documents_router
from elacak.api.v1.gis import router as gis_router
from elacak.api.v1.health import router as health_router
from elacak.api.v1.housing import router as housing_router
from elacak.api.v1.reference import router as reference_router
from elacak.api.v1.reports import router as reports_router
from elacak.api.v1.users import router as users_router
from elacak.core.config import get_settings
from elacak.core.db import check_db_connection
from elacak.core.errors import AuthError, RegistryError, StorageError

settings = get_settings()
logger = logging.getLogger(__name__)

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting e-LACAK backend (env=%s)", settings.environment)
    db_ok = await check_db_connection()
    if db_ok:
        logger.info("Database connection: OK")
    else:
        logger.warning("Database connection: FAILED, check DB_HOST / credentials")

    if settings.auth_disabled:
        logger.warning(
            "DEV_SKIP_AUTH=true: X-Dev-User-ID header authentication is ENABLED. "
            "This must never be enabled in staging or production."
        )

    yield

    logger.info("Shutting down e-LACAK backend")


def _error_response(exc: RegistryError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="e-LACAK Housing Registry API",
        version="0.1.0",
        description="Housing records, verification, backlogs and reporting",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # ------------------------------------------------------------------ #
    # CORS: restrict outside development
    # ------------------------------------------------------------------ #
    origins = ["*"] if settings.is_development else [settings.client_url]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ------------------------------------------------------------------ #
    # Exception handlers
    # ------------------------------------------------------------------ #
    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url, exc.message)
        return _error_response(exc)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url)
        return _error_response(StorageError("Database operation failed"))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # ------------------------------------------------------------------ #
    # Routers
    # ------------------------------------------------------------------ #
    app.include_router(health_router)
    for router in (
        auth_router,
        users_router,
        reference_router,
        housing_router,
        documents_router,
        backlogs_router,
        analytics_router,
        gis_router,
        reports_router,
        audit_router,
    ):
        app.include_router(router, prefix="/api/v1")

    return app


app = create_app()
