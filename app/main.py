"""FastAPI application entrypoint. No business logic; only wiring, middleware and lifespan."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1 import health
from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import build_engine, make_session_factory
from app.core.log import configure_logging
from app.core.rate_limit import ClientRateLimiter
from app.core.security import TokenIssuer, dummy_hash
from app.repositories.user_repository import UserRepository
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def bootstrap_default_admin(app: FastAPI) -> None:
    """Create the default admin on startup; a failure is logged, not fatal."""
    settings: Settings = app.state.settings
    if not settings.DEFAULT_ADMIN_ENABLED:
        return
    password = (
        settings.DEFAULT_ADMIN_PASSWORD.get_secret_value()
        if settings.DEFAULT_ADMIN_PASSWORD is not None
        else None
    )
    db = app.state.session_factory()
    try:
        service = AuthService(
            UserRepository(db),
            app.state.token_issuer,
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )
        created = service.ensure_default_admin(
            settings.DEFAULT_ADMIN_USERNAME,
            settings.DEFAULT_ADMIN_EMAIL,
            password,
        )
        if not created:
            logger.info("Default admin account '%s' already present", settings.DEFAULT_ADMIN_USERNAME)
    except SQLAlchemyError as e:
        logger.warning("Failed to create default admin account: %s", e)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Startup
    settings: Settings = app.state.settings
    app.state.token_issuer = TokenIssuer(
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )
    app.state.rate_limiter = ClientRateLimiter(
        rate=settings.RATE_LIMIT,
        burst=settings.RATE_BURST,
        idle_ttl=settings.RATE_LIMIT_IDLE_SECONDS,
        sweep_interval=settings.RATE_LIMIT_SWEEP_SECONDS,
    )
    dummy_hash(settings.BCRYPT_ROUNDS)
    bootstrap_default_admin(app)
    logger.info("Support API started", extra={"environment": settings.APP_ENV})
    yield
    # Shutdown
    app.state.rate_limiter.close()
    app.state.engine.dispose()


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are client errors (400)."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures surface as a generic 500; details only go to the log."""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or get_settings()
    configure_logging(app_settings.LOG_LEVEL)

    app = FastAPI(
        title="Support App API",
        description="Support tickets and feedback from mobile apps, with JWT-protected admin triage.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.engine = build_engine(app_settings.DATABASE_URL, echo=app_settings.DEBUG)
    app.state.session_factory = make_session_factory(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization", "Accept", "X-Requested-With"],
        max_age=86400,
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)

    # Load balancers probe /health without the API prefix.
    app.include_router(health.router, prefix="/health", tags=["health"], include_in_schema=False)
    app.include_router(v1_router, prefix=app_settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Support App API"}

    return app


app = create_app()
