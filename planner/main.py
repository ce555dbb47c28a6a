from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from planner.access.errors import AccessDeniedError
from planner.crypto import TokenCipher
from planner.db.init_db import init_db
from planner.logging_config import configure_app_logging
from planner.routers import auth, courses, health, organization
from planner.security.config import load_security_config
from planner.security.dependencies import enforce_security
from planner.security.session import SessionCarrier
from planner.security.tokens import TokenProvider
from planner.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, seed_database: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        resolved = settings or get_settings()
        configure_app_logging(resolved.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(resolved.resolved_security_config_path())
        logger.info("Loaded security config: %s", resolved.resolved_security_config_path())

        # Key is derived once per process and held for its lifetime.
        cipher = TokenCipher(resolved.encryption_secret)
        app.state.session_carrier = SessionCarrier.from_settings(cipher, resolved)
        app.state.token_provider = TokenProvider.from_settings(resolved)

        if seed_database:
            init_db()
            logger.info("Database initialized (tables ensured + seed if needed)")

        yield

    # Global dependency: every route passes through the guard stage.
    app = FastAPI(dependencies=[Depends(enforce_security)], lifespan=lifespan)

    @app.exception_handler(AccessDeniedError)
    async def _access_denied(request: Request, exc: AccessDeniedError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": "Access denied"})

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(organization.router)
    app.include_router(courses.router)

    return app


app = create_app()
