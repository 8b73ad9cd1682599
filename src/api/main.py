import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import get_settings, limit_api
from src.app_shell.config import validate_ops_rules
from src.rules.loader import load_rules

APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    configure_logging()
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
    except (OSError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)
    validate_ops_rules(rules, settings.data_dir)
    logger.info("Rules loaded from %s", settings.rules_path)

    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    if applied:
        logger.info("Applied %d migration(s)", len(applied))

    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Snake & Ladders Event API",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# --- Error envelope ---
@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "data": None},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": "Validation failed", "data": errors},
    )


# --- Routers ---
from src.api.routes import (  # noqa: E402
    admin,
    auth,
    leaderboard,
    participant,
    questions,
    superadmin,
)

api_limited = [Depends(limit_api)]

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(
    participant.router, prefix="/api/participant", tags=["Participant"], dependencies=api_limited
)
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"], dependencies=api_limited)
app.include_router(
    superadmin.router, prefix="/api/superadmin", tags=["Superadmin"], dependencies=api_limited
)
app.include_router(
    questions.router, prefix="/api/questions", tags=["Questions"], dependencies=api_limited
)
app.include_router(
    leaderboard.router, prefix="/api/leaderboard", tags=["Leaderboard"], dependencies=api_limited
)


# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root() -> dict[str, Any]:
    return {"success": True, "message": "Snake & Ladders Event API", "data": {"docs": "/docs"}}


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}


@app.get("/version")
def version() -> dict[str, Any]:
    return {"version": APP_VERSION}
