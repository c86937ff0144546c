import logging
import os
import sys
import time
import uuid
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click
import uvicorn
from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from academy.core.config import settings
from academy.core.database import Base, SessionLocal, engine
from academy.core.decorator import DBException
from academy.core.init import initialize_application
from academy.core.limiter import custom_rate_limit_exceeded_handler, limiter
from academy.core.schedular import (
    deactivate_expired_coupons,
    reset_stale_streaks,
    shutdown_scheduler,
    start_scheduler,
)
from academy.models import *
from academy.routers import routes

BASE_DIR = Path(__file__).parent
LOG_FILE = BASE_DIR / settings.log_file
LOG_FILE.parent.mkdir(parents=True, exist_ok=True)


# ============================================================================
# Logging
# ============================================================================
def setup_logging() -> logging.Logger:
    level = (
        logging.DEBUG
        if settings.debug
        else getattr(logging, settings.log_level.upper(), logging.INFO)
    )
    file_handler = RotatingFileHandler(
        LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout), file_handler],
        force=True,
    )

    for noisy in ("sqlalchemy.engine", "uvicorn.access", "apscheduler"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger("academy")


logger = setup_logging()


# ============================================================================
# Lifespan
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        initialize_application(db)
    finally:
        db.close()

    app.state.scheduler = start_scheduler() if settings.scheduler_enabled else None
    logger.info("✓ Startup complete")

    yield

    shutdown_scheduler(app.state.scheduler)
    logger.info("✓ Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    debug=settings.debug,
    lifespan=lifespan,
)
app.state.limiter = limiter
app.state.scheduler = None

if settings.rate_limit_enabled:
    app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every response with a request id and its processing time."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.4f}"
    return response


# ============================================================================
# Exception Handlers
# ============================================================================
@app.exception_handler(DBException)
async def db_exception_handler(request: Request, exc: DBException):
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{exc.error_type} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "type": exc.error_type},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # ctx may hold the raised ValueError, which is not JSON serializable
    details = [
        {key: str(value) if key == "ctx" else value for key, value in error.items()}
        for error in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}: {details}")
    return JSONResponse(
        status_code=422,
        content={"error": "Validation error", "details": details},
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error: {type(exc).__name__}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Database error occurred", "type": type(exc).__name__},
    )


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)


# ============================================================================
# Health
# ============================================================================
@app.get("/")
async def root():
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
    }


@app.get("/health")
@limiter.limit("10/minute")
async def health_check(request: Request):
    """Database connectivity and scheduler state."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        database = "unhealthy"

    scheduler = request.app.state.scheduler
    return {
        "status": "healthy" if database == "healthy" else "degraded",
        "timestamp": time.time(),
        "environment": "production" if settings.production else "development",
        "database": database,
        "scheduler": "running" if scheduler and scheduler.running else "stopped",
    }


for router in routes:
    app.include_router(router)


# ============================================================================
# CLI
# ============================================================================
@click.group()
def cli():
    """Academy backend management CLI."""


@cli.command()
def migrate():
    """Upgrade the database to the latest migration."""
    command.upgrade(Config(str(BASE_DIR / "alembic.ini")), "head")
    click.echo("✓ Migrations applied")


@cli.command()
def seed():
    """Create the default super admin and badges."""
    db = SessionLocal()
    try:
        initialize_application(db)
    finally:
        db.close()
    click.echo("✓ Seed data ready")


@cli.command("expire-coupons")
def expire_coupons():
    """Deactivate coupons whose validity window has closed."""
    deactivate_expired_coupons()


@cli.command("reset-streaks")
def reset_streaks():
    """Zero the streaks of learners inactive since before yesterday."""
    reset_stale_streaks()


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to run the server on")
@click.option("--reload", is_flag=True, help="Enable auto-reload (development only)")
def dev(host: str, port: int, reload: bool):
    """Run the development server with Uvicorn."""
    logger.info(f"Development server on {host}:{port} (reload={reload})")
    uvicorn.run("main:app", host=host, port=port, reload=reload, log_level="debug")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to run the server on")
@click.option("--workers", default=4, help="Number of worker processes")
def prod(host: str, port: int, workers: int):
    """Apply migrations, then replace this process with Gunicorn."""
    try:
        command.upgrade(Config(str(BASE_DIR / "alembic.ini")), "head")
    except Exception as e:
        raise click.ClickException(f"Migration failed: {e}")

    argv = [
        "gunicorn",
        "main:app",
        "--worker-class=uvicorn.workers.UvicornWorker",
        f"--workers={workers}",
        f"--bind={host}:{port}",
        f"--log-level={settings.log_level}",
        "--access-logfile=-",
        "--timeout=120",
    ]
    logger.info(f"Starting Gunicorn: {' '.join(argv)}")
    try:
        os.execvp(argv[0], argv)
    except FileNotFoundError:
        raise click.ClickException("Gunicorn not installed")


@cli.command()
def info():
    """Display application information."""
    click.echo(f"Application: {settings.app_name} v{settings.app_version}")
    click.echo(f"Debug Mode: {settings.debug}")
    click.echo(f"Database: {engine.url.render_as_string(hide_password=True)}")
    click.echo(f"Rate limiting: {settings.rate_limit_enabled}")
    click.echo(f"Scheduler: {settings.scheduler_enabled}")
    click.echo(f"Video completion threshold: {settings.video_completion_threshold}%")
    click.echo(f"Log file: {LOG_FILE.absolute()}")


if __name__ == "__main__":
    cli()
