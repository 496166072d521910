"""FastAPI application entry point."""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from editor_activity.config import get_settings
from editor_activity.version import APP_VERSION
from editor_activity.routers import activity, health, projects, summary
from editor_activity.middleware.api_key import api_key_middleware
from editor_activity.services.errors import ActivityServiceError

# Create logs directory if it doesn't exist
logs_dir = Path("logs")
logs_dir.mkdir(exist_ok=True)

log_file = logs_dir / "editor_activity.log"
sql_log_file = logs_dir / "editor_activity_sql.log"
api_log_file = logs_dir / "editor_activity_api.log"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# General logs (1MB max size, keep 5 backup files)
rotating_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))

# SQL logs (1MB max size, keep 5 backup files)
sql_rotating_handler = RotatingFileHandler(sql_log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
sql_rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))

# API request logs (2MB max size, keep 15 backup files)
api_rotating_handler = RotatingFileHandler(api_log_file, maxBytes=2 * 1024 * 1024, backupCount=15, encoding='utf-8')
api_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

# Force=True overrides any existing configuration (e.g., from uvicorn)
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.StreamHandler(),
        rotating_handler,
    ],
    force=True,
)

logger = logging.getLogger(__name__)

# Dedicated API request logger
api_logger = logging.getLogger("editor_activity.api")
api_logger.handlers.clear()
api_logger.addHandler(api_rotating_handler)
api_logger.setLevel(logging.INFO)
api_logger.propagate = False

# Uvicorn's access logger also writes to the general log file
uvicorn_access_logger = logging.getLogger("uvicorn.access")
uvicorn_access_logger.setLevel(logging.INFO)
if rotating_handler not in uvicorn_access_logger.handlers:
    uvicorn_access_logger.addHandler(rotating_handler)

# SQLAlchemy engine logs go to their own file only
sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
sqlalchemy_logger.handlers.clear()
sqlalchemy_logger.addHandler(sql_rotating_handler)
sqlalchemy_logger.setLevel(logging.INFO)
sqlalchemy_logger.propagate = False


class SQLTransactionFilter(logging.Filter):
    def filter(self, record):
        if record.levelno == logging.INFO and hasattr(record, 'getMessage'):
            message = record.getMessage()

            # Drop transaction bookkeeping noise
            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False

            # Collapse multi-line statements onto one line
            if any(kw in message for kw in ['SELECT', 'DELETE', 'INSERT', 'UPDATE']):
                record.msg = ' '.join(message.split())
                record.args = ()

        return True


sqlalchemy_logger.addFilter(SQLTransactionFilter())

settings = get_settings()


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Manage application startup and shutdown tasks."""
    from editor_activity.tasks.liveness_sweep import liveness_sweep_cycle

    logger.info("=" * 60)
    logger.info("Editor Activity API Starting")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'SQLite'}")
    logger.info(f"API key check: {'Enabled' if settings.api_key else 'Disabled'}")
    logger.info("=" * 60)

    sweep_task = None
    if settings.liveness_sweep_enabled:
        try:
            sweep_task = asyncio.create_task(liveness_sweep_cycle())
            logger.info(
                f"Liveness sweep task started (runs every {settings.liveness_sweep_interval_seconds} seconds)"
            )
        except Exception as e:
            logger.error(f"Failed to start liveness sweep: {e}")
    else:
        logger.info("Liveness sweep is disabled, not starting cycle")

    try:
        yield
    finally:
        if sweep_task:
            sweep_task.cancel()
            try:
                await asyncio.wait_for(sweep_task, timeout=2.0)
            except asyncio.CancelledError:
                logger.info("Liveness sweep task cancelled")
            except asyncio.TimeoutError:
                logger.warning("Liveness sweep task did not cancel within timeout, forcing shutdown")
            except Exception as e:
                logger.error(f"Error cancelling liveness sweep task: {e}")

        logger.info("Editor Activity API Shutting Down")


app = FastAPI(
    title="Editor Activity API",
    description="Coding-activity sessions and project structure tracking",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(ActivityServiceError)
async def activity_error_handler(request: Request, exc: ActivityServiceError):
    """Render service errors with their stable kind and message."""
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "kind": exc.kind, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with user-friendly messages."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        loc = error.get("loc", [])
        if len(loc) > 1:
            field_path = " -> ".join(str(x) for x in loc[1:])
        elif loc:
            field_path = str(loc[0])
        else:
            field_path = "unknown field"
        errors.append({
            "field": field_path,
            "message": error.get("msg", "Validation error"),
            "type": error.get("type", "unknown"),
        })

    return JSONResponse(
        status_code=400,
        content={
            "error": True,
            "kind": "validation_error",
            "message": "Request validation failed",
            "errors": errors,
        },
    )


@app.exception_handler(Exception)
async def unexpected_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures without leaking details to the client."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": True, "kind": "internal_error", "message": "Internal Server Error"},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request and its outcome to the dedicated API log."""
    start_time = time.time()

    client_ip = request.client.host if request.client else "unknown"
    method = request.method
    path = request.url.path
    request_id = f"{method}:{path}:{int(start_time * 1000) % 100000}"

    api_logger.info(f">> {request_id} | START | {method} {path} | IP: {client_ip}")

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = time.time() - start_time
        api_logger.error(
            f"<< {request_id} | EXCEPTION | {method} {path} | "
            f"Error: {str(e)[:100]} | Time: {process_time:.3f}s"
        )
        raise

    process_time = time.time() - start_time
    api_logger.info(
        f"<< {request_id} | COMPLETE | {method} {path} | "
        f"Status: {response.status_code} | Time: {process_time:.3f}s"
    )
    return response


app.middleware("http")(api_key_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["health"])
app.include_router(projects.router, tags=["projects"])
app.include_router(activity.router, tags=["activity"])
app.include_router(summary.router, prefix="/summary", tags=["summary"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Editor Activity API",
        "version": APP_VERSION,
        "environment": settings.environment,
        "docs": "/docs",
    }
