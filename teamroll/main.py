"""
Main FastAPI application for the Team Roll Draft API.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.orm import Session

from teamroll.core.config import settings
from teamroll.core.database import get_db, init_db
from teamroll.core.logging import configure_logging, get_logger
from teamroll.core.middleware import RequestContextMiddleware
from teamroll.core import metrics
from teamroll.api.routes import team_roll
from teamroll.services.draft.errors import DraftError

# Configure structured logging (JSON in deployments, colored for local work)
configure_logging(
    level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON
)
logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """
    Get the rate limit key for a request.

    Uses IP address, with fallback to X-Forwarded-For for proxied requests.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["60/minute"],
    storage_uri=settings.REDIS_URL if settings.RATE_LIMIT_STORAGE == "redis" else "memory://",
    enabled=settings.RATE_LIMIT_ENABLED
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    # Local SQLite databases are created on the fly; PostgreSQL is set up
    # with scripts/init_database.py
    if settings.is_sqlite():
        init_db()

    logger.info("Application started")
    yield
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Team Roll Draft: roll a random NFL team, fill a roster slot with one of its assets, repeat until 8 slots are filled",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
# Applies default_limits to every route without its own @limiter.limit
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(RequestContextMiddleware)

# Initialize Prometheus metrics before including routes
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
logger.info("Prometheus metrics initialized at /metrics")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1
app.include_router(team_roll.router, prefix="/api/v1")


@app.get("/")
@limiter.limit("60/minute")
async def root(request: Request):
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "api_version": "v1",
            "team_roll": "/api/v1/team-roll/runs",
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics"
        }
    }


@app.get("/health")
@limiter.limit("120/minute")  # Higher limit for health checks
async def health_check(request: Request):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION
    }


@app.get("/api/health")
@limiter.limit("60/minute")
def api_health(request: Request, db: Session = Depends(get_db)):
    """Detailed API health check with database status and table counts."""
    from teamroll.models import Coach, DraftPick, DraftRun, Player, Team

    health_status = {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "components": {}
    }

    try:
        database_status = {
            "status": "connected",
            "counts": {
                "teams": db.query(Team).count(),
                "coaches": db.query(Coach).count(),
                "players": db.query(Player).count(),
                "runs": db.query(DraftRun).count(),
                "picks": db.query(DraftPick).count(),
            }
        }
        pool_status = metrics.update_db_pool_metrics()
        if pool_status:
            database_status["pool"] = pool_status
        health_status["components"]["database"] = database_status
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "degraded"
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(
        status_code=status_code,
        content=health_status
    )


# Exception handlers
@app.exception_handler(DraftError)
async def draft_error_handler(request: Request, exc: DraftError):
    """Render draft engine errors as {"error": code, "detail": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "teamroll.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
