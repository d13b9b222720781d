"""
Prometheus metrics for the Team Roll Draft API.

Metrics exposed:
- Draft engine operation counters (by operation and outcome) and latency
- Runs started and completed
- Database connection pool gauges

HTTP request metrics come from prometheus-fastapi-instrumentator in main.py.
"""
from prometheus_client import Counter, Gauge, Histogram
from sqlalchemy.pool import QueuePool

# Draft engine metrics
draft_operations_total = Counter(
    "draft_operations_total",
    "Total draft engine operations",
    ["operation", "outcome"]
)

draft_operation_duration_seconds = Histogram(
    "draft_operation_duration_seconds",
    "Draft engine operation latency in seconds",
    ["operation"]
)

draft_runs_started_total = Counter(
    "draft_runs_started_total",
    "Total draft runs started"
)

draft_runs_completed_total = Counter(
    "draft_runs_completed_total",
    "Total draft runs that filled all roster slots"
)

# Database Metrics
db_pool_connections = Gauge(
    "db_pool_connections",
    "Number of database connections in the pool"
)

db_pool_connections_idle = Gauge(
    "db_pool_connections_idle",
    "Number of idle database connections"
)

db_pool_connections_checked_out = Gauge(
    "db_pool_connections_checked_out",
    "Number of checked out database connections"
)

db_pool_connections_overflow = Gauge(
    "db_pool_connections_overflow",
    "Number of overflow database connections"
)


def record_draft_operation(operation: str, outcome: str, duration: float) -> None:
    """
    Record one draft engine call.

    Args:
        operation: Engine operation name (start_run, roll_team, ...)
        outcome: "ok" or the error code of the failure
        duration: Wall time spent in the operation, in seconds
    """
    draft_operations_total.labels(operation=operation, outcome=outcome).inc()
    draft_operation_duration_seconds.labels(operation=operation).observe(duration)


def record_run_started() -> None:
    draft_runs_started_total.inc()


def record_run_completed() -> None:
    draft_runs_completed_total.inc()


def update_db_pool_metrics() -> dict:
    """
    Update database connection pool metrics from the SQLAlchemy engine.

    Returns:
        Pool status dict for the health endpoint (empty for non-queue pools,
        e.g. SQLite)
    """
    from teamroll.core.database import engine

    pool = engine.pool
    if not isinstance(pool, QueuePool):
        return {}

    db_pool_connections.set(pool.size())
    db_pool_connections_idle.set(pool.checkedin())
    db_pool_connections_checked_out.set(pool.checkedout())
    db_pool_connections_overflow.set(pool.overflow())

    return {
        "pool_size": pool.size(),
        "checked_out": pool.checkedout(),
        "overflow": pool.overflow(),
    }
