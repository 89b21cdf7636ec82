"""Liveness, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from skillpath.config import get_settings
from skillpath.database import get_session
from skillpath.redis_client import get_redis

router = APIRouter()

# One table per concern the roadmap engine writes to.
SCHEMA_TABLES: tuple[str, ...] = ("learning_paths", "module_assignments", "modules", "roadmap_backups")


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Ready when the roadmap schema is queryable.

    Redis only backs rate limiting, so a missing Redis reports ``degraded``
    rather than failing the probe.
    """
    settings = get_settings()
    checks: dict[str, str] = {}

    missing = []
    for table in SCHEMA_TABLES:
        try:
            await db.execute(text(f"SELECT 1 FROM {table} LIMIT 1"))  # noqa: S608
        except Exception as exc:
            await db.rollback()
            missing.append(table)
            checks["database"] = f"error: {exc}"
    if not missing:
        checks["database"] = "ok"

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as exc:
        checks["redis"] = f"error: {exc}"

    if missing:
        status = "unavailable"
    elif checks["redis"] != "ok":
        status = "degraded"
    else:
        status = "ready"
    return {
        "status": status,
        "checks": checks,
        "missing_tables": missing,
        "backups_enabled": settings.backups_enabled,
    }


@router.get("/version")
async def version() -> dict[str, object]:
    settings = get_settings()
    return {
        "service": "skillpath-api",
        "version": settings.app_version,
        "environment": settings.environment,
        "defaults": {
            "weekly_hours": settings.default_weekly_hours,
            "module_hours": settings.default_module_hours,
        },
    }
