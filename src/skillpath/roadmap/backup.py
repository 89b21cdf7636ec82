"""Backup / restore guard around roadmap modifications.

Backups are advisory: a snapshot that cannot be written yields ``None`` and a
restore that cannot be applied yields ``restored=False``. Neither ever raises
into the caller's primary operation. Both run in their own sessions so a
snapshot is committed before the modification starts.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillpath.catalog.drafts import Curriculum, parse_curriculum
from skillpath.catalog.resolver import DEFAULT_MODULE_HOURS, ContentResolver
from skillpath.db.models import RoadmapBackup
from skillpath.roadmap.errors import PathNotFoundError, RoadmapModificationError
from skillpath.roadmap.planner import ActiveCurriculum, CarriedProgress, Intent
from skillpath.roadmap.reconciler import PathReconciler, ReconciliationResult
from skillpath.roadmap.repository import RoadmapRepository

logger = structlog.get_logger()

BACKUP_TYPE = "pre_modification"
REGENERATE_MESSAGE = "Backup restoration not available - please regenerate roadmap if needed"


@dataclass(frozen=True)
class RestoreOutcome:
    restored: bool
    message: str
    backup_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"restored": self.restored, "message": self.message, "backup_id": self.backup_id}


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def serialize_curriculum(curriculum: ActiveCurriculum) -> dict[str, Any]:
    """JSON payload for a backup row; module entries read back through the draft adapter."""
    return {
        "path": {
            "path_id": curriculum.path_id,
            "path_name": curriculum.name,
            "path_description": curriculum.description,
            "created_at": _iso(curriculum.created_at),
            "updated_at": _iso(curriculum.updated_at),
        },
        "modules": [
            {
                "module_id": a.module_id,
                "module_name": a.name,
                "module_description": a.description,
                "difficulty": a.difficulty,
                "estimated_hours": a.estimated_hours,
                "skills_covered": list(a.skills),
                "prerequisites": list(a.prerequisites),
                "sequence_order": a.sequence_order,
                "is_completed": a.is_completed,
                "completion_date": _iso(a.completion_date),
                "progress_percentage": a.progress_percentage,
                "resources": [{k: v for k, v in r.items() if k != "resource_id"} for r in a.resources],
                "tasks": [{k: v for k, v in t.items() if k != "task_id"} for t in a.tasks],
            }
            for a in curriculum.assignments
        ],
    }


def curriculum_from_payload(payload: Mapping[str, Any]) -> tuple[Curriculum, dict[str, CarriedProgress]]:
    """Rebuild a target curriculum and the carried progress recorded in a backup."""
    path = payload.get("path") or {}
    modules = sorted(
        (m for m in payload.get("modules") or [] if isinstance(m, Mapping)),
        key=lambda m: m.get("sequence_order") or 0,
    )
    curriculum = parse_curriculum(
        {
            "path_name": path.get("path_name"),
            "path_description": path.get("path_description"),
            "modules": modules,
        }
    )
    carried = {
        str(m["module_id"]): CarriedProgress(
            is_completed=bool(m.get("is_completed")),
            completion_date=_parse_datetime(m.get("completion_date")),
        )
        for m in modules
        if m.get("module_id")
    }
    return curriculum, carried


class RoadmapBackupGuard:
    """Snapshot before a modification; restore on hard failure."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        enabled: bool = True,
        default_module_hours: float = DEFAULT_MODULE_HOURS,
    ) -> None:
        self.session_factory = session_factory
        self.enabled = enabled
        self.default_module_hours = default_module_hours

    async def snapshot(self, user_id: str) -> str | None:
        """Persist the user's active curriculum. Returns the backup id, or None if unavailable."""
        if not self.enabled:
            return None
        try:
            async with self.session_factory() as db:
                curriculum = await RoadmapRepository(db).load_active(user_id, with_content=True)
                if curriculum is None:
                    return None
                backup = RoadmapBackup(
                    user_id=user_id,
                    backup_type=BACKUP_TYPE,
                    payload=serialize_curriculum(curriculum),
                )
                db.add(backup)
                await db.commit()
                logger.info("roadmap_backup_created", user_id=user_id, backup_id=backup.id)
                return backup.id
        except Exception as exc:
            logger.warning("roadmap_backup_failed", user_id=user_id, error=str(exc))
            return None

    async def restore(self, user_id: str, backup_id: str) -> RestoreOutcome:
        """Reapply a backup as a full replacement. Never raises."""
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(RoadmapBackup).where(RoadmapBackup.id == backup_id, RoadmapBackup.user_id == user_id)
                )
                backup = result.scalar_one_or_none()
                if backup is None:
                    return RestoreOutcome(False, REGENERATE_MESSAGE, backup_id)

                curriculum, carried = curriculum_from_payload(backup.payload)
                reconciler = PathReconciler(db, ContentResolver(db, self.default_module_hours))
                await reconciler.reconcile(user_id, curriculum, Intent.FULL_REPLACE, carried_progress=carried)
                await db.commit()
        except Exception as exc:
            logger.warning("roadmap_restore_failed", user_id=user_id, backup_id=backup_id, error=str(exc))
            return RestoreOutcome(False, REGENERATE_MESSAGE, backup_id)

        logger.info("roadmap_restored", user_id=user_id, backup_id=backup_id)
        return RestoreOutcome(True, "Roadmap restored from backup", backup_id)

    async def guarded_reconcile(
        self,
        db: AsyncSession,
        user_id: str,
        target: Curriculum,
        intent: Intent,
    ) -> tuple[ReconciliationResult, str | None]:
        """Snapshot, then reconcile on ``db``.

        On a hard failure the caller's session is rolled back, the snapshot is
        restored if one exists, and RoadmapModificationError is raised with the
        restore outcome. PathNotFoundError propagates untouched.
        """
        backup_id = await self.snapshot(user_id)
        reconciler = PathReconciler(db, ContentResolver(db, self.default_module_hours))
        try:
            result = await reconciler.reconcile(user_id, target, intent)
        except PathNotFoundError:
            raise
        except Exception as exc:
            await db.rollback()
            logger.error("roadmap_modification_failed", user_id=user_id, intent=Intent(intent).value, error=str(exc))
            if backup_id is None:
                restore = RestoreOutcome(False, REGENERATE_MESSAGE)
            else:
                restore = await self.restore(user_id, backup_id)
            raise RoadmapModificationError("Failed to update roadmap", restore) from exc
        return result, backup_id
