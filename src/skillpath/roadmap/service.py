"""Roadmap service: generation, modification, completion, and read models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillpath.catalog.drafts import parse_curriculum
from skillpath.catalog.resolver import ContentResolver
from skillpath.config import Settings, get_settings
from skillpath.database import get_session_factory
from skillpath.roadmap.backup import RestoreOutcome, RoadmapBackupGuard
from skillpath.roadmap.errors import PathNotFoundError
from skillpath.roadmap.planner import ActiveCurriculum, Intent
from skillpath.roadmap.reconciler import PathReconciler
from skillpath.roadmap.repository import RoadmapRepository
from skillpath.roadmap.stats import compute_stats

logger = structlog.get_logger()

DEFAULT_PATH_NAME = "My Learning Path"


def roadmap_view(curriculum: ActiveCurriculum) -> dict[str, Any]:
    return {
        "path_id": curriculum.path_id,
        "path_title": curriculum.name,
        "path_description": curriculum.description,
        "created_at": curriculum.created_at,
        "updated_at": curriculum.updated_at,
        "modules": [
            {
                "module_id": a.module_id,
                "name": a.name,
                "description": a.description,
                "difficulty": a.difficulty,
                "estimated_hours": a.estimated_hours,
                "skills": list(a.skills),
                "prerequisites": list(a.prerequisites),
                "sequence_order": a.sequence_order,
                "is_completed": a.is_completed,
                "completion_date": a.completion_date,
                "progress_percentage": a.progress_percentage,
                "resources": list(a.resources),
                "tasks": list(a.tasks),
            }
            for a in curriculum.assignments
        ],
    }


class RoadmapService:
    """Entry point for roadmap operations. Flushes; the router commits."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.repo = RoadmapRepository(db)
        self.guard = RoadmapBackupGuard(
            session_factory or get_session_factory(),
            enabled=self.settings.backups_enabled,
            default_module_hours=self.settings.default_module_hours,
        )

    def _reconciler(self) -> PathReconciler:
        return PathReconciler(self.db, ContentResolver(self.db, self.settings.default_module_hours))

    # --- Reads ---

    async def get_roadmap(self, user_id: str) -> dict[str, Any]:
        curriculum = await self.repo.load_active(user_id, with_content=True)
        if curriculum is None:
            raise PathNotFoundError(user_id)
        return roadmap_view(curriculum)

    async def get_stats(self, user_id: str, weekly_hours: float | None = None) -> dict[str, Any]:
        curriculum = await self.repo.load_active(user_id)
        return compute_stats(
            curriculum,
            weekly_hours=weekly_hours or self.settings.default_weekly_hours,
            default_module_hours=self.settings.default_module_hours,
        )

    async def get_history(self, user_id: str) -> dict[str, Any]:
        return await self.repo.modification_history(user_id)

    # --- Writes ---

    async def generate_roadmap(self, user_id: str, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Create a fresh active path from a generated curriculum, archiving any previous one."""
        curriculum = parse_curriculum(raw)
        path_id = await self.repo.create_path(
            user_id,
            name=curriculum.title or DEFAULT_PATH_NAME,
            description=curriculum.description,
        )
        result = await self._reconciler().reconcile(user_id, curriculum, Intent.FULL_REPLACE)
        logger.info("roadmap_generated", user_id=user_id, path_id=path_id, modules=result.processed)
        return result.to_dict()

    async def modify_roadmap(
        self, user_id: str, raw: Mapping[str, Any], intent: Intent = Intent.FULL_REPLACE
    ) -> dict[str, Any]:
        """Guarded reconciliation of an edited curriculum into the active path."""
        curriculum = parse_curriculum(raw)
        result, backup_id = await self.guard.guarded_reconcile(self.db, user_id, curriculum, intent)
        return {**result.to_dict(), "backup_id": backup_id}

    async def update_module_completion(self, user_id: str, module_id: str, is_completed: bool) -> dict[str, Any]:
        assignment = await self.repo.set_module_completion(user_id, module_id, is_completed)
        stats = compute_stats(await self.repo.load_active(user_id))
        return {
            "module_id": module_id,
            "is_completed": assignment.is_completed,
            "completion_date": assignment.completion_date,
            "total_modules": stats["total_modules"],
            "completed_modules": stats["completed_modules"],
            "completion_percentage": stats["completion_percentage"],
        }

    # --- Backups ---

    async def create_backup(self, user_id: str) -> str | None:
        return await self.guard.snapshot(user_id)

    async def restore_backup(self, user_id: str, backup_id: str) -> RestoreOutcome:
        return await self.guard.restore(user_id, backup_id)
