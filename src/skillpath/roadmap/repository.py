"""Store access for learning paths, assignments, and module content links."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillpath.db.models import (
    LearningPath,
    Module,
    ModuleAssignment,
    ModuleResourceLink,
    ModuleTaskLink,
    Resource,
    Task,
)
from skillpath.roadmap.errors import AssignmentNotFoundError, PathNotFoundError
from skillpath.roadmap.planner import ActiveCurriculum, AssignmentSnapshot, CarriedProgress

HISTORY_LIMIT = 10


class RoadmapRepository:
    """Reads and writes one user's curriculum. Flushes; never commits."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # --- Paths ---

    async def get_active_path(self, user_id: str) -> LearningPath | None:
        result = await self.db.execute(
            select(LearningPath)
            .where(LearningPath.user_id == user_id, LearningPath.status == "active")
            .order_by(LearningPath.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_path(self, user_id: str, name: str, description: str | None = None) -> str:
        """Archive any active path for the user, then create a new active one."""
        await self.archive_user_paths(user_id)
        path = LearningPath(user_id=user_id, name=name, description=description, status="active")
        self.db.add(path)
        await self.db.flush()
        return path.id

    async def archive_user_paths(self, user_id: str) -> None:
        now = datetime.now(timezone.utc)
        active_paths = select(LearningPath.id).where(
            LearningPath.user_id == user_id, LearningPath.status == "active"
        )
        await self.db.execute(
            update(ModuleAssignment)
            .where(ModuleAssignment.path_id.in_(active_paths), ModuleAssignment.status == "active")
            .values(status="archived", updated_at=now)
        )
        await self.db.execute(
            update(LearningPath)
            .where(LearningPath.user_id == user_id, LearningPath.status == "active")
            .values(status="archived", updated_at=now)
        )

    async def update_path_metadata(
        self, path_id: str, name: str | None = None, description: str | None = None
    ) -> None:
        values: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
        if name:
            values["name"] = name
        if description:
            values["description"] = description
        await self.db.execute(
            update(LearningPath)
            .where(LearningPath.id == path_id)
            .values(**values)
        )

    # --- Snapshot ---

    async def load_active(self, user_id: str, with_content: bool = False) -> ActiveCurriculum | None:
        """Load the active path and its ordered active assignments, or None."""
        path = await self.get_active_path(user_id)
        if path is None:
            return None

        result = await self.db.execute(
            select(ModuleAssignment, Module)
            .join(Module, Module.id == ModuleAssignment.module_id)
            .where(ModuleAssignment.path_id == path.id, ModuleAssignment.status == "active")
            .order_by(ModuleAssignment.sequence_order)
        )
        assignments = []
        for assignment, module in result.all():
            resources: tuple[dict[str, Any], ...] = ()
            tasks: tuple[dict[str, Any], ...] = ()
            if with_content:
                resources = tuple(await self.module_resources(module.id))
                tasks = tuple(await self.module_tasks(module.id))
            assignments.append(
                AssignmentSnapshot(
                    module_id=module.id,
                    name=module.name,
                    sequence_order=assignment.sequence_order,
                    is_completed=assignment.is_completed,
                    completion_date=assignment.completion_date,
                    progress_percentage=assignment.progress_percentage,
                    started_at=assignment.started_at,
                    description=module.description,
                    difficulty=module.difficulty,
                    estimated_hours=module.estimated_hours,
                    skills=tuple(module.skills or ()),
                    prerequisites=tuple(module.prerequisites or ()),
                    resources=resources,
                    tasks=tasks,
                )
            )

        return ActiveCurriculum(
            path_id=path.id,
            user_id=user_id,
            name=path.name,
            description=path.description,
            created_at=path.created_at,
            updated_at=path.updated_at,
            assignments=tuple(assignments),
        )

    async def module_resources(self, module_id: str) -> list[dict[str, Any]]:
        result = await self.db.execute(
            select(Resource, ModuleResourceLink.sequence_order, ModuleResourceLink.is_required)
            .join(ModuleResourceLink, ModuleResourceLink.resource_id == Resource.id)
            .where(ModuleResourceLink.module_id == module_id)
            .order_by(ModuleResourceLink.sequence_order)
        )
        return [
            {
                "resource_id": resource.id,
                "title": resource.title,
                "type": resource.type,
                "url": resource.url,
                "description": resource.description,
                "estimated_minutes": resource.estimated_minutes,
                "sequence_order": sequence_order,
                "is_required": is_required,
            }
            for resource, sequence_order, is_required in result.all()
        ]

    async def module_tasks(self, module_id: str) -> list[dict[str, Any]]:
        result = await self.db.execute(
            select(Task, ModuleTaskLink.sequence_order, ModuleTaskLink.is_required)
            .join(ModuleTaskLink, ModuleTaskLink.task_id == Task.id)
            .where(ModuleTaskLink.module_id == module_id)
            .order_by(ModuleTaskLink.sequence_order)
        )
        return [
            {
                "task_id": task.id,
                "title": task.title,
                "description": task.description,
                "type": task.type,
                "estimated_minutes": task.estimated_minutes,
                "instructions": task.instructions,
                "solution_url": task.solution_url,
                "sequence_order": sequence_order,
                "is_required": is_required,
            }
            for task, sequence_order, is_required in result.all()
        ]

    # --- Assignments ---

    async def archive_assignments(self, path_id: str) -> None:
        await self.db.execute(
            update(ModuleAssignment)
            .where(ModuleAssignment.path_id == path_id, ModuleAssignment.status == "active")
            .values(status="archived", updated_at=datetime.now(timezone.utc))
        )

    async def upsert_assignment(
        self,
        user_id: str,
        path_id: str,
        module_id: str,
        sequence_order: int,
        progress: CarriedProgress | None = None,
    ) -> None:
        """Place a module in the path, reactivating an archived row for the same module."""
        progress = progress or CarriedProgress()
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(ModuleAssignment).where(
                ModuleAssignment.user_id == user_id,
                ModuleAssignment.path_id == path_id,
                ModuleAssignment.module_id == module_id,
            )
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            assignment = ModuleAssignment(user_id=user_id, path_id=path_id, module_id=module_id)
            self.db.add(assignment)

        assignment.sequence_order = sequence_order
        assignment.is_completed = progress.is_completed
        assignment.completion_date = progress.completion_date
        assignment.progress_percentage = progress.progress_percentage
        assignment.status = "active"
        assignment.started_at = None
        assignment.updated_at = now
        await self.db.flush()

    async def set_module_completion(self, user_id: str, module_id: str, is_completed: bool) -> ModuleAssignment:
        path = await self.get_active_path(user_id)
        if path is None:
            raise PathNotFoundError(user_id)

        result = await self.db.execute(
            select(ModuleAssignment).where(
                ModuleAssignment.path_id == path.id,
                ModuleAssignment.module_id == module_id,
                ModuleAssignment.status == "active",
            )
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            raise AssignmentNotFoundError(user_id, module_id)

        now = datetime.now(timezone.utc)
        assignment.is_completed = is_completed
        assignment.completion_date = now if is_completed else None
        assignment.progress_percentage = 100 if is_completed else 0
        if is_completed and assignment.started_at is None:
            assignment.started_at = now
        assignment.updated_at = now
        await self.db.flush()
        return assignment

    # --- Content links ---

    async def link_resource(self, module_id: str, resource_id: str, sequence_order: int) -> None:
        link = await self.db.get(ModuleResourceLink, (module_id, resource_id))
        if link is None:
            self.db.add(
                ModuleResourceLink(
                    module_id=module_id, resource_id=resource_id, sequence_order=sequence_order, is_required=True
                )
            )
        else:
            link.sequence_order = sequence_order
        await self.db.flush()

    async def link_task(self, module_id: str, task_id: str, sequence_order: int) -> None:
        link = await self.db.get(ModuleTaskLink, (module_id, task_id))
        if link is None:
            self.db.add(
                ModuleTaskLink(module_id=module_id, task_id=task_id, sequence_order=sequence_order, is_required=True)
            )
        else:
            link.sequence_order = sequence_order
        await self.db.flush()

    # --- History ---

    async def modification_history(self, user_id: str, limit: int = HISTORY_LIMIT) -> dict[str, Any]:
        """Recently archived placements, newest first, as a proxy for edit history."""
        path = await self.get_active_path(user_id)
        result = await self.db.execute(
            select(ModuleAssignment.updated_at, ModuleAssignment.status, Module.name)
            .join(Module, Module.id == ModuleAssignment.module_id)
            .where(ModuleAssignment.user_id == user_id, ModuleAssignment.status == "archived")
            .order_by(ModuleAssignment.updated_at.desc())
            .limit(limit)
        )
        history = [
            {
                "id": f"mod_{index}",
                "type": "module_archive",
                "description": f'Module "{name}" was modified',
                "timestamp": updated_at,
                "status": status,
            }
            for index, (updated_at, status, name) in enumerate(result.all())
        ]
        return {
            "history": history,
            "last_modified": path.updated_at if path else None,
            "created": path.created_at if path else None,
        }
