"""Content identity resolution against the shared catalog.

Maps a normalized draft onto a catalog module, resource or task, creating the
row only when no entity with the same normalized title exists. Reuse bumps
``usage_count`` in place; there is no locking, so two first uses of the same
new title racing each other may both create a row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

import structlog
from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillpath.catalog.drafts import ModuleDraft, ResourceDraft, TaskDraft, normalize_title
from skillpath.catalog.urls import generate_resource_url, is_placeholder_url
from skillpath.db.models import Module, Resource, Task

logger = structlog.get_logger()

CatalogKind = Literal["module", "resource", "task"]

DEFAULT_MODULE_HOURS = 3


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one draft."""

    kind: CatalogKind
    entity_id: str
    created: bool


class ContentResolver:
    """Resolve drafts to catalog ids. Storage errors propagate; nothing is retried."""

    def __init__(self, db: AsyncSession, default_module_hours: float = DEFAULT_MODULE_HOURS) -> None:
        self.db = db
        self.default_module_hours = default_module_hours

    async def resolve(self, kind: CatalogKind, draft: ModuleDraft | ResourceDraft | TaskDraft) -> str:
        """Return the catalog id for ``draft``, creating the entity if needed."""
        resolution = await self.resolve_entity(kind, draft)
        return resolution.entity_id

    async def resolve_entity(
        self, kind: CatalogKind, draft: ModuleDraft | ResourceDraft | TaskDraft
    ) -> Resolution:
        if kind == "module" and isinstance(draft, ModuleDraft):
            return await self._resolve_module(draft)
        if kind == "resource" and isinstance(draft, ResourceDraft):
            return await self._resolve_resource(draft)
        if kind == "task" and isinstance(draft, TaskDraft):
            return await self._resolve_task(draft)
        msg = f"Draft of type {type(draft).__name__} cannot be resolved as {kind}"
        raise TypeError(msg)

    # --- Modules ---

    async def _resolve_module(self, draft: ModuleDraft) -> Resolution:
        key = draft.name_key
        existing_id = await self._find(select(Module.id).where(Module.name_key == key).order_by(Module.created_at))
        if existing_id is not None:
            await self._bump(Module, existing_id)
            logger.info("catalog_entity_reused", kind="module", entity_id=existing_id, title=draft.name)
            return Resolution("module", existing_id, created=False)

        module = Module(
            name=draft.name,
            name_key=key,
            description=draft.description or f"Learn {draft.name}",
            difficulty=draft.difficulty,
            estimated_hours=draft.estimated_hours or self.default_module_hours,
            skills=list(draft.skills),
            prerequisites=list(draft.prerequisites),
            usage_count=1,
            created_by_ai=True,
        )
        self.db.add(module)
        await self.db.flush()
        logger.info("catalog_entity_created", kind="module", entity_id=module.id, title=draft.name)
        return Resolution("module", module.id, created=True)

    # --- Resources ---

    async def _resolve_resource(self, draft: ResourceDraft) -> Resolution:
        key = normalize_title(draft.title)
        query = select(Resource.id).where(Resource.title_key == key)
        has_url = not is_placeholder_url(draft.url)
        if has_url:
            query = query.where(Resource.url == draft.url)
        existing_id = await self._find(query.order_by(Resource.created_at))
        if existing_id is not None:
            await self._bump(Resource, existing_id)
            logger.info("catalog_entity_reused", kind="resource", entity_id=existing_id, title=draft.title)
            return Resolution("resource", existing_id, created=False)

        resource = Resource(
            title=draft.title,
            title_key=key,
            type=draft.type,
            url=draft.url if has_url else generate_resource_url(draft.title, draft.type),
            description=draft.description,
            estimated_minutes=draft.estimated_minutes,
            usage_count=1,
            created_by_ai=True,
        )
        self.db.add(resource)
        await self.db.flush()
        logger.info("catalog_entity_created", kind="resource", entity_id=resource.id, title=draft.title)
        return Resolution("resource", resource.id, created=True)

    # --- Tasks ---

    async def _resolve_task(self, draft: TaskDraft) -> Resolution:
        key = normalize_title(draft.title)
        existing_id = await self._find(select(Task.id).where(Task.title_key == key).order_by(Task.created_at))
        if existing_id is not None:
            await self._bump(Task, existing_id)
            logger.info("catalog_entity_reused", kind="task", entity_id=existing_id, title=draft.title)
            return Resolution("task", existing_id, created=False)

        task = Task(
            title=draft.title,
            title_key=key,
            description=draft.description,
            type=draft.type,
            estimated_minutes=draft.estimated_minutes,
            instructions=draft.instructions,
            solution_url=draft.solution_url,
            usage_count=1,
            created_by_ai=True,
        )
        self.db.add(task)
        await self.db.flush()
        logger.info("catalog_entity_created", kind="task", entity_id=task.id, title=draft.title)
        return Resolution("task", task.id, created=True)

    # --- Helpers ---

    async def _find(self, query: Select[tuple[str]]) -> str | None:
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def _bump(self, model: type[Module] | type[Resource] | type[Task], entity_id: str) -> None:
        """Increment usage_count in SQL so concurrent reuses never lose a count."""
        await self.db.execute(
            update(model)
            .where(model.id == entity_id)
            .values(usage_count=model.usage_count + 1, updated_at=datetime.now(timezone.utc))
        )
