"""Path reconciler: applies a reconciliation plan to the store.

Each planned entry runs inside its own savepoint. A failing entry is rolled
back, logged and reported as ``failed``; the fold continues with the next one.
Sequence numbers come from a running counter that only advances on success,
so the active ordering stays dense whatever fails.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from skillpath.catalog.drafts import Curriculum
from skillpath.catalog.resolver import ContentResolver
from skillpath.roadmap.errors import PathNotFoundError
from skillpath.roadmap.planner import (
    CarriedProgress,
    EntryOutcome,
    Intent,
    OutcomeStatus,
    PlanStep,
    ReconciliationPlan,
    plan_reconciliation,
)
from skillpath.roadmap.repository import RoadmapRepository

logger = structlog.get_logger()


@dataclass
class ReconciliationResult:
    """Itemized outcome of one reconciliation."""

    user_id: str
    path_id: str
    intent: Intent
    outcomes: list[EntryOutcome] = field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def counts(self) -> dict[str, int]:
        return {status.value: self.count(status) for status in OutcomeStatus}

    @property
    def processed(self) -> int:
        """Entries that ended up placed in the path."""
        return sum(
            1
            for outcome in self.outcomes
            if outcome.status in (OutcomeStatus.CREATED, OutcomeStatus.REUSED, OutcomeStatus.CARRIED)
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "path_id": self.path_id,
            "intent": self.intent.value,
            "processed": self.processed,
            "counts": self.counts,
            "outcomes": [
                {
                    "position": outcome.position,
                    "name": outcome.name,
                    "status": outcome.status.value,
                    "module_id": outcome.module_id,
                    "sequence_order": outcome.sequence_order,
                    "reason": outcome.reason,
                }
                for outcome in sorted(self.outcomes, key=lambda o: o.position)
            ],
        }


class PathReconciler:
    """Merge a target curriculum into a user's active path."""

    def __init__(self, db: AsyncSession, resolver: ContentResolver | None = None) -> None:
        self.db = db
        self.repo = RoadmapRepository(db)
        self.resolver = resolver or ContentResolver(db)

    async def reconcile(
        self,
        user_id: str,
        target: Curriculum,
        intent: Intent,
        carried_progress: Mapping[str, CarriedProgress] | None = None,
    ) -> ReconciliationResult:
        """Reconcile ``target`` into the user's active path.

        Raises PathNotFoundError when the user has no active path. Failures
        loading the snapshot, archiving, or updating path metadata propagate.
        """
        current = await self.repo.load_active(user_id)
        if current is None:
            raise PathNotFoundError(user_id)

        plan = plan_reconciliation(current, target, intent, carried_progress)
        result = ReconciliationResult(user_id=user_id, path_id=plan.path_id, intent=plan.intent)
        result.outcomes.extend(plan.skipped)

        if plan.intent is Intent.FULL_REPLACE:
            await self.repo.archive_assignments(plan.path_id)

        placed: set[str] = set(plan.kept_module_ids)
        sequence = plan.start_sequence
        for step in plan.steps:
            savepoint = await self.db.begin_nested()
            try:
                outcome = await self._apply_step(user_id, plan, step, sequence, placed)
            except Exception as exc:
                await savepoint.rollback()
                logger.warning(
                    "reconcile_entry_failed",
                    user_id=user_id,
                    position=step.position,
                    module=step.draft.name,
                    error=str(exc),
                )
                result.outcomes.append(
                    EntryOutcome(
                        position=step.position,
                        name=step.draft.name,
                        status=OutcomeStatus.FAILED,
                        reason=str(exc),
                    )
                )
                continue

            if outcome.status is OutcomeStatus.SKIPPED:
                await savepoint.rollback()
            else:
                await savepoint.commit()
                placed.add(outcome.module_id)
                sequence += 1
            result.outcomes.append(outcome)

        await self.repo.update_path_metadata(plan.path_id, name=plan.title, description=plan.description)

        logger.info(
            "roadmap_reconciled",
            user_id=user_id,
            path_id=plan.path_id,
            intent=plan.intent.value,
            **result.counts,
        )
        return result

    async def _apply_step(
        self,
        user_id: str,
        plan: ReconciliationPlan,
        step: PlanStep,
        sequence: int,
        placed: set[str],
    ) -> EntryOutcome:
        draft = step.draft
        if step.is_carry:
            module_id = step.carry_module_id
            status = OutcomeStatus.CARRIED
        else:
            resolution = await self.resolver.resolve_entity("module", draft)
            module_id = resolution.entity_id
            status = OutcomeStatus.CREATED if resolution.created else OutcomeStatus.REUSED
            if module_id in plan.carried_module_ids:
                return EntryOutcome(
                    position=step.position,
                    name=draft.name,
                    status=OutcomeStatus.SKIPPED,
                    module_id=module_id,
                    reason="module carried by a referenced draft",
                )

        if module_id in placed:
            return EntryOutcome(
                position=step.position,
                name=draft.name,
                status=OutcomeStatus.SKIPPED,
                module_id=module_id,
                reason="duplicate module in target",
            )

        if not step.is_carry:
            for index, resource in enumerate(draft.resources, start=1):
                resource_id = await self.resolver.resolve("resource", resource)
                await self.repo.link_resource(module_id, resource_id, index)
            for index, task in enumerate(draft.tasks, start=1):
                task_id = await self.resolver.resolve("task", task)
                await self.repo.link_task(module_id, task_id, index)

        await self.repo.upsert_assignment(user_id, plan.path_id, module_id, sequence, progress=step.carried)
        return EntryOutcome(
            position=step.position,
            name=draft.name,
            status=status,
            module_id=module_id,
            sequence_order=sequence,
        )
