"""Roadmap API endpoints under /api/v1/users/{user_id}/roadmap."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skillpath.database import get_session
from skillpath.roadmap.schemas import (
    BackupResponse,
    GenerateRoadmapRequest,
    HistoryResponse,
    ModuleCompletionRequest,
    ModuleCompletionResponse,
    ReconciliationResponse,
    ReconcileRoadmapRequest,
    RestoreResponse,
    RoadmapResponse,
    RoadmapStatsResponse,
)
from skillpath.roadmap.service import RoadmapService

router = APIRouter(prefix="/api/v1/users/{user_id}/roadmap", tags=["Roadmap"])


@router.get("", response_model=RoadmapResponse)
async def get_roadmap(
    user_id: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    """Active roadmap with modules, resources, and tasks."""
    return await RoadmapService(db).get_roadmap(user_id)


@router.post("/generate", response_model=ReconciliationResponse, status_code=201)
async def generate_roadmap(
    user_id: str,
    body: GenerateRoadmapRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    """Create a new active path from a generated curriculum."""
    result = await RoadmapService(db).generate_roadmap(user_id, body.curriculum)
    await db.commit()
    return result


@router.post("/reconcile", response_model=ReconciliationResponse)
async def reconcile_roadmap(
    user_id: str,
    body: ReconcileRoadmapRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    """Merge an edited curriculum into the active path (backup taken first)."""
    result = await RoadmapService(db).modify_roadmap(user_id, body.curriculum, body.intent)
    await db.commit()
    return result


@router.patch("/modules/{module_id}", response_model=ModuleCompletionResponse)
async def update_module_completion(
    user_id: str,
    module_id: str,
    body: ModuleCompletionRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    result = await RoadmapService(db).update_module_completion(user_id, module_id, body.is_completed)
    await db.commit()
    return result


@router.get("/stats", response_model=RoadmapStatsResponse)
async def get_stats(
    user_id: str,
    weekly_hours: float | None = Query(default=None, gt=0),
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    """Progress rollups and estimated completion. Never 404s."""
    return await RoadmapService(db).get_stats(user_id, weekly_hours)


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    user_id: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    return await RoadmapService(db).get_history(user_id)


@router.post("/backups", response_model=BackupResponse, status_code=201)
async def create_backup(
    user_id: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    backup_id = await RoadmapService(db).create_backup(user_id)
    return {"backup_id": backup_id, "available": backup_id is not None}


@router.post("/backups/{backup_id}/restore", response_model=RestoreResponse)
async def restore_backup(
    user_id: str,
    backup_id: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict:
    outcome = await RoadmapService(db).restore_backup(user_id, backup_id)
    return outcome.to_dict()
