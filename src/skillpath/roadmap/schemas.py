"""Pydantic request/response models for roadmap endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from skillpath.roadmap.planner import Intent

# --- Requests ---


class GenerateRoadmapRequest(BaseModel):
    """A generated curriculum. Field spellings are normalized server side."""

    curriculum: dict[str, Any]


class ReconcileRoadmapRequest(BaseModel):
    curriculum: dict[str, Any]
    intent: Intent = Intent.FULL_REPLACE


class ModuleCompletionRequest(BaseModel):
    is_completed: bool


# --- Roadmap ---


class ResourceResponse(BaseModel):
    resource_id: str
    title: str
    type: str
    url: str | None = None
    description: str | None = None
    estimated_minutes: int
    sequence_order: int
    is_required: bool = True


class TaskResponse(BaseModel):
    task_id: str
    title: str
    description: str | None = None
    type: str
    estimated_minutes: int
    instructions: str | None = None
    solution_url: str | None = None
    sequence_order: int
    is_required: bool = True


class RoadmapModuleResponse(BaseModel):
    module_id: str
    name: str
    description: str | None = None
    difficulty: str
    estimated_hours: float | None = None
    skills: list[str] = []
    prerequisites: list[str] = []
    sequence_order: int
    is_completed: bool
    completion_date: datetime | None = None
    progress_percentage: int = 0
    resources: list[ResourceResponse] = []
    tasks: list[TaskResponse] = []


class RoadmapResponse(BaseModel):
    path_id: str
    path_title: str
    path_description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    modules: list[RoadmapModuleResponse]


# --- Reconciliation ---


class EntryOutcomeResponse(BaseModel):
    position: int
    name: str
    status: str
    module_id: str | None = None
    sequence_order: int | None = None
    reason: str | None = None


class ReconciliationResponse(BaseModel):
    user_id: str
    path_id: str
    intent: Intent
    processed: int
    counts: dict[str, int]
    outcomes: list[EntryOutcomeResponse]
    backup_id: str | None = None


# --- Progress ---


class ModuleCompletionResponse(BaseModel):
    module_id: str
    is_completed: bool
    completion_date: datetime | None = None
    total_modules: int
    completed_modules: int
    completion_percentage: int


class Achievement(BaseModel):
    type: str
    title: str


class NextModule(BaseModel):
    module_id: str
    name: str
    sequence_order: int


class RoadmapStatsResponse(BaseModel):
    has_roadmap: bool
    title: str | None = None
    total_modules: int = 0
    completed_modules: int = 0
    completion_percentage: int = 0
    total_hours: float = 0
    completed_hours: float = 0
    remaining_hours: float = 0
    weekly_hours: float | None = None
    estimated_weeks: int = 0
    estimated_completion_date: datetime | None = None
    next_module: NextModule | None = None
    achievements: list[Achievement] = []
    created_at: datetime | None = None
    last_updated: datetime | None = None


# --- History / backups ---


class HistoryEntry(BaseModel):
    id: str
    type: str
    description: str
    timestamp: datetime | None = None
    status: str


class HistoryResponse(BaseModel):
    history: list[HistoryEntry]
    last_modified: datetime | None = None
    created: datetime | None = None


class BackupResponse(BaseModel):
    backup_id: str | None = None
    available: bool


class RestoreResponse(BaseModel):
    restored: bool
    message: str
    backup_id: str | None = None
