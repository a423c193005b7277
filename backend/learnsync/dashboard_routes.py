"""Dashboard REST endpoints consumed by the mobile client."""

from __future__ import annotations

import logging
from typing import List, Literal

from fastapi import APIRouter, Depends, Query, Request

from .dashboard import DashboardService, DashboardView
from .view_models import (
    AchievementTileView,
    LearningStepView,
    LessonCardView,
    build_achievement_tiles,
    build_learning_path,
    build_lesson_cards,
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])
logger = logging.getLogger(__name__)


async def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard


@router.get("", response_model=DashboardView)
async def get_dashboard(service: DashboardService = Depends(get_dashboard_service)) -> DashboardView:
    return await service.view()


@router.post("/refresh", response_model=DashboardView)
async def refresh_dashboard(
    reason: Literal["mount", "focus", "manual"] = Query("manual"),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardView:
    logger.info("Dashboard refresh requested (reason=%s)", reason)
    return await service.refresh(reason)


@router.get("/lessons", response_model=List[LessonCardView])
async def list_lessons(
    limit: int = Query(8, ge=1, le=50),
    service: DashboardService = Depends(get_dashboard_service),
) -> List[LessonCardView]:
    return build_lesson_cards(service.store.current(), limit)


@router.get("/learning-path", response_model=List[LearningStepView])
async def list_learning_path(
    limit: int = Query(5, ge=1, le=20),
    service: DashboardService = Depends(get_dashboard_service),
) -> List[LearningStepView]:
    return build_learning_path(service.store.current(), limit)


@router.get("/achievements", response_model=List[AchievementTileView])
async def list_achievements(
    preview: int = Query(3, ge=0, le=100),
    service: DashboardService = Depends(get_dashboard_service),
) -> List[AchievementTileView]:
    achievements, earned_ids = service.store.current_achievements()
    return build_achievement_tiles(achievements, earned_ids, preview)
