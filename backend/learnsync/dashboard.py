"""Dashboard composition: one owned store and scheduler per service."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel

from .config import Settings
from .content_fetcher import ContentFetcher
from .content_store import ContentStore
from .models import ProgressSummary
from .refresh_scheduler import RefreshReason, RefreshScheduler
from .telemetry import Telemetry
from .view_models import (
    AchievementSummaryView,
    AchievementTileView,
    LearningStepView,
    LessonCardView,
    StatsHeaderView,
    build_achievement_summary,
    build_achievement_tiles,
    build_learning_path,
    build_lesson_cards,
    build_stats_header,
)

logger = logging.getLogger(__name__)

ProgressLoader = Callable[[], Awaitable[ProgressSummary]]


class DashboardView(BaseModel):
    lessons: List[LessonCardView]
    learning_path: List[LearningStepView]
    achievements: List[AchievementTileView]
    achievement_summary: AchievementSummaryView
    stats: StatsHeaderView
    is_fallback: bool
    refreshed_at: Optional[datetime] = None


class DashboardService:
    def __init__(
        self,
        settings: Settings,
        fetcher: ContentFetcher,
        *,
        store: Optional[ContentStore] = None,
        telemetry: Optional[Telemetry] = None,
        progress_loader: Optional[ProgressLoader] = None,
    ) -> None:
        self.settings = settings
        self.telemetry = telemetry or Telemetry()
        self.store = store or ContentStore()
        self.fetcher = fetcher
        self.scheduler = RefreshScheduler(
            fetcher,
            self.store,
            user_id=settings.user_id,
            telemetry=self.telemetry,
        )
        self._progress_loader = progress_loader

    async def refresh(self, reason: RefreshReason = "manual") -> DashboardView:
        await self.scheduler.refresh(reason)
        return await self.view()

    async def view(self) -> DashboardView:
        return self.build_view(await self._load_progress())

    def build_view(self, progress: Optional[ProgressSummary] = None) -> DashboardView:
        snapshot = self.store.snapshot()
        modules = snapshot.modules
        return DashboardView(
            lessons=build_lesson_cards(modules, self.settings.lesson_card_limit),
            learning_path=build_learning_path(modules, self.settings.learning_path_limit),
            achievements=build_achievement_tiles(
                snapshot.achievements,
                snapshot.earned_ids,
                self.settings.achievement_preview_count,
            ),
            achievement_summary=build_achievement_summary(snapshot.achievements, snapshot.earned_ids),
            stats=build_stats_header(progress),
            is_fallback=not modules,
            refreshed_at=self.scheduler.last_refreshed_at,
        )

    async def aclose(self) -> None:
        try:
            await self.scheduler.aclose()
        finally:
            await self.fetcher.aclose()

    async def _load_progress(self) -> Optional[ProgressSummary]:
        if self._progress_loader is None:
            return None
        try:
            return await self._progress_loader()
        except Exception:  # noqa: BLE001
            logger.exception("Progress summary unavailable; showing zeroed stats")
            return None


__all__ = ["DashboardService", "DashboardView", "ProgressLoader"]
