"""Refresh state machine that drives fetch, reconcile and commit."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import FrozenSet, Iterable, Literal, Optional

from .content_fetcher import ContentFetcher
from .content_store import ContentStore
from .errors import EmptyResultError
from .reconciler import ALLOWED_CATEGORIES, is_fallback_required, reconcile
from .telemetry import Telemetry

logger = logging.getLogger(__name__)

RefreshReason = Literal["mount", "focus", "manual", "coalesced"]
RefreshState = Literal["idle", "refreshing"]


class RefreshScheduler:
    """Runs at most one refresh pipeline at a time.

    A trigger while idle starts the pipeline. Triggers that arrive while a
    pipeline is in flight are coalesced: they share the in-flight task and cause
    exactly one more pipeline run once the current one finishes, however many
    of them arrived. The module chain and the achievement chain run side by
    side and a failure in one never blocks the other.
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        store: ContentStore,
        *,
        user_id: Optional[str] = None,
        allowed_categories: Optional[Iterable[str]] = None,
        telemetry: Optional[Telemetry] = None,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._user_id = user_id
        self._allowed: FrozenSet[str] = frozenset(
            ALLOWED_CATEGORIES if allowed_categories is None else allowed_categories
        )
        self._telemetry = telemetry or Telemetry()
        self._state: RefreshState = "idle"
        self._pending = False
        self._task: Optional[asyncio.Task[None]] = None
        self._run_count = 0
        self._last_refreshed_at: Optional[datetime] = None

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def run_count(self) -> int:
        return self._run_count

    @property
    def last_refreshed_at(self) -> Optional[datetime]:
        return self._last_refreshed_at

    def trigger(self, reason: RefreshReason = "manual") -> "asyncio.Task[None]":
        """Request a refresh and return the task that will satisfy it."""
        if self._state == "refreshing" and self._task is not None:
            self._pending = True
            logger.debug("Refresh coalesced (reason=%s)", reason)
            self._telemetry.emit("refresh_coalesced", reason=reason)
            return self._task

        self._state = "refreshing"
        self._task = asyncio.get_running_loop().create_task(self._drive(reason))
        return self._task

    async def refresh(self, reason: RefreshReason = "manual") -> None:
        await self.trigger(reason)

    async def aclose(self) -> None:
        task = self._task
        if task is not None and not task.done():
            await task

    async def _drive(self, reason: RefreshReason) -> None:
        try:
            while True:
                try:
                    await self._run_pipeline(reason)
                except Exception:  # noqa: BLE001
                    logger.exception("Refresh pipeline failed (reason=%s)", reason)
                    self._telemetry.emit("refresh_failed", run=self._run_count, reason=reason)
                if not self._pending:
                    break
                self._pending = False
                reason = "coalesced"
        finally:
            self._state = "idle"

    async def _run_pipeline(self, reason: RefreshReason) -> None:
        self._run_count += 1
        run_id = self._run_count
        self._telemetry.emit("refresh_started", run=run_id, reason=reason)
        modules_ok, achievements_ok = await asyncio.gather(
            self._refresh_modules(),
            self._refresh_achievements(),
        )
        self._last_refreshed_at = datetime.now(timezone.utc)
        self._telemetry.emit(
            "refresh_completed",
            run=run_id,
            reason=reason,
            modules_ok=modules_ok,
            achievements_ok=achievements_ok,
            revision=self._store.snapshot().revision,
        )

    async def _refresh_modules(self) -> bool:
        result = await self._fetcher.fetch_modules()
        if not result.ok:
            # Keep the last-known-good modules; the builder falls back if there are none.
            logger.warning("Module refresh failed, keeping previous snapshot: %s", result.error)
            return False

        modules = reconcile(result, self._allowed)
        if is_fallback_required(modules):
            empty = EmptyResultError("No eligible modules after filtering.")
            logger.info("%s Default lessons will be shown.", empty)
            self._telemetry.emit(
                "fallback_triggered",
                resource="modules",
                fetched_count=len(result.value or []),
                error_kind=empty.kind,
            )
        self._store.replace(modules)
        return True

    async def _refresh_achievements(self) -> bool:
        catalogue = await self._fetcher.fetch_achievements()
        if not catalogue.ok:
            logger.warning("Achievement refresh failed, showing none: %s", catalogue.error)
            self._store.replace_achievements([], set())
            return False

        achievements = catalogue.value or []
        earned: set[str] = set()
        if self._user_id:
            unlocks = await self._fetcher.fetch_user_achievements(self._user_id)
            if unlocks.ok:
                earned = set(unlocks.value or set())
            else:
                logger.warning("Earned achievements unavailable for user_id=%s: %s", self._user_id, unlocks.error)
        self._store.replace_achievements(achievements, earned)
        return True


__all__ = ["RefreshReason", "RefreshScheduler", "RefreshState"]
