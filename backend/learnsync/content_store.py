"""Process-local store for the last-known-good dashboard content."""

from __future__ import annotations

from dataclasses import dataclass, field, replace as dataclass_replace
from datetime import datetime, timezone
from typing import FrozenSet, Iterable, Optional, Tuple

from .models import Achievement, Module


@dataclass(frozen=True)
class ContentSnapshot:
    modules: Tuple[Module, ...] = ()
    achievements: Tuple[Achievement, ...] = ()
    earned_ids: FrozenSet[str] = field(default_factory=frozenset)
    modules_updated_at: Optional[datetime] = None
    achievements_updated_at: Optional[datetime] = None
    revision: int = 0


class ContentStore:
    """Holds one immutable :class:`ContentSnapshot` and swaps it wholesale.

    Each write builds a new snapshot and publishes it with a single assignment,
    so readers see either the previous snapshot or the new one in full. Domain
    entities are frozen and collections are tuples/frozensets, which keeps
    committed state read-only for callers.
    """

    def __init__(self) -> None:
        self._snapshot = ContentSnapshot()

    def snapshot(self) -> ContentSnapshot:
        return self._snapshot

    def current(self) -> Tuple[Module, ...]:
        return self._snapshot.modules

    def current_achievements(self) -> Tuple[Tuple[Achievement, ...], FrozenSet[str]]:
        snapshot = self._snapshot
        return snapshot.achievements, snapshot.earned_ids

    def replace(self, modules: Iterable[Module]) -> ContentSnapshot:
        previous = self._snapshot
        updated = dataclass_replace(
            previous,
            modules=tuple(modules),
            modules_updated_at=datetime.now(timezone.utc),
            revision=previous.revision + 1,
        )
        self._snapshot = updated
        return updated

    def replace_achievements(
        self,
        achievements: Iterable[Achievement],
        earned_ids: Iterable[str],
    ) -> ContentSnapshot:
        previous = self._snapshot
        updated = dataclass_replace(
            previous,
            achievements=tuple(achievements),
            earned_ids=frozenset(earned_ids),
            achievements_updated_at=datetime.now(timezone.utc),
            revision=previous.revision + 1,
        )
        self._snapshot = updated
        return updated

    def clear(self) -> None:
        self._snapshot = ContentSnapshot()


__all__ = ["ContentSnapshot", "ContentStore"]
