"""Filtering applied to freshly fetched modules before they are committed."""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set

from .content_fetcher import FetchResult
from .models import Module

logger = logging.getLogger(__name__)

ALLOWED_CATEGORIES: FrozenSet[str] = frozenset({"finance", "ai", "math", "brainstorming", "soft-skills"})


def reconcile(
    fetch_result: FetchResult[List[Module]],
    allowed_categories: Optional[Iterable[str]] = None,
) -> List[Module]:
    """Return the displayable subset of a module fetch.

    A failed fetch yields an empty list, meaning nothing should be adopted.
    Otherwise modules outside the allowed categories are dropped (exact,
    case-sensitive match), repeated ids keep their first occurrence, and server
    order is preserved. Fallback substitution is left to the caller.
    """
    if not fetch_result.ok or fetch_result.value is None:
        return []

    allowed: Set[str] = set(ALLOWED_CATEGORIES if allowed_categories is None else allowed_categories)
    seen: Set[str] = set()
    reconciled: List[Module] = []
    dropped_categories = 0
    dropped_duplicates = 0
    for module in fetch_result.value:
        if module.category not in allowed:
            dropped_categories += 1
            continue
        if module.id in seen:
            dropped_duplicates += 1
            continue
        seen.add(module.id)
        reconciled.append(module)

    if dropped_categories or dropped_duplicates:
        logger.debug(
            "Reconciled %s modules (dropped %s outside allowed categories, %s duplicates)",
            len(reconciled),
            dropped_categories,
            dropped_duplicates,
        )
    return reconciled


def is_fallback_required(modules: Sequence[Module]) -> bool:
    return len(modules) == 0


__all__ = ["ALLOWED_CATEGORIES", "is_fallback_required", "reconcile"]
