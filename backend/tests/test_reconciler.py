"""Reconciliation filtering tests."""

from __future__ import annotations

from learnsync.content_fetcher import FetchResult
from learnsync.errors import NetworkError, PayloadError
from learnsync.models import Module
from learnsync.reconciler import ALLOWED_CATEGORIES, is_fallback_required, reconcile


def _module(module_id: str, category: str, title: str | None = None) -> Module:
    return Module(id=module_id, title=title or f"Module {module_id}", category=category)


def test_failed_fetch_adopts_nothing() -> None:
    assert reconcile(FetchResult.failure(NetworkError("offline"))) == []
    assert reconcile(FetchResult.failure(PayloadError("success=false"))) == []


def test_only_allowed_categories_survive_in_server_order() -> None:
    fetched = [
        _module("m1", "math"),
        _module("m2", "history"),
        _module("m3", "ai"),
        _module("m4", "Finance"),
        _module("m5", "soft-skills"),
        _module("m6", "brainstorming"),
        _module("m7", "finance"),
    ]

    reconciled = reconcile(FetchResult.success(fetched))

    assert [module.id for module in reconciled] == ["m1", "m3", "m5", "m6", "m7"]
    assert {module.category for module in reconciled} <= ALLOWED_CATEGORIES


def test_category_subset_holds_for_any_outcome() -> None:
    outcomes = [
        FetchResult.success([]),
        FetchResult.success([_module("x", "art"), _module("y", "music")]),
        FetchResult.success([_module(str(i), category) for i, category in enumerate(sorted(ALLOWED_CATEGORIES))]),
        FetchResult.failure(NetworkError("timeout")),
    ]
    for outcome in outcomes:
        assert {module.category for module in reconcile(outcome)} <= ALLOWED_CATEGORIES


def test_duplicate_ids_keep_first_occurrence() -> None:
    fetched = [
        _module("m1", "math", "First"),
        _module("m2", "ai"),
        _module("m1", "finance", "Second"),
    ]

    reconciled = reconcile(FetchResult.success(fetched))

    assert [module.id for module in reconciled] == ["m1", "m2"]
    assert reconciled[0].title == "First"


def test_custom_allow_list_and_fallback_signal() -> None:
    fetched = [_module("m1", "math"), _module("m2", "ai")]

    only_ai = reconcile(FetchResult.success(fetched), {"ai"})
    assert [module.id for module in only_ai] == ["m2"]
    assert is_fallback_required(only_ai) is False

    nothing = reconcile(FetchResult.success(fetched), set())
    assert nothing == []
    assert is_fallback_required(nothing) is True
