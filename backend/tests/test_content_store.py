"""ContentStore snapshot semantics."""

from __future__ import annotations

from learnsync.content_store import ContentSnapshot, ContentStore
from learnsync.models import Achievement, Module


def _module(module_id: str) -> Module:
    return Module(id=module_id, title=module_id.upper(), category="math")


def test_store_starts_empty() -> None:
    store = ContentStore()

    assert store.current() == ()
    assert store.current_achievements() == ((), frozenset())
    assert store.snapshot() == ContentSnapshot()


def test_replace_swaps_whole_snapshot() -> None:
    store = ContentStore()
    store.replace([_module("m1"), _module("m2")])
    before = store.snapshot()

    store.replace([_module("m3")])
    after = store.snapshot()

    assert [module.id for module in before.modules] == ["m1", "m2"]
    assert [module.id for module in after.modules] == ["m3"]
    assert after.revision == before.revision + 1
    assert after is not before


def test_replace_copies_the_input_collection() -> None:
    store = ContentStore()
    modules = [_module("m1")]
    store.replace(modules)

    modules.append(_module("m2"))

    assert [module.id for module in store.current()] == ["m1"]


def test_achievement_replace_keeps_modules() -> None:
    store = ContentStore()
    store.replace([_module("m1")])
    badge = Achievement(id="a1", name="Starter")

    store.replace_achievements([badge], {"a1"})

    achievements, earned = store.current_achievements()
    assert achievements == (badge,)
    assert earned == frozenset({"a1"})
    assert [module.id for module in store.current()] == ["m1"]
    assert store.snapshot().achievements_updated_at is not None


def test_clear_resets_snapshot() -> None:
    store = ContentStore()
    store.replace([_module("m1")])

    store.clear()

    assert store.current() == ()
    assert store.snapshot().revision == 0
