"""View model derivation tests."""

from __future__ import annotations

from typing import Optional

import pytest

from learnsync.models import Achievement, Module, ProgressSummary, UserProgress
from learnsync.view_models import (
    DEFAULT_LEARNING_PATH,
    LEARNING_PATH_PALETTE,
    LESSON_PALETTE,
    UNEARNED_TINT,
    build_achievement_summary,
    build_achievement_tiles,
    build_learning_path,
    build_lesson_cards,
    build_stats_header,
    clamp_progress,
    is_module_completed,
)


def _module(
    module_id: str,
    title: str,
    *,
    percentage: Optional[float] = None,
    difficulty: Optional[str] = None,
    category: str = "math",
) -> Module:
    progress = UserProgress(percentage=percentage) if percentage is not None else None
    return Module(id=module_id, title=title, category=category, difficulty=difficulty, user_progress=progress)


def _achievement(achievement_id: str, symbol: str = "🏆") -> Achievement:
    return Achievement(
        id=achievement_id,
        name=f"Badge {achievement_id}",
        description="Earned by practising.",
        symbol=symbol,
        color="#ffd700",
    )


def test_empty_collection_uses_default_lessons() -> None:
    cards = build_lesson_cards([])

    assert [(card.title, card.progress, card.difficulty) for card in cards] == [
        ("Grammar Basics", 0, "Easy"),
        ("Vocabulary Builder", 0, "Medium"),
        ("Reading Comprehension", 0, "Hard"),
    ]
    assert [card.color for card in cards] == ["#4169e1", "#4ecdc4", "#2ed573"]


def test_lesson_cards_limit_order_and_palette() -> None:
    modules = [_module(f"m{i}", f"Lesson {i}") for i in range(10)]

    cards = build_lesson_cards(modules)

    assert len(cards) == 8
    assert [card.id for card in cards] == [f"m{i}" for i in range(8)]
    assert [card.color for card in cards] == list(LESSON_PALETTE)
    assert len(build_lesson_cards(modules, limit=3)) == 3


def test_lesson_card_defaults_and_rounding() -> None:
    modules = [
        _module("m1", "Budgeting", percentage=42.5, difficulty="Hard"),
        _module("m2", "Prompting"),
        _module("m3", "Fractions", percentage=66.4, difficulty="medium"),
    ]

    cards = build_lesson_cards(modules)

    assert (cards[0].progress, cards[0].difficulty) == (43, "Hard")
    assert (cards[1].progress, cards[1].difficulty) == (0, "Easy")
    assert (cards[2].progress, cards[2].difficulty) == (66, "Medium")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(-5, 0), (150, 100), (0, 0), (100, 100), (99.5, 100), (None, 0), (float("nan"), 0), (float("inf"), 100)],
)
def test_progress_is_clamped(raw: Optional[float], expected: int) -> None:
    assert clamp_progress(raw) == expected


def test_out_of_range_progress_on_cards() -> None:
    cards = build_lesson_cards([_module("m1", "Low", percentage=-5), _module("m2", "High", percentage=150)])
    assert [card.progress for card in cards] == [0, 100]


def test_lesson_cards_are_idempotent() -> None:
    modules = (_module("m1", "Intro", percentage=12.2), _module("m2", "Next", difficulty="Hard"))
    assert build_lesson_cards(modules) == build_lesson_cards(modules)


def test_learning_path_steps_and_completion_threshold() -> None:
    modules = [
        _module("m1", "Saving", percentage=81),
        _module("m2", "Spending", percentage=80),
        _module("m3", "Investing"),
        _module("m4", "Giving", percentage=100),
        _module("m5", "Earning", percentage=10),
        _module("m6", "Extra", percentage=95),
    ]

    steps = build_learning_path(modules)

    assert [step.step for step in steps] == [1, 2, 3, 4, 5]
    assert [step.completed for step in steps] == [True, False, False, True, False]
    assert [step.color for step in steps] == list(LEARNING_PATH_PALETTE)
    assert is_module_completed(modules[5]) is True


def test_learning_path_falls_back_when_empty() -> None:
    steps = build_learning_path([])

    assert steps == list(DEFAULT_LEARNING_PATH)
    assert [step.title for step in steps][:2] == ["Alphabet & Sounds", "Basic Words"]
    assert [step.completed for step in steps] == [True, True, False, False, False]


def test_achievement_tiles_keep_server_order() -> None:
    achievements = [
        _achievement("a1"),
        _achievement("a2", symbol="https://cdn.example.com/badge.png"),
        _achievement("a3"),
        _achievement("a4"),
    ]

    tiles = build_achievement_tiles(achievements, {"a2", "a4"})

    assert [tile.id for tile in tiles] == ["a1", "a2", "a3"]
    assert [tile.earned for tile in tiles] == [False, True, False]
    assert [tile.dimmed for tile in tiles] == [True, False, True]
    assert tiles[0].color == UNEARNED_TINT
    assert tiles[1].color == "#ffd700"
    assert tiles[1].symbol_kind == "image"
    assert tiles[0].symbol_kind == "glyph"


def test_earned_status_tracks_the_given_ids() -> None:
    achievements = [_achievement("a1")]

    assert build_achievement_tiles(achievements, {"a1"})[0].earned is True
    assert build_achievement_tiles(achievements, set())[0].earned is False


def test_achievement_summary_counts_known_ids() -> None:
    achievements = [_achievement("a1"), _achievement("a2"), _achievement("a3")]

    summary = build_achievement_summary(achievements, {"a1", "a3", "retired-badge"})

    assert (summary.earned_count, summary.total_count) == (2, 3)


def test_stats_header_defaults_to_zero() -> None:
    assert build_stats_header(None).model_dump() == {"streak": 0, "points": 0, "completed_count": 0}
    header = build_stats_header(ProgressSummary(streak=4, points=85, completed_count=1))
    assert (header.streak, header.points, header.completed_count) == (4, 85, 1)
