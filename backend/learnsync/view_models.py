"""Presentation-ready view models derived from the committed content snapshot."""

from __future__ import annotations

import math
from typing import AbstractSet, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .models import DEFAULT_DIFFICULTY, Achievement, Difficulty, Module, ProgressSummary

DEFAULT_LESSON_LIMIT = 8
DEFAULT_LEARNING_PATH_LIMIT = 5
DEFAULT_ACHIEVEMENT_PREVIEW = 3
COMPLETION_THRESHOLD = 80.0

LESSON_PALETTE = (
    "#4169e1",
    "#4ecdc4",
    "#2ed573",
    "#ff6b6b",
    "#4ecdc4",
    "#45b7d1",
    "#96ceb4",
    "#feca57",
)
LEARNING_PATH_PALETTE = ("#4ecdc4", "#45b7d1", "#ff6b6b", "#9b59b6", "#f39c12")
UNEARNED_TINT = "#ddd"


class LessonCardView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    progress: int = Field(ge=0, le=100)
    difficulty: Difficulty
    color: str


class LearningStepView(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: int = Field(ge=1)
    title: str
    completed: bool
    color: str


class AchievementTileView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    symbol: str
    symbol_kind: Literal["glyph", "image"]
    color: str
    earned: bool
    dimmed: bool


class AchievementSummaryView(BaseModel):
    model_config = ConfigDict(frozen=True)

    earned_count: int = Field(ge=0)
    total_count: int = Field(ge=0)


class StatsHeaderView(BaseModel):
    model_config = ConfigDict(frozen=True)

    streak: int = Field(ge=0)
    points: int = Field(ge=0)
    completed_count: int = Field(ge=0)


DEFAULT_LESSON_CARDS: tuple[LessonCardView, ...] = (
    LessonCardView(id="1", title="Grammar Basics", progress=0, difficulty="Easy", color="#4169e1"),
    LessonCardView(id="2", title="Vocabulary Builder", progress=0, difficulty="Medium", color="#4ecdc4"),
    LessonCardView(id="3", title="Reading Comprehension", progress=0, difficulty="Hard", color="#2ed573"),
)

DEFAULT_LEARNING_PATH: tuple[LearningStepView, ...] = (
    LearningStepView(step=1, title="Alphabet & Sounds", completed=True, color="#4ecdc4"),
    LearningStepView(step=2, title="Basic Words", completed=True, color="#45b7d1"),
    LearningStepView(step=3, title="Simple Sentences", completed=False, color="#ff6b6b"),
    LearningStepView(step=4, title="Reading Stories", completed=False, color="#9b59b6"),
    LearningStepView(step=5, title="Writing Practice", completed=False, color="#f39c12"),
)


def clamp_progress(percentage: Optional[float]) -> int:
    """Clamp a raw percentage into [0, 100] and round half up."""
    if percentage is None or math.isnan(percentage):
        return 0
    bounded = min(max(float(percentage), 0.0), 100.0)
    return int(math.floor(bounded + 0.5))


def is_module_completed(module: Module) -> bool:
    """Canonical completion rule: progress strictly above the completion threshold."""
    percentage = module.progress_percentage
    if percentage is None or math.isnan(percentage):
        return False
    return percentage > COMPLETION_THRESHOLD


def build_lesson_cards(modules: Sequence[Module], limit: int = DEFAULT_LESSON_LIMIT) -> List[LessonCardView]:
    if not modules:
        return list(DEFAULT_LESSON_CARDS)
    cards: List[LessonCardView] = []
    for index, module in enumerate(modules[: max(limit, 0)]):
        cards.append(
            LessonCardView(
                id=module.id,
                title=module.title,
                progress=clamp_progress(module.progress_percentage),
                difficulty=module.difficulty or DEFAULT_DIFFICULTY,
                color=LESSON_PALETTE[index % len(LESSON_PALETTE)],
            )
        )
    return cards


def build_learning_path(
    modules: Sequence[Module],
    limit: int = DEFAULT_LEARNING_PATH_LIMIT,
) -> List[LearningStepView]:
    if not modules:
        return list(DEFAULT_LEARNING_PATH)
    return [
        LearningStepView(
            step=index + 1,
            title=module.title,
            completed=is_module_completed(module),
            color=LEARNING_PATH_PALETTE[index % len(LEARNING_PATH_PALETTE)],
        )
        for index, module in enumerate(modules[: max(limit, 0)])
    ]


def _symbol_kind(symbol: str) -> Literal["glyph", "image"]:
    return "image" if symbol.startswith("http") else "glyph"


def build_achievement_tiles(
    achievements: Sequence[Achievement],
    earned_ids: AbstractSet[str],
    preview_count: int = DEFAULT_ACHIEVEMENT_PREVIEW,
) -> List[AchievementTileView]:
    """Preview tiles in server order; earned status is resolved here, never stored."""
    tiles: List[AchievementTileView] = []
    for achievement in achievements[: max(preview_count, 0)]:
        earned = achievement.id in earned_ids
        tiles.append(
            AchievementTileView(
                id=achievement.id,
                name=achievement.name,
                description=achievement.description,
                symbol=achievement.symbol,
                symbol_kind=_symbol_kind(achievement.symbol),
                color=achievement.color if earned else UNEARNED_TINT,
                earned=earned,
                dimmed=not earned,
            )
        )
    return tiles


def build_achievement_summary(
    achievements: Sequence[Achievement],
    earned_ids: AbstractSet[str],
) -> AchievementSummaryView:
    earned = sum(1 for achievement in achievements if achievement.id in earned_ids)
    return AchievementSummaryView(earned_count=earned, total_count=len(achievements))


def build_stats_header(summary: Optional[ProgressSummary]) -> StatsHeaderView:
    summary = summary or ProgressSummary()
    return StatsHeaderView(
        streak=summary.streak,
        points=summary.points,
        completed_count=summary.completed_count,
    )


__all__ = [
    "AchievementSummaryView",
    "AchievementTileView",
    "COMPLETION_THRESHOLD",
    "DEFAULT_LEARNING_PATH",
    "DEFAULT_LESSON_CARDS",
    "LEARNING_PATH_PALETTE",
    "LESSON_PALETTE",
    "LearningStepView",
    "LessonCardView",
    "StatsHeaderView",
    "UNEARNED_TINT",
    "build_achievement_summary",
    "build_achievement_tiles",
    "build_learning_path",
    "build_lesson_cards",
    "build_stats_header",
    "clamp_progress",
    "is_module_completed",
]
