"""Domain entities shared by the fetcher, reconciler, store and view builders."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Difficulty = Literal["Easy", "Medium", "Hard"]
DIFFICULTY_LEVELS: tuple[Difficulty, ...] = ("Easy", "Medium", "Hard")
DEFAULT_DIFFICULTY: Difficulty = "Easy"


def normalize_difficulty(value: Any) -> Optional[Difficulty]:
    """Map a raw difficulty label onto the known levels; unknown labels become ``None``."""
    if not isinstance(value, str):
        return None
    candidate = value.strip().lower()
    for level in DIFFICULTY_LEVELS:
        if level.lower() == candidate:
            return level
    return None


class Topic(BaseModel):
    """Lesson topic inside a module. Unknown server keys are preserved."""

    model_config = ConfigDict(extra="allow", frozen=True)

    topic_id: Optional[str] = None
    title: Optional[str] = None


class UserProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Raw server value; clamping happens when views are built.
    percentage: Optional[float] = None


class Module(BaseModel):
    """Remote learning unit with a category, topics and optional per-user progress."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    category: str
    topics: List[Topic] = Field(default_factory=list)
    difficulty: Optional[Difficulty] = None
    user_progress: Optional[UserProgress] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def coerce_difficulty(cls, value: Any) -> Optional[Difficulty]:
        return normalize_difficulty(value)

    @property
    def progress_percentage(self) -> Optional[float]:
        if self.user_progress is None:
            return None
        return self.user_progress.percentage


class Achievement(BaseModel):
    """Achievement catalogue entry. Whether a user earned it is never stored here."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    description: str = ""
    symbol: str = ""
    color: str = ""


class ProgressSummary(BaseModel):
    """Aggregate counters owned by the progress subsystem."""

    model_config = ConfigDict(frozen=True)

    streak: int = Field(default=0, ge=0)
    points: int = Field(default=0, ge=0)
    completed_count: int = Field(default=0, ge=0)


__all__ = [
    "Achievement",
    "DEFAULT_DIFFICULTY",
    "DIFFICULTY_LEVELS",
    "Difficulty",
    "Module",
    "ProgressSummary",
    "Topic",
    "UserProgress",
    "normalize_difficulty",
]
