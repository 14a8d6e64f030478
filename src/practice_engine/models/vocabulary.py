"""Vocabulary content and per-learner progress models."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VocabularyCategory(StrEnum):
    """Fixed content categories."""

    ANIMALS = "animals"
    COLORS = "colors"
    NUMBERS = "numbers"
    FAMILY = "family"
    OBJECTS = "objects"
    FOOD = "food"
    CLOTHING = "clothing"
    BODY_PARTS = "body_parts"
    WEATHER = "weather"
    TIME = "time"
    PLACES = "places"
    ACTIONS = "actions"


class DifficultyLevel(StrEnum):
    """Ordered difficulty tiers."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    def raised(self) -> "DifficultyLevel":
        """One tier harder, clamped at advanced."""
        return _DIFFICULTY_ORDER[min(self.rank + 1, len(_DIFFICULTY_ORDER) - 1)]

    def lowered(self) -> "DifficultyLevel":
        """One tier easier, clamped at beginner."""
        return _DIFFICULTY_ORDER[max(self.rank - 1, 0)]


_DIFFICULTY_ORDER = [
    DifficultyLevel.BEGINNER,
    DifficultyLevel.INTERMEDIATE,
    DifficultyLevel.ADVANCED,
]


class MasteryLevel(StrEnum):
    """Mastery tiers, lowest first."""

    NOT_LEARNED = "not_learned"
    LEARNING = "learning"
    FAMILIAR = "familiar"
    MASTERED = "mastered"

    @property
    def rank(self) -> int:
        return _MASTERY_ORDER.index(self)


_MASTERY_ORDER = [
    MasteryLevel.NOT_LEARNED,
    MasteryLevel.LEARNING,
    MasteryLevel.FAMILIAR,
    MasteryLevel.MASTERED,
]


class ExerciseType(StrEnum):
    """Vocabulary exercise formats."""

    MULTIPLE_CHOICE = "multiple_choice"
    FILL_BLANK = "fill_blank"
    SPELLING = "spelling"
    TRANSLATION = "translation"
    TYPING = "typing"


class ExampleSentence(BaseModel):
    """An example sentence with its translation."""

    model_config = ConfigDict(frozen=True)

    sentence: str
    translation: str


class VocabularyWord(BaseModel):
    """Immutable vocabulary content record."""

    model_config = ConfigDict(frozen=True)

    id: str
    word: str
    translation: str
    language: str = "de"
    category: VocabularyCategory
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    frequency: int = Field(default=1, ge=1)
    tags: tuple[str, ...] = ()
    examples: tuple[ExampleSentence, ...] = ()
    language_data: dict[str, Any] | None = None


class VocabularyProgress(BaseModel):
    """Per-(learner, word) progress including SM-2 state."""

    student_id: str
    word_id: str
    mastery_level: MasteryLevel = MasteryLevel.NOT_LEARNED
    correct_attempts: int = Field(default=0, ge=0)
    total_attempts: int = Field(default=0, ge=0)
    last_seen: datetime | None = None
    next_review: datetime | None = None
    streak_count: int = Field(default=0, ge=0)
    interval: int = Field(default=1, ge=1)
    ease_factor: float = Field(default=2.5, ge=1.3, le=2.5)
    repetitions: int = Field(default=0, ge=0)
    lapse_count: int = Field(default=0, ge=0)
    is_archived: bool = False

    @property
    def accuracy(self) -> float:
        """Correct/total ratio (0.0 when never attempted)."""
        if self.total_attempts == 0:
            return 0.0
        return self.correct_attempts / self.total_attempts


class VocabularyAttempt(BaseModel):
    """A single answered vocabulary exercise."""

    word_id: str
    exercise_type: ExerciseType = ExerciseType.MULTIPLE_CHOICE
    is_correct: bool
    response_time_ms: float = Field(default=0.0, ge=0)
    hints_used: int = Field(default=0, ge=0)
    attempted_at: datetime = Field(default_factory=datetime.now)
    student_answer: str | None = None
