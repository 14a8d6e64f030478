"""Mistake taxonomy and aggregated pattern models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from practice_engine.models.vocabulary import ExerciseType, VocabularyCategory


class MistakeType(StrEnum):
    """Kinds of learner mistakes usable for remediation."""

    ARTICLE = "article"
    PLURAL = "plural"
    GENDER = "gender"
    CASE = "case"
    DIACRITIC = "diacritic"
    PHONETIC_CONFUSION = "phonetic_confusion"
    VISUAL_CONFUSION = "visual_confusion"
    SPELLING = "spelling"
    SEMANTIC_CONFUSION = "semantic_confusion"
    GRAMMAR = "grammar"
    TIMING = "timing"
    COMPOUND = "compound"
    CAPITALIZATION = "capitalization"


class MistakeTrend(StrEnum):
    IMPROVING = "improving"
    STABLE = "stable"
    WORSENING = "worsening"


class MistakeRecord(BaseModel):
    """Append-only log entry for one classified mistake."""

    model_config = ConfigDict(frozen=True)

    type: MistakeType
    word_id: str
    word: str
    correct_answer: str
    student_answer: str
    timestamp: datetime = Field(default_factory=datetime.now)
    exercise_type: ExerciseType = ExerciseType.MULTIPLE_CHOICE
    response_time_ms: float = Field(default=0.0, ge=0)
    hints_used: int = Field(default=0, ge=0)
    severity: float = Field(default=0.5, ge=0.0, le=1.0)
    category: VocabularyCategory | None = None


class MistakePattern(BaseModel):
    """Aggregate of all records of one mistake kind."""

    type: MistakeType
    frequency: int
    recent_frequency: int
    severity: float
    affected_words: list[str] = Field(default_factory=list)
    trend: MistakeTrend = MistakeTrend.STABLE
    recommendations: list[str] = Field(default_factory=list)


class WeakWord(BaseModel):
    word_id: str
    error_rate: float
    attempts: int
    common_mistakes: list[MistakeType] = Field(default_factory=list)


class WeakCategory(BaseModel):
    category: VocabularyCategory
    error_rate: float
    attempts: int


class MistakeSummary(BaseModel):
    """A learner's weak-area report."""

    student_id: str
    top_patterns: list[MistakePattern] = Field(default_factory=list)
    weak_words: list[WeakWord] = Field(default_factory=list)
    weak_categories: list[WeakCategory] = Field(default_factory=list)
    overall_accuracy: float = 0.0
    improvement_rate: float = 0.0
    generated_at: datetime = Field(default_factory=datetime.now)
