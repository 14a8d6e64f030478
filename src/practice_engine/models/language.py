"""Language provider data contracts."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from practice_engine.models.mistakes import MistakeType
from practice_engine.models.vocabulary import (
    DifficultyLevel,
    VocabularyCategory,
    VocabularyWord,
)


class DistractorType(StrEnum):
    """Kinds of plausible wrong answers."""

    PHONETIC = "phonetic"
    VISUAL = "visual"
    SEMANTIC = "semantic"
    GRAMMATICAL = "grammatical"


class Distractor(BaseModel):
    """A candidate wrong answer (ephemeral, never persisted)."""

    model_config = ConfigDict(frozen=True)

    word: str
    type: DistractorType
    reason: str
    similarity_score: float = Field(ge=0.0, le=1.0)


class DistractorOptions(BaseModel):
    """Options for distractor generation."""

    count: int = Field(default=3, ge=0)
    types: list[DistractorType] = Field(
        default_factory=lambda: [DistractorType.SEMANTIC, DistractorType.PHONETIC]
    )
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER
    exclude_words: list[str] = Field(default_factory=list)
    category: VocabularyCategory | None = None


class GrammarRule(BaseModel):
    rule: str
    examples: list[str] = Field(default_factory=list)


class GrammarRules(BaseModel):
    """Grammar facts a provider exposes about its language."""

    has_grammatical_gender: bool
    genders: list[str] = Field(default_factory=list)
    has_cases: bool
    cases: list[str] = Field(default_factory=list)
    plural_rules: list[GrammarRule] = Field(default_factory=list)
    article_rules: list[GrammarRule] = Field(default_factory=list)


class CommonMistake(BaseModel):
    mistake: str
    mistake_type: MistakeType
    frequency: int = Field(ge=1, le=10)  # how common, 1-10


class LanguageSpecificData(BaseModel):
    """Grammatical metadata inferred (or authored) for a vocabulary item."""

    language: str
    gender: str | None = None
    article: str | None = None
    plural: str | None = None
    common_mistakes: list[CommonMistake] = Field(default_factory=list)
    compound_parts: list[str] = Field(default_factory=list)
    pronunciation_hints: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class PerformanceData(BaseModel):
    """Outcome of one attempt, as seen by difficulty adaptation."""

    correct: bool
    response_time_ms: float = Field(default=0.0, ge=0)
    hints_used: int = Field(default=0, ge=0)
    mistake_type: MistakeType | None = None
    student_answer: str | None = None
    selected_distractor: Distractor | None = None


class DifficultyAdjustment(BaseModel):
    new_difficulty: DifficultyLevel
    reason: str
    confidence: float = Field(ge=0.0, le=1.0)
    suggested_distractor_types: list[DistractorType] = Field(default_factory=list)


class WordAttempt(BaseModel):
    """A vocabulary item paired with how the learner did on it."""

    word: VocabularyWord
    performance: PerformanceData


class WeakAreaPattern(BaseModel):
    type: MistakeType
    frequency: float  # share of all attempts, 0-1
    affected_categories: list[VocabularyCategory] = Field(default_factory=list)


class WeakAreas(BaseModel):
    """Per-language weak-area summary produced by a provider."""

    student_id: str
    language: str
    mistake_patterns: list[WeakAreaPattern] = Field(default_factory=list)
    difficult_categories: list[VocabularyCategory] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
