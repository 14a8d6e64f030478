"""Language provider capability interface."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from practice_engine.models.language import (
    CommonMistake,
    DifficultyAdjustment,
    Distractor,
    DistractorOptions,
    GrammarRules,
    LanguageSpecificData,
    PerformanceData,
    WeakAreas,
    WordAttempt,
)
from practice_engine.models.mistakes import MistakeType
from practice_engine.models.vocabulary import VocabularyWord

# Attributes every provider must expose.
REQUIRED_PROPERTIES: tuple[str, ...] = (
    "language_code",
    "language_name",
    "grammar_rules",
)

# Methods every provider must implement before it may be registered.
REQUIRED_CAPABILITIES: tuple[str, ...] = (
    "generate_distractors",
    "validate_word",
    "calculate_complexity",
    "analyze_mistake",
    "get_common_mistakes",
    "adapt_difficulty",
    "identify_weak_areas",
    "get_language_specific_data",
    "generate_phonetic_distractors",
    "generate_visual_distractors",
    "generate_semantic_distractors",
    "generate_grammatical_distractors",
)


@runtime_checkable
class LanguageProvider(Protocol):
    """Per-language strategy for distractors, validation and mistake analysis."""

    language_code: str
    language_name: str
    grammar_rules: GrammarRules

    def generate_distractors(
        self,
        word: VocabularyWord,
        options: DistractorOptions,
        vocabulary: Sequence[VocabularyWord] = (),
    ) -> list[Distractor]: ...

    def generate_phonetic_distractors(self, word: VocabularyWord, count: int) -> list[str]: ...

    def generate_visual_distractors(self, word: VocabularyWord, count: int) -> list[str]: ...

    def generate_semantic_distractors(
        self,
        word: VocabularyWord,
        count: int,
        vocabulary: Sequence[VocabularyWord],
    ) -> list[str]: ...

    def generate_grammatical_distractors(self, word: VocabularyWord, count: int) -> list[str]: ...

    def validate_word(self, word: str) -> list[str]: ...

    def calculate_complexity(self, word: VocabularyWord) -> float: ...

    def analyze_mistake(self, target: VocabularyWord, answer: str) -> list[MistakeType]: ...

    def get_common_mistakes(self, word: VocabularyWord) -> list[CommonMistake]: ...

    def adapt_difficulty(
        self,
        word: VocabularyWord,
        performance: PerformanceData,
        history: Sequence[PerformanceData] | None = None,
    ) -> DifficultyAdjustment: ...

    def identify_weak_areas(
        self, student_id: str, attempts: Sequence[WordAttempt]
    ) -> WeakAreas: ...

    def get_language_specific_data(self, word: VocabularyWord) -> LanguageSpecificData: ...
