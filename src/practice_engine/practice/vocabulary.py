"""Vocabulary practice flow.

Wires the provider registry, mistake analyzer and scheduler together: builds
exercises for a word and turns an answer into mistake records, a scheduled
review and XP.
"""

import random
from collections.abc import Sequence
from datetime import datetime

import structlog
from pydantic import BaseModel, Field

from practice_engine.analysis.mistakes import MistakePatternAnalyzer
from practice_engine.config import Settings, get_settings
from practice_engine.models.language import (
    DifficultyAdjustment,
    Distractor,
    DistractorOptions,
    DistractorType,
    PerformanceData,
)
from practice_engine.models.mistakes import MistakeRecord, MistakeType
from practice_engine.models.vocabulary import (
    DifficultyLevel,
    ExerciseType,
    MasteryLevel,
    VocabularyAttempt,
    VocabularyProgress,
    VocabularyWord,
)
from practice_engine.providers import heuristics
from practice_engine.providers.registry import ProviderRegistry, create_default_registry
from practice_engine.scheduling.spaced_repetition import (
    ReviewUpdate,
    SchedulingOptions,
    SpacedRepetitionScheduler,
)
from practice_engine.utils import round_half_up

logger = structlog.get_logger()

BASE_XP = 10
DIFFICULTY_XP_MULTIPLIER: dict[DifficultyLevel, float] = {
    DifficultyLevel.BEGINNER: 1.0,
    DifficultyLevel.INTERMEDIATE: 1.5,
    DifficultyLevel.ADVANCED: 2.0,
}
MASTERY_XP_BONUS: dict[MasteryLevel, float] = {
    MasteryLevel.MASTERED: 1.5,
    MasteryLevel.FAMILIAR: 1.2,
}
MISTAKE_EASE_WEIGHT = 1.2


class MultipleChoiceExercise(BaseModel):
    word_id: str
    prompt: str
    correct_answer: str
    options: list[str]
    distractors: list[Distractor] = Field(default_factory=list)
    language: str
    used_fallback: bool = False


class AttemptOutcome(BaseModel):
    """Everything produced by one answered exercise."""

    attempt: VocabularyAttempt
    quality: int
    mistake_types: list[MistakeType] = Field(default_factory=list)
    mistakes: list[MistakeRecord] = Field(default_factory=list)
    complexity_weight: float = 1.0
    review: ReviewUpdate
    xp_earned: int = 0
    adjustment: DifficultyAdjustment

    @property
    def progress(self) -> VocabularyProgress:
        return self.review.progress

    @property
    def is_correct(self) -> bool:
        return self.attempt.is_correct


def time_spent_multiplier(response_time_ms: float, expected_time_ms: float) -> float:
    """Slow answers stretch the next interval a little, fast ones shrink it."""
    speed_ratio = response_time_ms / expected_time_ms
    if speed_ratio > 1.5:
        return 1.1
    if speed_ratio < 0.5:
        return 0.9
    return 1.0


class VocabularyTrainer:
    """Builds vocabulary exercises and processes answers.

    Args:
        registry: Provider lookup; a registry with the German provider by default.
        analyzer: Mistake classifier.
        scheduler: SM-2 scheduler.
        settings: Language and timing defaults.
        rng: Random source for option order.
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        analyzer: MistakePatternAnalyzer | None = None,
        scheduler: SpacedRepetitionScheduler | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or create_default_registry(self.settings)
        self.analyzer = analyzer or MistakePatternAnalyzer()
        self.scheduler = scheduler or SpacedRepetitionScheduler(self.settings)
        self.rng = rng or random.Random()

    def build_multiple_choice(
        self,
        word: VocabularyWord,
        vocabulary: Sequence[VocabularyWord] = (),
        count: int = 3,
        types: Sequence[DistractorType] | None = None,
        exclude_words: Sequence[str] = (),
    ) -> MultipleChoiceExercise:
        """Correct answer plus distractors in random order."""
        resolution = self.registry.get_with_fallback(word.language)
        options = DistractorOptions(
            count=count,
            difficulty=word.difficulty,
            exclude_words=list(exclude_words),
            category=word.category,
        )
        if types:
            options.types = list(types)

        distractors = resolution.provider.generate_distractors(word, options, vocabulary)
        choices = heuristics.shuffle([word.word, *(d.word for d in distractors)], self.rng)
        return MultipleChoiceExercise(
            word_id=word.id,
            prompt=f'Which word means "{word.translation}"?',
            correct_answer=word.word,
            options=choices,
            distractors=distractors,
            language=resolution.resolved_code,
            used_fallback=resolution.used_fallback,
        )

    @staticmethod
    def fill_blank_prompt(word: VocabularyWord) -> str:
        if word.examples:
            return word.examples[0].sentence.replace(word.word, "_____")
        return "Das ist ein _____."

    @staticmethod
    def spelling_prompt(word: VocabularyWord) -> str:
        return f"How do you spell: {word.translation}?"

    def record_attempt(
        self,
        progress: VocabularyProgress,
        word: VocabularyWord,
        answer: str,
        response_time_ms: float,
        hints_used: int = 0,
        exercise_type: ExerciseType = ExerciseType.MULTIPLE_CHOICE,
        expected_time_ms: float | None = None,
        correct_answer: str | None = None,
        history: Sequence[PerformanceData] | None = None,
        now: datetime | None = None,
    ) -> AttemptOutcome:
        """Grade an answer and schedule the word's next review.

        Wrong answers are classified and logged as one ``MistakeRecord`` per
        mistake kind; the kinds also shorten the next interval through the
        complexity weight.

        Args:
            progress: The learner's current record for ``word``.
            word: The vocabulary item practiced.
            answer: What the learner entered or picked.
            response_time_ms: Time to answer.
            hints_used: Hints revealed before answering.
            exercise_type: Exercise format.
            expected_time_ms: Reference answer time; defaults to settings.
            correct_answer: Expected text when it differs from ``word.word``.
            history: Recent performance on this word, for difficulty adaptation.
            now: Reference time.

        Returns:
            The attempt, quality, mistakes, updated progress, XP and a
            difficulty recommendation.
        """
        now = now or datetime.now()
        expected = expected_time_ms or self.settings.expected_response_time_ms
        target = correct_answer if correct_answer is not None else word.word
        is_correct = answer.strip() == target.strip()

        attempt = VocabularyAttempt(
            word_id=word.id,
            exercise_type=exercise_type,
            is_correct=is_correct,
            response_time_ms=response_time_ms,
            hints_used=hints_used,
            attempted_at=now,
            student_answer=answer,
        )

        mistake_types: list[MistakeType] = []
        complexity_weight = 1.0
        records: list[MistakeRecord] = []
        if not is_correct:
            mistake_types = self.analyzer.analyze_mistake(word, target, answer, word.language)
            complexity_weight = self.analyzer.calculate_complexity_weight(
                mistake_types, word.language
            )
            records = [
                MistakeRecord(
                    type=kind,
                    word_id=word.id,
                    word=word.word,
                    correct_answer=target,
                    student_answer=answer,
                    timestamp=now,
                    exercise_type=exercise_type,
                    response_time_ms=response_time_ms,
                    hints_used=hints_used,
                    severity=self.analyzer.severity_for(kind, word.language),
                    category=word.category,
                )
                for kind in mistake_types
            ]

        quality = self.scheduler.response_to_quality(
            is_correct, hints_used, response_time_ms, expected
        )
        options = SchedulingOptions(
            language_complexity=complexity_weight,
            mistake_type_weight=MISTAKE_EASE_WEIGHT if mistake_types else 1.0,
            time_spent_multiplier=time_spent_multiplier(response_time_ms, expected),
        )
        review = self.scheduler.apply_review(progress, quality, options, now)

        xp = 0
        if is_correct:
            updated = review.progress
            xp = round_half_up(
                BASE_XP
                * DIFFICULTY_XP_MULTIPLIER[word.difficulty]
                * MASTERY_XP_BONUS.get(updated.mastery_level, 1.0)
                * self.scheduler.calculate_streak_bonus(updated.streak_count)
            )

        performance = PerformanceData(
            correct=is_correct,
            response_time_ms=response_time_ms,
            hints_used=hints_used,
            mistake_type=mistake_types[0] if mistake_types else None,
            student_answer=answer,
        )
        provider = self.registry.get_with_fallback(word.language).provider
        adjustment = provider.adapt_difficulty(word, performance, history)

        logger.info(
            "vocabulary_attempt_recorded",
            student_id=progress.student_id,
            word_id=word.id,
            correct=is_correct,
            quality=quality,
            mistakes=[m.value for m in mistake_types],
            xp=xp,
        )
        return AttemptOutcome(
            attempt=attempt,
            quality=quality,
            mistake_types=mistake_types,
            mistakes=records,
            complexity_weight=complexity_weight,
            review=review,
            xp_earned=xp,
            adjustment=adjustment,
        )

    def words_for_review(
        self,
        records: Sequence[VocabularyProgress],
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[VocabularyProgress]:
        return self.scheduler.get_words_for_review(records, limit, now)
