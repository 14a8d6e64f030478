"""SM-2 spaced repetition with language-complexity and mistake-weight modifiers.

Quality ratings (0-5):
    0  complete blackout
    1  incorrect, but the answer seemed familiar
    2  incorrect, but remembered once shown (hints)
    3  correct with serious difficulty
    4  correct after some hesitation
    5  perfect response
"""

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

import structlog
from pydantic import BaseModel, Field

from practice_engine.config import Settings, get_settings
from practice_engine.models.vocabulary import MasteryLevel, VocabularyProgress
from practice_engine.utils import round_half_up, start_of_day

logger = structlog.get_logger()

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5
EASE_FACTOR_BONUS = 0.1
EASE_FACTOR_PENALTY = 0.2

# (min repetitions, min ease factor), highest tier first
MASTERY_THRESHOLDS: list[tuple[MasteryLevel, int, float]] = [
    (MasteryLevel.MASTERED, 6, 2.3),
    (MasteryLevel.FAMILIAR, 3, 2.0),
    (MasteryLevel.LEARNING, 1, 0.0),
]


class SchedulingOptions(BaseModel):
    """Modifiers for one scheduling step."""

    language_complexity: float = 1.0  # 0.5-2.0, higher shrinks the ease factor
    mistake_type_weight: float = 1.0
    time_spent_multiplier: float = 1.0
    minimum_interval: int | None = Field(default=None, ge=1)
    maximum_interval: int | None = Field(default=None, ge=1)


class SM2Result(BaseModel):
    interval: int
    ease_factor: float
    repetitions: int
    next_review: datetime
    mastery_level: MasteryLevel


class ReviewUpdate(BaseModel):
    """Progress record after a review plus what changed."""

    progress: VocabularyProgress
    result: SM2Result
    quality: int
    streak_updated: bool = False
    lapsed: bool = False


class SpacedRepetitionScheduler:
    """Computes review intervals, ease factors and mastery tiers.

    Args:
        settings: Interval bounds and review defaults. Defaults to ``get_settings()``.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def calculate_next_review(
        self,
        progress: VocabularyProgress,
        quality: int,
        options: SchedulingOptions | None = None,
        now: datetime | None = None,
    ) -> SM2Result:
        """Apply one SM-2 step.

        Args:
            progress: Current progress record (not modified).
            quality: Recall quality 0-5.
            options: Complexity, mistake and timing modifiers plus interval bounds.
            now: Reference time; the next review lands on midnight of now + interval.

        Returns:
            The new interval, ease factor, repetitions, review date and mastery tier.
        """
        options = options or SchedulingOptions()
        now = now or datetime.now()
        quality = max(0, min(5, quality))
        minimum = options.minimum_interval or self.settings.minimum_interval
        maximum = options.maximum_interval or self.settings.maximum_interval

        ease_factor = progress.ease_factor or DEFAULT_EASE_FACTOR
        repetitions = progress.repetitions or 0
        interval = progress.interval or 1

        new_ease = ease_factor + (
            EASE_FACTOR_BONUS - (5 - quality) * (EASE_FACTOR_BONUS + EASE_FACTOR_PENALTY)
        )
        new_ease *= 2 - options.language_complexity
        new_ease *= options.mistake_type_weight
        new_ease = max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, new_ease))

        if quality < 3:
            new_repetitions = 0
            new_interval = 1
        else:
            new_repetitions = repetitions + 1
            if new_repetitions == 1:
                new_interval = 1
            elif new_repetitions == 2:
                new_interval = 6
            else:
                new_interval = round_half_up(interval * new_ease)

        new_interval = round_half_up(new_interval * options.time_spent_multiplier)
        new_interval = max(minimum, min(maximum, new_interval))

        return SM2Result(
            interval=new_interval,
            ease_factor=new_ease,
            repetitions=new_repetitions,
            next_review=start_of_day(now + timedelta(days=new_interval)),
            mastery_level=self.calculate_mastery_level(new_repetitions, new_ease),
        )

    def apply_review(
        self,
        progress: VocabularyProgress,
        quality: int,
        options: SchedulingOptions | None = None,
        now: datetime | None = None,
    ) -> ReviewUpdate:
        """Schedule the next review and return an updated copy of ``progress``.

        Counters, streak, lapse count and ``last_seen`` are updated alongside
        the SM-2 state. Mastery only drops when the recall failed.
        """
        now = now or datetime.now()
        result = self.calculate_next_review(progress, quality, options, now)
        recalled = quality >= 3

        mastery = result.mastery_level
        if recalled and mastery.rank < progress.mastery_level.rank:
            mastery = progress.mastery_level

        streak_updated = False
        if recalled:
            if progress.next_review is None:
                streak = 1
                streak_updated = True
            elif math.floor((now - progress.next_review).total_seconds() / 86400) <= 1:
                streak = progress.streak_count + 1
                streak_updated = True
            else:
                streak = 1
        else:
            streak = 0

        updated = progress.model_copy(
            update={
                "mastery_level": mastery,
                "correct_attempts": progress.correct_attempts + (1 if recalled else 0),
                "total_attempts": progress.total_attempts + 1,
                "last_seen": now,
                "next_review": result.next_review,
                "interval": result.interval,
                "ease_factor": result.ease_factor,
                "repetitions": result.repetitions,
                "lapse_count": progress.lapse_count + (0 if recalled else 1),
                "streak_count": streak,
            }
        )

        logger.info(
            "review_scheduled",
            student_id=progress.student_id,
            word_id=progress.word_id,
            quality=quality,
            interval=result.interval,
            ease_factor=round(result.ease_factor, 3),
            mastery=mastery.value,
        )
        return ReviewUpdate(
            progress=updated,
            result=result,
            quality=quality,
            streak_updated=streak_updated,
            lapsed=not recalled,
        )

    def response_to_quality(
        self,
        correct: bool,
        hints_used: int,
        response_time_ms: float,
        expected_time_ms: float | None = None,
    ) -> int:
        """Map an answer to an SM-2 quality rating.

        Incorrect: 2 with hints, else 1. Correct: 3 with more than two hints;
        4 with one hint or slower than 1.5x expected; 5 when faster than half
        the expected time without hints; otherwise 4.
        """
        expected = expected_time_ms or self.settings.expected_response_time_ms
        if not correct:
            return 2 if hints_used > 0 else 1

        speed_ratio = response_time_ms / expected
        if hints_used > 2:
            return 3
        if hints_used == 1 or speed_ratio > 1.5:
            return 4
        if speed_ratio < 0.5:
            return 5
        return 4

    @staticmethod
    def calculate_mastery_level(repetitions: int, ease_factor: float) -> MasteryLevel:
        for level, min_repetitions, min_ease in MASTERY_THRESHOLDS:
            if repetitions >= min_repetitions and ease_factor >= min_ease:
                return level
        return MasteryLevel.NOT_LEARNED

    def get_words_for_review(
        self,
        records: Sequence[VocabularyProgress],
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[VocabularyProgress]:
        """Records due today, overdue-oldest first, then never-reviewed by tier.

        Archived records are skipped.
        """
        limit = limit or self.settings.review_limit
        today = start_of_day(now or datetime.now())

        overdue = [
            r
            for r in records
            if not r.is_archived
            and r.next_review is not None
            and start_of_day(r.next_review) <= today
        ]
        never_reviewed = [r for r in records if not r.is_archived and r.next_review is None]

        overdue.sort(key=lambda r: r.next_review)
        never_reviewed.sort(key=lambda r: r.mastery_level.rank)
        return (overdue + never_reviewed)[:limit]

    def is_word_lapsed(self, progress: VocabularyProgress, now: datetime | None = None) -> bool:
        """True when more than twice the interval has passed since the due date."""
        if progress.next_review is None:
            return False
        now = now or datetime.now()
        days_overdue = math.floor((now - progress.next_review).total_seconds() / 86400)
        return days_overdue > progress.interval * 2

    @staticmethod
    def calculate_optimal_session_size(
        average_accuracy: float, average_seconds_per_word: float
    ) -> int:
        """Words per session from accuracy (0-100) and pace."""
        size = 10
        if average_accuracy > 80:
            size = 15
        elif average_accuracy < 60:
            size = 5

        if average_seconds_per_word > 10:
            size = max(5, math.floor(size * 0.7))
        elif average_seconds_per_word < 5:
            size = min(20, math.floor(size * 1.3))
        return size

    @staticmethod
    def calculate_streak_bonus(streak_count: int) -> float:
        """XP multiplier: +5% per streak step, capped at 2.0."""
        if streak_count <= 0:
            return 1.0
        return min(2.0, 1.0 + streak_count * 0.05)
