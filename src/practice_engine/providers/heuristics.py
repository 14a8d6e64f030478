"""Language-agnostic heuristics that concrete providers compose.

Everything here is a plain function so a provider can pick the pieces it
needs instead of inheriting a base class.
"""

import math
import random
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TypeVar

from practice_engine.models.language import (
    DifficultyAdjustment,
    Distractor,
    DistractorOptions,
    DistractorType,
    PerformanceData,
    WeakAreaPattern,
    WeakAreas,
    WordAttempt,
)
from practice_engine.models.mistakes import MistakeType
from practice_engine.models.vocabulary import (
    DifficultyLevel,
    VocabularyCategory,
    VocabularyWord,
)

T = TypeVar("T")

MAX_WORD_LENGTH = 50
FAST_RESPONSE_MS = 3000
SLOW_RESPONSE_MS = 10000
MIN_HISTORY_FOR_OVERRIDE = 3
MIN_HISTORY_FOR_CONFIDENCE = 5

DIFFICULTY_FACTORS: dict[DifficultyLevel, float] = {
    DifficultyLevel.BEGINNER: 0.1,
    DifficultyLevel.INTERMEDIATE: 0.25,
    DifficultyLevel.ADVANCED: 0.4,
}

CATEGORY_COMPLEXITY: dict[VocabularyCategory, float] = {
    VocabularyCategory.NUMBERS: 0.05,
    VocabularyCategory.COLORS: 0.1,
    VocabularyCategory.ANIMALS: 0.15,
    VocabularyCategory.FAMILY: 0.15,
    VocabularyCategory.OBJECTS: 0.2,
    VocabularyCategory.FOOD: 0.2,
    VocabularyCategory.CLOTHING: 0.2,
    VocabularyCategory.BODY_PARTS: 0.25,
    VocabularyCategory.PLACES: 0.25,
    VocabularyCategory.WEATHER: 0.25,
    VocabularyCategory.TIME: 0.3,
    VocabularyCategory.ACTIONS: 0.3,
}

_DISTRACTOR_REASONS: dict[DistractorType, str] = {
    DistractorType.PHONETIC: 'Sounds similar to "{target}"',
    DistractorType.VISUAL: 'Looks similar to "{target}"',
    DistractorType.SEMANTIC: 'Related concept to "{target}"',
    DistractorType.GRAMMATICAL: 'Common grammatical mistake for "{target}"',
}

_SUGGESTED_TYPES: dict[MistakeType, DistractorType] = {
    MistakeType.PHONETIC_CONFUSION: DistractorType.PHONETIC,
    MistakeType.DIACRITIC: DistractorType.PHONETIC,
    MistakeType.VISUAL_CONFUSION: DistractorType.VISUAL,
    MistakeType.SEMANTIC_CONFUSION: DistractorType.SEMANTIC,
    MistakeType.GRAMMAR: DistractorType.GRAMMATICAL,
    MistakeType.ARTICLE: DistractorType.GRAMMATICAL,
    MistakeType.GENDER: DistractorType.GRAMMATICAL,
    MistakeType.CASE: DistractorType.GRAMMATICAL,
    MistakeType.PLURAL: DistractorType.GRAMMATICAL,
}


# ---------------------------------------------------------------------------
# String metrics
# ---------------------------------------------------------------------------


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert/delete/substitute, unit cost)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j], current[j - 1], previous[j - 1]) + 1)
        previous = current
    return previous[-1]


def calculate_similarity(a: str, b: str) -> float:
    """Similarity in [0, 1]: ``1 - distance / longer length``."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / longest


def sounds_similar(a: str, b: str) -> bool:
    """Crude phonetic match: same first and last letter, ignoring case."""
    if not a or not b:
        return False
    return a[0].lower() == b[0].lower() and a[-1].lower() == b[-1].lower()


def looks_similar(a: str, b: str) -> bool:
    return levenshtein_distance(a, b) <= 2


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


def shuffle(items: Iterable[T], rng: random.Random) -> list[T]:
    """Fisher-Yates shuffle into a new list using the injected random source."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def unique(items: Iterable[T]) -> list[T]:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(items))


def deduplicate_distractors(distractors: Iterable[Distractor]) -> list[Distractor]:
    """Keep one distractor per surface form, preferring the highest similarity."""
    best: dict[str, Distractor] = {}
    for distractor in distractors:
        existing = best.get(distractor.word)
        if existing is None or distractor.similarity_score > existing.similarity_score:
            best[distractor.word] = distractor
    return list(best.values())


def distractor_reason(target: str, distractor_type: DistractorType) -> str:
    return _DISTRACTOR_REASONS[distractor_type].format(target=target)


def collect_distractors(
    word: VocabularyWord,
    options: DistractorOptions,
    generators: Mapping[DistractorType, Callable[[int], list[str]]],
    rng: random.Random,
) -> list[Distractor]:
    """Run the per-type generators and assemble the final distractor list.

    Each requested type gets ``ceil(count / len(types))`` candidates. The
    target word and excluded words are filtered out, duplicates keep their
    best similarity, and the survivors are shuffled and cut to ``count``.
    Fewer than ``count`` results is a valid outcome.

    Args:
        word: Target vocabulary item.
        options: Requested count, types and exclusions.
        generators: Candidate generator per distractor type, called with the quota.
        rng: Random source for the final shuffle.

    Returns:
        At most ``options.count`` distractors.
    """
    if options.count <= 0 or not options.types:
        return []

    per_type = math.ceil(options.count / len(options.types))
    excluded = set(options.exclude_words)
    candidates: list[Distractor] = []

    for distractor_type in options.types:
        generate = generators.get(distractor_type)
        if generate is None:
            continue
        for surface in generate(per_type):
            if surface == word.word or surface in excluded:
                continue
            candidates.append(
                Distractor(
                    word=surface,
                    type=distractor_type,
                    reason=distractor_reason(word.word, distractor_type),
                    similarity_score=max(0.0, min(1.0, calculate_similarity(surface, word.word))),
                )
            )

    return shuffle(deduplicate_distractors(candidates), rng)[: options.count]


# ---------------------------------------------------------------------------
# Validation, complexity, mistakes
# ---------------------------------------------------------------------------


def base_validation_errors(word: str) -> list[str]:
    errors = []
    if not word or not word.strip():
        errors.append("Word cannot be empty")
    if len(word) > MAX_WORD_LENGTH:
        errors.append(f"Word is too long (max {MAX_WORD_LENGTH} characters)")
    if any(ch.isdigit() for ch in word):
        errors.append("Word should not contain numbers")
    return errors


def category_complexity(category: VocabularyCategory) -> float:
    return CATEGORY_COMPLEXITY.get(category, 0.2)


def base_complexity(word: VocabularyWord) -> float:
    """Length, difficulty tier and category factors, capped at 1."""
    length_factor = min(len(word.word) / 20, 0.3)
    difficulty_factor = DIFFICULTY_FACTORS.get(word.difficulty, 0.25)
    complexity = length_factor + difficulty_factor + category_complexity(word.category)
    return min(complexity, 1.0)


def base_mistake_types(target: str, answer: str) -> list[MistakeType]:
    """Generic classification; never empty."""
    mistakes = []
    if sounds_similar(target, answer):
        mistakes.append(MistakeType.PHONETIC_CONFUSION)

    distance = levenshtein_distance(target, answer)
    if distance <= 2:
        mistakes.append(MistakeType.VISUAL_CONFUSION)
        mistakes.append(MistakeType.SPELLING)

    if not mistakes:
        mistakes.append(MistakeType.SEMANTIC_CONFUSION)
    return mistakes


# ---------------------------------------------------------------------------
# Adaptation
# ---------------------------------------------------------------------------


def suggest_distractor_types(performance: PerformanceData) -> list[DistractorType]:
    suggested = _SUGGESTED_TYPES.get(performance.mistake_type) if performance.mistake_type else None
    if suggested is not None:
        return [suggested]
    return [DistractorType.SEMANTIC, DistractorType.PHONETIC]


def _adjustment_reason(old: DifficultyLevel, new: DifficultyLevel) -> str:
    if new.rank > old.rank:
        return "Student performed well - increasing difficulty"
    if new.rank < old.rank:
        return "Student is struggling - reducing difficulty"
    return "Difficulty level maintained"


def adapt_difficulty(
    word: VocabularyWord,
    performance: PerformanceData,
    history: Sequence[PerformanceData] | None = None,
) -> DifficultyAdjustment:
    """Recommend the next difficulty tier from one attempt and recent history.

    A correct, fast (<3s), hint-free answer raises the tier. A wrong, slow
    (>10s) or hinted answer lowers it. With three or more history points the
    rolling accuracy decides instead (>=0.8 raise, <0.5 lower).
    """
    current = word.difficulty
    new = current

    fast = performance.response_time_ms < FAST_RESPONSE_MS
    slow = performance.response_time_ms > SLOW_RESPONSE_MS
    used_hints = performance.hints_used > 0

    if performance.correct and fast and not used_hints:
        new = current.raised()
    elif not performance.correct or slow or used_hints:
        new = current.lowered()

    if history and len(history) >= MIN_HISTORY_FOR_OVERRIDE:
        accuracy = sum(1 for p in history if p.correct) / len(history)
        if accuracy >= 0.8:
            new = current.raised()
        elif accuracy < 0.5:
            new = current.lowered()

    confidence = 0.9 if history and len(history) >= MIN_HISTORY_FOR_CONFIDENCE else 0.6

    return DifficultyAdjustment(
        new_difficulty=new,
        reason=_adjustment_reason(current, new),
        confidence=confidence,
        suggested_distractor_types=suggest_distractor_types(performance),
    )


def weak_area_recommendations(
    patterns: Sequence[WeakAreaPattern],
    difficult_categories: Sequence[VocabularyCategory],
) -> list[str]:
    recommendations = []
    for pattern in patterns:
        if pattern.frequency > 0.3:
            label = pattern.type.value.replace("_", " ")
            recommendations.append(
                f"Focus on {label} - occurs in {round(pattern.frequency * 100)}% of mistakes"
            )
    if difficult_categories:
        listed = ", ".join(c.value for c in difficult_categories)
        recommendations.append(f"Practice vocabulary in categories: {listed}")
    return recommendations


def identify_weak_areas(
    student_id: str,
    language: str,
    attempts: Sequence[WordAttempt],
) -> WeakAreas:
    """Tally mistake kinds and per-category error rates over recent attempts."""
    if not attempts:
        return WeakAreas(student_id=student_id, language=language)

    mistake_counts: dict[MistakeType, int] = {}
    affected: dict[MistakeType, list[VocabularyCategory]] = {}
    category_errors: dict[VocabularyCategory, int] = {}
    category_attempts: dict[VocabularyCategory, int] = {}

    for attempt in attempts:
        category = attempt.word.category
        category_attempts[category] = category_attempts.get(category, 0) + 1
        category_errors.setdefault(category, 0)
        if attempt.performance.correct:
            continue
        category_errors[category] += 1
        kind = attempt.performance.mistake_type
        if kind is not None:
            mistake_counts[kind] = mistake_counts.get(kind, 0) + 1
            affected.setdefault(kind, [])
            if category not in affected[kind]:
                affected[kind].append(category)

    total = len(attempts)
    patterns = [
        WeakAreaPattern(
            type=kind,
            frequency=count / total,
            affected_categories=affected[kind],
        )
        for kind, count in mistake_counts.items()
    ]
    difficult = [
        category
        for category, errors in category_errors.items()
        if errors / category_attempts[category] > 0.5
    ]

    return WeakAreas(
        student_id=student_id,
        language=language,
        mistake_patterns=patterns,
        difficult_categories=difficult,
        recommendations=weak_area_recommendations(patterns, difficult),
    )
