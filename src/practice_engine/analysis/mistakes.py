"""Mistake classification, aggregation and complexity weighting."""

from collections.abc import Sequence
from datetime import datetime, timedelta

import structlog
from pydantic import BaseModel

from practice_engine.models.mistakes import (
    MistakePattern,
    MistakeRecord,
    MistakeSummary,
    MistakeTrend,
    MistakeType,
    WeakCategory,
    WeakWord,
)
from practice_engine.models.vocabulary import (
    VocabularyAttempt,
    VocabularyCategory,
    VocabularyWord,
)
from practice_engine.providers.german.data import ARTICLE_FORMS
from practice_engine.providers.heuristics import levenshtein_distance

logger = structlog.get_logger()

RECENT_WINDOW = timedelta(days=7)
MIN_RECORDS_FOR_TREND = 5
MIN_ATTEMPTS_FOR_IMPROVEMENT = 10
TOP_PATTERN_COUNT = 5
WEAK_ERROR_RATE = 0.5


class LanguageComplexity(BaseModel):
    """How hard each grammar area is in a language (0-1)."""

    article: float
    gender: float
    case: float
    phonetic: float
    compound: float
    overall: float


LANGUAGE_COMPLEXITY: dict[str, LanguageComplexity] = {
    # der/die/das plus four cases
    "de": LanguageComplexity(
        article=0.9, gender=0.9, case=0.8, phonetic=0.6, compound=0.7, overall=0.78
    ),
    "en": LanguageComplexity(
        article=0.2, gender=0.1, case=0.1, phonetic=0.4, compound=0.3, overall=0.22
    ),
}

PHONETIC_PAIRS: list[tuple[str, str]] = [
    ("b", "p"), ("d", "t"), ("g", "k"), ("f", "v"),
    ("s", "z"), ("m", "n"), ("ch", "sh"), ("th", "t"),
]

VISUAL_PAIRS: list[tuple[str, str]] = [
    ("b", "d"), ("p", "q"), ("m", "n"), ("u", "v"), ("i", "l"), ("o", "0"),
]

DIACRITIC_PAIRS: list[tuple[str, str]] = [
    ("ä", "a"), ("ö", "o"), ("ü", "u"), ("ß", "ss"),
]

RECOMMENDATIONS: dict[MistakeType, list[str]] = {
    MistakeType.ARTICLE: [
        "Practice German articles (der/die/das) with noun gender rules",
        "Review article changes in different cases (Nominativ, Akkusativ, Dativ, Genitiv)",
    ],
    MistakeType.DIACRITIC: [
        "Practice pronunciation of umlauts (ä, ö, ü)",
        "Learn when umlauts appear in plural forms",
    ],
    MistakeType.COMPOUND: [
        "Study German compound word formation rules",
        "Practice breaking down compound words into their parts",
    ],
    MistakeType.PHONETIC_CONFUSION: [
        "Listen to audio pronunciations more carefully",
        "Practice distinguishing similar sounds",
    ],
    MistakeType.VISUAL_CONFUSION: [
        "Slow down when reading and writing",
        "Pay attention to letter shapes (b/d, m/n, etc.)",
    ],
    MistakeType.SPELLING: [
        "Practice spelling with written exercises",
        "Use mnemonic devices for difficult words",
    ],
    MistakeType.CAPITALIZATION: [
        "Remember: all German nouns are capitalized",
    ],
}
DEFAULT_RECOMMENDATION = "Continue practicing this word type"


class MistakePatternAnalyzer:
    """Classifies wrong answers and summarizes a learner's mistake history."""

    def analyze_mistake(
        self,
        word: VocabularyWord,
        correct_answer: str,
        student_answer: str,
        language: str = "de",
    ) -> list[MistakeType]:
        """Classify one answer.

        Args:
            word: The vocabulary item being practiced.
            correct_answer: Expected answer text.
            student_answer: What the learner entered.
            language: Language code; German adds article/umlaut/compound checks.

        Returns:
            Mistake kinds, empty only when the answer matches exactly. A blank
            answer is a timing mistake.
        """
        if not student_answer or not student_answer.strip():
            return [MistakeType.TIMING]

        correct_raw = correct_answer.strip()
        student_raw = student_answer.strip()
        if correct_raw == student_raw:
            return []

        correct = correct_raw.lower()
        student = student_raw.lower()
        mistakes: list[MistakeType] = []

        if language == "de":
            if self._has_article_error(correct, student):
                mistakes.append(MistakeType.ARTICLE)
            if self._has_diacritic_error(correct, student):
                mistakes.append(MistakeType.DIACRITIC)
            if correct == student:
                mistakes.append(MistakeType.CAPITALIZATION)
            elif correct.replace(" ", "") == student.replace(" ", ""):
                mistakes.append(MistakeType.COMPOUND)
        elif correct == student:
            mistakes.append(MistakeType.CAPITALIZATION)

        if correct != student:
            if self._has_pair_confusion(correct, student, PHONETIC_PAIRS):
                mistakes.append(MistakeType.PHONETIC_CONFUSION)
            if self._has_pair_confusion(correct, student, VISUAL_PAIRS):
                mistakes.append(MistakeType.VISUAL_CONFUSION)

        if not mistakes:
            mistakes.append(MistakeType.SPELLING)

        logger.debug(
            "mistake_classified",
            word_id=word.id,
            language=language,
            kinds=[m.value for m in mistakes],
        )
        return mistakes

    def aggregate_mistake_patterns(
        self,
        records: Sequence[MistakeRecord],
        now: datetime | None = None,
    ) -> list[MistakePattern]:
        """Group records by kind, most frequent first."""
        now = now or datetime.now()
        cutoff = now - RECENT_WINDOW
        ordered = sorted(records, key=lambda r: r.timestamp)

        grouped: dict[MistakeType, list[MistakeRecord]] = {}
        for record in ordered:
            grouped.setdefault(record.type, []).append(record)

        patterns = []
        for kind, kind_records in grouped.items():
            pattern = MistakePattern(
                type=kind,
                frequency=len(kind_records),
                recent_frequency=sum(1 for r in kind_records if r.timestamp >= cutoff),
                severity=sum(r.severity for r in kind_records) / len(kind_records),
                affected_words=list(dict.fromkeys(r.word_id for r in kind_records)),
                trend=self._trend(kind, ordered),
                recommendations=list(RECOMMENDATIONS.get(kind, [DEFAULT_RECOMMENDATION])),
            )
            patterns.append(pattern)

        return sorted(patterns, key=lambda p: p.frequency, reverse=True)

    def calculate_complexity_weight(
        self, mistake_types: Sequence[MistakeType], language: str = "de"
    ) -> float:
        """Interval-shortening weight in [0.5, 2.0] for a set of mistake kinds."""
        complexity = self.get_language_complexity(language)
        weight = 1.0
        for kind in mistake_types:
            if kind in (MistakeType.ARTICLE, MistakeType.GENDER):
                weight += complexity.article * 0.3
            elif kind is MistakeType.CASE:
                weight += complexity.case * 0.25
            elif kind in (MistakeType.DIACRITIC, MistakeType.PHONETIC_CONFUSION):
                weight += complexity.phonetic * 0.2
            elif kind is MistakeType.COMPOUND:
                weight += complexity.compound * 0.2
            elif kind in (MistakeType.SPELLING, MistakeType.VISUAL_CONFUSION):
                weight += 0.15
            else:
                weight += 0.1
        return max(0.5, min(2.0, weight))

    def severity_for(self, kind: MistakeType, language: str = "de") -> float:
        """Severity in [0, 1] for a newly recorded mistake of ``kind``."""
        complexity = self.get_language_complexity(language)
        if kind in (MistakeType.ARTICLE, MistakeType.GENDER):
            return 0.8 * complexity.article
        if kind is MistakeType.DIACRITIC:
            return 0.7 * complexity.phonetic
        if kind is MistakeType.COMPOUND:
            return 0.7 * complexity.compound
        if kind is MistakeType.CASE:
            return 0.75 * complexity.case
        if kind is MistakeType.PHONETIC_CONFUSION:
            return 0.6
        if kind is MistakeType.CAPITALIZATION:
            return 0.3
        return 0.5

    def calculate_improvement_rate(self, attempts: Sequence[VocabularyAttempt]) -> float:
        """Percent change in accuracy between the older and newer half.

        Returns 0.0 with fewer than ten attempts or when the older half had no
        correct answers.
        """
        if len(attempts) < MIN_ATTEMPTS_FOR_IMPROVEMENT:
            return 0.0
        ordered = sorted(attempts, key=lambda a: a.attempted_at)
        midpoint = len(ordered) // 2
        first, second = ordered[:midpoint], ordered[midpoint:]
        first_accuracy = sum(1 for a in first if a.is_correct) / len(first)
        second_accuracy = sum(1 for a in second if a.is_correct) / len(second)
        if first_accuracy == 0:
            return 0.0
        return (second_accuracy - first_accuracy) / first_accuracy * 100

    def analyze_weak_areas(
        self,
        student_id: str,
        records: Sequence[MistakeRecord],
        attempts: Sequence[VocabularyAttempt],
        words: Sequence[VocabularyWord] = (),
        now: datetime | None = None,
    ) -> MistakeSummary:
        """Build a learner's weak-area report.

        Args:
            student_id: Learner identifier.
            records: The learner's mistake log.
            attempts: The learner's answered exercises.
            words: Vocabulary items, used to group attempts by category.
            now: Reference time for the recent-frequency window.

        Returns:
            Top five patterns, weak words and categories, overall accuracy (%)
            and improvement rate.
        """
        total = len(attempts)
        correct = sum(1 for a in attempts if a.is_correct)
        overall_accuracy = correct / total * 100 if total else 0.0

        kinds_by_word: dict[str, dict[MistakeType, int]] = {}
        for record in records:
            counts = kinds_by_word.setdefault(record.word_id, {})
            counts[record.type] = counts.get(record.type, 0) + 1

        def common_kinds(counts: dict[MistakeType, int]) -> list[MistakeType]:
            return [k for k, _ in sorted(counts.items(), key=lambda kv: kv[1], reverse=True)][:3]

        per_word: dict[str, list[VocabularyAttempt]] = {}
        for attempt in attempts:
            per_word.setdefault(attempt.word_id, []).append(attempt)

        weak_words = []
        for word_id, word_attempts in per_word.items():
            error_rate = sum(1 for a in word_attempts if not a.is_correct) / len(word_attempts)
            if error_rate > WEAK_ERROR_RATE:
                weak_words.append(
                    WeakWord(
                        word_id=word_id,
                        error_rate=error_rate,
                        attempts=len(word_attempts),
                        common_mistakes=common_kinds(kinds_by_word.get(word_id, {})),
                    )
                )
        weak_words.sort(key=lambda w: w.error_rate, reverse=True)

        by_id = {w.id: w for w in words}
        category_totals: dict[VocabularyCategory, tuple[int, int]] = {}
        for word_id, word_attempts in per_word.items():
            word = by_id.get(word_id)
            if word is None:
                continue
            errors, count = category_totals.get(word.category, (0, 0))
            errors += sum(1 for a in word_attempts if not a.is_correct)
            category_totals[word.category] = (errors, count + len(word_attempts))

        weak_categories = [
            WeakCategory(category=category, error_rate=errors / count, attempts=count)
            for category, (errors, count) in category_totals.items()
            if errors / count > WEAK_ERROR_RATE
        ]
        weak_categories.sort(key=lambda c: c.error_rate, reverse=True)

        summary = MistakeSummary(
            student_id=student_id,
            top_patterns=self.aggregate_mistake_patterns(records, now)[:TOP_PATTERN_COUNT],
            weak_words=weak_words,
            weak_categories=weak_categories,
            overall_accuracy=overall_accuracy,
            improvement_rate=self.calculate_improvement_rate(attempts),
        )
        logger.info(
            "weak_areas_analyzed",
            student_id=student_id,
            mistakes=len(records),
            attempts=total,
            overall_accuracy=round(overall_accuracy, 1),
        )
        return summary

    def get_language_complexity(self, language: str) -> LanguageComplexity:
        return LANGUAGE_COMPLEXITY.get(language, LANGUAGE_COMPLEXITY["en"])

    # ------------------------------------------------------------------

    def _trend(self, kind: MistakeType, ordered: Sequence[MistakeRecord]) -> MistakeTrend:
        # Share of this kind in the older vs newer half of the whole log
        if sum(1 for r in ordered if r.type == kind) < MIN_RECORDS_FOR_TREND:
            return MistakeTrend.STABLE
        midpoint = len(ordered) // 2
        first, second = ordered[:midpoint], ordered[midpoint:]
        first_rate = sum(1 for r in first if r.type == kind) / len(first)
        second_rate = sum(1 for r in second if r.type == kind) / len(second)
        if second_rate < first_rate * 0.8:
            return MistakeTrend.IMPROVING
        if second_rate > first_rate * 1.2:
            return MistakeTrend.WORSENING
        return MistakeTrend.STABLE

    def _has_article_error(self, correct: str, student: str) -> bool:
        correct_article = correct.split(" ")[0]
        student_article = student.split(" ")[0]
        if correct_article in ARTICLE_FORMS and student_article in ARTICLE_FORMS:
            return correct_article != student_article
        return False

    def _has_diacritic_error(self, correct: str, student: str) -> bool:
        for marked, plain in DIACRITIC_PAIRS:
            if marked in correct and marked not in student:
                restored = student.replace(plain, marked)
                if levenshtein_distance(correct, restored) <= 1:
                    return True
        return False

    def _has_pair_confusion(
        self, correct: str, student: str, pairs: Sequence[tuple[str, str]]
    ) -> bool:
        baseline = levenshtein_distance(correct, student)
        for first, second in pairs:
            for variant in (student.replace(first, second), student.replace(second, first)):
                if variant == student:
                    continue
                distance = levenshtein_distance(correct, variant)
                if distance <= 1 and distance < baseline:
                    return True
        return False
