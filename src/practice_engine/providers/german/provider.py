"""German language provider."""

import math
import random
import re
from collections.abc import Sequence

import structlog

from practice_engine.models.language import (
    CommonMistake,
    DifficultyAdjustment,
    Distractor,
    DistractorOptions,
    DistractorType,
    GrammarRules,
    LanguageSpecificData,
    PerformanceData,
    WeakAreas,
    WordAttempt,
)
from practice_engine.models.mistakes import MistakeType
from practice_engine.models.vocabulary import VocabularyWord
from practice_engine.providers import heuristics
from practice_engine.providers.german.data import (
    COMPOUND_COMPONENTS,
    CONSONANT_SUBSTITUTIONS,
    GENDER_SUFFIXES,
    GERMAN_ARTICLES,
    GERMAN_GRAMMAR_RULES,
    INVALID_PATTERNS,
    PHONETIC_GROUPS,
    PLURAL_SUFFIXES,
    PRONUNCIATION_HINTS,
    RELATED_CATEGORIES,
    RHYME_CONSONANTS,
    UMLAUT_CHARS,
    UMLAUT_PLURALS,
    UMLAUT_PRONUNCIATION_HINT,
    VISUAL_CONFUSIONS,
    VOWEL_SUBSTITUTIONS,
)

logger = structlog.get_logger()

MIN_DISTRACTOR_LENGTH = 3
MAX_RHYMES = 3
SAME_CATEGORY_SHARE = 0.6

_DOUBLE_LETTER = re.compile(r"(.)\1")


class GermanLanguageProvider:
    """German distractor generation, validation and mistake analysis.

    Args:
        rng: Random source for shuffling and compound splicing. Inject a
            seeded ``random.Random`` for reproducible output.
    """

    language_code: str = "de"
    language_name: str = "German"

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self.grammar_rules: GrammarRules = GERMAN_GRAMMAR_RULES

    # ------------------------------------------------------------------
    # Distractors
    # ------------------------------------------------------------------

    def generate_distractors(
        self,
        word: VocabularyWord,
        options: DistractorOptions,
        vocabulary: Sequence[VocabularyWord] = (),
    ) -> list[Distractor]:
        """Generate up to ``options.count`` distractors for ``word``.

        Args:
            word: Target vocabulary item.
            options: Count, requested types and words to exclude.
            vocabulary: Known words, used as the pool for semantic distractors.

        Returns:
            Shuffled distractors; may be shorter than requested.
        """
        generators = {
            DistractorType.PHONETIC: lambda n: self.generate_phonetic_distractors(word, n),
            DistractorType.VISUAL: lambda n: self.generate_visual_distractors(word, n),
            DistractorType.SEMANTIC: lambda n: self.generate_semantic_distractors(word, n, vocabulary),
            DistractorType.GRAMMATICAL: lambda n: self.generate_grammatical_distractors(word, n),
        }
        distractors = heuristics.collect_distractors(word, options, generators, self.rng)
        if len(distractors) < options.count:
            logger.debug(
                "distractor_shortfall",
                word=word.word,
                requested=options.count,
                generated=len(distractors),
            )
        return distractors

    def generate_phonetic_distractors(self, word: VocabularyWord, count: int) -> list[str]:
        """Homophone groups, then vowel/consonant substitution, then rhymes."""
        target = word.word.lower()
        candidates = list(PHONETIC_GROUPS.get(target, [])[:count])

        for table in (VOWEL_SUBSTITUTIONS, CONSONANT_SUBSTITUTIONS):
            for original, substitutes in table.items():
                if len(candidates) >= count:
                    break
                if original not in target:
                    continue
                for substitute in substitutes:
                    candidate = target.replace(original, substitute, 1)
                    if candidate != target and len(candidate) >= MIN_DISTRACTOR_LENGTH:
                        candidates.append(candidate.capitalize())
                        if len(candidates) >= count:
                            break

        if len(candidates) < count and len(target) >= 4:
            rhymes = self._rhymes(target)
            candidates.extend(rhymes[: count - len(candidates)])

        return heuristics.unique(candidates)[:count]

    def generate_visual_distractors(self, word: VocabularyWord, count: int) -> list[str]:
        """Letter-pair confusions, transpositions, doubling and deletions."""
        target = word.word
        candidates: list[str] = []

        for first, second in VISUAL_CONFUSIONS:
            if len(candidates) >= count:
                break
            if first in target:
                candidates.append(target.replace(first, second, 1))
            if second in target:
                candidates.append(target.replace(second, first, 1))

        for i in range(len(target) - 1):
            if len(candidates) >= count:
                break
            chars = list(target)
            chars[i], chars[i + 1] = chars[i + 1], chars[i]
            candidates.append("".join(chars))

        if _DOUBLE_LETTER.search(target):
            candidates.append(_DOUBLE_LETTER.sub(r"\1", target))
        else:
            for i in range(1, len(target)):
                if len(candidates) >= count:
                    break
                candidates.append(target[:i] + target[i] + target[i:])

        for i in range(len(target)):
            if len(candidates) >= count:
                break
            candidates.append(target[:i] + target[i + 1:])

        kept = [c for c in candidates if c != target and len(c) >= MIN_DISTRACTOR_LENGTH]
        return heuristics.unique(kept)[:count]

    def generate_semantic_distractors(
        self,
        word: VocabularyWord,
        count: int,
        vocabulary: Sequence[VocabularyWord],
    ) -> list[str]:
        """Same category first, then related categories, then similar length."""
        pool = [w for w in vocabulary if w.id != word.id and w.language == self.language_code]

        def proximity(other: VocabularyWord) -> int:
            return abs(other.difficulty.rank - word.difficulty.rank)

        same_category = sorted((w for w in pool if w.category == word.category), key=proximity)
        candidates = [w.word for w in same_category[: math.ceil(count * SAME_CATEGORY_SHARE)]]

        if len(candidates) < count:
            related = RELATED_CATEGORIES.get(word.category, [])
            related_words = sorted((w for w in pool if w.category in related), key=proximity)
            candidates.extend(w.word for w in related_words[: count - len(candidates)])

        if len(candidates) < count:
            similar = [
                w.word
                for w in pool
                if abs(len(w.word) - len(word.word)) <= 2 and w.word not in candidates
            ]
            candidates.extend(similar[: count - len(candidates)])

        return heuristics.unique(candidates)[:count]

    def generate_grammatical_distractors(self, word: VocabularyWord, count: int) -> list[str]:
        """Wrong articles, wrong plurals and mis-spliced compounds."""
        data = self.get_language_specific_data(word)
        candidates: list[str] = []

        if data.article:
            for article in GERMAN_ARTICLES.values():
                if len(candidates) >= count:
                    break
                if article != data.article:
                    candidates.append(f"{article} {word.word}")

        if data.plural:
            for suffix in PLURAL_SUFFIXES:
                if len(candidates) >= count:
                    break
                wrong_plural = word.word + suffix
                if wrong_plural != data.plural:
                    candidates.append(wrong_plural)

            for original, umlaut in UMLAUT_PLURALS.items():
                if len(candidates) >= count:
                    break
                if original in word.word and umlaut not in data.plural:
                    candidates.append(word.word.replace(original, umlaut, 1) + "e")
        else:
            for suffix in PLURAL_SUFFIXES[:3]:
                if len(candidates) >= count:
                    break
                candidates.append(word.word + suffix)

        if len(word.word) > 6:
            component = self.rng.choice(COMPOUND_COMPONENTS)
            if len(candidates) < count:
                candidates.append(component + word.word[3:])
            if len(candidates) < count:
                candidates.append(word.word[:-3] + component)

        return heuristics.unique(c for c in candidates if c != word.word)[:count]

    # ------------------------------------------------------------------
    # Validation and scoring
    # ------------------------------------------------------------------

    def validate_word(self, word: str) -> list[str]:
        errors = heuristics.base_validation_errors(word)
        if word and word[0] != word[0].upper():
            errors.append("German nouns must start with a capital letter")
        for pattern in INVALID_PATTERNS:
            if pattern.search(word):
                errors.append(f"Invalid German pattern: {pattern.pattern}")
        return errors

    def calculate_complexity(self, word: VocabularyWord) -> float:
        """Base complexity plus German bonuses, clamped to [0, 1]."""
        complexity = heuristics.base_complexity(word)
        if self._is_compound(word.word):
            complexity += 0.15
        if any(ch in UMLAUT_CHARS for ch in word.word):
            complexity += 0.05
        if "ß" in word.word:
            complexity += 0.1
        if len(word.word) > 10:
            complexity += 0.1
        return max(0.0, min(complexity, 1.0))

    def analyze_mistake(self, target: VocabularyWord, answer: str) -> list[MistakeType]:
        """Classify a wrong answer; empty only when the answer is right."""
        expected = target.word
        if expected == answer:
            return []

        mistakes = heuristics.base_mistake_types(expected, answer)

        if self._has_article_mistake(expected, answer):
            mistakes.append(MistakeType.ARTICLE)
        if self._has_plural_mistake(expected, answer):
            mistakes.append(MistakeType.PLURAL)
        if self._has_umlaut_confusion(expected, answer):
            mistakes.append(MistakeType.PHONETIC_CONFUSION)
        if expected.replace("ß", "ss") == answer.replace("ß", "ss"):
            mistakes.append(MistakeType.SPELLING)
        if expected and answer and expected[0] != answer[0] and expected.lower() == answer.lower():
            mistakes.append(MistakeType.CAPITALIZATION)

        return heuristics.unique(mistakes)

    def get_common_mistakes(self, word: VocabularyWord) -> list[CommonMistake]:
        return self.get_language_specific_data(word).common_mistakes

    def adapt_difficulty(
        self,
        word: VocabularyWord,
        performance: PerformanceData,
        history: Sequence[PerformanceData] | None = None,
    ) -> DifficultyAdjustment:
        return heuristics.adapt_difficulty(word, performance, history)

    def identify_weak_areas(self, student_id: str, attempts: Sequence[WordAttempt]) -> WeakAreas:
        return heuristics.identify_weak_areas(student_id, self.language_code, attempts)

    # ------------------------------------------------------------------
    # Grammatical metadata
    # ------------------------------------------------------------------

    def get_language_specific_data(self, word: VocabularyWord) -> LanguageSpecificData:
        """Authored metadata when present, otherwise inferred from word shape."""
        if word.language_data:
            return LanguageSpecificData.model_validate(
                {"language": self.language_code, **word.language_data}
            )

        gender = self._infer_gender(word.word)
        return LanguageSpecificData(
            language=self.language_code,
            gender=gender,
            article=GERMAN_ARTICLES.get(gender, "das"),
            plural=self._infer_plural(word.word, gender),
            compound_parts=self._split_compound(word.word) if self._is_compound(word.word) else [],
            common_mistakes=self._common_mistakes(word.word),
            pronunciation_hints=self._pronunciation_hints(word.word),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _rhymes(self, word: str) -> list[str]:
        ending = word[-2:]
        rhymes = []
        for consonant in RHYME_CONSONANTS:
            rhyme = consonant + ending
            if rhyme != word and len(rhyme) >= MIN_DISTRACTOR_LENGTH:
                rhymes.append(rhyme.capitalize())
                if len(rhymes) >= MAX_RHYMES:
                    break
        return rhymes

    def _infer_gender(self, word: str) -> str:
        for gender, suffixes in GENDER_SUFFIXES.items():
            if word.endswith(suffixes):
                return gender
        return "neuter"

    def _infer_plural(self, word: str, gender: str) -> str:
        # Rough, but good enough to steer distractors
        if gender == "masculine":
            return word + "e"
        if gender == "feminine":
            return word + "n"
        return word + "er"

    def _is_compound(self, word: str) -> bool:
        return len(word) > 8 or any(c in word for c in COMPOUND_COMPONENTS)

    def _split_compound(self, word: str) -> list[str]:
        for component in COMPOUND_COMPONENTS:
            if component in word:
                parts = [p for p in word.split(component) if p]
                return parts + [component]
        mid = len(word) // 2
        return [word[:mid], word[mid:]]

    def _common_mistakes(self, word: str) -> list[CommonMistake]:
        mistakes = []
        for original, umlaut in UMLAUT_PLURALS.items():
            if original in word:
                mistakes.append(
                    CommonMistake(
                        mistake=word.replace(original, umlaut, 1),
                        mistake_type=MistakeType.DIACRITIC,
                        frequency=7,
                    )
                )
        if "ß" in word:
            mistakes.append(
                CommonMistake(
                    mistake=word.replace("ß", "ss", 1),
                    mistake_type=MistakeType.SPELLING,
                    frequency=8,
                )
            )
        return mistakes

    def _pronunciation_hints(self, word: str) -> list[str]:
        hints = [hint for fragment, hint in PRONUNCIATION_HINTS if fragment in word]
        if any(ch in "äöü" for ch in word):
            hints.append(UMLAUT_PRONUNCIATION_HINT)
        return hints

    def _has_article_mistake(self, target: str, answer: str) -> bool:
        articles = set(GERMAN_ARTICLES.values())
        target_article = next((a for a in articles if target.startswith(a + " ")), None)
        answer_article = next((a for a in articles if answer.startswith(a + " ")), None)
        return target_article != answer_article and (
            target_article is not None or answer_article is not None
        )

    def _has_plural_mistake(self, target: str, answer: str) -> bool:
        return any(
            target.endswith(suffix) != answer.endswith(suffix)
            for suffix in PLURAL_SUFFIXES
            if suffix
        )

    def _has_umlaut_confusion(self, target: str, answer: str) -> bool:
        return any((umlaut in target) != (umlaut in answer) for umlaut in UMLAUT_PLURALS.values())
