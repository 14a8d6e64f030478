"""Tests for the German language provider."""

import random

import pytest

from practice_engine.models.language import DistractorOptions, DistractorType, PerformanceData
from practice_engine.models.mistakes import MistakeType
from practice_engine.models.vocabulary import DifficultyLevel, VocabularyCategory, VocabularyWord
from practice_engine.providers.german import GermanLanguageProvider


@pytest.fixture
def provider():
    return GermanLanguageProvider(rng=random.Random(42))


def word(text, category=VocabularyCategory.OBJECTS, **kwargs):
    return VocabularyWord(
        id=f"w-{text.lower()}", word=text, translation=text, category=category, **kwargs
    )


class TestDistractors:
    def test_visual_confusions(self, provider, hund):
        assert provider.generate_visual_distractors(hund, 3) == ["Hunb", "Humd", "Hvnd"]

    def test_phonetic_groups_first(self, provider):
        haus = word("Haus", VocabularyCategory.PLACES)
        assert provider.generate_phonetic_distractors(haus, 3) == ["Maus", "raus", "Klaus"]

    def test_phonetic_substitutions_exclude_target(self, provider):
        katze = word("Katze", VocabularyCategory.ANIMALS)
        candidates = provider.generate_phonetic_distractors(katze, 4)
        assert len(candidates) == 4
        assert "Katze" not in candidates
        assert len(set(candidates)) == 4

    def test_semantic_prefers_same_category(self, provider, hund, vocabulary):
        assert provider.generate_semantic_distractors(hund, 3, vocabulary) == [
            "Katze",
            "Maus",
            "Nase",
        ]

    def test_semantic_ignores_other_languages(self, provider, hund, vocabulary):
        assert "dog" not in provider.generate_semantic_distractors(hund, 10, vocabulary)

    def test_grammatical_wrong_articles_and_plurals(self, provider):
        katze = word("Katze", VocabularyCategory.ANIMALS)
        assert provider.generate_grammatical_distractors(katze, 3) == [
            "der Katze",
            "das Katze",
            "Katzee",
        ]

    def test_generate_respects_exclusions(self, provider):
        haus = word("Haus", VocabularyCategory.PLACES)
        options = DistractorOptions(
            count=3, types=[DistractorType.PHONETIC], exclude_words=["raus"]
        )

        distractors = provider.generate_distractors(haus, options)

        assert {d.word for d in distractors} == {"Maus", "Klaus"}
        assert all(d.type is DistractorType.PHONETIC for d in distractors)
        assert all(d.reason == 'Sounds similar to "Haus"' for d in distractors)
        assert all(0.0 <= d.similarity_score <= 1.0 for d in distractors)

    def test_generate_never_returns_target_or_duplicates(self, provider, hund, vocabulary):
        options = DistractorOptions(
            count=6,
            types=list(DistractorType),
        )
        distractors = provider.generate_distractors(hund, options, vocabulary)

        surfaces = [d.word for d in distractors]
        assert 0 < len(surfaces) <= 6
        assert "Hund" not in surfaces
        assert len(set(surfaces)) == len(surfaces)

    def test_zero_count(self, provider, hund):
        assert provider.generate_distractors(hund, DistractorOptions(count=0)) == []


class TestValidation:
    def test_valid_word(self, provider):
        assert provider.validate_word("Straße") == []

    def test_lowercase_noun(self, provider):
        assert "German nouns must start with a capital letter" in provider.validate_word("hund")

    def test_invalid_pattern(self, provider):
        assert provider.validate_word("Rück") == ["Invalid German pattern: ck$"]

    def test_empty_and_digits(self, provider):
        assert provider.validate_word("") == ["Word cannot be empty"]
        assert "Word should not contain numbers" in provider.validate_word("Hund1")


class TestComplexity:
    def test_short_beginner_word(self, provider, hund):
        assert provider.calculate_complexity(hund) == pytest.approx(0.45)

    def test_long_compound_is_capped(self, provider):
        schmetterling = word(
            "Schmetterling", VocabularyCategory.ANIMALS, difficulty=DifficultyLevel.ADVANCED
        )
        assert provider.calculate_complexity(schmetterling) == 1.0

    def test_eszett_bonus(self, provider):
        fuss = word("Fuß", VocabularyCategory.BODY_PARTS)
        # 0.15 length + 0.1 beginner + 0.25 body parts + 0.1 eszett
        assert provider.calculate_complexity(fuss) == pytest.approx(0.6)


class TestLanguageData:
    def test_neuter_diminutive(self, provider):
        data = provider.get_language_specific_data(word("Mädchen"))
        assert data.gender == "neuter"
        assert data.article == "das"
        assert "Remember to pronounce umlauts correctly" in data.pronunciation_hints

    def test_masculine_agent_noun(self, provider):
        data = provider.get_language_specific_data(word("Lehrer"))
        assert data.gender == "masculine"
        assert data.article == "der"
        assert data.plural == "Lehrere"

    def test_feminine_plural(self, provider):
        data = provider.get_language_specific_data(word("Katze"))
        assert data.article == "die"
        assert data.plural == "Katzen"

    def test_compound_parts(self, provider):
        data = provider.get_language_specific_data(word("Haustür"))
        assert data.compound_parts == ["tür", "Haus"]

    def test_authored_metadata_wins(self, provider):
        authored = word(
            "Hund",
            language_data={"gender": "masculine", "article": "der", "plural": "Hunde"},
        )
        data = provider.get_language_specific_data(authored)
        assert data.article == "der"
        assert data.plural == "Hunde"
        assert data.language == "de"

    def test_common_mistakes(self, provider):
        mistakes = provider.get_common_mistakes(word("Fuß", VocabularyCategory.BODY_PARTS))
        assert [(m.mistake, m.mistake_type, m.frequency) for m in mistakes] == [
            ("Füß", MistakeType.DIACRITIC, 7),
            ("Fuss", MistakeType.SPELLING, 8),
        ]


class TestMistakes:
    def test_correct_answer_has_no_mistakes(self, provider, hund):
        assert provider.analyze_mistake(hund, "Hund") == []

    def test_capitalization(self, provider, hund):
        assert MistakeType.CAPITALIZATION in provider.analyze_mistake(hund, "hund")

    def test_eszett_spelling(self, provider):
        strasse = word("Straße")
        assert MistakeType.SPELLING in provider.analyze_mistake(strasse, "Strasse")

    def test_article(self, provider):
        der_hund = word("der Hund")
        assert MistakeType.ARTICLE in provider.analyze_mistake(der_hund, "die Hund")

    def test_unrelated_answer_is_semantic(self, provider, hund):
        assert provider.analyze_mistake(hund, "Baum") == [MistakeType.SEMANTIC_CONFUSION]


def test_adapt_difficulty_delegates(provider, hund):
    adjustment = provider.adapt_difficulty(
        hund, PerformanceData(correct=True, response_time_ms=1500)
    )
    assert adjustment.new_difficulty is DifficultyLevel.INTERMEDIATE


def test_grammar_rules(provider):
    assert provider.grammar_rules.has_grammatical_gender
    assert provider.grammar_rules.cases == ["Nominativ", "Akkusativ", "Dativ", "Genitiv"]
