"""Shared fixtures: settings, a controllable clock and sample words."""

import pytest

from practice_engine.config import Settings
from practice_engine.models.vocabulary import (
    DifficultyLevel,
    ExampleSentence,
    VocabularyCategory,
    VocabularyProgress,
    VocabularyWord,
)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def settings():
    return Settings(
        minimum_interval=1,
        maximum_interval=365,
        expected_response_time_ms=5000,
        review_limit=10,
        typing_base_xp=50,
        typing_advance_on_error=False,
        hints_enabled=True,
        hint_level1_threshold=3,
        hint_level2_threshold=5,
        hint_level3_threshold=7,
        math_default_difficulty="easy",
        math_problem_count=10,
        math_max_generation_attempts=50,
        math_zehneruebergang_ratio=0.4,
    )


@pytest.fixture
def clock():
    return FakeClock()


def make_word(
    word_id: str,
    word: str,
    translation: str,
    category: VocabularyCategory,
    difficulty: DifficultyLevel = DifficultyLevel.BEGINNER,
    **kwargs,
) -> VocabularyWord:
    return VocabularyWord(
        id=word_id,
        word=word,
        translation=translation,
        category=category,
        difficulty=difficulty,
        **kwargs,
    )


@pytest.fixture
def hund():
    return make_word(
        "w-hund",
        "Hund",
        "dog",
        VocabularyCategory.ANIMALS,
        examples=(ExampleSentence(sentence="Der Hund bellt.", translation="The dog barks."),),
    )


@pytest.fixture
def vocabulary(hund):
    animals = VocabularyCategory.ANIMALS
    return [
        hund,
        make_word("w-katze", "Katze", "cat", animals),
        make_word("w-maus", "Maus", "mouse", animals),
        make_word("w-pferd", "Pferd", "horse", animals, DifficultyLevel.INTERMEDIATE),
        make_word("w-vogel", "Vogel", "bird", animals),
        make_word(
            "w-schmetterling",
            "Schmetterling",
            "butterfly",
            animals,
            DifficultyLevel.ADVANCED,
        ),
        make_word("w-nase", "Nase", "nose", VocabularyCategory.BODY_PARTS),
        make_word("w-hand", "Hand", "hand", VocabularyCategory.BODY_PARTS),
        make_word("w-apfel", "Apfel", "apple", VocabularyCategory.FOOD),
        make_word("w-brot", "Brot", "bread", VocabularyCategory.FOOD),
        make_word("w-rot", "Rot", "red", VocabularyCategory.COLORS),
        make_word("w-haus", "Haus", "house", VocabularyCategory.PLACES),
        make_word("w-fuss", "Fuß", "foot", VocabularyCategory.BODY_PARTS),
        make_word("w-dog-en", "dog", "Hund", animals, language="en"),
    ]


@pytest.fixture
def fresh_progress():
    return VocabularyProgress(student_id="student-1", word_id="w-hund")
