"""Tests for German math feedback and explanations."""

import random

import pytest

from practice_engine.math_practice import feedback
from practice_engine.models.math_challenge import MathOperation, UnknownPosition


def test_phrase_pools():
    assert len(feedback.SUCCESS_PHRASES) == 10
    assert len(feedback.ENCOURAGEMENT_PHRASES) == 5
    assert feedback.SUCCESS_PHRASES[0] == "Gut gemacht!"
    assert feedback.ENCOURAGEMENT_PHRASES[-1] == "Probiere es nochmal!"


def test_phrase_choice_uses_injected_rng():
    expected = random.Random(12).choice(feedback.SUCCESS_PHRASES)
    assert feedback.random_success_phrase(random.Random(12)) == expected
    expected = random.Random(12).choice(feedback.ENCOURAGEMENT_PHRASES)
    assert feedback.random_encouragement_phrase(random.Random(12)) == expected


def test_verliebte_zahlen():
    assert feedback.verliebte_zahl(7) == 3
    assert feedback.verliebte_zahl(0) == 10
    assert feedback.verliebte_zahl(12) == 0


class TestExplanations:
    def test_addition_crossing(self):
        assert feedback.zehneruebergang_addition_explanation(7, 5, 12) == (
            "Schauen wir uns das zusammen an:\n"
            "7 + 5 - wir teilen die 5 auf.\n"
            "7 braucht noch 3 bis zur 10 (Verliebte Zahlen: 7 und 3).\n"
            "7 + 3 = 10, dann noch 2 dazu: 10 + 2 = 12."
        )

    def test_addition_crossing_higher_ten(self):
        assert feedback.zehneruebergang_addition_explanation(28, 5, 33).endswith(
            "28 + 2 = 30, dann noch 3 dazu: 30 + 3 = 33."
        )

    def test_addition_without_crossing(self):
        assert feedback.zehneruebergang_addition_explanation(3, 4, 7) == "3 + 4 = 7"
        assert feedback.zehneruebergang_addition_explanation(10, 5, 15) == "10 + 5 = 15"

    def test_subtraction_crossing(self):
        assert feedback.zehneruebergang_subtraction_explanation(13, 5, 8) == (
            "Schauen wir uns das zusammen an:\n"
            "13 - 5: Wir gehen erst zur 10.\n"
            "13 - 3 = 10, dann noch 2 abziehen: 10 - 2 = 8."
        )

    def test_subtraction_without_crossing(self):
        assert feedback.zehneruebergang_subtraction_explanation(15, 3, 12) == "15 - 3 = 12"
        assert feedback.zehneruebergang_subtraction_explanation(20, 4, 16) == "20 - 4 = 16"

    def test_simple(self):
        assert feedback.simple_explanation(9, 4, MathOperation.SUBTRACTION, 5) == "9 - 4 = 5"


class TestIncorrectExplanation:
    def test_close_answer(self):
        text = feedback.incorrect_explanation(
            7, 5, MathOperation.ADDITION, 12, 12, 13, True, random.Random(2)
        )
        encouragement, rest = text.split(" Du warst ganz nah dran!\n\n")
        assert encouragement in feedback.ENCOURAGEMENT_PHRASES
        assert rest.startswith("Schauen wir uns das zusammen an:")

    def test_near_answer(self):
        text = feedback.incorrect_explanation(
            3, 4, MathOperation.ADDITION, 7, 7, 10, False, random.Random(2)
        )
        assert " Fast richtig!\n\n3 + 4 = 7" in text

    def test_far_answer_has_no_hint(self):
        text = feedback.incorrect_explanation(
            13, 5, MathOperation.SUBTRACTION, 8, 8, 40, True, random.Random(2)
        )
        head, explanation = text.split("\n\n")
        assert head in {f"{phrase} " for phrase in feedback.ENCOURAGEMENT_PHRASES}
        assert explanation.endswith("10 - 2 = 8.")


def test_correct_explanation():
    assert feedback.correct_explanation(False, random.Random(3)) in feedback.SUCCESS_PHRASES
    assert feedback.correct_explanation(True, random.Random(3)).endswith(
        " Du hast den Zehnerübergang super gemeistert!"
    )


@pytest.mark.parametrize(
    ("n", "word"),
    [
        (0, "null"),
        (7, "sieben"),
        (12, "zwölf"),
        (20, "zwanzig"),
        (21, "einundzwanzig"),
        (30, "dreißig"),
        (47, "siebenundvierzig"),
        (100, "hundert"),
        (101, "101"),
        (-3, "-3"),
    ],
)
def test_german_number(n, word):
    assert feedback.german_number(n) == word


@pytest.mark.parametrize(
    ("a", "b", "operation", "unknown", "expected"),
    [
        (7, 5, MathOperation.ADDITION, UnknownPosition.RESULT, "sieben plus fünf ist gleich?"),
        (12, 3, MathOperation.SUBTRACTION, UnknownPosition.LEFT, "Welche Zahl minus drei ergibt neun?"),
        (7, 5, MathOperation.ADDITION, UnknownPosition.RIGHT, "sieben plus welche Zahl ergibt zwölf?"),
    ],
)
def test_spoken_problem(a, b, operation, unknown, expected):
    assert feedback.spoken_problem(a, b, operation, unknown) == expected
