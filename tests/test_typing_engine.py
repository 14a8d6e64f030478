"""Tests for the typing engine."""

import pytest

from practice_engine.models.typing_session import TypingAchievement
from practice_engine.typing_practice.engine import TypingEngine, build_words, classify_error
from practice_engine.typing_practice.hints import HintOptions, HintSystem


@pytest.fixture
def make_engine(settings, clock):
    def factory(text, **kwargs):
        return TypingEngine(text, clock=clock, settings=settings, **kwargs)

    return factory


def type_text(engine, clock, keys, step_ms=1000):
    results = []
    for key in keys:
        clock.advance(step_ms)
        results.append(engine.process_input(key))
    return results


def test_build_words_keeps_separator_space():
    words = build_words("ab  cd")
    assert [w.word for w in words] == ["ab", "cd"]
    assert [c.expected for c in words[0].characters] == ["a", "b", " "]
    assert [c.expected for c in words[1].characters] == ["c", "d"]


class TestProcessInput:
    def test_wrong_key_holds_cursor(self, make_engine, clock):
        engine = make_engine("ab cd")
        results = type_text(engine, clock, ["a", "x", "b", " ", "c", "d"])

        assert [r.is_correct for r in results] == [True, False, True, True, True, True]
        assert results[1].char_index == 1
        assert results[2].char_index == 1
        assert results[3].word_completed
        assert results[-1].is_complete
        assert [r.version for r in results] == [1, 2, 3, 4, 5, 6]

        metrics = engine.get_metrics()
        assert metrics.correct_characters == 5
        assert metrics.incorrect_characters == 1
        assert metrics.accuracy == 83

        [error] = engine.error_positions
        assert (error.expected, error.actual) == ("b", "x")
        assert (error.position, error.word_index, error.char_index) == (1, 0, 1)

    def test_advance_on_error(self, make_engine, clock):
        engine = make_engine("ab", advance_on_error=True)
        type_text(engine, clock, ["a", "x"])

        assert engine.is_complete()
        assert engine.get_metrics().accuracy == 50

    def test_frozen_after_completion(self, make_engine, clock):
        engine = make_engine("ab")
        type_text(engine, clock, ["a", "b"])
        version = engine.version

        result = engine.process_input("c")

        assert not result.accepted
        assert result.is_complete
        assert result.version == version
        assert engine.get_metrics().incorrect_characters == 0

    def test_empty_text_is_complete(self, make_engine):
        engine = make_engine("")
        assert engine.is_complete()
        assert engine.progress == 100
        assert engine.current_char is None
        assert not engine.process_input("a").accepted


class TestMetrics:
    def test_full_run(self, make_engine, clock):
        engine = make_engine("hallo welt")
        type_text(engine, clock, "hallo welt")

        metrics = engine.get_metrics()
        assert metrics.total_time_ms == 9000
        assert metrics.characters_typed == 10
        assert metrics.words_typed == 2
        assert metrics.average_wpm == 13
        assert metrics.accuracy == 100
        assert engine.calculate_xp() == 75
        assert [(t.word, t.time_ms) for t in engine.word_timings] == [
            ("hallo", 5000),
            ("welt", 3000),
        ]
        assert engine.check_achievements() == [
            TypingAchievement.PERFECT_TYPING,
            TypingAchievement.FIRST_COMPLETION,
        ]

    def test_nothing_typed(self, make_engine):
        metrics = make_engine("hallo").get_metrics()
        assert metrics.accuracy == 100
        assert metrics.average_wpm == 0
        assert metrics.words_typed == 0

    def test_partial_word_counts(self, make_engine, clock):
        engine = make_engine("hallo welt")
        type_text(engine, clock, "hallo w")
        assert engine.get_metrics().words_typed == 2
        assert engine.progress == 70

    def test_xp_floor(self, make_engine, clock):
        engine = make_engine("ab")
        type_text(engine, clock, ["x"] * 20)
        assert engine.calculate_xp() == 10

    def test_error_breakdown(self, make_engine, clock):
        engine = make_engine("Äpfel, ok")
        type_text(engine, clock, ["ä", "Ä", "p", "f", "e", "l", ".", ",", " ", "p", "o", "k"])

        metrics = engine.get_metrics()
        assert metrics.uppercase_errors == 1
        assert metrics.special_char_errors == 1
        assert metrics.wrong_key_errors == 1
        assert metrics.umlaut_errors == 0
        assert TypingAchievement.UMLAUT_MASTER in engine.check_achievements()

    @pytest.mark.parametrize(
        ("expected", "actual", "kind"),
        [
            ("A", "a", "case"),
            ("ö", "o", "umlaut"),
            ("!", "1", "special"),
            ("k", "l", "wrong_key"),
        ],
    )
    def test_classify_error(self, expected, actual, kind):
        assert classify_error(expected, actual) == kind


class TestBackspace:
    def test_undo_error(self, make_engine, clock):
        engine = make_engine("ab cd")
        type_text(engine, clock, ["a", "x"])

        result = engine.handle_backspace()

        assert result.changed
        assert (result.word_index, result.char_index) == (0, 1)
        assert engine.error_positions == []
        assert engine.get_metrics().incorrect_characters == 0

    def test_undo_to_start(self, make_engine, clock):
        engine = make_engine("ab")
        type_text(engine, clock, ["a"])
        engine.handle_backspace()

        assert engine.start_time is None
        assert engine.current_char.typed is None
        assert engine.current_char.is_correct is None
        assert not engine.handle_backspace().changed

    def test_crosses_word_boundary(self, make_engine, clock):
        engine = make_engine("ab cd")
        type_text(engine, clock, ["a", "b", " "])
        assert engine.word_index == 1

        result = engine.handle_backspace()

        assert (result.word_index, result.char_index) == (0, 2)
        assert not engine.words[0].is_complete
        assert engine.word_timings == []

    def test_ignored_after_completion(self, make_engine, clock):
        engine = make_engine("ab")
        type_text(engine, clock, ["a", "b"])
        assert not engine.handle_backspace().changed
        assert engine.is_complete()


def test_reset_with_new_text(make_engine, clock):
    engine = make_engine("ab")
    type_text(engine, clock, ["a", "b"])
    before = engine.version

    version = engine.reset("cd ef")

    assert version == before + 1
    assert not engine.is_complete()
    assert engine.current_char.expected == "c"
    assert engine.get_metrics().correct_characters == 0


def test_visible_words_window(make_engine, clock):
    engine = make_engine("eins zwei drei vier fünf sechs sieben")
    window = engine.visible_words()
    assert [w.word for w in window.words] == ["eins", "zwei", "drei", "vier", "fünf"]
    assert window.current_index == 0

    type_text(engine, clock, "eins zwei ")
    window = engine.visible_words()
    assert [w.word for w in window.words][0] == "zwei"
    assert window.current_index == 1


def test_hints_escalate_and_reset(make_engine, clock):
    hints = HintSystem(HintOptions(level1_threshold=2, level2_threshold=3, level3_threshold=4))
    engine = make_engine("ab", hints=hints)

    results = type_text(engine, clock, ["x", "x", "x", "x"])
    assert [r.hint.level for r in results] == [0, 1, 2, 3]
    assert results[-1].hint.message == 'Press the "a" key!'

    engine.process_input("a")
    assert hints.state.level == 0
    assert hints.state.error_count == 0
