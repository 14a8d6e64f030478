"""Tests for math problem generation, sessions and results."""

import random
from datetime import datetime

import pytest

from practice_engine.errors import SessionCompleteError
from practice_engine.math_practice import engine as math_engine
from practice_engine.math_practice.engine import (
    MathEngine,
    calculate_results,
    create_session,
    detect_zehneruebergang,
    generate_local_feedback,
    generate_problem,
    generate_problems,
    get_current_problem,
    is_session_complete,
    record_answer,
)
from practice_engine.math_practice.feedback import (
    ENCOURAGEMENT_PHRASES,
    INCORRECT_MESSAGE,
    SUCCESS_PHRASES,
)
from practice_engine.models.math_challenge import (
    MathDifficulty,
    MathOperation,
    MathProblem,
    MathProblemConfig,
    MathProblemType,
    UnknownPosition,
)

NOW = datetime(2026, 6, 1, 9, 0)


def problem(left, right, operation=MathOperation.ADDITION, unknown=UnknownPosition.RESULT, problem_id=None):
    result = left + right if operation is MathOperation.ADDITION else left - right
    answer = {UnknownPosition.LEFT: left, UnknownPosition.RIGHT: right, UnknownPosition.RESULT: result}
    return MathProblem(
        id=problem_id or f"p-{left}-{right}",
        type=MathProblemType(f"{operation.value}_{unknown.value}"),
        operation=operation,
        display="",
        left_operand=left,
        right_operand=right,
        result=result,
        unknown_position=unknown,
        correct_answer=answer[unknown],
        has_zehneruebergang=detect_zehneruebergang(left, right, operation),
        difficulty=MathDifficulty.EASY,
    )


@pytest.mark.parametrize(
    ("a", "b", "operation", "expected"),
    [
        (7, 5, MathOperation.ADDITION, True),
        (3, 4, MathOperation.ADDITION, False),
        (5, 5, MathOperation.ADDITION, True),
        (13, 5, MathOperation.SUBTRACTION, True),
        (15, 3, MathOperation.SUBTRACTION, False),
        (20, 1, MathOperation.SUBTRACTION, True),
        (47, 8, MathOperation.ADDITION, True),
    ],
)
def test_detect_zehneruebergang(a, b, operation, expected):
    assert detect_zehneruebergang(a, b, operation) is expected


class TestGenerateProblem:
    @pytest.mark.parametrize("difficulty", list(MathDifficulty))
    def test_problems_are_well_formed(self, difficulty):
        rng = random.Random(99)
        bounds = math_engine.get_difficulty_range(difficulty)
        for _ in range(200):
            p = generate_problem(difficulty, rng=rng)
            for value in (p.left_operand, p.right_operand, p.result):
                assert bounds.min <= value <= bounds.max
            if p.operation is MathOperation.ADDITION:
                assert p.left_operand + p.right_operand == p.result
            else:
                assert p.left_operand - p.right_operand == p.result
            slots = {
                UnknownPosition.LEFT: p.left_operand,
                UnknownPosition.RIGHT: p.right_operand,
                UnknownPosition.RESULT: p.result,
            }
            assert p.correct_answer == slots[p.unknown_position]
            assert p.type.operation is p.operation
            assert p.display.count("__") == 1
            assert p.has_zehneruebergang == detect_zehneruebergang(
                p.left_operand, p.right_operand, p.operation
            )

    def test_display(self):
        rng = random.Random(3)
        p = generate_problem(
            operations=[MathOperation.SUBTRACTION], target_zehneruebergang=True, rng=rng
        )
        slots = {
            UnknownPosition.LEFT: f"__ - {p.right_operand} = {p.result}",
            UnknownPosition.RIGHT: f"{p.left_operand} - __ = {p.result}",
            UnknownPosition.RESULT: f"{p.left_operand} - {p.right_operand} = __",
        }
        assert p.display == slots[p.unknown_position]

    def test_target_crossing(self):
        rng = random.Random(5)
        assert all(generate_problem(target_zehneruebergang=True, rng=rng).has_zehneruebergang for _ in range(30))
        assert not any(
            generate_problem(target_zehneruebergang=False, rng=rng).has_zehneruebergang
            for _ in range(30)
        )

    def test_excluding_crossing(self):
        rng = random.Random(8)
        problems = [generate_problem(include_zehneruebergang=False, rng=rng) for _ in range(30)]
        assert not any(p.has_zehneruebergang for p in problems)

    def test_same_seed_same_problem(self):
        first = generate_problem(MathDifficulty.HARD, rng=random.Random(17))
        second = generate_problem(MathDifficulty.HARD, rng=random.Random(17))
        assert first == second


class TestGenerateProblems:
    def test_crossing_ratio(self):
        config = MathProblemConfig(count=10)
        problems = generate_problems(config, rng=random.Random(21))
        assert len(problems) == 10
        assert sum(p.has_zehneruebergang for p in problems) == 4

    def test_ratio_rounds_up(self):
        config = MathProblemConfig(count=3)
        problems = generate_problems(config, rng=random.Random(22))
        assert sum(p.has_zehneruebergang for p in problems) == 2

    def test_without_crossing(self):
        config = MathProblemConfig(count=8, include_zehneruebergang=False)
        problems = generate_problems(config, rng=random.Random(23))
        assert not any(p.has_zehneruebergang for p in problems)

    def test_single_operation(self):
        config = MathProblemConfig(count=6, operations=[MathOperation.SUBTRACTION])
        problems = generate_problems(config, rng=random.Random(24))
        assert {p.operation for p in problems} == {MathOperation.SUBTRACTION}


class TestFeedback:
    def test_correct(self):
        feedback = generate_local_feedback(problem(3, 4), 7, random.Random(1))
        assert feedback.is_correct
        assert feedback.message in SUCCESS_PHRASES
        assert feedback.explanation is None

    def test_correct_with_crossing(self):
        feedback = generate_local_feedback(problem(7, 5), 12, random.Random(1))
        assert feedback.message.endswith("Du hast den Zehnerübergang super gemeistert!")

    def test_incorrect(self):
        feedback = generate_local_feedback(problem(7, 5), 11, random.Random(1))
        assert not feedback.is_correct
        assert feedback.message == INCORRECT_MESSAGE
        assert feedback.explanation.split(" ")[0] in {p.split(" ")[0] for p in ENCOURAGEMENT_PHRASES}
        assert "Du warst ganz nah dran!" in feedback.explanation
        assert feedback.explanation.endswith("10 + 2 = 12.")

    def test_incorrect_missing_operand_explains_full_sum(self):
        p = problem(7, 5, unknown=UnknownPosition.LEFT)
        feedback = generate_local_feedback(p, 6, random.Random(1))
        assert feedback.explanation.endswith("7 + 3 = 10, dann noch 2 dazu: 10 + 2 = 12.")


class TestSession:
    def make_session(self, problems, difficulty=MathDifficulty.EASY):
        config = MathProblemConfig(difficulty=difficulty, count=len(problems))
        return create_session("student-1", config, rng=random.Random(4), now=NOW, problems=problems)

    def test_answer_flow(self):
        session = self.make_session([problem(3, 4), problem(7, 5)])
        assert get_current_problem(session).left_operand == 3

        first = record_answer(session, 7, 1000, rng=random.Random(1), now=NOW)
        assert first.feedback.is_correct
        assert not first.is_complete
        assert first.session.current_index == 1
        assert session.current_index == 0
        assert session.answers == ()

        second = record_answer(first.session, 12, 2000, rng=random.Random(1), now=NOW)
        assert second.is_complete
        assert second.session.completed_at == NOW
        assert is_session_complete(second.session)
        assert get_current_problem(second.session) is None

        with pytest.raises(SessionCompleteError):
            record_answer(second.session, 1, 1000)

    def test_results_perfect_with_crossing(self):
        session = self.make_session([problem(3, 4), problem(7, 5)])
        session = record_answer(session, 7, 1000, now=NOW).session
        session = record_answer(session, 12, 2001, now=NOW).session

        results = calculate_results(session, now=NOW)

        assert results.correct_answers == 2
        assert results.accuracy == 100.0
        assert results.xp_earned == 30
        assert results.average_time_per_problem_ms == 1501
        assert results.total_time_spent_ms == 3001

    def test_results_medium_eighty_percent(self):
        problems = [problem(2, 3, problem_id=f"p{i}") for i in range(5)]
        session = self.make_session(problems, MathDifficulty.MEDIUM)
        for answer in (5, 5, 5, 5, 9):
            session = record_answer(session, answer, 1000, now=NOW).session

        results = calculate_results(session, now=NOW)

        assert results.accuracy == 80.0
        assert results.xp_earned == 66
        assert results.incorrect_answers == 1

    def test_results_accuracy_one_decimal(self):
        problems = [problem(1, 1, problem_id=f"p{i}") for i in range(3)]
        session = self.make_session(problems)
        for answer in (2, 2, 3):
            session = record_answer(session, answer, 1000, now=NOW).session

        results = calculate_results(session, now=NOW)

        assert results.accuracy == 66.7
        assert results.xp_earned == 20

    def test_results_empty_session(self):
        results = calculate_results(self.make_session([problem(1, 1)]), now=NOW)
        assert results.accuracy == 0
        assert results.xp_earned == 0
        assert results.average_time_per_problem_ms == 0


class TestMathEngine:
    def test_session_uses_settings(self, settings):
        engine = MathEngine(rng=random.Random(30), settings=settings)
        session = engine.create_session("student-1")

        assert len(session.problems) == settings.math_problem_count
        assert session.config.difficulty is MathDifficulty.EASY
        assert sum(p.has_zehneruebergang for p in session.problems) == 4

    def test_default_config_overrides(self, settings):
        engine = MathEngine(rng=random.Random(31), settings=settings)
        config = engine.default_config(count=3, difficulty=MathDifficulty.HARD)
        assert config.count == 3
        assert config.difficulty is MathDifficulty.HARD

    def test_spoken_problem(self, settings):
        engine = MathEngine(rng=random.Random(32), settings=settings)
        assert engine.spoken_problem(problem(7, 5)) == "sieben plus fünf ist gleich?"

    def test_record_answer(self, settings):
        engine = MathEngine(rng=random.Random(33), settings=settings)
        session = engine.create_session("student-1", engine.default_config(count=1))
        current = engine.get_current_problem(session)

        result = engine.record_answer(session, current.correct_answer, 1500)

        assert result.is_complete
        assert engine.calculate_results(result.session).correct_answers == 1
