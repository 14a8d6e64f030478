"""Addition and subtraction drills with tens-crossing (Zehnerübergang) control."""

import math
import random
import uuid
from collections.abc import Sequence
from datetime import datetime

import structlog

from practice_engine.config import Settings, get_settings
from practice_engine.errors import SessionCompleteError
from practice_engine.math_practice import feedback
from practice_engine.models.math_challenge import (
    DIFFICULTY_RANGES,
    DifficultyRange,
    MathAnswer,
    MathDifficulty,
    MathFeedback,
    MathOperation,
    MathProblem,
    MathProblemConfig,
    MathProblemType,
    MathSession,
    MathSessionResults,
    RecordAnswerResult,
    UnknownPosition,
)
from practice_engine.utils import round_half_up

logger = structlog.get_logger()

MAX_GENERATION_ATTEMPTS = 50
ZEHNERUEBERGANG_RATIO = 0.4
BASE_XP_PER_CORRECT = 10
ZEHNERUEBERGANG_XP_BONUS = 5
DIFFICULTY_XP_MULTIPLIER: dict[MathDifficulty, float] = {
    MathDifficulty.EASY: 1,
    MathDifficulty.MEDIUM: 1.5,
    MathDifficulty.HARD: 2,
}

ALL_OPERATIONS = (MathOperation.ADDITION, MathOperation.SUBTRACTION)


def get_difficulty_range(difficulty: MathDifficulty) -> DifficultyRange:
    return DIFFICULTY_RANGES[MathDifficulty(difficulty)]


def detect_zehneruebergang(a: int, b: int, operation: MathOperation) -> bool:
    """True when the result lands in a different ten than ``a``.

    >>> detect_zehneruebergang(7, 5, MathOperation.ADDITION)
    True
    """
    tens_a = math.floor(a / 10)
    if operation is MathOperation.ADDITION:
        return math.floor((a + b) / 10) > tens_a
    return math.floor((a - b) / 10) < tens_a


def _new_id(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def _display(problem_type: MathProblemType, left: int, right: int, result: int) -> str:
    symbol = problem_type.operation.symbol
    slots = {
        UnknownPosition.LEFT: ("__", right, result),
        UnknownPosition.RIGHT: (left, "__", result),
        UnknownPosition.RESULT: (left, right, "__"),
    }
    a, b, r = slots[problem_type.unknown_position]
    return f"{a} {symbol} {b} = {r}"


def _draw_operands(
    operation: MathOperation, bounds: DifficultyRange, rng: random.Random
) -> tuple[int, int, int]:
    """Operands and result, all inside ``bounds``."""
    low, high = bounds.min, bounds.max
    if operation is MathOperation.ADDITION:
        left = rng.randint(low, high - low)
        right = rng.randint(low, high - left)
        return left, right, left + right
    left = rng.randint(2 * low, high)
    right = rng.randint(low, left - low)
    return left, right, left - right


def generate_problem(
    difficulty: MathDifficulty = MathDifficulty.EASY,
    include_zehneruebergang: bool = True,
    operations: Sequence[MathOperation] = ALL_OPERATIONS,
    target_zehneruebergang: bool | None = None,
    rng: random.Random | None = None,
    max_attempts: int = MAX_GENERATION_ATTEMPTS,
) -> MathProblem:
    """Generate one problem.

    Operands are redrawn until the tens-crossing requirement is met or
    ``max_attempts`` is used up; in the latter case the last draw is returned.

    Args:
        difficulty: Selects the number range.
        include_zehneruebergang: Whether tens-crossing problems are allowed
            when no target is given.
        operations: Operations to pick from.
        target_zehneruebergang: Require (True) or forbid (False) tens crossing.
        rng: Random source; the module-level generator when omitted.
        max_attempts: Upper bound on redraws.
    """
    rng = rng or random.Random()
    difficulty = MathDifficulty(difficulty)
    bounds = get_difficulty_range(difficulty)
    operation = MathOperation(rng.choice(list(operations)))
    problem_type = rng.choice(MathProblemType.for_operation(operation))

    for _ in range(max_attempts):
        left, right, result = _draw_operands(operation, bounds, rng)
        crosses = detect_zehneruebergang(left, right, operation)
        if target_zehneruebergang is not None:
            if crosses == target_zehneruebergang:
                break
        elif include_zehneruebergang or not crosses:
            break

    correct_answer = {
        UnknownPosition.LEFT: left,
        UnknownPosition.RIGHT: right,
        UnknownPosition.RESULT: result,
    }[problem_type.unknown_position]

    return MathProblem(
        id=_new_id(rng),
        type=problem_type,
        operation=operation,
        display=_display(problem_type, left, right, result),
        left_operand=left,
        right_operand=right,
        result=result,
        unknown_position=problem_type.unknown_position,
        correct_answer=correct_answer,
        has_zehneruebergang=crosses,
        difficulty=difficulty,
    )


def generate_problems(
    config: MathProblemConfig,
    rng: random.Random | None = None,
    ratio: float = ZEHNERUEBERGANG_RATIO,
    max_attempts: int = MAX_GENERATION_ATTEMPTS,
) -> list[MathProblem]:
    """A shuffled batch: ``ceil(ratio * count)`` tens-crossing problems when
    allowed, the rest without crossing."""
    rng = rng or random.Random()
    crossing_count = math.ceil(config.count * ratio) if config.include_zehneruebergang else 0

    problems = [
        generate_problem(
            config.difficulty,
            True,
            config.operations,
            target_zehneruebergang=True,
            rng=rng,
            max_attempts=max_attempts,
        )
        for _ in range(min(crossing_count, config.count))
    ]
    while len(problems) < config.count:
        problems.append(
            generate_problem(
                config.difficulty,
                config.include_zehneruebergang,
                config.operations,
                target_zehneruebergang=False,
                rng=rng,
                max_attempts=max_attempts,
            )
        )

    # Fisher-Yates
    for i in range(len(problems) - 1, 0, -1):
        j = rng.randint(0, i)
        problems[i], problems[j] = problems[j], problems[i]
    return problems


def evaluate_answer(problem: MathProblem, answer: int) -> bool:
    return answer == problem.correct_answer


def generate_local_feedback(
    problem: MathProblem, answer: int, rng: random.Random | None = None
) -> MathFeedback:
    """German praise, or encouragement plus a worked explanation."""
    if evaluate_answer(problem, answer):
        return MathFeedback(
            is_correct=True,
            message=feedback.correct_explanation(problem.has_zehneruebergang, rng),
        )
    return MathFeedback(
        is_correct=False,
        message=feedback.INCORRECT_MESSAGE,
        explanation=feedback.incorrect_explanation(
            problem.left_operand,
            problem.right_operand,
            problem.operation,
            problem.result,
            problem.correct_answer,
            answer,
            problem.has_zehneruebergang,
            rng,
        ),
    )


def create_session(
    student_id: str,
    config: MathProblemConfig,
    rng: random.Random | None = None,
    now: datetime | None = None,
    problems: Sequence[MathProblem] | None = None,
) -> MathSession:
    """Start a session; problems are generated from ``config`` unless given."""
    rng = rng or random.Random()
    if problems is None:
        problems = generate_problems(config, rng)
    session = MathSession(
        id=_new_id(rng),
        student_id=student_id,
        problems=tuple(problems),
        started_at=now or datetime.now(),
        config=config,
    )
    logger.info(
        "math_session_created",
        session_id=session.id,
        student_id=student_id,
        difficulty=config.difficulty.value,
        problems=len(session.problems),
    )
    return session


def get_current_problem(session: MathSession) -> MathProblem | None:
    if session.current_index < len(session.problems):
        return session.problems[session.current_index]
    return None


def is_session_complete(session: MathSession) -> bool:
    return session.current_index >= len(session.problems)


def record_answer(
    session: MathSession,
    answer: int,
    time_spent_ms: float,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> RecordAnswerResult:
    """Answer the current problem. The session is not modified; a copy is returned.

    Raises:
        SessionCompleteError: If every problem has already been answered.
    """
    problem = get_current_problem(session)
    if problem is None:
        raise SessionCompleteError(session.id)

    now = now or datetime.now()
    result_feedback = generate_local_feedback(problem, answer, rng)
    math_answer = MathAnswer(
        problem_id=problem.id,
        answer=answer,
        is_correct=result_feedback.is_correct,
        time_spent_ms=time_spent_ms,
        feedback=result_feedback,
        answered_at=now,
    )

    update: dict = {
        "answers": session.answers + (math_answer,),
        "current_index": session.current_index + 1,
    }
    is_complete = update["current_index"] >= len(session.problems)
    if is_complete:
        update["completed_at"] = now
        logger.info("math_session_completed", session_id=session.id, student_id=session.student_id)

    return RecordAnswerResult(
        session=session.model_copy(update=update),
        feedback=result_feedback,
        is_complete=is_complete,
    )


def calculate_results(session: MathSession, now: datetime | None = None) -> MathSessionResults:
    """Accuracy, timing and XP for the answers given so far."""
    answers = session.answers
    difficulty = session.config.difficulty
    problems_by_id = {p.id: p for p in session.problems}

    correct = sum(1 for a in answers if a.is_correct)
    total_time = sum(a.time_spent_ms for a in answers)
    average_time = total_time / len(answers) if answers else 0
    accuracy = correct / len(answers) * 100 if answers else 0

    xp = 0.0
    for answer in answers:
        if not answer.is_correct:
            continue
        xp += BASE_XP_PER_CORRECT * DIFFICULTY_XP_MULTIPLIER[difficulty]
        problem = problems_by_id.get(answer.problem_id)
        if problem is not None and problem.has_zehneruebergang:
            xp += ZEHNERUEBERGANG_XP_BONUS

    if accuracy == 100:
        xp *= 1.2
    elif accuracy >= 80:
        xp *= 1.1

    return MathSessionResults(
        session_id=session.id,
        student_id=session.student_id,
        total_problems=len(session.problems),
        correct_answers=correct,
        incorrect_answers=len(answers) - correct,
        accuracy=round_half_up(accuracy * 10) / 10,
        total_time_spent_ms=total_time,
        average_time_per_problem_ms=round_half_up(average_time),
        xp_earned=round_half_up(xp),
        difficulty=difficulty,
        includes_zehneruebergang=session.config.include_zehneruebergang,
        completed_at=now or datetime.now(),
        answers=list(answers),
    )


class MathEngine:
    """Math drill operations bound to one random source and settings.

    Args:
        rng: Random source for problems, ids and phrase choice.
        settings: Supplies the retry budget, tens-crossing ratio and defaults.
    """

    def __init__(self, rng: random.Random | None = None, settings: Settings | None = None):
        self.rng = rng or random.Random()
        self.settings = settings or get_settings()

    def default_config(self, **overrides) -> MathProblemConfig:
        values = {
            "difficulty": MathDifficulty(self.settings.math_default_difficulty),
            "count": self.settings.math_problem_count,
        }
        values.update(overrides)
        return MathProblemConfig(**values)

    def generate_problem(
        self,
        difficulty: MathDifficulty = MathDifficulty.EASY,
        include_zehneruebergang: bool = True,
        operations: Sequence[MathOperation] = ALL_OPERATIONS,
        target_zehneruebergang: bool | None = None,
    ) -> MathProblem:
        return generate_problem(
            difficulty,
            include_zehneruebergang,
            operations,
            target_zehneruebergang,
            rng=self.rng,
            max_attempts=self.settings.math_max_generation_attempts,
        )

    def generate_problems(self, config: MathProblemConfig | None = None) -> list[MathProblem]:
        return generate_problems(
            config or self.default_config(),
            rng=self.rng,
            ratio=self.settings.math_zehneruebergang_ratio,
            max_attempts=self.settings.math_max_generation_attempts,
        )

    def create_session(
        self, student_id: str, config: MathProblemConfig | None = None
    ) -> MathSession:
        config = config or self.default_config()
        return create_session(
            student_id, config, rng=self.rng, problems=self.generate_problems(config)
        )

    def record_answer(
        self, session: MathSession, answer: int, time_spent_ms: float
    ) -> RecordAnswerResult:
        return record_answer(session, answer, time_spent_ms, rng=self.rng)

    def generate_local_feedback(self, problem: MathProblem, answer: int) -> MathFeedback:
        return generate_local_feedback(problem, answer, rng=self.rng)

    def spoken_problem(self, problem: MathProblem) -> str:
        return feedback.spoken_problem(
            problem.left_operand,
            problem.right_operand,
            problem.operation,
            problem.unknown_position,
        )

    evaluate_answer = staticmethod(evaluate_answer)
    detect_zehneruebergang = staticmethod(detect_zehneruebergang)
    calculate_results = staticmethod(calculate_results)
    get_current_problem = staticmethod(get_current_problem)
    is_session_complete = staticmethod(is_session_complete)
    get_difficulty_range = staticmethod(get_difficulty_range)
