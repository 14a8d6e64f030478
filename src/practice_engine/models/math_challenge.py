"""Math challenge models (addition/subtraction drills)."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class MathOperation(StrEnum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"

    @property
    def symbol(self) -> str:
        return "+" if self is MathOperation.ADDITION else "-"


class UnknownPosition(StrEnum):
    LEFT = "left"
    RIGHT = "right"
    RESULT = "result"


class MathProblemType(StrEnum):
    """Operation plus which slot the learner fills in."""

    ADDITION_LEFT = "addition_left"  # __ + 35 = 47
    ADDITION_RIGHT = "addition_right"  # 35 + __ = 47
    ADDITION_RESULT = "addition_result"  # 34 + 12 = __
    SUBTRACTION_LEFT = "subtraction_left"  # __ - 35 = 12
    SUBTRACTION_RIGHT = "subtraction_right"  # 67 - __ = 23
    SUBTRACTION_RESULT = "subtraction_result"  # 45 - 12 = __

    @classmethod
    def for_operation(cls, operation: MathOperation) -> list["MathProblemType"]:
        return [t for t in cls if t.value.startswith(operation.value)]

    @property
    def operation(self) -> MathOperation:
        return MathOperation(self.value.split("_")[0])

    @property
    def unknown_position(self) -> UnknownPosition:
        return UnknownPosition(self.value.split("_")[1])


class MathDifficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class DifficultyRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int
    max: int
    label: str
    label_de: str


DIFFICULTY_RANGES: dict[MathDifficulty, DifficultyRange] = {
    MathDifficulty.EASY: DifficultyRange(min=1, max=20, label="Easy", label_de="Leicht"),
    MathDifficulty.MEDIUM: DifficultyRange(min=1, max=50, label="Medium", label_de="Mittel"),
    MathDifficulty.HARD: DifficultyRange(min=1, max=100, label="Hard", label_de="Schwer"),
}


class MathProblem(BaseModel):
    """A generated problem; immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: MathProblemType
    operation: MathOperation
    display: str
    left_operand: int
    right_operand: int
    result: int
    unknown_position: UnknownPosition
    correct_answer: int
    has_zehneruebergang: bool
    difficulty: MathDifficulty


class MathProblemConfig(BaseModel):
    difficulty: MathDifficulty = MathDifficulty.EASY
    count: int = Field(default=10, ge=0)
    include_zehneruebergang: bool = True
    operations: list[MathOperation] = Field(
        default_factory=lambda: [MathOperation.ADDITION, MathOperation.SUBTRACTION]
    )


class MathFeedback(BaseModel):
    """German feedback for one answer."""

    model_config = ConfigDict(frozen=True)

    is_correct: bool
    message: str
    explanation: str | None = None


class MathAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    problem_id: str
    answer: int
    is_correct: bool
    time_spent_ms: float = Field(ge=0)
    feedback: MathFeedback | None = None
    answered_at: datetime = Field(default_factory=datetime.now)


class MathSession(BaseModel):
    """A drill session; treated as immutable, updates return a copy."""

    model_config = ConfigDict(frozen=True)

    id: str
    student_id: str
    problems: tuple[MathProblem, ...]
    current_index: int = 0
    answers: tuple[MathAnswer, ...] = ()
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = None
    config: MathProblemConfig


class MathSessionResults(BaseModel):
    session_id: str
    student_id: str
    total_problems: int
    correct_answers: int
    incorrect_answers: int
    accuracy: float  # percent, one decimal
    total_time_spent_ms: float
    average_time_per_problem_ms: int
    xp_earned: int
    difficulty: MathDifficulty
    includes_zehneruebergang: bool
    completed_at: datetime = Field(default_factory=datetime.now)
    answers: list[MathAnswer] = Field(default_factory=list)


class RecordAnswerResult(BaseModel):
    session: MathSession
    feedback: MathFeedback
    is_complete: bool
