"""Typing practice state and result models."""

from enum import StrEnum

from pydantic import BaseModel, Field


class CharacterState(BaseModel):
    """One expected character; ``is_correct`` is None until typed."""

    expected: str
    typed: str | None = None
    is_correct: bool | None = None
    timestamp: float | None = None


class WordState(BaseModel):
    word: str
    characters: list[CharacterState] = Field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    errors: int = 0
    is_complete: bool = False


class ErrorPosition(BaseModel):
    """A mistyped keystroke."""

    position: int  # absolute character offset in the text
    word_index: int
    char_index: int
    expected: str
    actual: str
    timestamp: float


class WordTiming(BaseModel):
    word: str
    time_ms: float
    errors: int


class TypingMetrics(BaseModel):
    words_typed: int = 0
    characters_typed: int = 0
    correct_characters: int = 0
    incorrect_characters: int = 0
    total_time_ms: float = 0.0
    average_wpm: int = 0
    accuracy: int = 100  # percent

    # Error breakdown
    uppercase_errors: int = 0
    umlaut_errors: int = 0
    special_char_errors: int = 0
    wrong_key_errors: int = 0


class TypingAchievement(StrEnum):
    PERFECT_TYPING = "perfect_typing"
    SPEED_DEMON = "speed_demon"
    UMLAUT_MASTER = "umlaut_master"
    FIRST_COMPLETION = "first_completion"


class KeyZone(StrEnum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class KeyFinger(StrEnum):
    LEFT_PINKY = "left-pinky"
    LEFT_RING = "left-ring"
    LEFT_MIDDLE = "left-middle"
    LEFT_INDEX = "left-index"
    RIGHT_INDEX = "right-index"
    RIGHT_MIDDLE = "right-middle"
    RIGHT_RING = "right-ring"
    RIGHT_PINKY = "right-pinky"
    THUMB = "thumb"


class HintState(BaseModel):
    """Snapshot of the escalating hint state for the current character."""

    level: int = Field(default=0, ge=0, le=3)
    error_count: int = 0
    zone: KeyZone | None = None
    finger: KeyFinger | None = None
    key: str | None = None
    message: str | None = None


class InputResult(BaseModel):
    """Outcome of one keystroke."""

    is_correct: bool
    accepted: bool = True  # False when the engine was already complete
    word_index: int
    char_index: int
    word_completed: bool = False
    is_complete: bool = False
    version: int
    hint: HintState | None = None


class BackspaceResult(BaseModel):
    changed: bool
    word_index: int
    char_index: int
    version: int
