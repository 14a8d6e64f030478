"""Character-by-character typing challenge state machine."""

import time
from collections.abc import Callable

import structlog
from pydantic import BaseModel

from practice_engine.config import Settings, get_settings
from practice_engine.models.typing_session import (
    BackspaceResult,
    CharacterState,
    ErrorPosition,
    InputResult,
    TypingAchievement,
    TypingMetrics,
    WordState,
    WordTiming,
)
from practice_engine.typing_practice.hints import HintSystem
from practice_engine.utils import round_half_up

logger = structlog.get_logger()

UMLAUTS = frozenset("äöüÄÖÜß")
SPECIAL_CHARS = frozenset(".,!?;:\"'-")

Clock = Callable[[], float]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class _Keystroke(BaseModel):
    """Everything needed to undo one keystroke."""

    word_index: int
    char_index: int
    is_correct: bool
    previous_char: CharacterState
    previous_word_start: float | None
    previous_start_time: float | None
    advanced: bool
    word_completed: bool


class VisibleWords(BaseModel):
    words: list[WordState]
    current_index: int


def build_words(text: str) -> list[WordState]:
    """Split on spaces; every word but the last keeps a trailing space."""
    words = [w for w in text.split(" ") if w]
    states = []
    for index, word in enumerate(words):
        chars = word + " " if index < len(words) - 1 else word
        states.append(
            WordState(word=word, characters=[CharacterState(expected=c) for c in chars])
        )
    return states


def classify_error(expected: str, actual: str) -> str:
    """Bucket a mistyped character: case, umlaut, special or wrong_key."""
    if expected.lower() == actual.lower():
        return "case"
    if expected in UMLAUTS or actual in UMLAUTS:
        return "umlaut"
    if expected in SPECIAL_CHARS or actual in SPECIAL_CHARS:
        return "special"
    return "wrong_key"


class TypingEngine:
    """Tracks input against a target text.

    A wrong keystroke is recorded as an error and the cursor stays on the
    expected character until it is typed correctly, unless
    ``advance_on_error`` is set. Every call that mutates state bumps
    ``version`` and reports it in its result.

    Args:
        text: Text to type.
        hints: Optional hint system, kept pointed at the expected character.
        advance_on_error: Move past mistyped characters.
        clock: Millisecond clock; defaults to ``time.monotonic``.
        settings: Supplies the default for ``advance_on_error`` and base XP.
    """

    def __init__(
        self,
        text: str,
        *,
        hints: HintSystem | None = None,
        advance_on_error: bool | None = None,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.hints = hints
        self.advance_on_error = (
            self.settings.typing_advance_on_error if advance_on_error is None else advance_on_error
        )
        self._clock = clock or _monotonic_ms
        self.version = 0
        self._load(text)

    def _load(self, text: str) -> None:
        self.text = text
        self.words = build_words(text)
        self.word_index = 0
        self.char_index = 0
        self.start_time: float | None = None
        self.end_time: float | None = None
        self.total_correct = 0
        self.total_errors = 0
        self._complete = not self.words
        self._errors: list[ErrorPosition] = []
        self._timings: list[WordTiming] = []
        self._journal: list[_Keystroke] = []
        self._sync_hints()

    def process_input(self, char: str) -> InputResult:
        """Compare one typed character with the expected one."""
        if self._complete:
            return InputResult(
                is_correct=False,
                accepted=False,
                word_index=self.word_index,
                char_index=self.char_index,
                is_complete=True,
                version=self.version,
            )

        now = self._clock()
        word = self.words[self.word_index]
        current = word.characters[self.char_index]
        is_correct = char == current.expected
        advanced = is_correct or self.advance_on_error

        entry = _Keystroke(
            word_index=self.word_index,
            char_index=self.char_index,
            is_correct=is_correct,
            previous_char=current.model_copy(),
            previous_word_start=word.start_time,
            previous_start_time=self.start_time,
            advanced=advanced,
            word_completed=False,
        )

        if self.start_time is None:
            self.start_time = now
        if word.start_time is None:
            word.start_time = now

        current.typed = char
        current.is_correct = is_correct
        current.timestamp = now

        hint = None
        if is_correct:
            self.total_correct += 1
        else:
            self.total_errors += 1
            word.errors += 1
            self._errors.append(
                ErrorPosition(
                    position=self._absolute_offset(),
                    word_index=self.word_index,
                    char_index=self.char_index,
                    expected=current.expected,
                    actual=char,
                    timestamp=now,
                )
            )
            if self.hints is not None:
                hint = self.hints.record_error()

        if advanced:
            self.char_index += 1
            if self.char_index >= len(word.characters):
                entry.word_completed = True
                word.is_complete = True
                word.end_time = now
                self._timings.append(
                    WordTiming(word=word.word, time_ms=now - word.start_time, errors=word.errors)
                )
                self.word_index += 1
                self.char_index = 0
                if self.word_index >= len(self.words):
                    self._complete = True
                    self.end_time = now
            if self.hints is not None:
                self.hints.record_correct()
                self._sync_hints()

        self._journal.append(entry)
        self.version += 1

        if self._complete:
            metrics = self.get_metrics()
            logger.info(
                "typing_completed",
                words=len(self.words),
                accuracy=metrics.accuracy,
                wpm=metrics.average_wpm,
                errors=self.total_errors,
            )

        return InputResult(
            is_correct=is_correct,
            word_index=entry.word_index,
            char_index=entry.char_index,
            word_completed=entry.word_completed,
            is_complete=self._complete,
            version=self.version,
            hint=hint,
        )

    def handle_backspace(self) -> BackspaceResult:
        """Undo the most recent keystroke, crossing word boundaries.

        Nothing changes once the text is complete or before the first keystroke.
        """
        if self._complete or not self._journal:
            return BackspaceResult(
                changed=False,
                word_index=self.word_index,
                char_index=self.char_index,
                version=self.version,
            )

        entry = self._journal.pop()
        word = self.words[entry.word_index]

        if entry.word_completed:
            word.is_complete = False
            word.end_time = None
            self._timings.pop()

        if entry.is_correct:
            self.total_correct -= 1
        else:
            self.total_errors -= 1
            word.errors -= 1
            self._errors.pop()

        word.characters[entry.char_index] = entry.previous_char
        word.start_time = entry.previous_word_start
        self.start_time = entry.previous_start_time
        self.word_index = entry.word_index
        self.char_index = entry.char_index
        self._sync_hints()

        self.version += 1
        return BackspaceResult(
            changed=True,
            word_index=self.word_index,
            char_index=self.char_index,
            version=self.version,
        )

    def reset(self, text: str | None = None) -> int:
        """Start over, optionally with a new text. Returns the new version."""
        self._load(text if text else self.text)
        if self.hints is not None:
            self.hints.reset()
            self._sync_hints()
        self.version += 1
        return self.version

    def _sync_hints(self) -> None:
        if self.hints is not None:
            current = self.current_char
            self.hints.set_current_char(current.expected if current else None)

    def _absolute_offset(self) -> int:
        done = sum(len(w.characters) for w in self.words[: self.word_index])
        return done + self.char_index

    @property
    def current_word(self) -> WordState | None:
        if not self.words:
            return None
        return self.words[min(self.word_index, len(self.words) - 1)]

    @property
    def current_char(self) -> CharacterState | None:
        if self._complete:
            return None
        return self.words[self.word_index].characters[self.char_index]

    @property
    def error_positions(self) -> list[ErrorPosition]:
        return list(self._errors)

    @property
    def word_timings(self) -> list[WordTiming]:
        return list(self._timings)

    def is_complete(self) -> bool:
        return self._complete

    def visible_words(self, window: int = 5) -> VisibleWords:
        """Sliding window starting one word behind the cursor."""
        start = max(0, self.word_index - 1)
        end = min(len(self.words), start + window)
        return VisibleWords(words=self.words[start:end], current_index=self.word_index - start)

    @property
    def progress(self) -> int:
        """Percentage of the text's characters typed."""
        total = sum(len(w.characters) for w in self.words)
        if total == 0:
            return 100
        return round_half_up(self._absolute_offset() / total * 100)

    def get_metrics(self) -> TypingMetrics:
        if self.start_time is None:
            total_time_ms = 0.0
        elif self.end_time is not None:
            total_time_ms = self.end_time - self.start_time
        else:
            total_time_ms = self._clock() - self.start_time

        chars_typed = self._absolute_offset()
        minutes = total_time_ms / 60000
        wpm = round_half_up((chars_typed / 5) / minutes) if minutes > 0 else 0

        keystrokes = self.total_correct + self.total_errors
        accuracy = round_half_up(self.total_correct / keystrokes * 100) if keystrokes else 100

        buckets = {"case": 0, "umlaut": 0, "special": 0, "wrong_key": 0}
        for error in self._errors:
            buckets[classify_error(error.expected, error.actual)] += 1

        return TypingMetrics(
            words_typed=self.word_index + (1 if self.char_index > 0 else 0),
            characters_typed=chars_typed,
            correct_characters=self.total_correct,
            incorrect_characters=self.total_errors,
            total_time_ms=total_time_ms,
            average_wpm=wpm,
            accuracy=accuracy,
            uppercase_errors=buckets["case"],
            umlaut_errors=buckets["umlaut"],
            special_char_errors=buckets["special"],
            wrong_key_errors=buckets["wrong_key"],
        )

    def calculate_xp(self, base_xp: int | None = None) -> int:
        """XP scaled by accuracy, with speed and completion bonuses; at least 10."""
        base = self.settings.typing_base_xp if base_xp is None else base_xp
        metrics = self.get_metrics()
        speed_bonus = 1.2 if metrics.average_wpm > 20 else 1.0
        completion_bonus = 1.5 if self._complete else 1.0
        xp = round_half_up(base * (metrics.accuracy / 100) * speed_bonus * completion_bonus)
        return max(xp, 10)

    def check_achievements(self) -> list[TypingAchievement]:
        metrics = self.get_metrics()
        achievements = []
        if metrics.accuracy == 100 and self._complete:
            achievements.append(TypingAchievement.PERFECT_TYPING)
        if metrics.average_wpm >= 30:
            achievements.append(TypingAchievement.SPEED_DEMON)
        if metrics.umlaut_errors == 0 and any(c in UMLAUTS for c in self.text):
            achievements.append(TypingAchievement.UMLAUT_MASTER)
        if self._complete:
            achievements.append(TypingAchievement.FIRST_COMPLETION)
        return achievements
