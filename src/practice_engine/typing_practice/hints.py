"""Progressive three-level typing hints.

Level 1 names the hand zone, level 2 the finger, level 3 the key itself.
Levels escalate with consecutive errors on the current character and reset
when it is typed correctly or the cursor moves on.
"""

import structlog
from pydantic import BaseModel, Field

from practice_engine.config import Settings, get_settings
from practice_engine.models.typing_session import HintState, KeyFinger, KeyZone
from practice_engine.typing_practice.keyboard import KeyDefinition, find_key_for_char

logger = structlog.get_logger()

ZONE_MESSAGES: dict[KeyZone, str] = {
    KeyZone.LEFT: "Try using your left hand",
    KeyZone.RIGHT: "Try using your right hand",
    KeyZone.CENTER: "Use your thumbs for the space bar",
}

FINGER_MESSAGES: dict[KeyFinger, str] = {
    KeyFinger.LEFT_PINKY: "Use your left pinky finger",
    KeyFinger.LEFT_RING: "Use your left ring finger",
    KeyFinger.LEFT_MIDDLE: "Use your left middle finger",
    KeyFinger.LEFT_INDEX: "Use your left index finger",
    KeyFinger.RIGHT_INDEX: "Use your right index finger",
    KeyFinger.RIGHT_MIDDLE: "Use your right middle finger",
    KeyFinger.RIGHT_RING: "Use your right ring finger",
    KeyFinger.RIGHT_PINKY: "Use your right pinky finger",
    KeyFinger.THUMB: "Use your thumbs",
}

LEVEL_NAMES = ("No hint", "Zone hint", "Finger hint", "Key hint")


class HintOptions(BaseModel):
    level1_threshold: int = Field(default=3, ge=1)
    level2_threshold: int = Field(default=5, ge=1)
    level3_threshold: int = Field(default=7, ge=1)
    enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "HintOptions":
        return cls(
            level1_threshold=settings.hint_level1_threshold,
            level2_threshold=settings.hint_level2_threshold,
            level3_threshold=settings.hint_level3_threshold,
            enabled=settings.hints_enabled,
        )


class HintStats(BaseModel):
    level1_used: int = 0
    level2_used: int = 0
    level3_used: int = 0
    total_hints_used: int = 0


class HintSystem:
    """Tracks errors on the current character and escalates hints."""

    def __init__(self, options: HintOptions | None = None, settings: Settings | None = None):
        self.options = options or HintOptions.from_settings(settings or get_settings())
        self._state = HintState()
        self._current_char: str | None = None
        self._current_key: KeyDefinition | None = None

    def set_current_char(self, char: str | None) -> None:
        """Point the hints at a new character; the level starts over."""
        self._current_char = char
        self._current_key = find_key_for_char(char) if char else None
        self._state = HintState()

    def record_error(self) -> HintState:
        """Count an error and escalate if a threshold was reached.

        Disabled hints and characters missing from the layout leave the state
        untouched.
        """
        if not self.options.enabled or self._current_key is None:
            return self.state

        self._state.error_count += 1
        errors = self._state.error_count
        if errors >= self.options.level3_threshold:
            self._activate(3)
        elif errors >= self.options.level2_threshold:
            self._activate(2)
        elif errors >= self.options.level1_threshold:
            self._activate(1)
        return self.state

    def record_correct(self) -> None:
        self._state = HintState()

    def _activate(self, level: int) -> None:
        key = self._current_key
        if key is None or self._state.level >= level:
            return

        self._state.level = level
        if level == 1:
            self._state.zone = key.zone
            self._state.message = ZONE_MESSAGES[key.zone]
        elif level == 2:
            self._state.finger = key.finger
            self._state.message = FINGER_MESSAGES[key.finger]
        else:
            self._state.key = key.key
            self._state.message = f'Press the "{self._current_char}" key!'
        logger.debug("typing_hint_escalated", level=level, char=self._current_char)

    @property
    def state(self) -> HintState:
        return self._state.model_copy()

    def is_enabled(self) -> bool:
        return self.options.enabled

    def set_enabled(self, enabled: bool) -> None:
        self.options.enabled = enabled
        if not enabled:
            self._state = HintState()

    def stats(self) -> HintStats:
        """Hint usage derived from the current level."""
        level = self._state.level
        return HintStats(
            level1_used=1 if level >= 1 else 0,
            level2_used=1 if level >= 2 else 0,
            level3_used=1 if level >= 3 else 0,
            total_hints_used=level,
        )

    def reset(self) -> None:
        self._state = HintState()
        self._current_char = None
        self._current_key = None

    def update_thresholds(
        self,
        level1_threshold: int | None = None,
        level2_threshold: int | None = None,
        level3_threshold: int | None = None,
        enabled: bool | None = None,
    ) -> None:
        updates = {
            "level1_threshold": level1_threshold,
            "level2_threshold": level2_threshold,
            "level3_threshold": level3_threshold,
            "enabled": enabled,
        }
        self.options = self.options.model_copy(
            update={k: v for k, v in updates.items() if v is not None}
        )

    def should_show_hint(self) -> bool:
        return self.options.enabled and self._state.level > 0

    def level_name(self, level: int | None = None) -> str:
        return LEVEL_NAMES[self._state.level if level is None else level]
