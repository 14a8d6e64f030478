"""German QWERTZ keyboard layout with finger and hand-zone assignments."""

from pydantic import BaseModel, ConfigDict

from practice_engine.models.typing_session import KeyFinger, KeyZone


class KeyDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    finger: KeyFinger
    zone: KeyZone
    shift_key: str | None = None
    alt_gr_key: str | None = None
    width: float = 1.0
    is_special: bool = False


class KeyRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    keys: tuple[KeyDefinition, ...]
    offset: float = 0.0


def _row(offset: float, *keys: tuple) -> KeyRow:
    """Build a row from (key, shift, altgr, finger, zone) tuples."""
    return KeyRow(
        keys=tuple(
            KeyDefinition(
                key=key,
                label=key.upper() if key.isalpha() and key != "ß" else key,
                shift_key=shift,
                alt_gr_key=alt_gr,
                finger=finger,
                zone=zone,
            )
            for key, shift, alt_gr, finger, zone in keys
        ),
        offset=offset,
    )


_L, _R = KeyZone.LEFT, KeyZone.RIGHT
_LP, _LR, _LM, _LI = (
    KeyFinger.LEFT_PINKY,
    KeyFinger.LEFT_RING,
    KeyFinger.LEFT_MIDDLE,
    KeyFinger.LEFT_INDEX,
)
_RI, _RM, _RR, _RP = (
    KeyFinger.RIGHT_INDEX,
    KeyFinger.RIGHT_MIDDLE,
    KeyFinger.RIGHT_RING,
    KeyFinger.RIGHT_PINKY,
)

QWERTZ_LAYOUT: tuple[KeyRow, ...] = (
    _row(
        0.0,
        ("^", "°", None, _LP, _L),
        ("1", "!", None, _LP, _L),
        ("2", '"', "²", _LR, _L),
        ("3", "§", "³", _LM, _L),
        ("4", "$", None, _LI, _L),
        ("5", "%", None, _LI, _L),
        ("6", "&", None, _RI, _R),
        ("7", "/", "{", _RI, _R),
        ("8", "(", "[", _RM, _R),
        ("9", ")", "]", _RR, _R),
        ("0", "=", "}", _RP, _R),
        ("ß", "?", "\\", _RP, _R),
        ("´", "`", None, _RP, _R),
    ),
    _row(
        0.25,
        ("q", "Q", "@", _LP, _L),
        ("w", "W", None, _LR, _L),
        ("e", "E", "€", _LM, _L),
        ("r", "R", None, _LI, _L),
        ("t", "T", None, _LI, _L),
        ("z", "Z", None, _RI, _R),
        ("u", "U", None, _RI, _R),
        ("i", "I", None, _RM, _R),
        ("o", "O", None, _RR, _R),
        ("p", "P", None, _RP, _R),
        ("ü", "Ü", None, _RP, _R),
        ("+", "*", "~", _RP, _R),
    ),
    # home row
    _row(
        0.5,
        ("a", "A", None, _LP, _L),
        ("s", "S", None, _LR, _L),
        ("d", "D", None, _LM, _L),
        ("f", "F", None, _LI, _L),
        ("g", "G", None, _LI, _L),
        ("h", "H", None, _RI, _R),
        ("j", "J", None, _RI, _R),
        ("k", "K", None, _RM, _R),
        ("l", "L", None, _RR, _R),
        ("ö", "Ö", None, _RP, _R),
        ("ä", "Ä", None, _RP, _R),
        ("#", "'", None, _RP, _R),
    ),
    _row(
        0.75,
        ("<", ">", "|", _LP, _L),
        ("y", "Y", None, _LP, _L),
        ("x", "X", None, _LR, _L),
        ("c", "C", None, _LM, _L),
        ("v", "V", None, _LI, _L),
        ("b", "B", None, _LI, _L),
        ("n", "N", None, _RI, _R),
        ("m", "M", "µ", _RI, _R),
        (",", ";", None, _RM, _R),
        (".", ":", None, _RR, _R),
        ("-", "_", None, _RP, _R),
    ),
    KeyRow(
        keys=(
            KeyDefinition(
                key=" ",
                label="Space",
                finger=KeyFinger.THUMB,
                zone=KeyZone.CENTER,
                width=6,
                is_special=True,
            ),
        ),
        offset=3.0,
    ),
)

HOME_ROW_KEYS = ("a", "s", "d", "f", "j", "k", "l", "ö")

KEYBOARD_ZONES: dict[KeyZone, str] = {
    KeyZone.LEFT: "Left hand zone (Q-T, A-G, Y-B)",
    KeyZone.CENTER: "Center zone (Space)",
    KeyZone.RIGHT: "Right hand zone (Z-P, H-Ä, N-_)",
}


def _all_keys():
    for row in QWERTZ_LAYOUT:
        yield from row.keys


def find_key_for_char(char: str) -> KeyDefinition | None:
    """Return the key that produces ``char`` plain, shifted or with AltGr."""
    for key in _all_keys():
        if char in (key.key, key.shift_key, key.alt_gr_key):
            return key
    return None


def requires_shift(char: str) -> bool:
    return any(key.shift_key == char for key in _all_keys())


def requires_alt_gr(char: str) -> bool:
    return any(key.alt_gr_key == char for key in _all_keys())


def home_row_keys() -> list[KeyDefinition]:
    return [key for key in QWERTZ_LAYOUT[2].keys if key.key in HOME_ROW_KEYS]
