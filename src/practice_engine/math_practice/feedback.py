"""German feedback phrases and step-by-step explanations for math drills.

The phrase pools and explanation templates are learner-facing content and
are kept word for word.
"""

import random

from practice_engine.models.math_challenge import MathOperation, UnknownPosition

SUCCESS_PHRASES: tuple[str, ...] = (
    "Gut gemacht!",
    "Prima!",
    "Super!",
    "Richtig!",
    "Toll gemacht!",
    "Sehr gut!",
    "Ausgezeichnet!",
    "Wunderbar!",
    "Klasse!",
    "Fantastisch!",
)

ENCOURAGEMENT_PHRASES: tuple[str, ...] = (
    "Nicht ganz richtig.",
    "Versuche es noch einmal!",
    "Fast richtig!",
    "Knapp daneben.",
    "Probiere es nochmal!",
)

# Number bonds to 10 ("Verliebte Zahlen")
VERLIEBTE_ZAHLEN: dict[int, int] = {n: 10 - n for n in range(11)}

GERMAN_NUMBERS: dict[int, str] = {
    0: "null",
    1: "eins",
    2: "zwei",
    3: "drei",
    4: "vier",
    5: "fünf",
    6: "sechs",
    7: "sieben",
    8: "acht",
    9: "neun",
    10: "zehn",
    11: "elf",
    12: "zwölf",
    13: "dreizehn",
    14: "vierzehn",
    15: "fünfzehn",
    16: "sechzehn",
    17: "siebzehn",
    18: "achtzehn",
    19: "neunzehn",
    20: "zwanzig",
}

GERMAN_TENS: dict[int, str] = {
    20: "zwanzig",
    30: "dreißig",
    40: "vierzig",
    50: "fünfzig",
    60: "sechzig",
    70: "siebzig",
    80: "achtzig",
    90: "neunzig",
}

INCORRECT_MESSAGE = "Nicht ganz richtig."


def random_success_phrase(rng: random.Random | None = None) -> str:
    return (rng or random).choice(SUCCESS_PHRASES)


def random_encouragement_phrase(rng: random.Random | None = None) -> str:
    return (rng or random).choice(ENCOURAGEMENT_PHRASES)


def verliebte_zahl(n: int) -> int:
    """Partner of ``n`` in the number bonds to 10; 0 outside 0-10."""
    return VERLIEBTE_ZAHLEN.get(n, 0)


def zehneruebergang_addition_explanation(a: int, b: int, result: int) -> str:
    """Split ``b`` to fill up to the next ten, e.g. 7 + 5 via 7 + 3 = 10."""
    to_next_ten = verliebte_zahl(a % 10)
    remainder = b - to_next_ten
    next_ten = a + to_next_ten

    if to_next_ten == 0 or to_next_ten > b:
        return f"{a} + {b} = {result}"

    return (
        "Schauen wir uns das zusammen an:\n"
        f"{a} + {b} - wir teilen die {b} auf.\n"
        f"{a} braucht noch {to_next_ten} bis zur {next_ten} "
        f"(Verliebte Zahlen: {a % 10} und {to_next_ten}).\n"
        f"{a} + {to_next_ten} = {next_ten}, dann noch {remainder} dazu: "
        f"{next_ten} + {remainder} = {result}."
    )


def zehneruebergang_subtraction_explanation(a: int, b: int, result: int) -> str:
    """Step down to the ten first, e.g. 13 - 5 via 13 - 3 = 10."""
    to_ten = a % 10
    remainder = b - to_ten
    ten = a - to_ten

    if to_ten == 0 or to_ten >= b:
        return f"{a} - {b} = {result}"

    return (
        "Schauen wir uns das zusammen an:\n"
        f"{a} - {b}: Wir gehen erst zur {ten}.\n"
        f"{a} - {to_ten} = {ten}, dann noch {remainder} abziehen: "
        f"{ten} - {remainder} = {result}."
    )


def simple_explanation(a: int, b: int, operation: MathOperation, result: int) -> str:
    return f"{a} {operation.symbol} {b} = {result}"


def incorrect_explanation(
    a: int,
    b: int,
    operation: MathOperation,
    result: int,
    correct_answer: int,
    user_answer: int,
    has_zehneruebergang: bool,
    rng: random.Random | None = None,
) -> str:
    """Encouragement, a closeness hint and the worked solution.

    ``result`` is the value of ``a op b``; ``correct_answer`` is whichever slot
    was blank and is what ``user_answer`` is compared against.
    """
    encouragement = random_encouragement_phrase(rng)

    if not has_zehneruebergang:
        explanation = simple_explanation(a, b, operation, result)
    elif operation is MathOperation.ADDITION:
        explanation = zehneruebergang_addition_explanation(a, b, result)
    else:
        explanation = zehneruebergang_subtraction_explanation(a, b, result)

    diff = abs(user_answer - correct_answer)
    hint = ""
    if diff == 1:
        hint = "Du warst ganz nah dran!"
    elif diff <= 5:
        hint = "Fast richtig!"

    return f"{encouragement} {hint}\n\n{explanation}"


def correct_explanation(has_zehneruebergang: bool, rng: random.Random | None = None) -> str:
    praise = random_success_phrase(rng)
    if has_zehneruebergang:
        return f"{praise} Du hast den Zehnerübergang super gemeistert!"
    return praise


def german_number(n: int) -> str:
    """Number word for 0-100; other values are returned as digits."""
    if n < 0 or n > 100:
        return str(n)
    if n <= 20:
        return GERMAN_NUMBERS[n]
    if n == 100:
        return "hundert"

    tens, ones = divmod(n, 10)
    tens_word = GERMAN_TENS[tens * 10]
    if ones == 0:
        return tens_word
    # 21 -> einundzwanzig, not einsundzwanzig
    ones_word = "ein" if ones == 1 else GERMAN_NUMBERS[ones]
    return f"{ones_word}und{tens_word}"


def spoken_problem(
    a: int, b: int, operation: MathOperation, unknown_position: UnknownPosition
) -> str:
    """Problem phrased for text-to-speech, e.g. "sieben plus fünf ist gleich?"."""
    operator_word = "plus" if operation is MathOperation.ADDITION else "minus"
    if unknown_position is UnknownPosition.RESULT:
        return f"{german_number(a)} {operator_word} {german_number(b)} ist gleich?"

    result = a + b if operation is MathOperation.ADDITION else a - b
    if unknown_position is UnknownPosition.LEFT:
        return f"Welche Zahl {operator_word} {german_number(b)} ergibt {german_number(result)}?"
    return f"{german_number(a)} {operator_word} welche Zahl ergibt {german_number(result)}?"
