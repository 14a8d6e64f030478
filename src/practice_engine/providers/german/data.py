"""German substitution tables, grammar facts and word-shape heuristics."""

import re

from practice_engine.models.language import GrammarRule, GrammarRules
from practice_engine.models.vocabulary import VocabularyCategory

GERMAN_ARTICLES: dict[str, str] = {
    "masculine": "der",
    "feminine": "die",
    "neuter": "das",
    "plural": "die",
}

# Articles that may open an answer, including the oblique-case forms.
ARTICLE_FORMS: tuple[str, ...] = ("der", "die", "das", "den", "dem", "des")

GERMAN_CASES: tuple[str, ...] = ("Nominativ", "Akkusativ", "Dativ", "Genitiv")

# Applied to the lowercase word, first occurrence only.
VOWEL_SUBSTITUTIONS: dict[str, list[str]] = {
    "a": ["ä", "e", "o"],
    "ä": ["a", "e"],
    "e": ["ä", "i", "a"],
    "i": ["ie", "e", "y"],
    "ie": ["i", "ih", "ieh"],
    "o": ["ö", "u", "a"],
    "ö": ["o", "oe"],
    "u": ["ü", "o"],
    "ü": ["u", "ue"],
    "au": ["äu", "eu"],
    "äu": ["au", "eu"],
    "eu": ["äu", "au"],
    "ei": ["ai", "ey"],
    "ai": ["ei", "ay"],
}

CONSONANT_SUBSTITUTIONS: dict[str, list[str]] = {
    "b": ["p", "w"],
    "p": ["b", "f"],
    "d": ["t", "th"],
    "t": ["d", "th"],
    "g": ["k", "ch"],
    "k": ["g", "ck"],
    "w": ["v", "b"],
    "v": ["f", "w"],
    "f": ["v", "ph"],
    "s": ["ss", "ß", "z"],
    "ss": ["s", "ß"],
    "ß": ["ss", "s"],
    "z": ["s", "ts"],
    "ch": ["sch", "k"],
    "sch": ["ch", "sh"],
}

VISUAL_CONFUSIONS: list[tuple[str, str]] = [
    ("b", "d"),
    ("p", "q"),
    ("m", "n"),
    ("u", "v"),
    ("i", "l"),
    ("o", "a"),
    ("e", "c"),
    ("f", "t"),
    ("h", "k"),
    ("r", "n"),
]

# Hund -> Hunde, Frau -> Frauen, Lampe -> Lampen, Kind -> Kinder, Auto -> Autos, Fenster
PLURAL_SUFFIXES: list[str] = ["e", "en", "n", "er", "s", ""]

UMLAUT_PLURALS: dict[str, str] = {
    "a": "ä",
    "o": "ö",
    "u": "ü",
    "au": "äu",
}

# Suffix heuristics, checked in order; anything unmatched is neuter.
GENDER_SUFFIXES: dict[str, tuple[str, ...]] = {
    "masculine": ("er", "ling", "ig", "ich"),
    "feminine": ("ung", "heit", "keit", "schaft", "ion", "tät", "e"),
    "neuter": ("chen", "lein", "um", "ment"),
}

COMPOUND_COMPONENTS: list[str] = [
    "Haus", "Auto", "Schul", "Kinder", "Buch", "Tisch", "Stuhl",
    "Zimmer", "Tür", "Fenster", "Baum", "Garten", "Wasser",
]

# Pre-tabulated near-homophones, keyed by the lowercase word.
PHONETIC_GROUPS: dict[str, list[str]] = {
    "haus": ["Maus", "raus", "Klaus", "aus"],
    "baum": ["Raum", "Traum", "kaum"],
    "kind": ["Wind", "sind", "blind"],
    "tisch": ["Fisch", "frisch", "misch"],
    "buch": ["Tuch", "such", "Uch"],
    "tag": ["mag", "sag", "lag"],
    "rot": ["tot", "Not", "Boot"],
    "blau": ["grau", "schlau", "genau"],
}

RHYME_CONSONANTS: tuple[str, ...] = (
    "B", "D", "F", "G", "H", "K", "L", "M", "N", "P", "R", "S", "T", "W", "Z",
)

RELATED_CATEGORIES: dict[VocabularyCategory, list[VocabularyCategory]] = {
    VocabularyCategory.ANIMALS: [VocabularyCategory.BODY_PARTS, VocabularyCategory.FOOD],
    VocabularyCategory.COLORS: [VocabularyCategory.OBJECTS, VocabularyCategory.CLOTHING],
    VocabularyCategory.NUMBERS: [VocabularyCategory.TIME],
    VocabularyCategory.FAMILY: [VocabularyCategory.BODY_PARTS],
    VocabularyCategory.OBJECTS: [VocabularyCategory.PLACES, VocabularyCategory.ACTIONS],
    VocabularyCategory.FOOD: [VocabularyCategory.OBJECTS, VocabularyCategory.ANIMALS],
    VocabularyCategory.CLOTHING: [VocabularyCategory.COLORS, VocabularyCategory.OBJECTS],
    VocabularyCategory.BODY_PARTS: [VocabularyCategory.ANIMALS, VocabularyCategory.FAMILY],
    VocabularyCategory.WEATHER: [VocabularyCategory.TIME, VocabularyCategory.PLACES],
    VocabularyCategory.TIME: [VocabularyCategory.NUMBERS, VocabularyCategory.WEATHER],
    VocabularyCategory.PLACES: [VocabularyCategory.OBJECTS, VocabularyCategory.WEATHER],
    VocabularyCategory.ACTIONS: [VocabularyCategory.OBJECTS, VocabularyCategory.BODY_PARTS],
}

# Word shapes rejected by validation.
INVALID_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ck$"),
    re.compile(r"^ß"),
    re.compile(r"üü"),
    re.compile(r"öö"),
    re.compile(r"ää"),
]

UMLAUT_CHARS = "äöüÄÖÜ"

PRONUNCIATION_HINTS: list[tuple[str, str]] = [
    ("ch", "ch pronunciation after a, o, u (ach-Laut)"),
    ("ie", 'ie is pronounced as long "ee"'),
    ("ß", 'ß (Eszett) is a sharp "s" sound'),
]
UMLAUT_PRONUNCIATION_HINT = "Remember to pronounce umlauts correctly"

GERMAN_GRAMMAR_RULES = GrammarRules(
    has_grammatical_gender=True,
    genders=["masculine", "feminine", "neuter"],
    has_cases=True,
    cases=list(GERMAN_CASES),
    plural_rules=[
        GrammarRule(rule="Add -e (often with umlaut)", examples=["Hund → Hunde", "Ball → Bälle"]),
        GrammarRule(rule="Add -en", examples=["Frau → Frauen", "Uhr → Uhren"]),
        GrammarRule(rule="Add -n", examples=["Lampe → Lampen"]),
        GrammarRule(rule="Add -er (often with umlaut)", examples=["Kind → Kinder", "Buch → Bücher"]),
        GrammarRule(rule="Add -s (foreign words)", examples=["Auto → Autos"]),
        GrammarRule(rule="No change", examples=["Fenster → Fenster"]),
    ],
    article_rules=[
        GrammarRule(rule="Masculine: der", examples=["der Hund", "der Mann"]),
        GrammarRule(rule="Feminine: die", examples=["die Katze", "die Frau"]),
        GrammarRule(rule="Neuter: das", examples=["das Kind", "das Haus"]),
        GrammarRule(rule="Plural: die", examples=["die Hunde", "die Kinder"]),
    ],
)
