"""
Name normalization for shopping list grouping.

"Pommes ", "pomme" and "POMMES" should land on one line. The key is built by:
- stripping accents, unfolding œ/æ and lowercasing
- collapsing whitespace
- folding trailing French plural markers (s, x) word by word

Plural folding is best-effort. A word it gets wrong just ends up on its own
line.
"""

import unicodedata

PLURAL_MARKERS = ("s", "x")

# Words that end in s/x in the singular too
INVARIANT_WORDS = frozenset(
    {
        "ananas",
        "anchois",
        "brebis",
        "cassis",
        "couscous",
        "gras",
        "jus",
        "mais",
        "noix",
        "pois",
        "radis",
        "riz",
    }
)

# NFKD leaves these ligatures whole
LIGATURES = str.maketrans({"œ": "oe", "Œ": "OE", "æ": "ae", "Æ": "AE"})

# Stripping below this length turns short words into noise ("gaz" → "ga")
MIN_FOLDED_LENGTH = 3


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.translate(LIGATURES))
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def _fold_plural(word: str) -> str:
    if word in INVARIANT_WORDS:
        return word
    while len(word) > MIN_FOLDED_LENGTH and word.endswith(PLURAL_MARKERS):
        word = word[:-1]
    return word


def normalize_name(name: str) -> str:
    """Return the grouping key for a dish or ingredient name."""
    words = strip_accents((name or "").lower()).lower().split()
    return " ".join(_fold_plural(word) for word in words)
