"""
Default six-scheme letter-value scorer.

The pipeline treats the scorer as an opaque `str -> Scores` function; this
module only provides the one used when none is injected. Each scheme is a
table of values for a..z; digits add their face value in every scheme;
whitespace and punctuation add nothing. Accented Latin letters are reduced to
their base letter (é -> e). Letters with no ASCII base form cannot be scored.
"""
from __future__ import annotations
import string
import unicodedata
from typing import Dict

from .config import SCHEMES
from .errors import ScoringError
from .models import Scores

_ORD = {ch: i for i, ch in enumerate(string.ascii_lowercase, start=1)}

_JEWISH_VALUES = [1, 2, 3, 4, 5, 6, 7, 8, 9, 600, 10, 20, 30, 40, 50, 60, 70,
                  80, 90, 100, 200, 700, 900, 300, 400, 500]

TABLES: Dict[str, Dict[str, int]] = {
    "english": {ch: v * 6 for ch, v in _ORD.items()},
    "jewish": dict(zip(string.ascii_lowercase, _JEWISH_VALUES)),
    "simple": dict(_ORD),
    # digital root of the ordinal: a=1 .. i=9, j=1 .. r=9, s=1 .. z=8
    "mystery": {ch: (v - 1) % 9 + 1 for ch, v in _ORD.items()},
    # reverse ordinal: a=26 .. z=1
    "majestic": {ch: 27 - v for ch, v in _ORD.items()},
    "eights": {ch: v * 8 for ch, v in _ORD.items()},
}


def _base_letter(ch: str) -> str:
    decomposed = unicodedata.normalize("NFKD", ch)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()


def score_text(text: str) -> Scores:
    """Score `text` under every scheme; raise ScoringError on an unscoreable letter."""
    totals = dict.fromkeys(SCHEMES, 0)
    for ch in text:
        if not ch.isalnum():
            continue
        if ch.isdigit():
            if not ch.isascii():
                raise ScoringError(f"no value for digit {ch!r} in {text!r}", text=text)
            for s in SCHEMES:
                totals[s] += int(ch)
            continue
        for base in _base_letter(ch):
            if base not in _ORD:
                raise ScoringError(f"no value for letter {ch!r} in {text!r}", text=text)
            for s in SCHEMES:
                totals[s] += TABLES[s][base]
    return Scores(**totals)
