# src/gramscore/models.py
"""
Data models for the n-gram index.

- Scores: the six scheme scores of one text.
- SubstringQuantity: one row of the sorted frequency view.
- State: lifecycle of a Document (EMPTY -> INDEXED -> SCORED).

These classes carry no pipeline logic; they only give the index a stable,
typed shape for views, reports and the interchange record.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass, astuple, fields
from typing import Any, Dict, Tuple

from .config import SCHEMES
from .errors import ScoringError


class State(str, enum.Enum):
    EMPTY = "empty"
    INDEXED = "indexed"
    SCORED = "scored"


@dataclass(frozen=True, slots=True)
class Scores:
    """
    Six non-negative integer scores, one per scheme.

    Field order matches config.SCHEMES and is also the column order of
    Document.render().
    """
    english: int
    jewish: int
    simple: int
    mystery: int
    majestic: int
    eights: int

    def as_tuple(self) -> Tuple[int, ...]:
        return astuple(self)

    def get(self, scheme: str) -> int:
        return getattr(self, scheme)

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def coerce(cls, value: Any) -> "Scores":
        """
        Accept a Scores, a mapping keyed by scheme name or a 6-sequence.
        Anything else (wrong arity, negative or non-integer values) is a
        ScoringError.
        """
        if isinstance(value, cls):
            raw = value.as_tuple()
        elif isinstance(value, dict):
            try:
                raw = tuple(value[s] for s in SCHEMES)
            except KeyError as e:
                raise ScoringError(f"missing scheme {e.args[0]!r} in score mapping") from e
        else:
            try:
                raw = tuple(value)
            except TypeError as e:
                raise ScoringError(f"scorer returned {type(value).__name__}, expected six scores") from e
        if len(raw) != len(SCHEMES):
            raise ScoringError(f"expected {len(SCHEMES)} scores, got {len(raw)}")
        for v in raw:
            if isinstance(v, bool) or not isinstance(v, int) or v < 0:
                raise ScoringError(f"scheme scores must be non-negative integers, got {v!r}")
        return cls(*raw)


@dataclass(frozen=True, slots=True)
class SubstringQuantity:
    substring: str
    quantity: int
