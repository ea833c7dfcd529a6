from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from .config import SCHEMES
from .errors import ScoringError
from .models import Scores

log = logging.getLogger(__name__)

Scorer = Callable[[str], Any]
InverseIndex = Dict[int, List[str]]


@dataclass(frozen=True)
class ScoreResult:
    """Everything one successful aggregation pass produces, installed together."""
    cache: Dict[str, Scores]
    inverse: Dict[str, InverseIndex]   # scheme -> score -> sorted n-grams


def score_one(scorer: Scorer, text: str) -> Scores:
    """Run the scorer and validate its answer; any failure comes out as ScoringError."""
    try:
        return Scores.coerce(scorer(text))
    except ScoringError as e:
        if e.text is None:
            e.text = text
        raise
    except Exception as e:
        raise ScoringError(f"unable to score {text!r}: {e}", text=text, causes=[e]) from e


class ScoreAggregator:
    """
    Scores every unique key of a frozen frequency map and builds the six
    inverse indices. The pass visits every key even after a failure, then
    either returns a complete ScoreResult or raises one ScoringError.
    """
    def __init__(self, scorer: Scorer) -> None:
        self.scorer = scorer

    def build(self, frequencies: Mapping[str, int]) -> ScoreResult:
        log.info("Scoring n-grams: unique=%d", len(frequencies))
        cache: Dict[str, Scores] = {}
        buckets: Dict[str, Dict[int, List[str]]] = {s: defaultdict(list) for s in SCHEMES}
        errors: List[ScoringError] = []

        for ngram in frequencies:
            try:
                scores = score_one(self.scorer, ngram.strip())
            except ScoringError as e:
                errors.append(e)
                continue
            cache[ngram] = scores
            for scheme in SCHEMES:
                buckets[scheme][scores.get(scheme)].append(ngram)

        if errors:
            log.warning("Scoring failed: %d n-gram(s) could not be scored", len(errors))
            raise ScoringError(f"{len(errors)} n-gram(s) could not be scored", causes=errors)

        # map iteration order is not part of the result: sort every bucket
        inverse = {
            scheme: {value: sorted(ngrams) for value, ngrams in sorted(by_value.items())}
            for scheme, by_value in buckets.items()
        }
        log.info("Scoring done: unique=%d", len(cache))
        return ScoreResult(cache=cache, inverse=inverse)
