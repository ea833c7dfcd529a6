# src/gramscore/document.py
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

from .aggregator import InverseIndex, ScoreAggregator, Scorer, score_one
from .config import SCHEMES
from .errors import ArgumentError, GramScoreError, PipelineError, ScoringError
from .indexer import NGramIndexer
from .models import Scores, State, SubstringQuantity
from .rules import TextRules
from .rwlock import ReadWriteLock
from .scoring import score_text

log = logging.getLogger(__name__)

# interchange record: scheme -> short key
RECORD_KEYS: Dict[str, str] = {
    "english": "sen",
    "jewish": "sje",
    "simple": "ssi",
    "mystery": "smy",
    "majestic": "smj",
    "eights": "sei",
}


def _empty_inverse() -> Dict[str, InverseIndex]:
    return {s: {} for s in SCHEMES}


def _check_scheme(scheme: str) -> str:
    if scheme not in SCHEMES:
        raise ArgumentError(f"unknown scheme {scheme!r}; expected one of {', '.join(SCHEMES)}")
    return scheme


class Document:
    """
    One body of text and its index.

    Lifecycle:
      * EMPTY   - constructed, nothing built
      * INDEXED - parse() built the frequency map; no scores
      * SCORED  - score() built the score cache and the six inverse indices

    Public API:
      * parse(text=None): split -> extract -> install frequency map (drops scores)
      * score():          score every n-gram -> install cache + inverse indices
      * summarize():      score the whole input (build_document runs it first)
      * sorted_substrings(), render(): deterministic views
      * to_record() / from_record(): interchange record with short keys

    A pass builds its result off to the side and installs it in one swap under
    the write lock, or raises and leaves the document as it was. Passes on the
    same document run one at a time; readers only ever see whole passes.
    """

    # ------------- lifecycle -------------

    def __init__(
        self,
        *fragments: str,
        rules: Optional[TextRules] = None,
        scorer: Optional[Scorer] = None,
        workers: Optional[int] = None,
        mode: Optional[str] = None,
    ) -> None:
        for f in fragments:
            if not isinstance(f, str):
                raise ArgumentError(f"text fragments must be str, got {type(f).__name__}")
        self.rules = rules or TextRules.default()
        self.scorer: Scorer = scorer or score_text
        self._indexer = NGramIndexer(self.rules, workers=workers, mode=mode)
        self._aggregator = ScoreAggregator(self.scorer)

        self._rw = ReadWriteLock()
        self._pass_lock = threading.Lock()

        self._input: str = " ".join(fragments)
        self._state = State.EMPTY
        self._frequencies: Dict[str, int] = {}
        self._scores: Dict[str, Scores] = {}
        self._inverse: Dict[str, InverseIndex] = _empty_inverse()
        self._summary: Optional[Scores] = None

    # /* ~~~ Extraction pass: rebuild the frequency map from scratch ~~~ */
    def parse(self, text: Optional[str] = None) -> "Document":
        """
        Index `text` (or the current input). On success the new map replaces
        the old one, `text` becomes the input, and n-gram score data is
        dropped. The input summary is dropped only when the input changes.
        """
        if text is not None and not isinstance(text, str):
            raise ArgumentError(f"text must be str, got {type(text).__name__}")
        with self._pass_lock:
            source = self._input if text is None else text
            sentences = self.rules.split_sentences(source)
            frequencies = self._indexer.build(sentences)

            with self._rw.write_locked():
                if source != self._input:
                    self._summary = None
                self._input = source
                self._frequencies = frequencies
                self._scores = {}
                self._inverse = _empty_inverse()
                self._state = State.INDEXED
        log.info("Document indexed: sentences=%d unique=%d", len(sentences), len(frequencies))
        return self

    # /* ~~~ Aggregation pass: score the frozen frequency map ~~~ */
    def score(self) -> "Document":
        """
        Score every n-gram. From EMPTY this succeeds with empty results. On
        failure nothing changes and one ScoringError listing every
        unscoreable n-gram is raised.
        """
        with self._pass_lock:
            with self._rw.read_locked():
                frequencies = self._frequencies  # replaced wholesale, never mutated
            result = self._aggregator.build(frequencies)

            with self._rw.write_locked():
                self._scores = result.cache
                self._inverse = result.inverse
                self._state = State.SCORED
        log.info("Document scored: unique=%d", len(result.cache))
        return self

    def summarize(self) -> "Document":
        """Score the whole input text. Does not touch the n-gram index or the state."""
        with self._pass_lock:
            with self._rw.read_locked():
                source = self._input
            summary = score_one(self.scorer, source)
            with self._rw.write_locked():
                self._summary = summary
        return self

    # ------------- views -------------

    @property
    def state(self) -> State:
        with self._rw.read_locked():
            return self._state

    @property
    def input(self) -> str:
        with self._rw.read_locked():
            return self._input

    @property
    def summary(self) -> Optional[Scores]:
        """Scores of the whole input; None until summarize() succeeds."""
        with self._rw.read_locked():
            return self._summary

    @property
    def frequencies(self) -> Dict[str, int]:
        with self._rw.read_locked():
            return dict(self._frequencies)

    @property
    def scores(self) -> Dict[str, Scores]:
        with self._rw.read_locked():
            return dict(self._scores)

    def inverse(self, scheme: str) -> InverseIndex:
        _check_scheme(scheme)
        with self._rw.read_locked():
            return {v: list(ngrams) for v, ngrams in self._inverse[scheme].items()}

    def ngrams_with_score(self, scheme: str, value: int) -> List[str]:
        _check_scheme(scheme)
        with self._rw.read_locked():
            return list(self._inverse[scheme].get(int(value), []))

    def sorted_substrings(self) -> List[SubstringQuantity]:
        """All (n-gram, count) pairs: count descending, then text ascending."""
        with self._rw.read_locked():
            items = list(self._frequencies.items())
        items.sort(key=lambda kv: (-kv[1], kv[0]))
        return [SubstringQuantity(substring=s, quantity=q) for s, q in items]

    def render(self) -> str:
        with self._rw.read_locked():
            frequencies = self._frequencies
            scores = self._scores
            scored = self._state is State.SCORED
        if not frequencies:
            return ""
        items = sorted(frequencies.items(), key=lambda kv: (-kv[1], kv[0]))
        lines = []
        for s, q in items:
            line = f"\"{s}\": {q}"
            if scored:
                sc = scores[s]
                line += "".join(f" [{scheme.capitalize()} {sc.get(scheme)}]" for scheme in SCHEMES)
            lines.append(line + "\n")
        return "".join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        with self._rw.read_locked():
            return f"Document(state={self._state.value}, unique={len(self._frequencies)})"

    # ------------- interchange record -------------

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready snapshot; inverse-index scores become string keys."""
        with self._rw.read_locked():
            rec: Dict[str, Any] = {
                "in": self._input,
                "st": self._state.value,
                "gem": self._summary.to_dict() if self._summary else None,
                "subs": dict(sorted(self._frequencies.items())),
                "gems": {k: v.to_dict() for k, v in sorted(self._scores.items())},
            }
            for scheme, key in RECORD_KEYS.items():
                rec[key] = {str(v): list(ngrams) for v, ngrams in sorted(self._inverse[scheme].items())}
        return rec

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        *,
        rules: Optional[TextRules] = None,
        scorer: Optional[Scorer] = None,
        workers: Optional[int] = None,
        mode: Optional[str] = None,
    ) -> "Document":
        """Rebuild a Document from to_record() output. Inconsistent records raise ArgumentError."""
        if not isinstance(record, Mapping):
            raise ArgumentError("record must be a mapping")
        text = record.get("in")
        if not isinstance(text, str):
            raise ArgumentError("record field 'in' must be a string")
        try:
            state = State(record.get("st", State.EMPTY.value))
        except ValueError as e:
            raise ArgumentError(f"unknown state {record.get('st')!r}") from e

        frequencies = _read_frequencies(record.get("subs") or {})
        try:
            scores = {k: Scores.coerce(v) for k, v in (record.get("gems") or {}).items()}
            summary = Scores.coerce(record["gem"]) if record.get("gem") is not None else None
        except ScoringError as e:
            raise ArgumentError(f"malformed scores in record: {e}") from e
        inverse = {scheme: _read_inverse(record.get(key) or {}, key) for scheme, key in RECORD_KEYS.items()}

        _check_consistency(state, frequencies, scores, inverse)

        doc = cls(text, rules=rules, scorer=scorer, workers=workers, mode=mode)
        doc._state = state
        doc._frequencies = frequencies
        doc._scores = scores
        doc._inverse = inverse
        doc._summary = summary
        return doc


def _read_frequencies(raw: Any) -> Dict[str, int]:
    if not isinstance(raw, Mapping):
        raise ArgumentError("record field 'subs' must be a mapping")
    out: Dict[str, int] = {}
    for k, v in raw.items():
        if not isinstance(k, str) or not k:
            raise ArgumentError(f"invalid n-gram key {k!r}")
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            raise ArgumentError(f"invalid count {v!r} for {k!r}")
        out[k] = v
    return out


def _read_inverse(raw: Any, key: str) -> InverseIndex:
    if not isinstance(raw, Mapping):
        raise ArgumentError(f"record field {key!r} must be a mapping")
    out: InverseIndex = {}
    for v, ngrams in raw.items():
        try:
            value = int(v)
        except (TypeError, ValueError) as e:
            raise ArgumentError(f"invalid score {v!r} in {key!r}") from e
        if not isinstance(ngrams, list) or not all(isinstance(ng, str) for ng in ngrams):
            raise ArgumentError(f"bucket {v!r} in {key!r} must be a list of strings")
        out[value] = sorted(ngrams)
    return out


def _check_consistency(state: State, frequencies: Dict[str, int], scores: Dict[str, Scores],
                       inverse: Dict[str, InverseIndex]) -> None:
    if state is State.SCORED:
        keys = set(frequencies)
        if set(scores) != keys:
            raise ArgumentError("score cache keys do not match the frequency map")
        for scheme, by_value in inverse.items():
            members = [ng for ngrams in by_value.values() for ng in ngrams]
            if len(members) != len(keys) or set(members) != keys:
                raise ArgumentError(f"inverse index {scheme!r} does not match the frequency map")
            for value, ngrams in by_value.items():
                if any(scores[ng].get(scheme) != value for ng in ngrams):
                    raise ArgumentError(f"inverse index {scheme!r} disagrees with the score cache")
        return
    if scores or any(inverse.values()):
        raise ArgumentError(f"{state.value} record must not carry score data")
    if state is State.EMPTY and frequencies:
        raise ArgumentError("empty record must not carry n-gram counts")


# /* ~~~ Construction entrypoint: join -> summarize -> parse -> score ~~~ */
def build_document(
    *fragments: str,
    rules: Optional[TextRules] = None,
    scorer: Optional[Scorer] = None,
    workers: Optional[int] = None,
    mode: Optional[str] = None,
) -> Document:
    """
    Join fragments with a single space, score the joined text as a whole,
    then index and score its n-grams.

    Raises ArgumentError for zero fragments and PipelineError (chained to the
    stage error) when any stage fails.
    """
    if not fragments:
        raise ArgumentError("empty input: at least one text fragment is required")
    doc = Document(*fragments, rules=rules, scorer=scorer, workers=workers, mode=mode)
    try:
        doc.summarize()
        doc.parse()
        doc.score()
    except GramScoreError as e:
        log.warning("build_document failed: %s", type(e).__name__)
        raise PipelineError(f"failed to build document ({type(e).__name__})", causes=[e]) from e
    return doc
