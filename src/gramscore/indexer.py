"""
N-gram extraction.

Every sentence is an independent task: it is split on whitespace, every
contiguous window of 1..MAX_WINDOW words is cleaned, lowercased and trimmed,
and the survivors are counted into a Counter private to that task. After all
tasks finish, one merge phase sums the private counters. Merging is
commutative, so the totals do not depend on scheduling order or worker count.
"""

from __future__ import annotations
import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .config import MAX_WINDOW, READ_MODE, WORKERS
from .errors import ArgumentError, CleanError
from .rules import TextRules

log = logging.getLogger(__name__)


def windows(words: Sequence[str], max_window: int = MAX_WINDOW) -> Iterator[str]:
    """
    Yield every run of 1..max_window consecutive words, joined by one space.

    Windows are yielded by start position, shortest first.

    Examples:
        >>> list(windows(["the", "cat", "sat"], 2))
        ['the', 'the cat', 'cat', 'cat sat', 'sat']
    """
    n = len(words)
    for i in range(n):
        for j in range(i + 1, min(i + max_window, n) + 1):
            yield " ".join(words[i:j])


class NGramIndexer:
    """
    Builds a frequency map (cleaned n-gram -> count) from a list of sentences.

    mode:
      * "threads": one thread-pool task per sentence (default)
      * "procs":   one process-pool task per sentence; rules must be picklable
    """
    def __init__(self, rules: TextRules, *, max_window: int = MAX_WINDOW,
                 workers: Optional[int] = None, mode: Optional[str] = None) -> None:
        if not 1 <= int(max_window) <= MAX_WINDOW:
            raise ArgumentError(f"max_window must be between 1 and {MAX_WINDOW}, got {max_window}")
        mode = (mode or READ_MODE).lower()
        if mode not in ("threads", "procs"):
            raise ArgumentError(f"unknown executor mode {mode!r}")
        self.rules = rules
        self.max_window = int(max_window)
        self.workers = max(1, int(workers or WORKERS))
        self.mode = mode

    def clean(self, window: str) -> str:
        return self.rules.sanitize(window).lower().strip()

    def count_sentence(self, sentence: str) -> Tuple[Counter, List[CleanError]]:
        """Count one sentence's windows. Failures are returned, not raised."""
        counts: Counter = Counter()
        errors: List[CleanError] = []
        for raw in windows(sentence.split(), self.max_window):
            try:
                cleaned = self.clean(raw)
            except Exception as e:
                errors.append(CleanError(f"unable to clean window {raw!r}", causes=[e]))
                continue
            if cleaned:
                counts[cleaned] += 1
        return counts, errors

    def build(self, sentences: Sequence[str]) -> Dict[str, int]:
        """
        Count every sentence in parallel and merge. Blocks until all tasks are
        done; if any window failed anywhere, raises one CleanError holding all
        of them and returns nothing.
        """
        sentences = list(sentences)
        if not sentences:
            return {}

        exec_cls = ThreadPoolExecutor if self.mode == "threads" else ProcessPoolExecutor
        workers = min(self.workers, len(sentences))
        log.info("Extracting n-grams: sentences=%d workers=%d mode=%s",
                 len(sentences), workers, self.mode)

        with exec_cls(max_workers=workers) as ex:
            results = list(ex.map(self.count_sentence, sentences))

        # single-threaded merge
        merged: Counter = Counter()
        errors: List[CleanError] = []
        for counts, errs in results:
            merged.update(counts)
            errors.extend(errs)

        if errors:
            log.warning("Extraction failed: %d window(s) could not be cleaned", len(errors))
            raise CleanError(f"{len(errors)} window(s) failed to clean", causes=errors)

        log.info("Extraction done: unique=%d total=%d", len(merged), sum(merged.values()))
        return dict(merged)
