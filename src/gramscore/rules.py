from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional

from .config import ABBREVIATIONS, CLEAN_PATTERN
from .errors import ConfigurationError

# terminator run (+ closing quotes/brackets) that is followed by whitespace
_BOUNDARY = r"[.!?]+[\"'”’)\]]*(?=\s)"
_LAST_TOKEN = re.compile(r"\S+$")
_OPENERS = "\"'“‘(["


@dataclass(frozen=True)
class TextRules:
    """
    Sentence-boundary and clean rules, built once and handed to the pipeline.

    A rule left as None is "not configured": using it raises
    ConfigurationError instead of silently doing nothing. `splitter` and
    `sanitizer` replace the regex rules entirely when given.
    """
    sentence_re: Optional[re.Pattern] = None
    clean_re: Optional[re.Pattern] = None
    abbreviations: FrozenSet[str] = ABBREVIATIONS
    splitter: Optional[Callable[[str], List[str]]] = None
    sanitizer: Optional[Callable[[str], str]] = None

    @classmethod
    def default(cls, *, abbreviations: Optional[FrozenSet[str]] = None,
                clean_pattern: Optional[str] = None) -> "TextRules":
        return cls(
            sentence_re=re.compile(_BOUNDARY),
            clean_re=re.compile(clean_pattern or CLEAN_PATTERN),
            abbreviations=frozenset(a.lower() for a in (abbreviations or ABBREVIATIONS)),
        )

    # ---- SentenceSplitter ----
    def split_sentences(self, text: str) -> List[str]:
        """
        Split text into trimmed sentences. Never returns an empty list:
        text without a boundary comes back as [text].
        """
        if self.splitter is not None:
            try:
                found = [s.strip() for s in self.splitter(text)]
            except Exception as e:
                raise ConfigurationError(f"sentence splitter failed: {e}", causes=[e]) from e
            found = [s for s in found if s]
            return found or [text]
        if self.sentence_re is None:
            raise ConfigurationError("sentence boundary rule is not configured")

        sentences: List[str] = []
        start = 0
        for m in self.sentence_re.finditer(text):
            if self._is_abbreviation(text, start, m):
                continue
            piece = text[start:m.end()].strip()
            if piece:
                sentences.append(piece)
            start = m.end()
        tail = text[start:].strip()
        if tail:
            sentences.append(tail)
        return sentences or [text]

    def _is_abbreviation(self, text: str, start: int, m: re.Match) -> bool:
        if not m.group().startswith(".") or m.group().startswith(".."):
            return False
        tok = _LAST_TOKEN.search(text, start, m.end())
        if tok is None:
            return False
        raw = tok.group().lstrip(_OPENERS)
        if raw.lower() in self.abbreviations:
            return True
        if not (len(raw) == 2 and raw[0].isupper()):
            return False
        # initial: "J. R. R. Tolkien", "George W. Bush"; not "plan B."
        end = tok.start()
        while end > start and text[end - 1].isspace():
            end -= 1
        prev = _LAST_TOKEN.search(text, start, end)
        if prev is None:
            return True
        return prev.group().lstrip(_OPENERS)[:1].isupper()

    # ---- Sanitizer ----
    def sanitize(self, span: str) -> str:
        """Trim, then drop everything but letters, digits and whitespace. Case is kept."""
        if self.sanitizer is not None:
            return self.sanitizer(span)
        if self.clean_re is None:
            raise ConfigurationError("clean rule is not configured")
        return self.clean_re.sub("", span.strip())
