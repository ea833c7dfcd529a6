"""Exception taxonomy shared by every stage of the pipeline."""
from __future__ import annotations
from typing import Iterable, List, Optional


class GramScoreError(Exception):
    """
    Base error. A pass that fails on several items raises ONE error whose
    `causes` holds every individual failure, in the order they were collected.
    """
    def __init__(self, message: str, *, causes: Optional[Iterable[BaseException]] = None) -> None:
        super().__init__(message)
        self.causes: List[BaseException] = list(causes or [])

    def __str__(self) -> str:
        msg = super().__str__()
        if not self.causes:
            return msg
        lines = [msg]
        lines.extend(f"  - {type(c).__name__}: {c}" for c in self.causes)
        return "\n".join(lines)


class ArgumentError(GramScoreError, ValueError):
    """Empty or invalid input (no fragments, unknown scheme, malformed record)."""


class ConfigurationError(GramScoreError):
    """A required collaborator (boundary rule, clean rule) is not available."""


class CleanError(GramScoreError):
    """An extraction pass failed because one or more windows could not be cleaned."""


class ScoringError(GramScoreError):
    """The scorer could not produce six scheme scores for a text."""
    def __init__(self, message: str, *, text: Optional[str] = None,
                 causes: Optional[Iterable[BaseException]] = None) -> None:
        super().__init__(message, causes=causes)
        self.text = text


class PipelineError(GramScoreError):
    """Raised by build_document() when any stage fails; the stage error is __cause__."""
