"""
gramscore: n-gram frequency and score index.

Text is split into sentences, every 1-3 word window inside a sentence is
cleaned and counted (one parallel task per sentence, merged once), and every
unique n-gram is scored under six schemes, producing six inverse indices
(score -> n-grams).

Example Usage:
    from gramscore import build_document

    doc = build_document("The cat sat.", "The cat ran.")
    for row in doc.sorted_substrings()[:3]:
        print(row.substring, row.quantity)
    print(doc.ngrams_with_score("simple", 24))
"""

# src/gramscore/__init__.py
from .document import Document, build_document
from .errors import (
    ArgumentError,
    CleanError,
    ConfigurationError,
    GramScoreError,
    PipelineError,
    ScoringError,
)
from .models import Scores, State, SubstringQuantity
from .rules import TextRules
from .scoring import score_text

__version__ = "1.0.0"
__all__ = [
    "Document", "build_document",
    "TextRules", "score_text",
    "Scores", "State", "SubstringQuantity",
    "GramScoreError", "ArgumentError", "ConfigurationError",
    "CleanError", "ScoringError", "PipelineError",
]
