from __future__ import annotations
import json
import os
from typing import Any, Optional

from .document import Document
from .errors import ArgumentError


def save_document(doc: Document, path: str) -> None:
    """Write the interchange record as JSON; the target is replaced atomically."""
    tmp = f"{path}.tmp"
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(doc.to_record(), f, ensure_ascii=False)
    os.replace(tmp, path)


def load_document(path: str, **kwargs: Any) -> Document:
    """Read a record written by save_document(); kwargs go to Document.from_record()."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            record: Optional[Any] = json.load(f)
        except json.JSONDecodeError as e:
            raise ArgumentError(f"{path} is not a valid record: {e}") from e
    return Document.from_record(record, **kwargs)
