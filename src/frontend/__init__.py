"""Flask frontend serving one gramscore Document."""
from __future__ import annotations

from .web import app, main

__all__ = ["app", "main"]
