from __future__ import annotations
import os

# longest word window counted as one n-gram
MAX_WINDOW: int = 3

# extraction fan-out:
# - "threads" shares the interpreter (injected callables work as-is)
# - "procs" needs picklable rules
READ_MODE: str = "threads"

_cpu = os.cpu_count() or 4
DEFAULT_WORKERS_THREADS = _cpu * 2
DEFAULT_WORKERS_PROCS = _cpu
WORKERS = DEFAULT_WORKERS_THREADS if READ_MODE == "threads" else DEFAULT_WORKERS_PROCS

# /* ~~~ sentence boundaries: tokens that end with "." but do not end a sentence ~~~ */
ABBREVIATIONS = frozenset({
    "mr.", "mrs.", "ms.", "dr.", "prof.", "sr.", "jr.", "st.", "mt.",
    "vs.", "etc.", "e.g.", "i.e.", "cf.", "al.", "approx.", "no.",
    "fig.", "inc.", "ltd.", "co.", "corp.", "jan.", "feb.", "mar.",
    "apr.", "jun.", "jul.", "aug.", "sep.", "sept.", "oct.", "nov.", "dec.",
})

# anything matching this is removed by the sanitizer
CLEAN_PATTERN: str = r"[^A-Za-z0-9\s]+"

# scheme order is the order of Scores fields and of the report columns
SCHEMES: tuple[str, ...] = ("english", "jewish", "simple", "mystery", "majestic", "eights")

# loader
ENCODING: str = "utf-8"
INCLUDE_EXTS = [".txt", ".md"]
EXCLUDE_DIRS = {".git", ".hg", ".svn", ".idea", ".vscode", "node_modules", "__pycache__"}
