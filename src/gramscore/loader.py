"""
Read text fragments from files and folders.

Each path may be a file (read as-is) or a folder (walked recursively for
INCLUDE_EXTS, skipping EXCLUDE_DIRS). Files are read in parallel on a thread
pool and returned in sorted path order, so the joined document is the same
on every run.
"""

from __future__ import annotations
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from .config import ENCODING, EXCLUDE_DIRS, INCLUDE_EXTS, WORKERS
from .errors import ArgumentError

log = logging.getLogger(__name__)

__all__ = ["find_text_files", "read_fragments"]


def find_text_files(
    paths: Iterable[str | Path],
    include_exts: Optional[Iterable[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
) -> List[str]:
    exts = {e.lower() if str(e).startswith(".") else "." + str(e).lower()
            for e in (include_exts or INCLUDE_EXTS)}
    excludes = {d.lower() for d in (exclude_dirs or EXCLUDE_DIRS)}

    out: List[str] = []
    for p in paths:
        root = Path(p)
        if root.is_file():
            out.append(str(root))
            continue
        if not root.exists():
            raise FileNotFoundError(root)

        stack = [root]
        while stack:
            cur = stack.pop()
            try:
                with os.scandir(cur) as it:
                    for entry in it:
                        if entry.is_dir(follow_symlinks=False):
                            if entry.name.lower() not in excludes:
                                stack.append(Path(cur, entry.name))
                        elif entry.is_file(follow_symlinks=False):
                            if Path(entry.name).suffix.lower() in exts:
                                out.append(str(Path(cur, entry.name)))
            except PermissionError:
                log.warning("Skipping unreadable folder %s", cur)
                continue
    # stable order for reproducibility
    return sorted(set(out))


def _read_text(path: str) -> Tuple[str, str]:
    with open(path, "rb") as f:
        raw = f.read()
    try:
        text = raw.decode(ENCODING)
    except UnicodeDecodeError:
        text = raw.decode("latin-1", errors="ignore")
    return path, text


def read_fragments(paths: Iterable[str | Path], workers: Optional[int] = None) -> List[str]:
    """Return the text of every file under `paths`, one fragment per file."""
    files = find_text_files(paths)
    if not files:
        raise ArgumentError("no text files found")
    log.info("Reading %d file(s)", len(files))
    with ThreadPoolExecutor(max_workers=workers or WORKERS) as ex:
        return [text for _, text in ex.map(_read_text, files)]
