"""Upward directory searches.

``find_in_parents`` applies a probe to a directory and each of its parents
until the probe yields a value or the filesystem root has been tried.
``find_file_up`` / ``find_dir_up`` are the listing-based variants used to
locate marker files above the working directory.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from discovery.walker import list_dir

T = TypeVar("T")


def find_in_parents(probe: Callable[[Path], Optional[T]], start: Path) -> Optional[T]:
    """Apply ``probe`` to ``start`` and its parents; return the first non-None result."""
    current = Path(start).resolve()
    while True:
        result = probe(current)
        if result is not None:
            return result
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _find_path_up(
    choose: Callable[[List[Path], List[Path]], List[Path]],
    start: Path,
    predicate: Callable[[Path], bool],
    upper_bound: Optional[Path],
) -> Optional[Path]:
    current = Path(start).resolve()
    bound = Path(upper_bound).resolve() if upper_bound is not None else None
    while True:
        dirs, files = list_dir(current)
        for candidate in sorted(choose(dirs, files)):
            if predicate(candidate):
                return candidate
        parent = current.parent
        if current == bound or parent == current:
            return None
        current = parent


def find_file_up(
    start: Path,
    predicate: Callable[[Path], bool],
    upper_bound: Optional[Path] = None,
) -> Optional[Path]:
    """Find the nearest file matching ``predicate`` in ``start`` or above.

    Args:
        start: Directory to start in.
        predicate: Matches the wanted file.
        upper_bound: Do not ascend above this directory.
    """
    return _find_path_up(lambda _dirs, files: files, start, predicate, upper_bound)


def find_dir_up(
    start: Path,
    predicate: Callable[[Path], bool],
    upper_bound: Optional[Path] = None,
) -> Optional[Path]:
    """Find the nearest directory matching ``predicate`` in ``start`` or above."""
    return _find_path_up(lambda dirs, _files: dirs, start, predicate, upper_bound)
