"""Predicate-driven filesystem walk.

Rules:
- symbolic-link directories are never descended, whatever the predicate says
- a directory that cannot be listed for lack of permission counts as empty
- every other OSError propagates to the caller
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)

PathPredicate = Callable[[Path], bool]


def list_dir(directory: Path) -> Tuple[List[Path], List[Path]]:
    """Return (subdirectories, files) of a directory, without symlinked dirs."""
    dirs: List[Path] = []
    files: List[Path] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                path = Path(entry.path)
                if entry.is_symlink():
                    # os.path.isfile swallows ELOOP and dangling targets
                    if os.path.isfile(entry.path):
                        files.append(path)
                    else:
                        logger.debug("Skipping symbolic link %s", path)
                elif entry.is_dir():
                    dirs.append(path)
                elif entry.is_file():
                    files.append(path)
    except PermissionError:
        logger.debug("Permission denied listing %s; treating as empty", directory)
        return [], []
    return dirs, files


def find_files(
    root: Path,
    file_predicate: PathPredicate,
    dir_predicate: PathPredicate,
) -> List[Path]:
    """Find files matching ``file_predicate`` at or below ``root``.

    Args:
        root: Directory to begin with.
        file_predicate: Selects the files to return.
        dir_predicate: Selects the subdirectories to traverse.

    Returns:
        Sorted list of matching file paths.
    """
    matches: List[Path] = []
    pending: List[Path] = [Path(root)]
    while pending:
        directory = pending.pop()
        dirs, files = list_dir(directory)
        matches.extend(f for f in files if file_predicate(f))
        pending.extend(d for d in dirs if dir_predicate(d))
    return sorted(matches)
