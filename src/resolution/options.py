"""Options for one initialization run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class InitOptions:
    """Immutable configuration for one resolution run.

    Attributes:
        search_dirs: Directories to search for package descriptors; empty
            means the project root.
        omit_packages: Exclude incompatible packages instead of failing.
        force_overwrite: Replace an existing project configuration file.
        include_subdirs: Look for descriptors below the search directories.
    """
    search_dirs: Tuple[str, ...] = ()
    omit_packages: bool = False
    force_overwrite: bool = False
    include_subdirs: bool = True
