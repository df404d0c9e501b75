"""Snapshot build-plan checking.

The resolver only needs an object with ``check_plan(snapshot, package_dirs)``.
``SnapshotPlanChecker`` is the bundled implementation: it compares each
package's declared dependency constraints with the versions the snapshot
pins. Packages being initialized satisfy each other's dependencies.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Protocol, Sequence

from buildplan.constraints import satisfies
from buildplan.models import BuildPlanResult, DepError, PlanFail, PlanOk, PlanPartial
from common.logging_utils import extra_context, is_debug_enabled
from descriptor.loader import DirectoryLoader
from snapshots.contents import SnapshotContentsSource
from snapshots.models import SnapshotLocation

logger = logging.getLogger(__name__)

# (dependency name, constraint) -> version available outside the snapshot, or None
ExtraIndex = Callable[[str, str], Optional[str]]


class BuildPlanOracle(Protocol):
    """Decides whether a set of package directories builds with a snapshot."""

    def check_plan(self, snapshot: SnapshotLocation, package_dirs: Sequence[Path]) -> BuildPlanResult:
        ...


class SnapshotPlanChecker:
    """Check package constraints against the versions a snapshot pins."""

    def __init__(
        self,
        contents_source: SnapshotContentsSource,
        loader: DirectoryLoader,
        extra_index: Optional[ExtraIndex] = None,
        bundled: Iterable[str] = (),
    ):
        """Initialize the checker.

        Args:
            contents_source: Provides the packages pinned by a snapshot.
            loader: Loads the descriptor of each package directory.
            extra_index: Optional lookup for dependencies the snapshot cannot
                satisfy; a hit turns the result into ``PlanPartial``.
            bundled: Packages shipped with every compiler; they count as
                satisfied when the snapshot does not pin them.
        """
        self.contents_source = contents_source
        self.loader = loader
        self.extra_index = extra_index
        self.bundled = frozenset(bundled)

    def _lookup_extra(self, dep: str, failing: Dict[str, str]) -> Optional[str]:
        if self.extra_index is None:
            return None
        first = sorted(failing)[0]
        return self.extra_index(dep, failing[first]) or None

    def check_plan(self, snapshot: SnapshotLocation, package_dirs: Sequence[Path]) -> BuildPlanResult:
        contents = self.contents_source.load(snapshot)
        descriptors = [self.loader.load_dir(Path(d)) for d in package_dirs]
        local = {d.name for d in descriptors}

        users: Dict[str, Dict[str, str]] = {}
        for desc in descriptors:
            for dep, constraint in desc.dependencies.items():
                if dep not in local:
                    users.setdefault(dep, {})[desc.name] = constraint

        needed_by: Dict[str, Dict[str, str]] = {}
        extra: Dict[str, str] = {}
        for dep in sorted(users):
            constraints = users[dep]
            pinned = contents.packages.get(dep)
            if pinned is None and dep in self.bundled:
                continue
            failing = _unsatisfied(pinned, constraints)
            if not failing:
                continue
            found = self._lookup_extra(dep, failing)
            # An extra version replaces the pin for every user of dep
            if found is not None and not _unsatisfied(found, constraints):
                extra[dep] = found
                continue
            if pinned is None and found is not None:
                failing = _unsatisfied(found, constraints)
            needed_by[dep] = failing

        flags = {d.name: dict(d.flags) for d in descriptors if d.flags}

        if is_debug_enabled(logger):
            logger.debug(
                "Build plan checked",
                extra=extra_context(
                    event="decision", component="buildplan", action="check_plan",
                    target=str(snapshot), unsatisfied=len(needed_by), extra_deps=len(extra),
                ),
            )

        if needed_by:
            unsatisfied = {
                dep: DepError(version=contents.packages.get(dep), needed_by=dep_users)
                for dep, dep_users in needed_by.items()
            }
            return PlanFail(unsatisfied=unsatisfied, compiler=contents.compiler)
        if extra:
            return PlanPartial(flags=flags, extra_deps=extra)
        return PlanOk(flags=flags)


def _unsatisfied(version: Optional[str], constraints: Dict[str, str]) -> Dict[str, str]:
    """Users whose constraint ``version`` does not meet; all of them when ``version`` is None."""
    if version is None:
        return dict(constraints)
    return {user: c for user, c in constraints.items() if not satisfies(version, c)}
