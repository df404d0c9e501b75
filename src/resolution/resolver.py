"""Snapshot selection and convergence of the package set.

The resolver owns the working package set for the whole run. It asks the
build-plan oracle whether the set builds with a snapshot and, when allowed
to omit packages, removes every package implicated in a failure and asks
again. Each round strictly shrinks the set, so a run over N packages makes
at most N rounds per snapshot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol

from buildplan.checker import BuildPlanOracle
from buildplan.models import BuildPlanResult, PlanFail, PlanOk, PlanPartial, merge_flags
from common.logging_utils import extra_context, is_debug_enabled
from errors import InvariantViolation, NoMatchingSnapshot, PlanFailure, SnapshotSourceUnavailable
from resolution.options import InitOptions
from snapshots.models import SnapName, SnapshotLocation, Snapshots
from snapshots.ranker import recommended_snapshots

logger = logging.getLogger(__name__)

DEFAULT_MIN_SUPPORTED = SnapName.lts(12, 0)


class SnapshotLister(Protocol):
    """Source of the snapshots available for ranking."""

    def list_available(self) -> Snapshots:
        ...


@dataclass
class ResolvedPlan:
    """Outcome of a successful (possibly degraded) resolution.

    Attributes:
        snapshot: Snapshot the final package set was checked against.
        packages: Final package set, name to package directory.
        flags: Flag assignments per package reported by the oracle.
        extra_deps: Dependencies to add from outside the snapshot.
        removed: Packages excluded as incompatible, in removal order.
        iterations: Oracle calls spent converging on ``snapshot``.
        no_working_plan: Every package had to be excluded.
    """
    snapshot: SnapshotLocation
    packages: Dict[str, Path] = field(default_factory=dict)
    flags: Dict[str, Dict[str, bool]] = field(default_factory=dict)
    extra_deps: Dict[str, str] = field(default_factory=dict)
    removed: List[str] = field(default_factory=list)
    iterations: int = 0
    no_working_plan: bool = False


class ConvergenceResolver:
    """Find a snapshot and the largest package set the oracle accepts with it."""

    def __init__(
        self,
        oracle: BuildPlanOracle,
        options: InitOptions,
        snapshot_source: Optional[SnapshotLister] = None,
        min_supported: SnapName = DEFAULT_MIN_SUPPORTED,
    ):
        """Initialize the resolver.

        Args:
            oracle: Build-plan oracle queried once per round.
            options: Run options; only ``omit_packages`` matters here.
            snapshot_source: Lists available snapshots when none is given.
            min_supported: Oldest stable snapshot worth offering.
        """
        self.oracle = oracle
        self.options = options
        self.snapshot_source = snapshot_source
        self.min_supported = min_supported

    def resolve(
        self,
        packages: Mapping[str, Path],
        explicit_snapshot: Optional[SnapshotLocation] = None,
    ) -> ResolvedPlan:
        """Resolve the canonical package set.

        An explicit snapshot is the only candidate; otherwise the ranked
        snapshots are tried in order.
        """
        if explicit_snapshot is not None:
            logger.info("Selected the snapshot %s.", explicit_snapshot)
            return self.converge(explicit_snapshot, packages)
        return self.select_snapshot(packages)

    def candidates(self) -> List[SnapshotLocation]:
        """Ranked snapshot candidates from the snapshot source."""
        if self.snapshot_source is None:
            raise SnapshotSourceUnavailable("no snapshot source is configured")
        names = recommended_snapshots(self.snapshot_source.list_available(), self.min_supported)
        return [SnapshotLocation.from_name(name) for name in names]

    def select_snapshot(self, packages: Mapping[str, Path]) -> ResolvedPlan:
        """Pick the first ranked snapshot that builds the packages.

        The full package set is checked against each candidate in rank
        order and the first ``Ok`` or ``Partial`` wins. When all fail and
        packages may be omitted, each candidate in turn gets a convergence
        run; the first one left with packages wins, and if none is, the
        top-ranked candidate's empty result is returned.
        """
        candidates = self.candidates()
        logger.info("Selecting the best among %d snapshots...", len(candidates))
        for location in candidates:
            result = self._check(location, packages)
            if isinstance(result, (PlanOk, PlanPartial)):
                logger.info("Selected the snapshot %s.", location)
                return self._finish(location, packages, result, removed=[], iterations=1)
            logger.info("* Build plan did not match snapshot %s", location)

        if not self.options.omit_packages:
            raise NoMatchingSnapshot([str(c) for c in candidates])

        fallback: Optional[ResolvedPlan] = None
        for location in candidates:
            logger.info("Trying snapshot %s with incompatible packages omitted.", location)
            plan = self._converge(location, packages)
            if not plan.no_working_plan:
                logger.info("Selected the snapshot %s.", location)
                return plan
            if fallback is None:
                fallback = plan
        self._warn_no_working_plan()
        return fallback

    def converge(self, snapshot: SnapshotLocation, packages: Mapping[str, Path]) -> ResolvedPlan:
        """Shrink ``packages`` until ``snapshot`` builds them."""
        plan = self._converge(snapshot, packages)
        if plan.no_working_plan:
            self._warn_no_working_plan()
        return plan

    def _converge(self, snapshot: SnapshotLocation, packages: Mapping[str, Path]) -> ResolvedPlan:
        current: Dict[str, Path] = dict(packages)
        removed: List[str] = []
        iterations = 0
        while True:
            iterations += 1
            result = self._check(snapshot, current)
            if is_debug_enabled(logger):
                logger.debug(
                    "Convergence round",
                    extra=extra_context(
                        event="decision", component="resolver", action="converge",
                        target=str(snapshot), iteration=iterations, packages=len(current),
                        outcome=type(result).__name__,
                    ),
                )
            if isinstance(result, (PlanOk, PlanPartial)):
                return self._finish(snapshot, current, result, removed, iterations)
            if not isinstance(result, PlanFail):
                raise InvariantViolation(f"Unexpected build plan result: {result!r}")
            if not self.options.omit_packages:
                raise PlanFailure(snapshot, result.describe())

            logger.warning("Snapshot %s cannot build every package:\n%s", snapshot, result.describe())
            ignored = sorted(result.implicated_packages() & set(current))
            if not ignored:
                raise InvariantViolation(
                    f"Build plan check against {snapshot} failed without implicating any package."
                )
            if len(ignored) == len(current):
                return ResolvedPlan(
                    snapshot=snapshot,
                    removed=removed + ignored,
                    iterations=iterations,
                    no_working_plan=True,
                )
            if len(ignored) > 1:
                logger.warning(
                    "Ignoring the following packages:\n%s",
                    "\n".join(f"  - {name}" for name in ignored),
                )
            else:
                logger.warning("Ignoring package: %s", ignored[0])
            for name in ignored:
                del current[name]
            removed.extend(ignored)

    def _check(self, snapshot: SnapshotLocation, packages: Mapping[str, Path]) -> BuildPlanResult:
        dirs = [packages[name] for name in sorted(packages)]
        return self.oracle.check_plan(snapshot, dirs)

    @staticmethod
    def _finish(
        snapshot: SnapshotLocation,
        packages: Mapping[str, Path],
        result: BuildPlanResult,
        removed: List[str],
        iterations: int,
    ) -> ResolvedPlan:
        extra_deps: Dict[str, str] = {}
        if isinstance(result, PlanPartial):
            extra_deps = dict(result.extra_deps)
            logger.warning(
                "Snapshot %s will need external packages:\n%s",
                snapshot,
                "\n".join(f"  - {name}-{version}" for name, version in sorted(extra_deps.items())),
            )
        return ResolvedPlan(
            snapshot=snapshot,
            packages=dict(packages),
            flags=merge_flags(result.flags),
            extra_deps=extra_deps,
            removed=list(removed),
            iterations=iterations,
        )

    @staticmethod
    def _warn_no_working_plan() -> None:
        logger.warning(
            "Could not find a working plan for any of the user packages. "
            "Proceeding to create a project-level configuration file anyway."
        )
