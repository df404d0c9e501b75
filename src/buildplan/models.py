"""Build-plan check results.

``BuildPlanResult`` is a closed union of three frozen dataclasses; callers
dispatch with ``isinstance`` and treat anything else as a bug.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set, Union

FlagMap = Mapping[str, Mapping[str, bool]]


@dataclass(frozen=True)
class DepError:
    """An unmet dependency: the version on offer (if any) and who needs it."""
    version: Optional[str]
    needed_by: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PlanOk:
    """Every package is satisfied by the snapshot."""
    flags: FlagMap = field(default_factory=dict)


@dataclass(frozen=True)
class PlanPartial:
    """Satisfiable only by adding dependencies from outside the snapshot."""
    flags: FlagMap = field(default_factory=dict)
    extra_deps: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PlanFail:
    """Some requirements cannot be met."""
    unsatisfied: Mapping[str, DepError] = field(default_factory=dict)
    compiler: Optional[str] = None

    def implicated_packages(self) -> Set[str]:
        """Every package named as needing an unmet dependency."""
        names: Set[str] = set()
        for error in self.unsatisfied.values():
            names.update(error.needed_by)
        return names

    def describe(self) -> str:
        """Human-readable account of the unmet dependencies."""
        lines: List[str] = []
        if self.compiler:
            lines.append(f"Compiler: {self.compiler}")
        for dep in sorted(self.unsatisfied):
            error = self.unsatisfied[dep]
            offered = f"version {error.version} found" if error.version else "not present in snapshot"
            lines.append(f"- {dep} ({offered})")
            for pkg in sorted(error.needed_by):
                constraint = error.needed_by[pkg] or "any version"
                lines.append(f"    - {pkg} requires {constraint}")
        return "\n".join(lines)


BuildPlanResult = Union[PlanOk, PlanPartial, PlanFail]


def merge_flags(flags: FlagMap) -> Dict[str, Dict[str, bool]]:
    """Copy a flag mapping into plain nested dicts."""
    return {pkg: dict(values) for pkg, values in flags.items()}
