"""Turn a resolved plan into a project configuration draft.

Everything presentational lives here: package directories relative to the
project root, the diagnostic groups and the user message built from them.
The resolver never formats text for the user.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from descriptor.loader import PackageDescriptor
from discovery.packages import DiscoveredPackage
from resolution.resolver import ResolvedPlan
from snapshots.models import SnapshotLocation

DUPLICATES_MESSAGE = (
    "Warning (added by snapinit): Some packages were found to have names\n"
    "conflicting with others and have been commented out in the packages section."
)
INCOMPATIBLE_MESSAGE = (
    "Warning (added by snapinit): Some packages were found to be incompatible\n"
    "with the snapshot and have been left commented out in the packages section."
)
EXTRA_DEPS_MESSAGE = (
    "Warning (added by snapinit): Specified snapshot could not satisfy all\n"
    "dependencies. Some external packages have been added as dependencies."
)
REMOVAL_HINT = (
    "You can omit this message by removing it from the project-level configuration\n"
    "file."
)


@dataclass(frozen=True)
class DiagnosticGroups:
    """What was left out of, or added to, the project and why.

    Attributes:
        duplicates: Relative directories of packages dropped for a name clash.
        incompatible: Relative directories of packages dropped by the resolver.
        extra_deps: Dependencies added from outside the snapshot, name to version.
    """
    duplicates: List[str] = field(default_factory=list)
    incompatible: List[str] = field(default_factory=list)
    extra_deps: Dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.duplicates or self.incompatible or self.extra_deps)


@dataclass(frozen=True)
class ProjectConfigDraft:
    """The project configuration, ready to be rendered."""
    snapshot: SnapshotLocation
    packages: List[str] = field(default_factory=list)
    extra_deps: List[str] = field(default_factory=list)
    flags: Dict[str, Dict[str, bool]] = field(default_factory=dict)
    user_message: Optional[str] = None
    diagnostics: DiagnosticGroups = field(default_factory=DiagnosticGroups)


def relative_package_dir(project_root: Path, directory: Path) -> str:
    """Render ``directory`` relative to ``project_root``.

    The root itself is ``"."``; a directory outside the root keeps its
    absolute form.
    """
    try:
        rel = Path(directory).relative_to(project_root)
    except ValueError:
        return Path(directory).as_posix()
    text = rel.as_posix()
    return "." if text in ("", ".") else text


def build_user_message(groups: DiagnosticGroups) -> Optional[str]:
    """Combine the non-empty diagnostic groups into one message.

    Returns ``None`` (never an empty string) when every group is empty.
    """
    paragraphs: List[str] = []
    if groups.duplicates:
        paragraphs.append(DUPLICATES_MESSAGE)
    if groups.incompatible:
        paragraphs.append(INCOMPATIBLE_MESSAGE)
    if groups.extra_deps:
        paragraphs.append(EXTRA_DEPS_MESSAGE)
    if not paragraphs:
        return None
    return "\n\n".join(paragraphs + [REMOVAL_HINT]) + "\n"


def remove_default_flags(
    flags: Mapping[str, Mapping[str, bool]],
    descriptors: Mapping[str, PackageDescriptor],
) -> Dict[str, Dict[str, bool]]:
    """Drop flag assignments that repeat the package's declared default.

    Flags of packages without a known descriptor (extra deps) are kept
    as given. Packages left with no assignments are dropped.
    """
    result: Dict[str, Dict[str, bool]] = {}
    for pkg in sorted(flags):
        descriptor = descriptors.get(pkg)
        defaults = descriptor.flags if descriptor is not None else {}
        kept = {
            name: value
            for name, value in sorted(flags[pkg].items())
            if defaults.get(name) != value
        }
        if kept:
            result[pkg] = kept
    return result


def assemble_config(
    project_root: Path,
    plan: ResolvedPlan,
    canonical: Mapping[str, DiscoveredPackage],
    duplicates: Sequence[DiscoveredPackage],
) -> ProjectConfigDraft:
    """Build the draft for ``plan``.

    Args:
        project_root: Directory the configuration file is written to.
        plan: Resolver output.
        canonical: Deduplicated packages the resolver started from.
        duplicates: Packages dropped by deduplication.

    Returns:
        ProjectConfigDraft with sorted package directories.
    """
    root = Path(project_root)
    packages = sorted(relative_package_dir(root, d) for d in plan.packages.values())
    incompatible = sorted(
        relative_package_dir(root, canonical[name].ref.directory)
        for name in plan.removed
        if name in canonical
    )
    duplicate_dirs = sorted(relative_package_dir(root, d.ref.directory) for d in duplicates)
    groups = DiagnosticGroups(
        duplicates=duplicate_dirs,
        incompatible=incompatible,
        extra_deps=dict(sorted(plan.extra_deps.items())),
    )
    descriptors = {name: pkg.descriptor for name, pkg in canonical.items()}
    return ProjectConfigDraft(
        snapshot=plan.snapshot,
        packages=packages,
        extra_deps=[f"{name}-{version}" for name, version in sorted(plan.extra_deps.items())],
        flags=remove_default_flags(plan.flags, descriptors),
        user_message=build_user_message(groups),
        diagnostics=groups,
    )
