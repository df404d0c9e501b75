"""Name-based deduplication of discovered packages.

Among packages declaring the same name, the one whose descriptor sits in the
shallowest directory is kept; equal depths go to the first entry in input
order, so callers must pass packages in a deterministic order.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from discovery.packages import DiscoveredPackage

logger = logging.getLogger(__name__)


def _depth(package: DiscoveredPackage) -> int:
    return len(package.ref.path.parts)


def dedupe_packages(
    packages: Sequence[DiscoveredPackage],
) -> Tuple[Dict[str, DiscoveredPackage], List[DiscoveredPackage]]:
    """Select one canonical package per declared name.

    Returns:
        (canonical mapping of name to package, duplicates left out)
    """
    groups: Dict[str, List[DiscoveredPackage]] = {}
    for package in packages:
        groups.setdefault(package.name, []).append(package)

    canonical: Dict[str, DiscoveredPackage] = {}
    duplicates: List[DiscoveredPackage] = []
    for name in sorted(groups):
        members = groups[name]
        chosen = min(members, key=_depth)  # min keeps the first of equal keys
        canonical[name] = chosen
        duplicates.extend(m for m in members if m is not chosen)

    if duplicates:
        lines = []
        for name in sorted(groups):
            if len(groups[name]) > 1:
                lines.extend(f"  - {m.ref.path}" for m in groups[name])
                lines.append("")
        logger.warning(
            "The following packages have duplicate package names:\n%s\n"
            "Packages with duplicate names will be ignored. "
            "Packages in upper level directories will be preferred.",
            "\n".join(lines).rstrip(),
        )
    return canonical, duplicates
