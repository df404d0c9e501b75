"""Snapshot candidate ranking."""

from __future__ import annotations

from typing import List

from snapshots.models import SnapName, Snapshots


def recommended_snapshots(snapshots: Snapshots, min_supported: SnapName) -> List[SnapName]:
    """Order the snapshots worth trying, best first.

    Latest supported stable release, then the rolling channel, then the
    other supported stable releases, most recent first. Stable releases
    older than ``min_supported`` are never offered. The result is never
    empty: with no supported stable release it is the rolling channel alone.
    """
    stable = [SnapName.lts(major, minor) for major, minor in sorted(snapshots.lts.items(), reverse=True)]
    supported = [s for s in stable if s.version >= min_supported.version]
    nightly = SnapName.nightly(snapshots.nightly)
    if not supported:
        return [nightly]
    return [supported[0], nightly] + supported[1:]
