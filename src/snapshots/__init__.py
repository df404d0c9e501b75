"""Snapshot support.

- models.py: snapshot names, available snapshots and snapshot locations
- ranker.py: order in which snapshots are tried
- source.py: the index of available snapshots
- contents.py: the packages and compiler a snapshot pins
"""

from .models import Channel, LocationKind, SnapName, SnapshotLocation, Snapshots  # noqa: F401
from .ranker import recommended_snapshots  # noqa: F401

__all__ = [
    "Channel",
    "LocationKind",
    "SnapName",
    "SnapshotLocation",
    "Snapshots",
    "recommended_snapshots",
]
