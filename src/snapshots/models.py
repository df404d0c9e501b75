"""Data models for snapshots and snapshot locations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

_LTS_RE = re.compile(r"^lts-(\d+)\.(\d+)$")
_NIGHTLY_RE = re.compile(r"^nightly-(\d{4})-(\d{2})-(\d{2})$")
_COMPILER_RE = re.compile(r"^[a-z][a-z0-9]*-\d+(\.\d+)*$")


class Channel(Enum):
    """Snapshot lineages."""
    LTS = "lts"
    NIGHTLY = "nightly"


@dataclass(frozen=True)
class SnapName:
    """Name of a published snapshot: ``lts-22.43`` or ``nightly-2024-05-01``."""
    channel: Channel
    major: int = 0
    minor: int = 0
    day: Optional[date] = None

    @classmethod
    def lts(cls, major: int, minor: int) -> "SnapName":
        return cls(Channel.LTS, major, minor)

    @classmethod
    def nightly(cls, day: date) -> "SnapName":
        return cls(Channel.NIGHTLY, day=day)

    @classmethod
    def parse(cls, text: str) -> "SnapName":
        """Parse a snapshot name; raises ValueError for anything else."""
        text = (text or "").strip()
        match = _LTS_RE.match(text)
        if match:
            return cls.lts(int(match.group(1)), int(match.group(2)))
        match = _NIGHTLY_RE.match(text)
        if match:
            return cls.nightly(date(int(match.group(1)), int(match.group(2)), int(match.group(3))))
        raise ValueError(f"Not a snapshot name: {text!r}")

    @property
    def version(self) -> Tuple[int, int]:
        """(major, minor) of a stable release."""
        return (self.major, self.minor)

    def __str__(self) -> str:
        if self.channel is Channel.LTS:
            return f"lts-{self.major}.{self.minor}"
        return f"nightly-{self.day.isoformat()}"


@dataclass(frozen=True)
class Snapshots:
    """Available snapshots: latest minor per stable major, and the rolling channel."""
    nightly: date
    lts: Dict[int, int] = field(default_factory=dict)


class LocationKind(Enum):
    """How a snapshot location is resolved."""
    SNAPSHOT = "snapshot"
    COMPILER = "compiler"
    URL = "url"
    FILE = "file"


@dataclass(frozen=True)
class SnapshotLocation:
    """Reference to an immutable snapshot."""
    kind: LocationKind
    value: str
    name: Optional[SnapName] = None

    @classmethod
    def from_name(cls, name: SnapName) -> "SnapshotLocation":
        return cls(LocationKind.SNAPSHOT, str(name), name)

    @classmethod
    def parse(cls, text: str) -> "SnapshotLocation":
        """Interpret user input as a snapshot name, compiler, URL or file."""
        text = (text or "").strip()
        if not text:
            raise ValueError("Empty snapshot location")
        try:
            return cls.from_name(SnapName.parse(text))
        except ValueError:
            pass
        if text.startswith(("http://", "https://")):
            return cls(LocationKind.URL, text)
        if _COMPILER_RE.match(text):
            return cls(LocationKind.COMPILER, text)
        return cls(LocationKind.FILE, text)

    def __str__(self) -> str:
        return self.value
