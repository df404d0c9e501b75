"""Snapshot contents: compiler and pinned package versions."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml

from common.http_client import robust_get
from common.logging_utils import safe_url
from constants import Constants
from errors import SnapshotSourceUnavailable
from snapshots.models import Channel, LocationKind, SnapshotLocation

logger = logging.getLogger(__name__)

_PKG_ID_RE = re.compile(r"^(?P<name>[A-Za-z0-9][A-Za-z0-9\-]*?)-(?P<version>\d+(?:\.\d+)*)$")


@dataclass
class SnapshotContents:
    """Packages a snapshot pins, keyed by name."""
    compiler: Optional[str] = None
    packages: Dict[str, str] = field(default_factory=dict)


def parse_package_id(text: str) -> Optional[tuple]:
    """``"aeson-2.1.2.1@sha256:...,1234"`` -> ``("aeson", "2.1.2.1")``."""
    ident = str(text).split("@", 1)[0].strip()
    match = _PKG_ID_RE.match(ident)
    if not match:
        return None
    return match.group("name"), match.group("version")


def parse_snapshot_document(data: Any) -> tuple:
    """Return (contents, parent location text or None, dropped names) of a snapshot YAML document.

    Dropped names are not applied here; they apply to the merged result,
    parent packages included.
    """
    if not isinstance(data, dict):
        raise ValueError("snapshot document is not a mapping")
    compiler = data.get("compiler")
    parent = data.get("snapshot") or data.get("resolver")
    if isinstance(parent, dict):
        compiler = compiler or parent.get("compiler")
        parent = None
    contents = SnapshotContents(compiler=str(compiler) if compiler else None)
    for entry in data.get("packages") or []:
        raw = entry.get("hackage") if isinstance(entry, dict) else entry
        if raw is None:
            continue
        parsed = parse_package_id(raw)
        if parsed is None:
            logger.debug("Ignoring unrecognized snapshot package entry %r", raw)
            continue
        contents.packages[parsed[0]] = parsed[1]
    dropped = [str(name) for name in data.get("drop-packages") or []]
    return contents, (str(parent) if parent else None), dropped


class SnapshotContentsSource:
    """Load snapshot contents from the snapshot repository, URLs or files.

    Results are memoised per instance, keyed by location.
    """

    def __init__(
        self,
        lts_url_template: str = Constants.SNAPSHOT_LTS_URL_TEMPLATE,
        nightly_url_template: str = Constants.SNAPSHOT_NIGHTLY_URL_TEMPLATE,
        base_dir: Optional[Path] = None,
    ):
        self.lts_url_template = lts_url_template
        self.nightly_url_template = nightly_url_template
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self._loaded: Dict[SnapshotLocation, SnapshotContents] = {}

    def url_for(self, location: SnapshotLocation) -> str:
        name = location.name
        if name is None:
            return location.value
        if name.channel is Channel.LTS:
            return self.lts_url_template.format(major=name.major, minor=name.minor)
        return self.nightly_url_template.format(
            year=name.day.year, month=name.day.month, day=name.day.day
        )

    def load(self, location: SnapshotLocation) -> SnapshotContents:
        if location not in self._loaded:
            self._loaded[location] = self._load(location, set())
        return self._loaded[location]

    def _load(self, location: SnapshotLocation, seen: Set[SnapshotLocation]) -> SnapshotContents:
        if location.kind is LocationKind.COMPILER:
            return SnapshotContents(compiler=location.value)
        if location in seen:
            raise SnapshotSourceUnavailable(f"snapshot {location} inherits from itself")
        seen.add(location)

        text = self._read(location)
        try:
            contents, parent, dropped = parse_snapshot_document(yaml.safe_load(text))
        except (yaml.YAMLError, ValueError) as exc:
            raise SnapshotSourceUnavailable(f"snapshot {location} could not be parsed: {exc}") from exc
        if parent is not None:
            base = self._load(SnapshotLocation.parse(parent), seen)
            contents = SnapshotContents(
                compiler=contents.compiler or base.compiler,
                packages={**base.packages, **contents.packages},
            )
        for name in dropped:
            contents.packages.pop(name, None)
        return contents

    def _read(self, location: SnapshotLocation) -> str:
        if location.kind is LocationKind.FILE:
            path = Path(location.value)
            if not path.is_absolute():
                path = self.base_dir / path
            try:
                return path.read_text(encoding="utf-8")
            except OSError as exc:
                raise SnapshotSourceUnavailable(f"snapshot file {path} could not be read: {exc}") from exc
        url = self.url_for(location)
        status_code, _, text = robust_get(url)
        if status_code != 200:
            raise SnapshotSourceUnavailable(f"{safe_url(url)} returned status {status_code}")
        return text
