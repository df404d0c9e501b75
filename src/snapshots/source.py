"""Snapshot index client.

Fetches the index of published snapshots (latest release per stable major
version plus the current rolling snapshot) and turns it into ``Snapshots``.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict

from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from constants import Constants
from errors import SnapshotSourceUnavailable
from snapshots.models import Channel, SnapName, Snapshots

logger = logging.getLogger(__name__)

_LTS_KEY_RE = re.compile(r"^lts-\d+$")


def parse_snapshot_index(data: Any) -> Snapshots:
    """Build ``Snapshots`` from an index document.

    The index maps ``lts-<major>`` keys to the latest ``lts-<major>.<minor>``
    and ``nightly`` to the current rolling snapshot; other keys are ignored.

    Raises:
        ValueError: if the document is not a mapping or has no rolling snapshot.
    """
    if not isinstance(data, dict):
        raise ValueError("snapshot index is not a JSON object")
    nightly_raw = data.get("nightly")
    if not isinstance(nightly_raw, str):
        raise ValueError("snapshot index has no 'nightly' entry")
    nightly = SnapName.parse(nightly_raw)

    lts: Dict[int, int] = {}
    for key, value in data.items():
        if not _LTS_KEY_RE.match(str(key)) or not isinstance(value, str):
            continue
        try:
            name = SnapName.parse(value)
        except ValueError:
            logger.debug("Ignoring malformed snapshot index entry %s: %s", key, value)
            continue
        if name.channel is Channel.LTS:
            lts[name.major] = max(name.minor, lts.get(name.major, name.minor))
    return Snapshots(nightly=nightly.day, lts=lts)


class SnapshotSource:
    """Lists the snapshots available for initialization."""

    def __init__(self, index_url: str = Constants.SNAPSHOT_INDEX_URL):
        self.index_url = index_url

    def list_available(self) -> Snapshots:
        """Download and parse the snapshot index.

        Raises:
            SnapshotSourceUnavailable: on transport errors, non-200 responses
                or an index that cannot be understood.
        """
        if is_debug_enabled(logger):
            logger.debug(
                "Fetching snapshot index",
                extra=extra_context(
                    event="function_entry", component="snapshots", action="list_available",
                    target=safe_url(self.index_url),
                ),
            )
        status_code, _, data = get_json(self.index_url, headers={"Accept": "application/json"})
        if status_code != 200:
            raise SnapshotSourceUnavailable(f"{safe_url(self.index_url)} returned status {status_code}")
        try:
            return parse_snapshot_index(data)
        except ValueError as exc:
            raise SnapshotSourceUnavailable(str(exc)) from exc
